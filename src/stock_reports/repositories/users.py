"""User repository: users and their linked OAuth providers."""
import logging

from sqlalchemy import delete, func, update
from sqlalchemy.orm import aliased
from sqlmodel import Session, select

from stock_reports.core.exceptions import (LastProviderError, NoCreditsError,
                                           NotFoundError)
from stock_reports.db.models import STARTING_CREDITS, Plan, User, UserProvider
from stock_reports.utils import utcnow

logger = logging.getLogger(__name__)


class UserRepository:
    """Database operations over the users and user_providers tables.

    Writes commit immediately; one repository wraps one request's session.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def rollback(self) -> None:
        """Discard a failed transaction so the session can be used again."""
        self._session.rollback()

    def get_by_email(self, email: str) -> User | None:
        return self._session.exec(select(User).where(User.email == email)).first()

    def get_by_provider_account(
        self, provider: str, provider_account_id: str
    ) -> User | None:
        """Resolve a linked OAuth identity to its user, if any."""
        statement = (
            select(User)
            .join(UserProvider, UserProvider.user_id == User.id)
            .where(
                UserProvider.provider == provider,
                UserProvider.provider_account_id == provider_account_id,
            )
        )
        return self._session.exec(statement).first()

    def create(self, email: str, name: str | None = None) -> User:
        """Create a user on the free plan with the starting credit count."""
        user = User(
            email=email,
            name=name,
            analysis_count=STARTING_CREDITS,
            plan=Plan.FREE.value,
            last_login_at=utcnow(),
        )
        self._session.add(user)
        self._session.commit()
        self._session.refresh(user)
        logger.info("User created: id=%s email=%s", user.id, email)
        return user

    def link_provider(
        self, user_id: int, provider: str, provider_account_id: str
    ) -> UserProvider:
        link = UserProvider(
            user_id=user_id,
            provider=provider,
            provider_account_id=provider_account_id,
        )
        self._session.add(link)
        self._session.commit()
        self._session.refresh(link)
        logger.info("Provider linked: user_id=%s provider=%s", user_id, provider)
        return link

    def resolve_or_create(
        self,
        email: str,
        provider: str,
        provider_account_id: str,
        name: str | None = None,
    ) -> tuple[User, bool]:
        """Resolve a sign-in to one stable user, creating what is missing.

        Order: existing provider link, then existing user with the same email
        (the new provider is linked to it), then a brand new user plus link.

        Returns:
            (user, created) where created is True for a brand new account.
        """
        user = self.get_by_provider_account(provider, provider_account_id)
        if user is not None:
            return user, False

        created = False
        user = self.get_by_email(email)
        if user is None:
            user = self.create(email, name=name)
            created = True
        else:
            logger.info("Linking %s identity to existing user id=%s", provider, user.id)
        self.link_provider(user.id, provider, provider_account_id)
        return user, created

    def touch_login(self, user: User, name: str | None = None) -> User:
        """Stamp last_login_at; fill in the name only when none is stored yet."""
        now = utcnow()
        user.last_login_at = now
        user.updated_at = now
        if name and not user.name:
            user.name = name
        self._session.add(user)
        self._session.commit()
        self._session.refresh(user)
        return user

    def list_providers(self, user_id: int) -> list[UserProvider]:
        statement = (
            select(UserProvider)
            .where(UserProvider.user_id == user_id)
            .order_by(UserProvider.created_at, UserProvider.id)
        )
        return list(self._session.exec(statement).all())

    def count_providers(self, user_id: int) -> int:
        statement = select(func.count()).select_from(UserProvider).where(
            UserProvider.user_id == user_id
        )
        return self._session.exec(statement).one()

    def unlink_provider(self, user_id: int, provider: str) -> None:
        """Remove one provider link, refusing to remove the last one.

        The guard is part of the DELETE itself so two concurrent unlinks
        cannot both pass a separate count check.
        """
        sibling = aliased(UserProvider)
        link_count = (
            select(func.count())
            .select_from(sibling)
            .where(sibling.user_id == user_id)
            .scalar_subquery()
        )
        statement = delete(UserProvider).where(
            UserProvider.user_id == user_id,
            UserProvider.provider == provider,
            link_count > 1,
        ).execution_options(synchronize_session=False)
        result = self._session.exec(statement)
        self._session.commit()
        if result.rowcount:
            logger.info("Provider unlinked: user_id=%s provider=%s", user_id, provider)
            return
        if self.count_providers(user_id) <= 1:
            raise LastProviderError("Cannot remove the last login method")
        raise NotFoundError(f"Provider '{provider}' is not linked")

    def decrement_credit(self, email: str) -> User:
        """Consume one analysis credit.

        Single conditional UPDATE with a floor of zero, so concurrent
        requests cannot drive the count negative.

        Raises:
            NotFoundError: No user with that email.
            NoCreditsError: The user has no credits left (count unchanged).
        """
        statement = (
            update(User)
            .where(User.email == email, User.analysis_count > 0)
            .values(analysis_count=User.analysis_count - 1, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        result = self._session.exec(statement)
        self._session.commit()
        user = self.get_by_email(email)
        if user is None:
            raise NotFoundError("User not found")
        if not result.rowcount:
            raise NoCreditsError("No analysis credits remaining")
        self._session.refresh(user)
        logger.info("Analysis credit used: email=%s remaining=%s", email, user.analysis_count)
        return user

    def add_credits(self, email: str, credits: int, plan: Plan | None = None) -> User:
        """Atomically add credits (payment, refund) and optionally change plan."""
        values: dict = {
            "analysis_count": User.analysis_count + credits,
            "updated_at": utcnow(),
        }
        if plan is not None:
            values["plan"] = plan.value
        result = self._session.exec(
            update(User)
            .where(User.email == email)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        self._session.commit()
        if not result.rowcount:
            raise NotFoundError("User not found")
        user = self.get_by_email(email)
        self._session.refresh(user)
        return user

    def delete(self, user: User) -> None:
        """Delete a user; provider links and history go with it (ON DELETE CASCADE)."""
        user_id = user.id
        self._session.exec(
            delete(User)
            .where(User.id == user_id)
            .execution_options(synchronize_session=False)
        )
        self._session.commit()
        self._session.expunge(user)
        logger.info("User deleted: id=%s", user_id)
