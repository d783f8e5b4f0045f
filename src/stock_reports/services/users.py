"""User service: sign-in upsert, profile, credits, linked providers and account deletion."""
import logging

from sqlalchemy.exc import SQLAlchemyError

from stock_reports.auth import SessionIdentity
from stock_reports.core import NotFoundError, Outcome
from stock_reports.db.models import User, UserProvider
from stock_reports.repositories import UserRepository
from stock_reports.schemas import UserProfile

logger = logging.getLogger(__name__)


class UserService:
    """Thin service over UserRepository; resolves the session identity to a user."""

    def __init__(self, users: UserRepository) -> None:
        self._users = users

    def current_user(self, identity: SessionIdentity) -> User:
        """Raises NotFoundError when the session's email has no account."""
        user = self._users.get_by_email(identity.email)
        if user is None:
            raise NotFoundError("User not found")
        return user

    def sign_in(
        self,
        email: str,
        provider: str,
        provider_account_id: str,
        name: str | None = None,
    ) -> Outcome[UserProfile | None]:
        """Create or update the account behind an OAuth sign-in.

        Never raises: sign-in must not be blocked by the database, so
        failures come back as warnings with value None. The profile is
        snapshotted as soon as the account is resolved, so a failed login
        stamp still returns it without touching the database again.
        """
        outcome: Outcome[UserProfile | None] = Outcome(value=None)
        try:
            user, created = self._users.resolve_or_create(
                email, provider, provider_account_id, name=name
            )
        except SQLAlchemyError as exc:
            logger.exception("Failed to upsert user %s via %s", email, provider)
            self._users.rollback()
            outcome.warn(f"Failed to upsert user: {exc}")
            return outcome
        outcome.value = UserProfile.model_validate(user)
        user_id = user.id

        try:
            outcome.value = UserProfile.model_validate(self._users.touch_login(user, name=name))
        except SQLAlchemyError as exc:
            logger.exception("Failed to update last login for user id=%s", user_id)
            self._users.rollback()
            outcome.warn(f"Failed to update last login: {exc}")

        logger.info(
            "User signed in: id=%s provider=%s new=%s", user_id, provider, created
        )
        return outcome

    def decrement_credit(self, identity: SessionIdentity) -> User:
        """Consume one credit. Raises NoCreditsError when none are left."""
        return self._users.decrement_credit(identity.email)

    def list_providers(self, identity: SessionIdentity) -> list[UserProvider]:
        return self._users.list_providers(self.current_user(identity).id)

    def unlink_provider(self, identity: SessionIdentity, provider: str) -> None:
        """Raises LastProviderError if this is the account's only login method."""
        self._users.unlink_provider(self.current_user(identity).id, provider)

    def delete_account(self, identity: SessionIdentity) -> None:
        """Irreversibly delete the account, its provider links and its history."""
        user = self.current_user(identity)
        logger.info("Account deletion requested: id=%s email=%s", user.id, user.email)
        self._users.delete(user)
