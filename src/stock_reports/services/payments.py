"""Payment service: credit plans and Toss Payments confirmation."""
import asyncio
import logging
from dataclasses import dataclass

import httpx

from stock_reports.auth import SessionIdentity
from stock_reports.clients import TossPaymentsClient, toss_error_message
from stock_reports.core import (NotFoundError, PaymentRejectedError,
                                RequestValidationFailed, UpstreamError)
from stock_reports.db.models import Plan, User
from stock_reports.repositories import UserRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CreditPlan:
    """A purchasable bundle of analysis credits (price in KRW)."""

    id: str
    name: str
    credits: int
    price: int


CREDIT_PLANS: tuple[CreditPlan, ...] = (
    CreditPlan(id="plan-20", name="Starter", credits=20, price=500),
    CreditPlan(id="plan-50", name="Premium", credits=50, price=1000),
)


def plan_for_amount(amount: int) -> CreditPlan | None:
    return next((plan for plan in CREDIT_PLANS if plan.price == amount), None)


class PaymentService:
    """Confirms a widget payment with Toss and credits the paying account."""

    def __init__(self, users: UserRepository, client: TossPaymentsClient) -> None:
        self._users = users
        self._client = client

    async def confirm(
        self,
        identity: SessionIdentity,
        payment_key: str,
        order_id: str,
        amount: int,
    ) -> User:
        """Confirm one payment and add the plan's credits to the user.

        Raises:
            RequestValidationFailed: The amount matches no credit plan.
            NotFoundError: The signed-in user has no account.
            PaymentRejectedError: Toss refused the payment.
            UpstreamError: Toss was unreachable or failed.
        """
        plan = plan_for_amount(amount)
        if plan is None:
            raise RequestValidationFailed(f"No credit plan costs {amount}")
        if await asyncio.to_thread(self._users.get_by_email, identity.email) is None:
            raise NotFoundError("User not found")

        try:
            payment = await self._client.confirm(payment_key, order_id, amount)
        except httpx.HTTPStatusError as exc:
            message = toss_error_message(exc)
            if exc.response.status_code < 500:
                logger.warning("Payment %s rejected: %s", order_id, message)
                raise PaymentRejectedError(message) from exc
            logger.error("Toss Payments error for %s: %s", order_id, message)
            raise UpstreamError("Payment processor error") from exc
        except httpx.HTTPError as exc:
            logger.error("Toss Payments unreachable for %s: %s", order_id, exc)
            raise UpstreamError("Payment processor unreachable") from exc

        if payment.status != "DONE":
            raise PaymentRejectedError(f"Payment not completed (status {payment.status})")

        user = await asyncio.to_thread(
            self._users.add_credits, identity.email, plan.credits, Plan.PAID
        )
        logger.info(
            "Credited %s analyses to user id=%s for order %s", plan.credits, user.id, order_id
        )
        return user
