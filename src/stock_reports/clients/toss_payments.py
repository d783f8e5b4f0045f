"""Toss Payments client: server-side confirmation of widget payments."""
import logging
import os

import httpx

from stock_reports.clients.base import HttpClientABC
from stock_reports.clients.models import TossConfirmRequest, TossPayment

logger = logging.getLogger(__name__)


class TossPaymentsClient(HttpClientABC):
    """Confirms payments started by the Toss payment widget.

    Authenticates with HTTP Basic auth: the secret key as user name and an
    empty password.
    """

    BASE_URL = "https://api.tosspayments.com"

    def __init__(
        self,
        secret_key: str | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            secret_key: Toss secret key. Defaults to TOSS_SECRET_KEY env var.
            client: Pre-built httpx client (tests pass one with a MockTransport).
        """
        self._auth = httpx.BasicAuth(secret_key or os.getenv("TOSS_SECRET_KEY", ""), "")
        super().__init__(
            client
            or httpx.AsyncClient(
                base_url=self.BASE_URL,
                timeout=30.0,
                headers={"Content-Type": "application/json"},
            )
        )

    async def confirm(self, payment_key: str, order_id: str, amount: int) -> TossPayment:
        """Confirm a payment.

        Raises:
            httpx.HTTPStatusError: Toss refused the confirmation (the body
                carries {"code", "message"}).
            httpx.HTTPError: Transport failure or timeout.
        """
        body = TossConfirmRequest(payment_key=payment_key, order_id=order_id, amount=amount)
        response = await self._client.post(
            "/v1/payments/confirm", json=body.model_dump(by_alias=True), auth=self._auth
        )
        response.raise_for_status()
        payment = TossPayment.model_validate(response.json())
        logger.info("Payment confirmed: order_id=%s status=%s", payment.order_id, payment.status)
        return payment


def toss_error_message(exc: httpx.HTTPStatusError) -> str:
    """Extract Toss's human-readable error message from a failed response."""
    try:
        data = exc.response.json()
    except ValueError:
        return exc.response.text or "Payment was rejected"
    return data.get("message") or data.get("code") or "Payment was rejected"
