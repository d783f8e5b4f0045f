"""Wire models for the AI analysis backend and Toss Payments."""
from pydantic import BaseModel, Field


class AnalyzeRequest(BaseModel):
    """Body of POST /api/analyze on the analysis backend."""

    market: str
    symbol: str
    name: str
    compare_periods: list[str] = Field(default_factory=list)
    model: str | None = None


class GeneratedReport(BaseModel):
    """Report returned by the analysis backend."""

    report: str
    sector: str | None = None
    financial_table: str | None = None
    citations: list[str] = Field(default_factory=list)
    model: str | None = None


class TossConfirmRequest(BaseModel):
    """Body of POST /v1/payments/confirm."""

    payment_key: str = Field(serialization_alias="paymentKey")
    order_id: str = Field(serialization_alias="orderId")
    amount: int

    model_config = {"populate_by_name": True}


class TossPayment(BaseModel):
    """Subset of the Payment object returned by Toss Payments."""

    payment_key: str = Field(alias="paymentKey")
    order_id: str = Field(alias="orderId")
    status: str
    total_amount: int | None = Field(default=None, alias="totalAmount")
    method: str | None = None

    model_config = {"populate_by_name": True}
