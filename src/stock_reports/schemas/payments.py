"""Request and response schemas for /api/payment."""
from pydantic import BaseModel, Field


class PaymentConfirmRequest(BaseModel):
    """Query values Toss appends to the success redirect, posted back by the client."""

    payment_key: str = Field(alias="paymentKey", min_length=1)
    order_id: str = Field(alias="orderId", min_length=1)
    amount: int = Field(gt=0)

    model_config = {"populate_by_name": True}


class CreditPlanRead(BaseModel):
    id: str
    name: str
    credits: int
    price: int


class PlansResponse(BaseModel):
    success: bool = True
    plans: list[CreditPlanRead]


class PaymentConfirmResponse(BaseModel):
    success: bool = True
    analysis_count: int
    plan: str
    order_id: str = Field(serialization_alias="orderId")
