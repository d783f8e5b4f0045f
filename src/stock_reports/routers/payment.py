"""Payment routes: credit plans and confirmation of Toss widget payments."""
from fastapi import APIRouter

from stock_reports.deps import Identity, PaymentServiceDep
from stock_reports.schemas import (CreditPlanRead, PaymentConfirmRequest,
                                   PaymentConfirmResponse, PlansResponse)
from stock_reports.services import CREDIT_PLANS

router = APIRouter(prefix="/api/payment", tags=["payment"])


@router.get("/plans", response_model=PlansResponse)
def list_plans() -> PlansResponse:
    return PlansResponse(
        plans=[
            CreditPlanRead(id=p.id, name=p.name, credits=p.credits, price=p.price)
            for p in CREDIT_PLANS
        ]
    )


@router.post("/confirm", response_model=PaymentConfirmResponse)
async def confirm_payment(
    payload: PaymentConfirmRequest,
    service: PaymentServiceDep,
    identity: Identity,
) -> PaymentConfirmResponse:
    """Confirm the payment with Toss and add the purchased credits."""
    user = await service.confirm(identity, payload.payment_key, payload.order_id, payload.amount)
    return PaymentConfirmResponse(
        analysis_count=user.analysis_count,
        plan=user.plan,
        order_id=payload.order_id,
    )
