"""Service layer: repository orchestration and domain error raising."""
from stock_reports.services.analyses import AnalysisService
from stock_reports.services.payments import (CREDIT_PLANS, CreditPlan,
                                             PaymentService, plan_for_amount)
from stock_reports.services.users import UserService

__all__ = [
    "CREDIT_PLANS",
    "AnalysisService",
    "CreditPlan",
    "PaymentService",
    "UserService",
    "plan_for_amount",
]
