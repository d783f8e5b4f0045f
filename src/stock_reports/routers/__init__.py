"""API routers.

Includes routes for:
- /api/auth - Sign-in callback from the OAuth front end, enabled providers
- /api/analyses - Stored analyses, cache check, generation, history recording
- /api/user - Profile, analysis history, credits, linked providers, account
- /api/payment - Credit plans and Toss Payments confirmation
"""
from stock_reports.routers.analyses import router as analyses_router
from stock_reports.routers.auth import router as auth_router
from stock_reports.routers.payment import router as payment_router
from stock_reports.routers.user import router as user_router

__all__ = [
    "analyses_router",
    "auth_router",
    "payment_router",
    "user_router",
]
