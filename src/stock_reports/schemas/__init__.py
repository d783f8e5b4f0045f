"""Pydantic schemas for the HTTP API. Not persisted to DB."""
from stock_reports.schemas.analyses import (AnalysisCreate,
                                            AnalysisListResponse,
                                            AnalysisRead, AnalysisResponse,
                                            AnalysisResultResponse,
                                            CacheCheckRequest,
                                            CacheCheckResponse, DeleteResponse,
                                            HistoryListResponse, HistoryRead,
                                            HistoryResponse,
                                            HistoryWithAnalysis,
                                            SaveHistoryRequest)
from stock_reports.schemas.common import ErrorResponse
from stock_reports.schemas.payments import (CreditPlanRead,
                                            PaymentConfirmRequest,
                                            PaymentConfirmResponse,
                                            PlansResponse)
from stock_reports.schemas.users import (AuthProvidersResponse, CreditResponse,
                                         MessageResponse, ProfileResponse,
                                         ProviderRead, ProvidersResponse,
                                         SignInRequest, SignInResponse,
                                         UnlinkProviderRequest, UserProfile)

__all__ = [
    "AnalysisCreate",
    "AnalysisListResponse",
    "AnalysisRead",
    "AnalysisResponse",
    "AnalysisResultResponse",
    "AuthProvidersResponse",
    "CacheCheckRequest",
    "CacheCheckResponse",
    "CreditPlanRead",
    "CreditResponse",
    "DeleteResponse",
    "ErrorResponse",
    "HistoryListResponse",
    "HistoryRead",
    "HistoryResponse",
    "HistoryWithAnalysis",
    "MessageResponse",
    "PaymentConfirmRequest",
    "PaymentConfirmResponse",
    "PlansResponse",
    "ProfileResponse",
    "ProviderRead",
    "ProvidersResponse",
    "SaveHistoryRequest",
    "SignInRequest",
    "SignInResponse",
    "UnlinkProviderRequest",
    "UserProfile",
]
