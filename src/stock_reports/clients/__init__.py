"""Outbound HTTP clients (AI analysis backend, Toss Payments)."""
from stock_reports.clients.analysis_backend import AnalysisBackendClient
from stock_reports.clients.base import HttpClientABC
from stock_reports.clients.models import (AnalyzeRequest, GeneratedReport,
                                          TossPayment)
from stock_reports.clients.toss_payments import (TossPaymentsClient,
                                                 toss_error_message)

__all__ = [
    "AnalysisBackendClient",
    "AnalyzeRequest",
    "GeneratedReport",
    "HttpClientABC",
    "TossPayment",
    "TossPaymentsClient",
    "toss_error_message",
]
