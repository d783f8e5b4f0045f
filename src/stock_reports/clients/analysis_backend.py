"""Client for the externally hosted AI analysis backend."""
import logging
import os

import httpx

from stock_reports.clients.base import HttpClientABC
from stock_reports.clients.models import AnalyzeRequest, GeneratedReport

logger = logging.getLogger(__name__)

ANALYSIS_BACKEND_URL = os.getenv("ANALYSIS_BACKEND_URL", "http://localhost:8000")
# Report generation is slow; the backend is given up to five minutes.
ANALYSIS_BACKEND_TIMEOUT = float(os.getenv("ANALYSIS_BACKEND_TIMEOUT", "300"))


class AnalysisBackendClient(HttpClientABC):
    """Calls the report generator over HTTP. One attempt per request, no retries."""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            base_url: Backend root URL. Defaults to ANALYSIS_BACKEND_URL.
            timeout: Seconds to wait for a report. Defaults to ANALYSIS_BACKEND_TIMEOUT.
            client: Pre-built httpx client (tests pass one with a MockTransport).
        """
        super().__init__(
            client
            or httpx.AsyncClient(
                base_url=base_url or ANALYSIS_BACKEND_URL,
                timeout=timeout or ANALYSIS_BACKEND_TIMEOUT,
                headers={"Accept": "application/json"},
            )
        )

    async def analyze(self, request: AnalyzeRequest) -> GeneratedReport:
        """Generate a report for one stock.

        Raises:
            httpx.HTTPError: Transport failure, timeout or non-2xx response.
            pydantic.ValidationError: The backend answered without a report.
        """
        logger.info("Requesting analysis for %s:%s", request.market, request.symbol)
        response = await self._client.post("/api/analyze", json=request.model_dump())
        response.raise_for_status()
        return GeneratedReport.model_validate(response.json())
