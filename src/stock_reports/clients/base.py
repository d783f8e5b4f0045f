"""Base class for outbound HTTP clients."""
from abc import ABC

import httpx


class HttpClientABC(ABC):
    """Owns one httpx.AsyncClient for the lifetime of the application.

    Subclasses build the client in __init__ (or accept one, which tests use
    to inject an httpx.MockTransport) and are closed from the app lifespan.
    """

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> "HttpClientABC":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        """Async context manager exit - calls close()."""
        await self.close()
