"""Main module for the stock report service."""
import logging
import os
import subprocess
import sys
from contextlib import asynccontextmanager
from pathlib import Path

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from stock_reports.clients import AnalysisBackendClient, TossPaymentsClient
from stock_reports.core import ServiceError, ServiceErrorMapper
from stock_reports.db.sessions import create_db_engine, init_db
from stock_reports.routers import (analyses_router, auth_router,
                                   payment_router, user_router)
from stock_reports.schemas import ErrorResponse

logger = logging.getLogger(__name__)

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
AUTO_CREATE_TABLES = os.getenv("AUTO_CREATE_TABLES", "1") == "1"

_error_mapper = ServiceErrorMapper(api_name="Analysis backend")

# Validation error types that mean "the field was not really supplied".
_MISSING_TYPES = {"missing", "string_too_short"}


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(error=message).model_dump())


async def service_error_handler(_: Request, exc: ServiceError) -> JSONResponse:
    status_code, detail = _error_mapper.to_http(exc)
    if status_code >= 500:
        logger.error("%s: %s", type(exc).__name__, detail)
    return _error_response(status_code, detail)


async def validation_error_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
    """Every malformed request is a 400 with a readable message."""
    missing = []
    for error in exc.errors():
        if error.get("type") in _MISSING_TYPES:
            loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query")]
            missing.append(".".join(loc) or "body")
    if missing:
        return _error_response(400, f"Missing required fields: {', '.join(missing)}")
    first = exc.errors()[0] if exc.errors() else {}
    field = ".".join(str(part) for part in first.get("loc", ())[1:])
    detail = f"{field}: {first.get('msg')}" if field else str(first.get("msg", "malformed body"))
    return _error_response(400, f"Invalid request: {detail}")


async def http_error_handler(_: Request, exc: StarletteHTTPException) -> JSONResponse:
    return _error_response(exc.status_code, str(exc.detail))


async def unhandled_error_handler(_: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error")
    status_code, detail = _error_mapper.to_http(exc)
    return _error_response(status_code, detail)


def create_app(
    database_url: str | None = None,
    analysis_backend: AnalysisBackendClient | None = None,
    payments_client: TossPaymentsClient | None = None,
) -> FastAPI:
    """Build the application.

    Args:
        database_url: Overrides DATABASE_URL (tests use in-memory SQLite).
        analysis_backend: Pre-built AI backend client; created from env when omitted.
        payments_client: Pre-built Toss Payments client; created from env when omitted.
    """

    @asynccontextmanager
    async def lifespan(fastapi_app: FastAPI):
        """Create the engine and HTTP clients at startup; close clients on shutdown."""
        engine = create_db_engine(database_url)
        if AUTO_CREATE_TABLES:
            init_db(engine)

        fastapi_app.state.engine = engine
        fastapi_app.state.analysis_backend = analysis_backend or AnalysisBackendClient()
        fastapi_app.state.payments_client = payments_client or TossPaymentsClient()

        # Keep client refs for clean shutdown
        fastapi_app.state.clients_to_close = [
            fastapi_app.state.analysis_backend,
            fastapi_app.state.payments_client,
        ]

        yield

        for client in fastapi_app.state.clients_to_close:
            try:
                await client.close()
            except Exception as exc:  # pylint: disable=broad-except
                logger.warning("Error closing client %s: %s", type(client).__name__, exc)
        engine.dispose()

    fastapi_app = FastAPI(
        title="Stock Reports",
        description="AI stock analysis reports with caching, history, credits and payments",
        version="0.1.0",
        lifespan=lifespan,
    )

    fastapi_app.add_exception_handler(ServiceError, service_error_handler)
    fastapi_app.add_exception_handler(RequestValidationError, validation_error_handler)
    fastapi_app.add_exception_handler(StarletteHTTPException, http_error_handler)
    fastapi_app.add_exception_handler(Exception, unhandled_error_handler)

    # Include routers
    fastapi_app.include_router(auth_router)
    fastapi_app.include_router(analyses_router)
    fastapi_app.include_router(user_router)
    fastapi_app.include_router(payment_router)

    @fastapi_app.get("/")
    def health():
        """Return health check status."""
        return {"status": "ok"}

    return fastapi_app


logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = create_app()


def run():
    """Run the server (uvicorn). Use for `poetry run start`."""
    uvicorn.run("stock_reports.main:app", host="127.0.0.1", port=8001)


def run_dev():
    """Run the development server with Postgres running via Docker."""
    project_root = Path(__file__).resolve().parent.parent.parent
    try:
        subprocess.run(
            ["docker", "compose", "up", "-d", "postgres"],
            cwd=project_root,
            capture_output=True,
            text=True,
            check=True,
        )
    except subprocess.CalledProcessError as e:
        print("Failed to start Postgres:", e.stderr or e.stdout, file=sys.stderr)
        sys.exit(1)
    uvicorn.run("stock_reports.main:app", host="0.0.0.0", port=8000, reload=True)
