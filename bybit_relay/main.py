"""
PURPOSE: FastAPI application factory for the Bybit webhook relay.

create_app() wires the /api router, slowapi rate limiting and the
app-level exception handlers, and refuses to start outside development
when a secret is missing. The lifespan only configures logging; the relay
keeps no connections or background tasks between requests.

Usage:
    uvicorn bybit_relay.main:app --host 0.0.0.0 --port 8000
    python -m bybit_relay.main
"""

from contextlib import asynccontextmanager
from uuid import uuid4

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from bybit_relay.api import api_router
from bybit_relay.bybit.errors import RelayError
from bybit_relay.config.settings import settings
from bybit_relay.core.rate_limit import limiter
from bybit_relay.schemas.webhook import RelayResponse
from bybit_relay.utils.logger import get_logger, setup_logging
from bybit_relay.utils.time_utils import utc_iso_now
from bybit_relay.version import get_version_string

logger = get_logger(__name__)

SERVICE_NAME = "Bybit Webhook Relay"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Configure logging and report unset secrets; nothing to release on shutdown."""
    setup_logging(settings.LOG_LEVEL)
    logger.info(
        "application_startup",
        version=app.version,
        env=settings.APP_ENV,
        bybit_base_url=settings.BYBIT_BASE_URL,
        recv_window=settings.BYBIT_RECV_WINDOW,
    )

    missing = settings.get_missing_secrets()
    if missing:
        logger.warning("missing_secrets", settings=missing)

    yield

    logger.info("application_shutdown")


# ════════════════════════════════════════════════════════════════
# Exception Handlers
# ════════════════════════════════════════════════════════════════


def _error_response(status_code: int, ret_msg: str, **extra) -> JSONResponse:
    body = RelayResponse(
        retCode=status_code,
        retMsg=ret_msg,
        requestId=uuid4().hex,
        timestamp=utc_iso_now(),
    ).model_dump(exclude_none=True)
    body.update(extra)
    return JSONResponse(status_code=status_code, content=body)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    PURPOSE: Answer FastAPI-level validation failures with a 400 envelope.

    CALLED BY: FastAPI when a declared route parameter fails validation
    """
    logger.warning("request_validation_failed", path=request.url.path, error_count=len(exc.errors()))
    errors = jsonable_encoder(exc.errors(), custom_encoder={Exception: str})
    return _error_response(status.HTTP_400_BAD_REQUEST, "Request validation failed", errors=errors)


async def relay_exception_handler(request: Request, exc: RelayError) -> JSONResponse:
    """
    PURPOSE: Map a RelayError that escaped a route onto its HTTP status.

    CALLED BY: FastAPI exception middleware
    """
    logger.warning("relay_error", path=request.url.path, error=exc.message, status_code=exc.http_status)
    return _error_response(exc.http_status, exc.message)


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    PURPOSE: Last-resort handler; never exposes exception details to the caller.

    CALLED BY: FastAPI exception middleware
    """
    logger.error(
        "unhandled_exception",
        path=request.url.path,
        method=request.method,
        error=str(exc),
        exception_type=type(exc).__name__,
    )
    return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal Server Error")


# ════════════════════════════════════════════════════════════════
# Application Factory
# ════════════════════════════════════════════════════════════════


def create_app() -> FastAPI:
    """
    PURPOSE: Build the relay application.

    CALLED BY: module import (uvicorn target) and the test suite

    Returns:
        FastAPI: Application with the /api router and handlers installed.

    Raises:
        ValueError: A secret is missing and APP_ENV is not development.
    """
    settings.validate_credentials()

    version = get_version_string()
    app = FastAPI(
        title=SERVICE_NAME,
        description="Relays authenticated automation webhooks to the Bybit v5 API",
        version=version,
        lifespan=lifespan,
    )

    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(RelayError, relay_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    app.include_router(api_router)

    @app.get("/", tags=["root"])
    async def root() -> dict:
        """Service name and version, for load balancers and smoke checks."""
        return {"status": "ok", "service": SERVICE_NAME, "version": version}

    logger.info("fastapi_application_created", version=version, api_prefix=api_router.prefix)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "bybit_relay.main:app",
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )
