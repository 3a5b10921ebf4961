"""
PURPOSE: Inbound webhook API route for the Bybit relay.

Provides the single public POST endpoint that automation tools call. The
endpoint is protected by a shared token carried in the JSON body
(data.token) rather than by a header, since most webhook senders can only
template the body.

Status mapping:
    - 405: any verb other than POST
    - 400: malformed JSON; after the token check, schema-invalid body,
           unknown event or missing field
    - 401: token missing or not equal to WEBHOOK_TOKEN
    - 500: transport or business failure from Bybit, or an internal error
Every response carries requestId and timestamp next to retCode/retMsg.

CALLED BY:
    - External automation webhooks (POST, public)
"""

import time
from typing import Any, Optional
from uuid import uuid4

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from bybit_relay.bybit.errors import ExchangeError, InvalidPayloadError
from bybit_relay.config.settings import Settings, settings
from bybit_relay.core.rate_limit import WEBHOOK_LIMIT, limiter
from bybit_relay.schemas.webhook import RelayResponse, WebhookPayload
from bybit_relay.utils.logger import get_logger
from bybit_relay.utils.time_utils import utc_iso_now
from bybit_relay.webhook.dispatcher import EventDispatcher, get_dispatcher

logger = get_logger(__name__)

router = APIRouter(tags=["webhook"])


# ════════════════════════════════════════════════════════════════
# Dependencies
# ════════════════════════════════════════════════════════════════


def get_settings() -> Settings:
    """
    PURPOSE: Return the process-wide settings.

    CALLED BY: FastAPI dependency injection (overridden in tests)

    Returns:
        Settings: Read-only configuration.
    """
    return settings


# ════════════════════════════════════════════════════════════════
# Internal Helpers
# ════════════════════════════════════════════════════════════════


def _respond(
    request_id: str,
    ret_code: Optional[int],
    ret_msg: str,
    status_code: int = status.HTTP_200_OK,
    result: Any = None,
) -> JSONResponse:
    """
    PURPOSE: Build a JSON envelope response with correlation metadata.

    Args:
        request_id: Correlation id of the inbound request.
        ret_code: Envelope retCode.
        ret_msg: Envelope retMsg.
        status_code: HTTP status of the response.
        result: Optional result object.

    Returns:
        JSONResponse: {retCode, retMsg, result?, requestId, timestamp}
    """
    body = RelayResponse(
        retCode=ret_code,
        retMsg=ret_msg,
        result=result,
        requestId=request_id,
        timestamp=utc_iso_now(),
    ).model_dump(exclude_none=True)
    return JSONResponse(status_code=status_code, content=body)


def _raw_token(raw: Any) -> Any:
    """Return data.token from an unvalidated JSON body, or None when absent."""
    if not isinstance(raw, dict):
        return None
    data = raw.get("data")
    return data.get("token") if isinstance(data, dict) else None


def _token_is_valid(provided: Any, configured: str) -> bool:
    """
    PURPOSE: Check the inbound webhook token against the configured one.

    An empty configured token never matches, so an unconfigured relay
    rejects every webhook.

    Args:
        provided: data.token from the payload.
        configured: WEBHOOK_TOKEN setting.

    Returns:
        bool: True if provided is a string and both are non-empty and equal.
    """
    return isinstance(provided, str) and bool(provided) and bool(configured) and provided == configured


# ════════════════════════════════════════════════════════════════
# Public Inbound Endpoint
# ════════════════════════════════════════════════════════════════


@router.post("/webhook")
@limiter.limit(WEBHOOK_LIMIT)
async def relay_webhook(
    request: Request,
    cfg: Settings = Depends(get_settings),
    dispatcher: EventDispatcher = Depends(get_dispatcher),
) -> JSONResponse:
    """
    PURPOSE: Receive an automation webhook and relay it to Bybit as a signed call.

    On receipt the webhook is:
      1. Parsed as JSON (HTTP 400 on failure).
      2. Token-checked on the raw body (HTTP 401 on failure).
      3. Validated against WebhookPayload (HTTP 400 on failure).
      4. Dispatched to the matching domain operation.
      5. Answered with the Bybit envelope plus requestId and timestamp.

    Rate limit: 30 requests/minute per IP address.

    Args:
        request: FastAPI Request (body is read manually to control 400s).
        cfg: Settings providing the token and the credentials.
        dispatcher: Event dispatcher.

    Returns:
        JSONResponse: Envelope with the appropriate HTTP status.
    """
    request_id = str(uuid4())
    started = time.perf_counter()

    logger.info(
        "webhook_request_received",
        request_id=request_id,
        method=request.method,
        path=request.url.path,
        client=request.client.host if request.client else None,
    )

    try:
        raw: Any = await request.json()
    except ValueError:
        logger.warning("webhook_invalid_json", request_id=request_id)
        return _respond(request_id, 400, "Invalid JSON payload", status.HTTP_400_BAD_REQUEST)

    # Token is checked on the raw body, before any schema validation
    token = _raw_token(raw)
    if not _token_is_valid(token, cfg.WEBHOOK_TOKEN):
        logger.warning("webhook_auth_failed", request_id=request_id, has_token=bool(token))
        return _respond(request_id, 401, "Unauthorized", status.HTTP_401_UNAUTHORIZED)

    try:
        payload = WebhookPayload.model_validate(raw)
    except ValidationError as e:
        logger.warning("webhook_invalid_payload", request_id=request_id, error_count=e.error_count())
        return _respond(request_id, 400, "Invalid JSON payload", status.HTTP_400_BAD_REQUEST)

    try:
        result = await dispatcher.dispatch(payload, cfg.credentials())
    except InvalidPayloadError as e:
        logger.warning("webhook_request_rejected", request_id=request_id, event_kind=payload.event, error=e.message)
        return _respond(request_id, 400, e.message, status.HTTP_400_BAD_REQUEST)
    except ExchangeError as e:
        logger.error(
            "webhook_request_failed",
            request_id=request_id,
            event_kind=payload.event,
            error=e.message,
            exception_type=type(e).__name__,
        )
        return _respond(request_id, 500, e.message, status.HTTP_500_INTERNAL_SERVER_ERROR)
    except Exception as e:
        logger.error(
            "webhook_request_failed",
            request_id=request_id,
            event_kind=payload.event,
            error=str(e),
            exception_type=type(e).__name__,
        )
        return _respond(request_id, 500, "Internal Server Error", status.HTTP_500_INTERNAL_SERVER_ERROR)

    logger.info(
        "webhook_request_completed",
        request_id=request_id,
        event_kind=payload.event,
        ret_code=result.get("retCode"),
        elapsed_ms=f"{(time.perf_counter() - started) * 1000:.2f}",
    )

    return _respond(
        request_id,
        result.get("retCode"),
        result.get("retMsg", ""),
        result=result.get("result"),
    )


@router.api_route("/webhook", methods=["GET", "HEAD", "PUT", "PATCH", "DELETE", "OPTIONS"], include_in_schema=False)
async def webhook_method_not_allowed(request: Request) -> JSONResponse:
    """
    PURPOSE: Reject every verb except POST on the webhook path.

    Returns:
        JSONResponse: HTTP 405 envelope.
    """
    return _respond(str(uuid4()), 405, "Method Not Allowed", status.HTTP_405_METHOD_NOT_ALLOWED)
