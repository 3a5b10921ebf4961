"""
PURPOSE: Webhook event dispatcher for the Bybit relay.

Maps an authenticated webhook event onto exactly one domain operation.
Dispatch is a table lookup; each handler checks its required fields before
any outbound call and lets every error propagate to the HTTP boundary.

    listing   -> place_order(Buy)      requires symbol
    delisting -> place_order(Sell)     requires symbol
    verify    -> verify_connection     no credentials used
    account   -> get_account_info
    positions -> get_positions         optional symbol filter
    custom    -> custom_request        requires endpoint

CALLED BY:
    - api/routes_webhook.py (POST /api/webhook)
"""

from typing import Any, Awaitable, Callable, Dict, Optional

from bybit_relay.bybit import operations
from bybit_relay.bybit.client import BybitClient
from bybit_relay.bybit.errors import InvalidPayloadError
from bybit_relay.bybit.models import Credentials
from bybit_relay.config.constants import EventKind, OrderSide
from bybit_relay.config.settings import settings
from bybit_relay.schemas.webhook import WebhookData, WebhookPayload
from bybit_relay.utils.logger import get_logger

logger = get_logger(__name__)

Handler = Callable[[WebhookData, Credentials], Awaitable[Dict[str, Any]]]


class EventDispatcher:
    """
    PURPOSE: Route webhook events to Bybit domain operations.

    Holds no per-request state; the same instance serves concurrent
    requests.

    Attributes:
        _client: BybitClient used by every operation.
        _handlers: Event kind -> handler coroutine.
    """

    def __init__(self, client: BybitClient) -> None:
        self._client = client
        self._handlers: Dict[str, Handler] = {
            EventKind.LISTING.value: self._handle_listing,
            EventKind.DELISTING.value: self._handle_delisting,
            EventKind.VERIFY.value: self._handle_verify,
            EventKind.ACCOUNT.value: self._handle_account,
            EventKind.POSITIONS.value: self._handle_positions,
            EventKind.CUSTOM.value: self._handle_custom,
        }

    @property
    def supported_events(self) -> list[str]:
        """Event kinds this dispatcher accepts."""
        return list(self._handlers)

    async def dispatch(self, payload: WebhookPayload, credentials: Credentials) -> Dict[str, Any]:
        """
        PURPOSE: Run the domain operation for an authenticated webhook event.

        Args:
            payload: Validated webhook payload (token already checked).
            credentials: API key pair for signed calls.

        Returns:
            dict: {retCode, retMsg, result} envelope.

        Raises:
            InvalidPayloadError: Unknown event kind or missing required field.
            ExchangeError: Transport or business failure from Bybit.
        """
        handler = self._handlers.get(payload.event)
        if handler is None:
            raise InvalidPayloadError(f"Unsupported event: {payload.event!r}")

        logger.info("event_dispatched", event_kind=payload.event, symbol=payload.data.symbol)
        return await handler(payload.data, credentials)

    # ════════════════════════════════════════════════════════════════
    # Handlers
    # ════════════════════════════════════════════════════════════════

    async def _handle_listing(self, data: WebhookData, credentials: Credentials) -> Dict[str, Any]:
        return await self._trade(data, credentials, OrderSide.BUY)

    async def _handle_delisting(self, data: WebhookData, credentials: Credentials) -> Dict[str, Any]:
        return await self._trade(data, credentials, OrderSide.SELL)

    async def _trade(self, data: WebhookData, credentials: Credentials, side: OrderSide) -> Dict[str, Any]:
        if not data.symbol:
            raise InvalidPayloadError("Symbol is required for trading")
        return await operations.place_order(
            self._client,
            credentials,
            symbol=data.symbol,
            side=side,
            price=data.price,
            quantity=data.quantity,
            order_type=data.order_type,
        )

    async def _handle_verify(self, data: WebhookData, credentials: Credentials) -> Dict[str, Any]:
        return await operations.verify_connection(self._client)

    async def _handle_account(self, data: WebhookData, credentials: Credentials) -> Dict[str, Any]:
        return await operations.get_account_info(self._client, credentials)

    async def _handle_positions(self, data: WebhookData, credentials: Credentials) -> Dict[str, Any]:
        return await operations.get_positions(self._client, credentials, symbol=data.symbol)

    async def _handle_custom(self, data: WebhookData, credentials: Credentials) -> Dict[str, Any]:
        if not data.endpoint:
            raise InvalidPayloadError("Endpoint is required for custom API calls")
        return await operations.custom_request(
            self._client,
            credentials,
            endpoint=data.endpoint,
            method=data.method,
            params=data.params,
        )


# ════════════════════════════════════════════════════════════════
# Module-level singleton
# ════════════════════════════════════════════════════════════════

_dispatcher_instance: Optional[EventDispatcher] = None


def get_dispatcher() -> EventDispatcher:
    """
    PURPOSE: Return the module-level EventDispatcher singleton.

    Creates the instance on first call from the process settings; later
    calls return the same object.

    CALLED BY: routes_webhook.py (FastAPI dependency)

    Returns:
        EventDispatcher: Singleton dispatcher instance.
    """
    global _dispatcher_instance
    if _dispatcher_instance is None:
        _dispatcher_instance = EventDispatcher(
            BybitClient(
                base_url=settings.BYBIT_BASE_URL,
                recv_window=settings.BYBIT_RECV_WINDOW,
                timeout=settings.HTTP_TIMEOUT_SECONDS,
            )
        )
    return _dispatcher_instance
