"""
PURPOSE: Tests for webhook event routing.

Each event kind must invoke exactly one domain operation; unknown kinds and
missing required fields must fail before any network call.
"""

from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from bybit_relay.bybit import operations
from bybit_relay.bybit.errors import BusinessError, InvalidPayloadError
from bybit_relay.config.constants import OrderSide
from bybit_relay.schemas.webhook import WebhookPayload
from bybit_relay.webhook.dispatcher import EventDispatcher

OPERATION_NAMES = (
    "place_order",
    "get_account_info",
    "get_positions",
    "verify_connection",
    "custom_request",
)


@pytest.fixture
def mocked_operations(monkeypatch):
    """Replace every domain operation with an AsyncMock."""
    mocks = {}
    for name in OPERATION_NAMES:
        mock = AsyncMock(return_value={"retCode": 0, "retMsg": "OK", "result": {"op": name}})
        monkeypatch.setattr(operations, name, mock)
        mocks[name] = mock
    return mocks


def _payload(event, **data):
    return WebhookPayload.model_validate({"event": event, "data": {"token": "secret", **data}})


def _called(mocks):
    return [name for name, mock in mocks.items() if mock.await_count]


class TestRouting:
    """Event kind -> operation."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "event,data,expected",
        [
            ("listing", {"symbol": "BTCUSDT"}, "place_order"),
            ("delisting", {"symbol": "BTCUSDT"}, "place_order"),
            ("verify", {}, "verify_connection"),
            ("account", {}, "get_account_info"),
            ("positions", {}, "get_positions"),
            ("custom", {"endpoint": "/v5/order/realtime"}, "custom_request"),
        ],
    )
    async def test_each_event_invokes_one_operation(
        self, mocked_operations, bybit_client, credentials, event, data, expected
    ):
        dispatcher = EventDispatcher(bybit_client)

        result = await dispatcher.dispatch(_payload(event, **data), credentials)

        assert _called(mocked_operations) == [expected]
        assert mocked_operations[expected].await_count == 1
        assert result["result"] == {"op": expected}

    @pytest.mark.asyncio
    async def test_listing_buys_and_delisting_sells(self, mocked_operations, bybit_client, credentials):
        dispatcher = EventDispatcher(bybit_client)

        await dispatcher.dispatch(_payload("listing", symbol="BTCUSDT", price=10), credentials)
        await dispatcher.dispatch(_payload("delisting", symbol="ETHUSDT", quantity=2), credentials)

        buy, sell = mocked_operations["place_order"].await_args_list
        assert buy.kwargs["side"] is OrderSide.BUY
        assert buy.kwargs["symbol"] == "BTCUSDT"
        assert buy.kwargs["price"] == Decimal("10")
        assert sell.kwargs["side"] is OrderSide.SELL
        assert sell.kwargs["quantity"] == Decimal("2")

    @pytest.mark.asyncio
    async def test_positions_forwards_symbol(self, mocked_operations, bybit_client, credentials):
        dispatcher = EventDispatcher(bybit_client)

        await dispatcher.dispatch(_payload("positions", symbol="BTCUSDT"), credentials)

        assert mocked_operations["get_positions"].await_args.kwargs["symbol"] == "BTCUSDT"

    @pytest.mark.asyncio
    async def test_custom_forwards_method_and_params(self, mocked_operations, bybit_client, credentials):
        dispatcher = EventDispatcher(bybit_client)

        await dispatcher.dispatch(
            _payload("custom", endpoint="/v5/order/create", method="post", params={"symbol": "X", "qty": 1}),
            credentials,
        )

        kwargs = mocked_operations["custom_request"].await_args.kwargs
        assert kwargs["endpoint"] == "/v5/order/create"
        assert kwargs["method"] == "POST"
        assert kwargs["params"] == {"symbol": "X", "qty": 1}


class TestValidation:
    """Structural errors stop before any network call."""

    @pytest.mark.asyncio
    async def test_unknown_event(self, mocked_operations, exchange, bybit_client, credentials):
        dispatcher = EventDispatcher(bybit_client)

        with pytest.raises(InvalidPayloadError):
            await dispatcher.dispatch(_payload("liquidate"), credentials)

        assert _called(mocked_operations) == []
        assert exchange.requests == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("event", ["listing", "delisting"])
    async def test_trade_events_require_symbol(self, mocked_operations, bybit_client, credentials, event):
        dispatcher = EventDispatcher(bybit_client)

        with pytest.raises(InvalidPayloadError):
            await dispatcher.dispatch(_payload(event), credentials)

        assert _called(mocked_operations) == []

    @pytest.mark.asyncio
    async def test_custom_requires_endpoint(self, mocked_operations, bybit_client, credentials):
        dispatcher = EventDispatcher(bybit_client)

        with pytest.raises(InvalidPayloadError):
            await dispatcher.dispatch(_payload("custom", endpoint="   "), credentials)

        assert _called(mocked_operations) == []


class TestPropagation:
    """Errors are not recovered by the dispatcher."""

    @pytest.mark.asyncio
    async def test_business_error_propagates(self, exchange, bybit_client, credentials):
        exchange.payload = {"retCode": 10001, "retMsg": "params error"}
        dispatcher = EventDispatcher(bybit_client)

        with pytest.raises(BusinessError):
            await dispatcher.dispatch(_payload("account"), credentials)

        assert len(exchange.requests) == 1

    def test_supported_events(self, bybit_client):
        dispatcher = EventDispatcher(bybit_client)
        assert sorted(dispatcher.supported_events) == sorted(
            ["custom", "listing", "delisting", "verify", "account", "positions"]
        )
