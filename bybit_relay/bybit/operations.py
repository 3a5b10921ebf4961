"""
PURPOSE: Domain operations built on the signed Bybit client.

Each operation builds a fixed parameter shape, sends it through
BybitClient.execute() and classifies the outcome with
RemoteResponse.raise_for_outcome(), so transport failures and business
rejections surface as distinct ExchangeError subclasses.

Operations:
    - place_order:       POST /v5/order/create (listing -> Buy, delisting -> Sell)
    - get_account_info:  GET /v5/account/wallet-balance
    - get_positions:     GET /v5/position/list, flat positions removed
    - verify_connection: unsigned GET /v5/market/time, tri-state status
    - custom_request:    any signed call, same signing path as the rest

CALLED BY:
    - webhook/dispatcher.py
"""

from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Mapping, Optional

from bybit_relay.bybit.client import BybitClient, resolve_endpoint
from bybit_relay.bybit.encoding import render_value
from bybit_relay.bybit.errors import ExchangeError, InvalidPayloadError, TransportError
from bybit_relay.bybit.models import Credentials, RemoteResponse
from bybit_relay.config.constants import (
    ACCOUNT_TYPE,
    MARKET_TIME_PATH,
    ORDER_CATEGORY,
    ORDER_CREATE_PATH,
    POSITION_IDX,
    POSITION_LIST_PATH,
    SETTLE_COIN,
    WALLET_BALANCE_PATH,
    ConnectionStatus,
    HttpMethod,
    OrderSide,
    OrderType,
)
from bybit_relay.utils.logger import get_logger
from bybit_relay.utils.time_utils import utc_iso_now

logger = get_logger("bybit.operations")

DEFAULT_QUANTITY = Decimal(1)


# ════════════════════════════════════════════════════════════════
# Orders
# ════════════════════════════════════════════════════════════════


def build_order_params(
    symbol: Optional[str],
    side: OrderSide,
    price: Optional[Decimal] = None,
    quantity: Optional[Decimal] = None,
    order_type: Optional[OrderType] = None,
) -> Dict[str, Any]:
    """
    PURPOSE: Build the /v5/order/create parameter mapping with defaults applied.

    Defaults:
        - quantity: 1 when absent (or zero).
        - order_type: Limit when a price is given, otherwise Market.
        - price: only sent for Limit orders that carry a price.
        - positionIdx: 1 for Buy, 2 for Sell (hedge-mode leg).

    Args:
        symbol: Contract symbol, e.g. "BTCUSDT". Required.
        side: OrderSide.BUY or OrderSide.SELL.
        price: Optional limit price.
        quantity: Optional order quantity.
        order_type: Optional explicit order type.

    Returns:
        dict: Parameters in the order they are sent on the wire.

    Raises:
        InvalidPayloadError: If symbol is missing.
    """
    if not symbol:
        raise InvalidPayloadError("Symbol is required for trading")

    side = OrderSide(side)
    qty = quantity if quantity else DEFAULT_QUANTITY
    if order_type is None:
        order_type = OrderType.LIMIT if price else OrderType.MARKET
    order_type = OrderType(order_type)

    params: Dict[str, Any] = {
        "category": ORDER_CATEGORY,
        "symbol": symbol,
        "side": side.value,
        "orderType": order_type.value,
        "qty": render_value(qty),
        "positionIdx": POSITION_IDX[side],
    }

    if order_type is OrderType.LIMIT and price:
        params["price"] = render_value(price)

    return params


async def place_order(
    client: BybitClient,
    credentials: Credentials,
    symbol: Optional[str],
    side: OrderSide,
    price: Optional[Decimal] = None,
    quantity: Optional[Decimal] = None,
    order_type: Optional[OrderType] = None,
) -> Dict[str, Any]:
    """
    PURPOSE: Place a linear perpetual order.

    Input validation runs before any signed call is attempted.

    Args:
        client: Bybit client.
        credentials: API key pair.
        symbol: Contract symbol. Required.
        side: Buy or Sell.
        price: Optional limit price.
        quantity: Optional quantity (defaults to 1).
        order_type: Optional order type (defaults from price).

    Returns:
        dict: {retCode, retMsg, result} from Bybit.

    Raises:
        InvalidPayloadError: If symbol is missing.
        ExchangeError: On transport or business failure.
    """
    params = build_order_params(symbol, side, price=price, quantity=quantity, order_type=order_type)

    logger.info(
        "place_order_requested",
        symbol=params["symbol"],
        side=params["side"],
        order_type=params["orderType"],
        qty=params["qty"],
        price=params.get("price"),
    )

    response = await client.execute(HttpMethod.POST.value, ORDER_CREATE_PATH, params, credentials)
    envelope = _checked(response, "place order")

    result = envelope.get("result")
    logger.info(
        "place_order_accepted",
        symbol=params["symbol"],
        side=params["side"],
        order_id=result.get("orderId") if isinstance(result, dict) else None,
    )
    return envelope


# ════════════════════════════════════════════════════════════════
# Account & Positions
# ════════════════════════════════════════════════════════════════


async def get_account_info(client: BybitClient, credentials: Credentials) -> Dict[str, Any]:
    """
    PURPOSE: Fetch the unified trading account wallet balance.

    Returns:
        dict: {retCode, retMsg, result} from Bybit.

    Raises:
        ExchangeError: On transport or business failure.
    """
    params = {"accountType": ACCOUNT_TYPE}
    logger.info("account_info_requested", endpoint=WALLET_BALANCE_PATH, params=params)

    response = await client.execute(HttpMethod.GET.value, WALLET_BALANCE_PATH, params, credentials)
    return _checked(response, "fetch account info")


def _position_size(position: Mapping[str, Any]) -> Decimal:
    try:
        size = Decimal(str(position.get("size", "0")))
    except (InvalidOperation, ValueError):
        return Decimal(0)
    # NaN never compares; treat it like any other unreadable size
    return Decimal(0) if size.is_nan() else size


def filter_open_positions(positions: List[Mapping[str, Any]]) -> List[Mapping[str, Any]]:
    """
    PURPOSE: Drop flat positions (size <= 0 or unparsable size).

    Args:
        positions: Rows from result.list of /v5/position/list.

    Returns:
        list: Rows whose size is strictly positive, in their original order.
    """
    return [position for position in positions if _position_size(position) > 0]


async def get_positions(
    client: BybitClient,
    credentials: Credentials,
    symbol: Optional[str] = None,
) -> Dict[str, Any]:
    """
    PURPOSE: Fetch open USDT-settled linear positions.

    Args:
        client: Bybit client.
        credentials: API key pair.
        symbol: Optional symbol filter.

    Returns:
        dict: {retCode, retMsg, result} with result.list holding only
              positions whose size is greater than zero.

    Raises:
        ExchangeError: On transport or business failure.
    """
    params: Dict[str, Any] = {
        "category": ORDER_CATEGORY,
        "settleCoin": SETTLE_COIN,
    }
    if symbol:
        params["symbol"] = symbol

    response = await client.execute(HttpMethod.GET.value, POSITION_LIST_PATH, params, credentials)
    envelope = _checked(response, "fetch positions")

    result = envelope.get("result")
    if isinstance(result, dict) and isinstance(result.get("list"), list):
        total = len(result["list"])
        result["list"] = filter_open_positions(result["list"])
        logger.info("positions_filtered", total=total, open=len(result["list"]), symbol=symbol)

    return envelope


# ════════════════════════════════════════════════════════════════
# Verification
# ════════════════════════════════════════════════════════════════


async def verify_connection(client: BybitClient) -> Dict[str, Any]:
    """
    PURPOSE: Probe exchange reachability with an unsigned market-time call.

    Status is composed from whether the raw HTTP call succeeded and whether
    the body parsed and reported retCode == 0:
        - unreachable: network failure or non-2xx status
        - failed:      2xx, but body unparsable, retCode missing, or retCode != 0
        - connected:   2xx and retCode == 0

    Args:
        client: Bybit client (credentials are not needed).

    Returns:
        dict: retCode 0 with a verified result when the host answered,
              retCode 500 with retMsg "Bybit API connection failed" otherwise.
    """
    try:
        response = await client.get_public(MARKET_TIME_PATH)
    except TransportError as e:
        logger.warning("bybit_verification_probe", status=ConnectionStatus.UNREACHABLE.value, error=str(e))
        return _unreachable()

    if not response.transport_ok:
        logger.warning(
            "bybit_verification_probe",
            status=ConnectionStatus.UNREACHABLE.value,
            http_status=response.status_code,
        )
        return _unreachable()

    if not isinstance(response.body, dict):
        status = ConnectionStatus.FAILED
    elif response.ret_code is None:
        status = ConnectionStatus.FAILED
    elif response.ret_code != 0:
        status = ConnectionStatus.FAILED
    else:
        status = ConnectionStatus.CONNECTED

    logger.info("bybit_verification_probe", status=status.value, ret_code=response.ret_code)

    return {
        "retCode": 0,
        "retMsg": "OK",
        "result": {
            "status": "verified",
            "bybitStatus": status.value,
            "workerStatus": "running",
            "timestamp": utc_iso_now(),
        },
    }


def _unreachable() -> Dict[str, Any]:
    return {
        "retCode": 500,
        "retMsg": "Bybit API connection failed",
        "result": {
            "status": "unverified",
            "bybitStatus": ConnectionStatus.UNREACHABLE.value,
            "workerStatus": "running",
            "timestamp": utc_iso_now(),
        },
    }


# ════════════════════════════════════════════════════════════════
# Custom passthrough
# ════════════════════════════════════════════════════════════════


async def custom_request(
    client: BybitClient,
    credentials: Credentials,
    endpoint: Optional[str],
    method: Optional[str] = None,
    params: Optional[Mapping[str, Any]] = None,
) -> Dict[str, Any]:
    """
    PURPOSE: Send an arbitrary signed call through the regular signing path.

    Args:
        client: Bybit client.
        credentials: API key pair.
        endpoint: Absolute URL or path; paths are prefixed with the base URL.
        method: "GET" (default) or "POST".
        params: Request parameters (default empty).

    Returns:
        dict: {retCode, retMsg, result} from Bybit.

    Raises:
        InvalidPayloadError: If endpoint is missing.
        ExchangeError: On transport or business failure.
    """
    if not endpoint:
        raise InvalidPayloadError("Endpoint is required for custom API calls")

    method = method or HttpMethod.GET.value
    url = resolve_endpoint(client.base_url, endpoint)

    logger.info("custom_request_requested", method=method, url=url)

    response = await client.execute(method, url, dict(params or {}), credentials)
    return _checked(response, f"call {method} {endpoint}")


def _checked(response: RemoteResponse, action: str) -> Dict[str, Any]:
    """Classify a RemoteResponse, logging the failure cause before re-raising."""
    try:
        return response.raise_for_outcome(action)
    except TransportError as e:
        logger.error("bybit_transport_error", action=action, status=e.status_code, error=e.message)
        raise
    except ExchangeError as e:
        logger.error(
            "bybit_business_error",
            action=action,
            ret_code=response.ret_code,
            ret_msg=response.ret_msg,
            error=str(e),
        )
        raise
