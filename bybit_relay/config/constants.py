"""
PURPOSE: Constants and enums for the Bybit webhook relay.

Holds the webhook event kinds, order enums, Bybit v5 endpoint paths and
the fixed request parameters used by the domain operations.
"""

from enum import Enum


class EventKind(str, Enum):
    """Webhook event kinds accepted by the dispatcher."""

    CUSTOM = "custom"
    LISTING = "listing"
    DELISTING = "delisting"
    VERIFY = "verify"
    ACCOUNT = "account"
    POSITIONS = "positions"


class HttpMethod(str, Enum):
    """HTTP methods supported by the signed request path."""

    GET = "GET"
    POST = "POST"


class OrderSide(str, Enum):
    """Order side, as spelled by the Bybit v5 API."""

    BUY = "Buy"
    SELL = "Sell"


class OrderType(str, Enum):
    """Order type, as spelled by the Bybit v5 API."""

    MARKET = "Market"
    LIMIT = "Limit"


class ConnectionStatus(str, Enum):
    """Outcome of the unauthenticated reachability probe."""

    CONNECTED = "connected"
    FAILED = "failed"
    UNREACHABLE = "unreachable"


# ── Bybit v5 endpoints ───────────────────────────────────────
ORDER_CREATE_PATH = "/v5/order/create"
WALLET_BALANCE_PATH = "/v5/account/wallet-balance"
POSITION_LIST_PATH = "/v5/position/list"
MARKET_TIME_PATH = "/v5/market/time"

# ── Request parameters ───────────────────────────────────────
DEFAULT_RECV_WINDOW = "5000"
ORDER_CATEGORY = "linear"
ACCOUNT_TYPE = "UNIFIED"
SETTLE_COIN = "USDT"

# Hedge-mode leg selector: 1 = buy side, 2 = sell side
POSITION_IDX = {
    OrderSide.BUY: 1,
    OrderSide.SELL: 2,
}

# ── Auth headers ─────────────────────────────────────────────
HEADER_API_KEY = "X-BAPI-API-KEY"
HEADER_TIMESTAMP = "X-BAPI-TIMESTAMP"
HEADER_RECV_WINDOW = "X-BAPI-RECV-WINDOW"
HEADER_SIGN = "X-BAPI-SIGN"
