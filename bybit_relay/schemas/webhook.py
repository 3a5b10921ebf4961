"""
Webhook-related Pydantic schemas for the relay API.

Handles validation of the inbound {event, data} payload and serialization
of the {retCode, retMsg, result} response envelope.
"""

from decimal import Decimal
from typing import Any, Dict, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Scalar accepted in data.params; None means "absent" and is dropped on encode
ParamScalar = Union[bool, int, float, str, None]


class WebhookData(BaseModel):
    """
    Schema for the data block of an inbound webhook.

    Every field is optional here; each event kind enforces its own required
    fields in the dispatcher so unknown kinds and missing fields surface as
    the same structural error.

    Attributes:
        endpoint: Bybit path or absolute URL (custom events)
        method: HTTP method for custom events, GET or POST
        params: Request parameters for custom events
        symbol: Contract symbol (listing, delisting, positions)
        price: Optional limit price
        quantity: Optional order quantity
        order_type: Optional order type, Market or Limit
        token: Shared webhook secret
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    endpoint: Optional[str] = None
    method: Optional[Literal["GET", "POST"]] = None
    params: Optional[Dict[str, ParamScalar]] = None
    symbol: Optional[str] = None
    price: Optional[Decimal] = None
    quantity: Optional[Decimal] = None
    order_type: Optional[Literal["Market", "Limit"]] = Field(default=None, alias="orderType")
    token: Optional[str] = None

    @field_validator("method", mode="before")
    @classmethod
    def normalize_method(cls, v: Any) -> Any:
        """Accept lower-case method names."""
        if isinstance(v, str):
            return v.upper()
        return v

    @field_validator("symbol", "endpoint")
    @classmethod
    def blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        """Treat whitespace-only strings as absent."""
        if v is not None and not v.strip():
            return None
        return v


class WebhookPayload(BaseModel):
    """
    Schema for an inbound webhook.

    The event kind is kept as a plain string; unknown kinds are rejected by
    the dispatcher rather than by schema validation.

    Attributes:
        event: Event kind (custom, listing, delisting, verify, account, positions)
        data: Event fields
    """

    model_config = ConfigDict(extra="ignore")

    event: str
    data: WebhookData = Field(default_factory=WebhookData)


class RelayResponse(BaseModel):
    """
    Response envelope returned by the webhook endpoint.

    Attributes:
        retCode: 0 on success, HTTP-like code or Bybit code otherwise
        retMsg: Human-readable status message
        result: Bybit result object (omitted on errors)
        requestId: Correlation id of the inbound request
        timestamp: ISO-8601 time the response was produced
    """

    retCode: Optional[int] = None
    retMsg: str = ""
    result: Optional[Any] = None
    requestId: str
    timestamp: str
