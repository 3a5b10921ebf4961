"""
PURPOSE: Request-scoped value types for the Bybit client.

Credentials, SignedRequest and RemoteResponse are built fresh for every
inbound webhook and discarded once the response is sent.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union

from bybit_relay.bybit.errors import BusinessError, MalformedResponseError, TransportError

# Scalar value accepted in a request parameter mapping
ParamValue = Union[str, int, float, bool]


@dataclass(frozen=True)
class Credentials:
    """Bybit API key pair. Read-only for the lifetime of the process."""

    api_key: str
    api_secret: str = field(repr=False)


@dataclass(frozen=True)
class SignedRequest:
    """
    PURPOSE: Fully assembled outbound call, ready to send.

    Attributes:
        method:      "GET" or "POST".
        url:         Absolute URL; for GET it carries the canonical query.
        canonical:   Canonical parameter string that was signed.
        timestamp:   Epoch milliseconds, string form.
        recv_window: Receive window in milliseconds, string form.
        signature:   64-char lowercase HMAC-SHA256 hex digest.
        headers:     Auth and content-type headers.
        body:        Raw JSON body for POST, None for GET.
    """

    method: str
    url: str
    canonical: str
    timestamp: str
    recv_window: str
    signature: str
    headers: Dict[str, str]
    body: Optional[str] = None


@dataclass
class RemoteResponse:
    """
    PURPOSE: Raw outcome of one call to the exchange.

    The body is kept as text next to its parsed form so unparsable responses
    can still be logged and reported.

    Attributes:
        status_code:   HTTP status code.
        reason:        HTTP reason phrase.
        text:          Raw response body.
        body:          Parsed JSON body, None when the text is not JSON.
        transport_ok:  True for 2xx statuses.
        ret_code:      Bybit retCode, None when absent or not an integer.
        ret_msg:       Bybit retMsg ("" when absent).
        result:        Bybit result object, passed through untouched.
    """

    status_code: int
    reason: str
    text: str
    body: Any = None
    transport_ok: bool = False
    ret_code: Optional[int] = None
    ret_msg: str = ""
    result: Any = None

    @classmethod
    def from_http(cls, status_code: int, reason: str, text: str) -> "RemoteResponse":
        """
        PURPOSE: Build a RemoteResponse from a status line and the raw body text.

        Args:
            status_code: HTTP status code.
            reason:      HTTP reason phrase.
            text:        Raw body, already read in full.

        Returns:
            RemoteResponse: Parsed response; parse failures leave body as None.
        """
        try:
            body = json.loads(text) if text else None
        except ValueError:
            body = None

        ret_code: Optional[int] = None
        ret_msg = ""
        result = None
        if isinstance(body, dict):
            raw_code = body.get("retCode")
            if isinstance(raw_code, int) and not isinstance(raw_code, bool):
                ret_code = raw_code
            ret_msg = str(body.get("retMsg") or "")
            result = body.get("result")

        return cls(
            status_code=status_code,
            reason=reason,
            text=text,
            body=body,
            transport_ok=200 <= status_code < 300,
            ret_code=ret_code,
            ret_msg=ret_msg,
            result=result,
        )

    @property
    def is_success(self) -> bool:
        """Business success: 2xx transport and retCode == 0."""
        return self.transport_ok and self.ret_code == 0

    def envelope(self) -> Dict[str, Any]:
        """Return the {retCode, retMsg, result} triple for the caller."""
        return {
            "retCode": self.ret_code,
            "retMsg": self.ret_msg,
            "result": self.result,
        }

    def raise_for_outcome(self, action: str) -> Dict[str, Any]:
        """
        PURPOSE: Classify the response and raise unless it is a business success.

        Args:
            action: Human-readable description used in error messages,
                e.g. "place order".

        Returns:
            dict: The {retCode, retMsg, result} envelope on success.

        Raises:
            TransportError: Non-2xx HTTP status.
            MalformedResponseError: 2xx status but no parsable Bybit envelope.
            BusinessError: 2xx status and retCode != 0.
        """
        if not self.transport_ok:
            message = f"Failed to {action}: HTTP {self.status_code}"
            if self.reason:
                message += f" {self.reason}"
            if self.ret_msg:
                message += f" - {self.ret_msg}"
            raise TransportError(message, status_code=self.status_code)
        if not isinstance(self.body, dict):
            raise MalformedResponseError(
                f"Failed to {action}: unparsable response body (HTTP {self.status_code})"
            )
        if self.ret_code is None:
            raise MalformedResponseError(
                f"Failed to {action}: response has no retCode (HTTP {self.status_code})"
            )
        if self.ret_code != 0:
            raise BusinessError(self.ret_code, self.ret_msg)
        return self.envelope()
