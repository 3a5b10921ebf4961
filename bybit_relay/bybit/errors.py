"""
PURPOSE: Exception hierarchy for the relay core.

Four failure classes flow out of the core:
    - InvalidPayloadError: required field missing or event kind unknown.
      Raised before any network call; mapped to HTTP 400.
    - TransportError: non-2xx HTTP status or network failure.
    - BusinessError: HTTP 2xx but Bybit reported retCode != 0.
    - MalformedResponseError: HTTP 2xx but the body is not a Bybit envelope.
The last three share ExchangeError so callers can catch exchange-side
failures as one type while the message still names the cause.
Anything else is an internal error and is handled at the HTTP boundary.
"""

from typing import Optional


class RelayError(Exception):
    """
    PURPOSE: Base class for every error the relay core raises on purpose.

    Attributes:
        http_status: Status code the HTTP boundary should answer with.
    """

    http_status: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidPayloadError(RelayError):
    """Structural/input error: nothing was sent to the exchange."""

    http_status = 400


class ExchangeError(RelayError):
    """A signed or public call reached the exchange boundary and failed."""


class TransportError(ExchangeError):
    """
    PURPOSE: Non-2xx HTTP response or network failure.

    Attributes:
        status_code: HTTP status, or None when no response was received.
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class BusinessError(ExchangeError):
    """
    PURPOSE: HTTP 2xx response whose Bybit retCode is non-zero.

    Attributes:
        ret_code: Bybit business code (e.g. 10001).
        ret_msg: Bybit business message.
    """

    def __init__(self, ret_code: int, ret_msg: str):
        super().__init__(f"Bybit error: {ret_msg} (code: {ret_code})")
        self.ret_code = ret_code
        self.ret_msg = ret_msg


class MalformedResponseError(ExchangeError):
    """HTTP 2xx response whose body is not JSON or carries no integer retCode."""
