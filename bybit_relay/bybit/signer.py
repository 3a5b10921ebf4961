"""
HMAC-SHA256 request signing for the Bybit v5 API.

The signed string is the plain concatenation

    timestamp + api_key + recv_window + canonical_params

with no separators. The canonical part comes from bybit/encoding.py and
already reflects the method (sorted query for GET, JSON body for POST).
"""

import hashlib
import hmac

from bybit_relay.config.constants import HttpMethod

_SUPPORTED_METHODS = {HttpMethod.GET.value, HttpMethod.POST.value}


def build_signature_base(timestamp: str, api_key: str, recv_window: str, canonical: str) -> str:
    """Concatenate the fields that make up the signed string."""
    return f"{timestamp}{api_key}{recv_window}{canonical}"


def sign(
    method: str,
    api_key: str,
    api_secret: str,
    timestamp: str,
    recv_window: str,
    canonical: str,
) -> str:
    """
    Generate the X-BAPI-SIGN value for a request.

    Args:
        method: "GET" or "POST".
        api_key: Bybit API key.
        api_secret: Bybit API secret, used as the HMAC key.
        timestamp: Epoch milliseconds, string form.
        recv_window: Receive window in milliseconds, string form.
        canonical: Canonical parameter string for this method.

    Returns:
        64-character lowercase hexadecimal HMAC-SHA256 digest.

    Raises:
        ValueError: If the method is not GET or POST.
    """
    if method not in _SUPPORTED_METHODS:
        raise ValueError(f"Unsupported method: {method}. Must be GET or POST.")

    base = build_signature_base(timestamp, api_key, recv_window, canonical)
    return hmac.new(
        api_secret.encode("utf-8"),
        base.encode("utf-8"),
        hashlib.sha256,
    ).hexdigest()
