"""
PURPOSE: Canonical parameter encoding for signed Bybit requests.

GET and POST are canonicalized differently and the exchange expects exactly
this asymmetry:
    - GET:  keys sorted lexicographically, rendered "k=v" and joined by "&".
    - POST: compact JSON of the mapping in its original insertion order.
The resulting string is both the signed payload and the wire payload
(query string or body), so the two can never diverge.

Values are rendered the way the exchange's reference clients render them:
booleans as "true"/"false" and integral floats without a trailing ".0".
A value of None means "absent" and is dropped in both encodings.

CALLED BY:
    - bybit/client.py (BybitClient.build_request)
"""

import json
from decimal import Decimal
from typing import Any, Dict, Mapping

from bybit_relay.config.constants import HttpMethod


def _normalize(value: Any) -> Any:
    """Map a scalar onto the JSON value the exchange expects."""
    if isinstance(value, bool):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, Decimal):
        return format(value.normalize(), "f")
    return value


def render_value(value: Any) -> str:
    """
    PURPOSE: Render one parameter value in its native string form.

    Args:
        value: str, int, float, bool or Decimal.

    Returns:
        str: Rendered value, e.g. True -> "true", 10.0 -> "10", 1.5 -> "1.5".
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(_normalize(value))


def canonical_query(params: Mapping[str, Any]) -> str:
    """
    PURPOSE: Build the sorted query string used to sign and send GET requests.

    Args:
        params: Parameter mapping; None values are skipped.

    Returns:
        str: "a=1&b=2" style string, or "" when nothing is left.

    Example:
        >>> canonical_query({"symbol": "BTCUSDT", "category": "linear"})
        'category=linear&symbol=BTCUSDT'
    """
    return "&".join(
        f"{key}={render_value(params[key])}"
        for key in sorted(params)
        if params[key] is not None
    )


def canonical_body(params: Mapping[str, Any]) -> str:
    """
    PURPOSE: Build the JSON body used to sign and send POST requests.

    Insertion order is preserved; keys are NOT sorted.

    Args:
        params: Parameter mapping; None values are skipped.

    Returns:
        str: Compact JSON object, e.g. '{"symbol":"BTCUSDT","qty":"1"}'.
    """
    payload: Dict[str, Any] = {
        key: _normalize(value) for key, value in params.items() if value is not None
    }
    return json.dumps(payload, separators=(",", ":"), ensure_ascii=False)


def canonicalize(method: str, params: Mapping[str, Any]) -> str:
    """
    PURPOSE: Pick the canonical encoding for an HTTP method.

    Args:
        method: "GET" or "POST".
        params: Parameter mapping.

    Returns:
        str: Canonical parameter string.

    Raises:
        ValueError: If the method is not GET or POST.
    """
    if method == HttpMethod.GET.value:
        return canonical_query(params)
    if method == HttpMethod.POST.value:
        return canonical_body(params)
    raise ValueError(f"Unsupported method: {method}. Must be GET or POST.")
