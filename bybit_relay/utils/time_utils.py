"""
PURPOSE: Time utilities for request timestamps and response metadata.
All values are UTC-based.
"""

import time
from datetime import datetime, timezone


def get_utc_now() -> datetime:
    """
    PURPOSE: Return the current UTC time as a timezone-aware datetime object.

    Returns:
        datetime: Current UTC time with timezone info.
    """
    return datetime.now(timezone.utc)


def get_timestamp_ms() -> str:
    """
    PURPOSE: Return the current epoch time in milliseconds, in string form.

    Generated fresh for every signed call so the exchange receive-window
    check stays valid.

    Returns:
        str: Epoch milliseconds, e.g. "1718000000000".
    """
    return str(time.time_ns() // 1_000_000)


def utc_iso_now() -> str:
    """
    PURPOSE: Return the current UTC time as an ISO-8601 string with millisecond precision.

    Returns:
        str: Timestamp such as "2024-06-10T12:00:00.000Z".
    """
    return get_utc_now().isoformat(timespec="milliseconds").replace("+00:00", "Z")
