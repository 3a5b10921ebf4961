"""
PURPOSE: Export configuration settings and constants for the relay.

This module centralizes access to all configuration settings and constants
used throughout the Bybit webhook relay.
"""

from .constants import (
    ConnectionStatus,
    EventKind,
    HttpMethod,
    OrderSide,
    OrderType,
)
from .settings import Settings, settings

__all__ = [
    "settings",
    "Settings",
    "EventKind",
    "HttpMethod",
    "OrderSide",
    "OrderType",
    "ConnectionStatus",
]
