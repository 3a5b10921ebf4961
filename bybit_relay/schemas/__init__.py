"""
Pydantic v2 schemas for the relay API.

This module exports all schema classes used for request/response
validation and documentation.
"""

from .webhook import RelayResponse, WebhookData, WebhookPayload

__all__ = [
    "WebhookData",
    "WebhookPayload",
    "RelayResponse",
]
