"""
PURPOSE: Webhook module for the relay: routes authenticated automation events.

Provides the event dispatcher that turns listing, delisting, verify,
account, positions and custom events into Bybit domain operations.
"""
