"""
PURPOSE: Bybit webhook relay.

Authenticates inbound automation events and converts them into signed,
authenticated REST calls against the Bybit v5 API.
"""
