"""
PURPOSE: Bybit v5 client package.

Canonical parameter encoding, HMAC request signing, the authenticated
request executor and the domain operations built on top of it.
"""
