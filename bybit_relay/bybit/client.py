"""
Bybit v5 authenticated request executor

PURPOSE: Assemble, sign and send REST calls to the Bybit v5 API.
Uses a fresh httpx async client per call; nothing is pooled or cached
between inbound webhooks.

CALLED BY:
    - bybit/operations.py
    - webhook/dispatcher.py (via operations)
"""

from typing import Any, Mapping, Optional

import httpx

from bybit_relay.bybit.encoding import canonicalize
from bybit_relay.bybit.errors import TransportError
from bybit_relay.bybit.models import Credentials, RemoteResponse, SignedRequest
from bybit_relay.bybit.signer import build_signature_base, sign
from bybit_relay.config.constants import (
    DEFAULT_RECV_WINDOW,
    HEADER_API_KEY,
    HEADER_RECV_WINDOW,
    HEADER_SIGN,
    HEADER_TIMESTAMP,
    HttpMethod,
)
from bybit_relay.utils.logger import get_logger
from bybit_relay.utils.time_utils import get_timestamp_ms

logger = get_logger("bybit.client")


def resolve_endpoint(base_url: str, endpoint: str) -> str:
    """
    PURPOSE: Turn a path into an absolute URL on the exchange host.

    Args:
        base_url: Exchange base URL, e.g. "https://api.bybit.com".
        endpoint: Absolute URL or path such as "/v5/order/realtime".

    Returns:
        str: Endpoint unchanged if it already starts with "http",
             otherwise base_url + endpoint.
    """
    if endpoint.startswith("http"):
        return endpoint
    return f"{base_url.rstrip('/')}{endpoint}"


class BybitClient:
    """
    PURPOSE: Execute signed and public HTTP calls against Bybit.

    Holds only immutable configuration. Credentials are passed into every
    signed call and never stored on the client.

    Attributes:
        _base_url: Exchange base URL
        _recv_window: Receive window sent with every signed call
        _timeout: httpx timeout in seconds
        _transport: Optional httpx transport (tests inject httpx.MockTransport)
    """

    def __init__(
        self,
        base_url: str = "https://api.bybit.com",
        recv_window: str = DEFAULT_RECV_WINDOW,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._recv_window = recv_window
        self._timeout = timeout
        self._transport = transport

    @property
    def base_url(self) -> str:
        """Return the configured base URL."""
        return self._base_url

    def build_request(
        self,
        method: str,
        endpoint: str,
        params: Mapping[str, Any],
        credentials: Credentials,
        timestamp: Optional[str] = None,
    ) -> SignedRequest:
        """
        PURPOSE: Build the signed request for one call without sending it.

        The canonical string is computed once and used for both the signature
        and the wire payload.

        Args:
            method: "GET" or "POST".
            endpoint: Absolute URL or path on the exchange host.
            params: Request parameters.
            credentials: API key pair.
            timestamp: Epoch millis override; a fresh one is generated when None.

        Returns:
            SignedRequest: URL, headers and body ready to send.

        Raises:
            ValueError: If the method is not GET or POST.
        """
        timestamp = timestamp or get_timestamp_ms()
        canonical = canonicalize(method, params)

        logger.debug(
            "bybit_signature_base",
            method=method,
            endpoint=endpoint,
            signature_base=build_signature_base(
                timestamp, credentials.api_key, self._recv_window, canonical
            ),
        )

        signature = sign(
            method,
            credentials.api_key,
            credentials.api_secret,
            timestamp,
            self._recv_window,
            canonical,
        )

        url = resolve_endpoint(self._base_url, endpoint)
        body: Optional[str] = None
        if method == HttpMethod.GET.value:
            if canonical:
                url = f"{url}?{canonical}"
        else:
            body = canonical

        headers = {
            "Content-Type": "application/json",
            HEADER_API_KEY: credentials.api_key,
            HEADER_TIMESTAMP: timestamp,
            HEADER_RECV_WINDOW: self._recv_window,
            HEADER_SIGN: signature,
        }

        return SignedRequest(
            method=method,
            url=url,
            canonical=canonical,
            timestamp=timestamp,
            recv_window=self._recv_window,
            signature=signature,
            headers=headers,
            body=body,
        )

    async def execute(
        self,
        method: str,
        endpoint: str,
        params: Mapping[str, Any],
        credentials: Credentials,
    ) -> RemoteResponse:
        """
        PURPOSE: Sign and send one call, returning the raw outcome.

        The response is not classified here; callers use
        RemoteResponse.raise_for_outcome() to tell transport failures from
        business rejections.

        Args:
            method: "GET" or "POST".
            endpoint: Absolute URL or path on the exchange host.
            params: Request parameters.
            credentials: API key pair.

        Returns:
            RemoteResponse: Status, raw text and parsed envelope.

        Raises:
            TransportError: If no HTTP response was received.
        """
        request = self.build_request(method, endpoint, params, credentials)
        return await self._send(
            request.method,
            request.url,
            headers=request.headers,
            content=request.body,
        )

    async def get_public(self, endpoint: str) -> RemoteResponse:
        """
        PURPOSE: Send an unsigned GET, used for reachability probes.

        Args:
            endpoint: Absolute URL or path on the exchange host.

        Returns:
            RemoteResponse: Status, raw text and parsed envelope.

        Raises:
            TransportError: If no HTTP response was received.
        """
        return await self._send(HttpMethod.GET.value, resolve_endpoint(self._base_url, endpoint))

    async def _send(
        self,
        method: str,
        url: str,
        headers: Optional[dict] = None,
        content: Optional[str] = None,
    ) -> RemoteResponse:
        """Issue the HTTP call and read the whole body as text before parsing."""
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.request(
                    method,
                    url,
                    headers=headers,
                    content=content.encode("utf-8") if content is not None else None,
                )
                text = response.text
        except httpx.HTTPError as e:
            logger.error(
                "bybit_transport_error",
                method=method,
                url=url,
                error=str(e),
                exception_type=type(e).__name__,
            )
            raise TransportError(f"Request to {url} failed: {type(e).__name__}: {e}") from e

        logger.info(
            "bybit_raw_response",
            method=method,
            url=url,
            status=response.status_code,
            body=text,
        )

        return RemoteResponse.from_http(response.status_code, response.reason_phrase, text)
