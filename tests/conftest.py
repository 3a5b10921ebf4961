"""
PURPOSE: Pytest fixtures for the Bybit relay tests.

Provides shared test data and fakes including:
- Test configuration settings and credentials
- A fake Bybit exchange backed by httpx.MockTransport that records
  every outbound request
- A FastAPI TestClient wired to the fake exchange
"""

from typing import Any, List, Optional

import httpx
import pytest
from fastapi.testclient import TestClient

from bybit_relay.bybit.client import BybitClient
from bybit_relay.bybit.models import Credentials

TEST_BASE_URL = "https://api.bybit.test"
TEST_API_KEY = "test-api-key"
TEST_API_SECRET = "test-api-secret"
TEST_WEBHOOK_TOKEN = "secret"


class FakeExchange:
    """
    PURPOSE: Scriptable stand-in for the Bybit REST API.

    Attributes:
        requests: Every httpx.Request received, in order.
        status_code: HTTP status of the next responses.
        payload: JSON body of the next responses.
        raw_text: Raw body override (takes precedence over payload).
        error: Exception raised instead of answering (network failure).
    """

    def __init__(self) -> None:
        self.requests: List[httpx.Request] = []
        self.status_code: int = 200
        self.payload: Any = {"retCode": 0, "retMsg": "OK", "result": {}}
        self.raw_text: Optional[str] = None
        self.error: Optional[Exception] = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        if self.raw_text is not None:
            return httpx.Response(self.status_code, text=self.raw_text)
        return httpx.Response(self.status_code, json=self.payload)

    def client(self) -> BybitClient:
        return BybitClient(
            base_url=TEST_BASE_URL,
            recv_window="5000",
            timeout=5.0,
            transport=httpx.MockTransport(self.handler),
        )

    @property
    def last_request(self) -> httpx.Request:
        assert self.requests, "no request reached the exchange"
        return self.requests[-1]


@pytest.fixture
def test_settings():
    """
    PURPOSE: Settings override with test values.

    Returns:
        Settings: Configuration object with test credentials and token.
    """
    from bybit_relay.config.settings import Settings

    return Settings(
        BYBIT_API_KEY=TEST_API_KEY,
        BYBIT_API_SECRET=TEST_API_SECRET,
        WEBHOOK_TOKEN=TEST_WEBHOOK_TOKEN,
        BYBIT_BASE_URL=TEST_BASE_URL,
        BYBIT_RECV_WINDOW="5000",
        HTTP_TIMEOUT_SECONDS=5.0,
        APP_ENV="development",
        LOG_LEVEL="DEBUG",
    )


@pytest.fixture
def credentials() -> Credentials:
    """Test API key pair."""
    return Credentials(api_key=TEST_API_KEY, api_secret=TEST_API_SECRET)


@pytest.fixture
def exchange() -> FakeExchange:
    """Fresh fake exchange per test."""
    return FakeExchange()


@pytest.fixture
def bybit_client(exchange: FakeExchange) -> BybitClient:
    """BybitClient whose HTTP calls go to the fake exchange."""
    return exchange.client()


@pytest.fixture
def api_client(test_settings, exchange: FakeExchange):
    """
    PURPOSE: TestClient for the relay app with settings and dispatcher overridden.

    Yields:
        TestClient: Client bound to an app whose outbound calls hit FakeExchange.
    """
    from bybit_relay.api.routes_webhook import get_settings
    from bybit_relay.core.rate_limit import limiter
    from bybit_relay.main import create_app
    from bybit_relay.webhook.dispatcher import EventDispatcher, get_dispatcher

    app = create_app()
    dispatcher = EventDispatcher(exchange.client())
    app.dependency_overrides[get_settings] = lambda: test_settings
    app.dependency_overrides[get_dispatcher] = lambda: dispatcher

    limiter.enabled = False
    try:
        with TestClient(app) as client:
            yield client
    finally:
        limiter.enabled = True
        app.dependency_overrides.clear()
