"""
Tests for logging, time and version helpers.
"""

import json
import re

import pytest
import structlog

from bybit_relay.bybit import client as client_module
from bybit_relay.bybit.client import BybitClient
from bybit_relay.bybit.models import Credentials
from bybit_relay.utils.logger import MASK, mask_secrets, setup_logging
from bybit_relay.utils.time_utils import get_timestamp_ms, utc_iso_now
from bybit_relay.version import get_version, get_version_string


@pytest.fixture
def configured_logging():
    yield setup_logging
    structlog.reset_defaults()


def _json_lines(output):
    return [json.loads(line) for line in output.splitlines() if line.strip()]


def test_module_loggers_follow_later_configuration(configured_logging, capsys):
    configured_logging("INFO")

    BybitClient("https://api.bybit.test").build_request(
        "GET", "/v5/a", {"a": 1}, Credentials("MYAPIKEY", "s"), timestamp="1"
    )
    client_module.logger.info("bybit_credentials_loaded", api_secret="s3cret")

    output = capsys.readouterr().out
    assert "MYAPIKEY" not in output
    assert "s3cret" not in output

    lines = _json_lines(output)
    assert [line["event"] for line in lines] == ["bybit_credentials_loaded"]
    assert lines[0]["api_secret"] == MASK
    assert lines[0]["level"] == "info"
    assert lines[0]["module"] == "bybit.client"


def test_debug_level_emits_signature_base(configured_logging, capsys):
    configured_logging("DEBUG")

    BybitClient("https://api.bybit.test").build_request(
        "GET", "/v5/a", {"a": 1}, Credentials("MYAPIKEY", "s"), timestamp="1"
    )

    lines = _json_lines(capsys.readouterr().out)
    base = next(line for line in lines if line["event"] == "bybit_signature_base")
    assert base["signature_base"] == "1MYAPIKEY5000a=1"


def test_mask_secrets_hides_top_level_and_header_values():
    event = {
        "event": "bybit_request",
        "api_secret": "s3cret",
        "headers": {"X-BAPI-API-KEY": "key", "X-BAPI-SIGN": "abc"},
        "url": "https://api.bybit.test/v5/order/create",
    }

    masked = mask_secrets(None, "info", event)

    assert masked["api_secret"] == MASK
    assert masked["headers"] == {"X-BAPI-API-KEY": "key", "X-BAPI-SIGN": MASK}
    assert masked["url"] == "https://api.bybit.test/v5/order/create"


def test_timestamp_is_epoch_millis():
    stamp = get_timestamp_ms()
    assert stamp.isdigit()
    assert len(stamp) == 13


def test_iso_timestamp_is_utc_with_millis():
    assert re.fullmatch(r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z", utc_iso_now())


def test_version_metadata():
    assert get_version()["version"] == get_version_string() == "1.0.0"
