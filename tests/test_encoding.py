"""
Tests for canonical parameter encoding (sorted GET query, ordered POST body).
"""

import json
from decimal import Decimal

import pytest

from bybit_relay.bybit.encoding import (
    canonical_body,
    canonical_query,
    canonicalize,
    render_value,
)


class TestCanonicalQuery:
    """GET canonicalization."""

    def test_keys_are_sorted(self):
        params = {"symbol": "BTCUSDT", "category": "linear", "settleCoin": "USDT"}
        assert canonical_query(params) == "category=linear&settleCoin=USDT&symbol=BTCUSDT"

    def test_input_order_does_not_matter(self):
        a = {"b": "2", "a": "1", "c": 3}
        b = {"c": 3, "a": "1", "b": "2"}
        assert canonical_query(a) == canonical_query(b) == "a=1&b=2&c=3"

    def test_idempotent(self):
        params = {"z": 1, "y": True, "x": "v"}
        assert canonical_query(params) == canonical_query(dict(params))

    def test_absent_values_are_dropped(self):
        assert canonical_query({"a": "1", "b": None}) == "a=1"

    def test_empty_mapping_yields_empty_string(self):
        assert canonical_query({}) == ""
        assert canonical_query({"only": None}) == ""

    def test_no_url_escaping(self):
        assert canonical_query({"cursor": "page=2&x"}) == "cursor=page=2&x"


class TestCanonicalBody:
    """POST canonicalization."""

    def test_insertion_order_is_preserved(self):
        params = {"symbol": "BTCUSDT", "category": "linear", "qty": "1"}
        assert canonical_body(params) == '{"symbol":"BTCUSDT","category":"linear","qty":"1"}'

    def test_body_is_not_sorted_while_query_is(self):
        params = {"b": "2", "a": "1"}
        assert canonical_body(params) == '{"b":"2","a":"1"}'
        assert canonical_query(params) == "a=1&b=2"

    def test_scalar_types_survive(self):
        body = json.loads(canonical_body({"positionIdx": 2, "reduceOnly": False, "price": 1.5}))
        assert body == {"positionIdx": 2, "reduceOnly": False, "price": 1.5}

    def test_integral_float_has_no_fraction(self):
        assert canonical_body({"qty": 10.0}) == '{"qty":10}'

    def test_absent_values_are_dropped(self):
        assert canonical_body({"a": 1, "b": None}) == '{"a":1}'

    def test_empty_mapping(self):
        assert canonical_body({}) == "{}"


class TestRenderValue:
    """Scalar rendering."""

    def test_booleans_are_lowercase(self):
        assert render_value(True) == "true"
        assert render_value(False) == "false"

    def test_numbers(self):
        assert render_value(10) == "10"
        assert render_value(10.0) == "10"
        assert render_value(1.5) == "1.5"

    def test_decimals_use_plain_notation(self):
        assert render_value(Decimal("10")) == "10"
        assert render_value(Decimal("0.50")) == "0.5"
        assert render_value(Decimal("100")) == "100"


class TestCanonicalize:
    """Method selection."""

    def test_get_uses_query(self):
        assert canonicalize("GET", {"b": 1, "a": 2}) == "a=2&b=1"

    def test_post_uses_body(self):
        assert canonicalize("POST", {"b": 1, "a": 2}) == '{"b":1,"a":2}'

    def test_unsupported_method(self):
        with pytest.raises(ValueError):
            canonicalize("DELETE", {})
