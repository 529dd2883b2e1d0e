"""Tests for xhttp.encoding."""

from __future__ import annotations

import json

import pytest

from xhttp.encoding import encode_json, encode_query, to_str, with_query


class TestToStr:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("abc", "abc"),
            (b"raw", "raw"),
            (True, "true"),
            (False, "false"),
            (42, "42"),
            (-7, "-7"),
            (1.5, "1.5"),
            (2.0, "2"),
            (1e20, "100000000000000000000"),
            (0.0001, "0.0001"),
            (None, ""),
            ([1, "a"], '[1,"a"]'),
            ({"k": 1}, '{"k":1}'),
        ],
    )
    def test_values(self, value, expected):
        assert to_str(value) == expected

    def test_special_floats(self):
        assert to_str(float("nan")) == "NaN"
        assert to_str(float("inf")) == "+Inf"
        assert to_str(float("-inf")) == "-Inf"


class TestEncodeQuery:
    def test_sorted_by_key(self):
        assert encode_query({"b": 2, "a": 1, "c": "x"}) == "a=1&b=2&c=x"

    def test_escaping(self):
        assert encode_query({"q": "a b&c=d", "ü": "é"}) == "q=a+b%26c%3Dd&%C3%BC=%C3%A9"

    def test_empty(self):
        assert encode_query({}) == ""


class TestWithQuery:
    def test_adds_query(self):
        assert with_query("http://x/a", {"q": "1"}) == "http://x/a?q=1"

    def test_empty_params_leave_url_bare(self):
        assert with_query("http://x/a", {}) == "http://x/a"

    def test_existing_query_replaced(self):
        assert with_query("http://x/a?z=9&b=1", {"a": 2}) == "http://x/a?a=2"

    def test_empty_params_drop_existing_query(self):
        assert with_query("http://x/a?q=old&q=older", {}) == "http://x/a"

    def test_fragment_preserved(self):
        assert with_query("http://x/a#top", {"q": 1}) == "http://x/a?q=1#top"

    def test_malformed_url(self):
        with pytest.raises(ValueError):
            with_query("http://[::1/a", {"q": 1})

    def test_bad_port(self):
        with pytest.raises(ValueError):
            with_query("http://x:port/a", {})


class TestEncodeJson:
    def test_compact_and_sorted(self):
        assert encode_json({"n": 1, "a": [1, 2]}) == b'{"a":[1,2],"n":1}'

    def test_utf8(self):
        body = encode_json({"name": "héllo"})
        assert json.loads(body) == {"name": "héllo"}
        assert "héllo".encode() in body

    def test_empty_map(self):
        assert encode_json({}) == b"{}"

    def test_unserializable(self):
        with pytest.raises(TypeError):
            encode_json({"x": object()})

    def test_nan_rejected(self):
        with pytest.raises(ValueError):
            encode_json({"x": float("nan")})
