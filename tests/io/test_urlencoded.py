"""Tests for URL-encoded I/O operations."""

import pytest

from dataio.io.urlencoded import UrlEncodedCodec

MEDIA_TYPE = "application/x-www-form-urlencoded"


def test_requires_media_type():
    codec = UrlEncodedCodec()
    assert not codec.can_decode_data("a=1")
    assert not codec.can_encode_data({"a": 1})
    assert codec.can_decode_data("a=1", MEDIA_TYPE)
    assert codec.can_encode_data({"a": 1}, MEDIA_TYPE)
    assert not codec.can_encode_data({"a": 1}, "application/json")


@pytest.mark.parametrize(
    "value",
    [
        "text",
        "A text with space",
        {"key": "value", "Complex": 'A more "tricky" string'},
        {"user": {"name": "Bob", "tags": ["a", "b"]}},
        ["x", "y"],
    ],
)
def test_round_trip(value):
    codec = UrlEncodedCodec()
    assert codec.decode_data(codec.encode_data(value, MEDIA_TYPE), MEDIA_TYPE) == value


def test_encode():
    codec = UrlEncodedCodec()
    assert codec.encode_data("A text with space", MEDIA_TYPE) == "A+text+with+space"
    assert codec.encode_data({"a": 1, "b": True, "c": None}, MEDIA_TYPE) == "a=1&b=true"
    assert codec.encode_data({"u": {"n": "B"}}, MEDIA_TYPE) == "u%5Bn%5D=B"


def test_decode_brackets():
    codec = UrlEncodedCodec()
    assert codec.decode_data("a[]=1&a[]=2&b[x][y]=3&c=", MEDIA_TYPE) == {
        "a": ["1", "2"],
        "b": {"x": {"y": "3"}},
        "c": "",
    }
    assert codec.decode_data("a%20b", MEDIA_TYPE) == "a b"
