"""Tests for YAML I/O operations."""

import pytest

from dataio.io.base import DecodeError, EncodeError
from dataio.io.yaml import YamlCodec


def test_media_types():
    codec = YamlCodec()
    assert "text/x-yaml" in codec.media_types()
    for media_type in ("application/yaml", "text/yaml", "application/vnd.foo+yaml"):
        assert codec.can_decode_data("a: 1", media_type)
    assert not codec.can_decode_data("a: 1", "application/json")
    assert codec.can_encode_file("data.yml", {})


def test_round_trip(app_messages, people):
    codec = YamlCodec()
    assert codec.decode_data(codec.encode_data(app_messages)) == app_messages
    assert codec.decode_data(codec.encode_data(people)) == people


def test_encode_keeps_key_order():
    codec = YamlCodec()
    assert codec.encode_data({"b": 1, "a": [1, 2]}) == "b: 1\na:\n- 1\n- 2\n"


def test_charset():
    codec = YamlCodec()
    assert codec.encode_data("é") == "é\n...\n"
    assert "\\xE9" in codec.encode_data("é", "text/x-yaml; charset=us-ascii")


def test_errors():
    codec = YamlCodec()
    with pytest.raises(DecodeError):
        codec.decode_data("a: [1")
    with pytest.raises(DecodeError):
        codec.decode_data("!!python/object:object {}")
    with pytest.raises(EncodeError):
        codec.encode_data({"a": object()})


def test_files(tmp_path, people):
    codec = YamlCodec()
    path = tmp_path / "people.yaml"
    codec.encode_file(path, people)
    assert codec.decode_file(path) == people
