"""Tests for INI I/O operations."""

import pytest

from dataio.io.base import Capability, DecodeError
from dataio.io.ini import IniCodec

INI_TEXT = """\
; Global settings
name = demo
debug = "true"

[database]
Host = localhost
port = 5432 ; inline comment

[paths]
root = /srv/data
empty
"""


def test_capabilities():
    codec = IniCodec()
    assert codec.capabilities == {Capability.DECODE_DATA, Capability.DECODE_FILE}
    assert not codec.can_decode_data(INI_TEXT)
    assert codec.can_decode_data(INI_TEXT, "text/x-ini")
    assert codec.can_decode_file("config.ini")
    assert not codec.can_decode_file("config.cfg")
    assert codec.can_decode_file("config.cfg", "text/x-ini")


def test_decode():
    codec = IniCodec()
    assert codec.decode_data(INI_TEXT, "text/x-ini") == {
        "name": "demo",
        "debug": "true",
        "database": {"Host": "localhost", "port": "5432"},
        "paths": {"root": "/srv/data", "empty": None},
    }


def test_duplicates_warn():
    codec = IniCodec()
    with pytest.warns(UserWarning, match="Duplicate"):
        data = codec.decode_data("[a]\nx = 1\nx = 2\n", "text/x-ini")
    assert data == {"a": {"x": "2"}}


def test_invalid():
    codec = IniCodec()
    with pytest.raises(DecodeError):
        codec.decode_data("= orphan value\n", "text/x-ini")


def test_files(tmp_path):
    path = tmp_path / "config.ini"
    path.write_text(INI_TEXT)
    data = IniCodec().decode_file(path)
    assert data["database"]["port"] == "5432"
