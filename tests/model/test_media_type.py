"""Tests for methods in the dataio.model.media_type file."""

import pytest

from dataio.model.media_type import MediaType, media_type_list


def test_parse():
    """Test parsing of type, subtype and parameters."""
    mt = MediaType.parse("Text/CSV; Separator=;; enclosure=\"'\"")
    assert mt.type == "text"
    assert mt.subtype == "csv"
    assert mt.essence == "text/csv"
    assert mt.parameters == {"separator": "", "enclosure": "'"}

    mt = MediaType.parse('text/csv; separator=";"; heading=column')
    assert mt.get("separator") == ";"
    assert mt.get("HEADING") == "column"
    assert mt.get("missing", "x") == "x"
    assert mt.has("heading")
    assert not mt.has("flatten")

    assert MediaType.parse(mt) is mt


@pytest.mark.parametrize("text", ["", "text", "text/", "/csv", "text/csv; =1"])
def test_parse_invalid(text):
    """Test that malformed media types are rejected."""
    with pytest.raises(ValueError):
        MediaType.parse(text)


def test_str():
    """Test the canonical string form."""
    assert str(MediaType.parse("TEXT/Plain")) == "text/plain"
    assert (
        str(MediaType.parse("text/csv;separator=;")) == "text/csv; separator=\"\""
    )
    assert (
        str(MediaType.parse('text/csv; separator=";"')) == 'text/csv; separator=";"'
    )
    assert str(MediaType("text", "csv", {"heading": "row"})) == "text/csv; heading=row"


def test_structured_syntax():
    """Test structured syntax suffix resolution."""
    assert MediaType.parse("application/ld+json").structured_syntax == "json"
    assert MediaType.parse("application/json").structured_syntax == "json"
    assert MediaType.parse("text/x-yaml").structured_syntax == "yaml"
    assert MediaType.parse("application/vnd.foo+yaml").structured_syntax == "yaml"
    assert MediaType.parse("text/plain").structured_syntax is None


def test_matches():
    """Test media type matching rules."""
    json = MediaType.parse("application/json")
    assert json.matches("application/json; charset=utf-8")
    assert json.matches("application/ld+json")
    assert json.matches("*/*")
    assert MediaType.parse("text/*").matches("text/csv")
    assert not MediaType.parse("text/*").matches("application/json")
    assert MediaType.parse("text/x-yaml").matches("application/yaml")
    assert not json.matches("text/csv")


def test_media_type_list():
    """Test de-duplication by canonical string."""
    types = media_type_list("text/csv", "TEXT/csv", "application/csv")
    assert list(types) == ["text/csv", "application/csv"]
    assert isinstance(types["text/csv"], MediaType)
