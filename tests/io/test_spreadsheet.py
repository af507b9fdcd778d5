"""Tests for spreadsheet workbook I/O operations."""

import zipfile

import pytest

from dataio.io.base import Capability, DecodeError, EncodeError, SerializationIOError
from dataio.io.main import load_file, save_file
from dataio.io.spreadsheet import (
    IOMode,
    SpreadsheetCodec,
    sanitize_title,
)
from dataio.io.utils import media_type_from_content

XLSX = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
ODS = "application/vnd.oasis.opendocument.spreadsheet"
XLS = "application/vnd.ms-excel"


@pytest.fixture(params=["xlsx", "ods"])
def extension(request):
    return request.param


def test_media_types():
    codec = SpreadsheetCodec()
    assert set(codec.media_types(Capability.DECODE_FILE)) == {XLSX, ODS, XLS}
    assert set(codec.media_types(Capability.ENCODE_FILE)) == {XLSX, ODS}
    assert [e.extension for e in codec.entries(IOMode.WRITABLE)] == ["xlsx", "ods"]


def test_predicates(tmp_path):
    codec = SpreadsheetCodec()
    assert codec.can_decode_file(tmp_path / "book.xls")
    assert not codec.can_encode_file(tmp_path / "book.xls", [[1]])
    assert codec.can_encode_file(tmp_path / "book.bin", [[1]], ODS)
    assert not codec.can_decode_file(tmp_path / "book.csv")
    assert not codec.can_decode_file(tmp_path / "book.bin", "text/csv")


def test_collection_of_tables(tmp_path, extension, app_messages):
    """Each top-level entry becomes a sheet with row and column headings."""
    path = tmp_path / f"messages.{extension}"
    save_file(app_messages, path)
    assert load_file(path) == app_messages


def test_single_sheet(tmp_path, extension, followers):
    codec = SpreadsheetCodec()
    path = tmp_path / f"followers.{extension}"
    codec.encode_file(path, followers)

    assert codec.decode_file(path) == {"Sheet1": followers}
    media_type = f"{ODS if extension == 'ods' else XLSX}; flatten=1"
    assert codec.decode_file(path, media_type) == followers
    assert codec.decode_file(path, media_type + "; heading=column") == [
        {"ID": 1, "name": "Alice", "followers": 12, "haters": 3},
        {"ID": 2, "name": "Bob", "followers": 5, "haters": 9},
        {"ID": 3, "name": "Carol", "followers": 140, "haters": 0},
    ]


def test_empty_cells(tmp_path, people):
    codec = SpreadsheetCodec()
    path = tmp_path / "people.xlsx"
    codec.encode_file(path, people)
    rows = codec.decode_file(path, f"{XLSX}; flatten=1; heading=none")
    assert rows[0] == ["id", "name", "age", "sex", "foo"]
    assert rows[2] == {1: "Alice", 3: "F"}
    assert rows[3] == {4: "bar"}
    assert codec.decode_file(path, f"{XLSX}; flatten=1; heading=column") == people



def test_gaps_in_positional_rows(tmp_path, extension):
    """Rows with missing cells are keyed by column index."""
    codec = SpreadsheetCodec()
    path = tmp_path / f"gaps.{extension}"
    codec.encode_file(path, [[1, None, 3], [4, 5, 6], [7, 8, None]])
    assert codec.decode_file(path) == {"Sheet1": [{0: 1, 2: 3}, [4, 5, 6], [7, 8]]}


def test_numeric_titles(tmp_path):
    codec = SpreadsheetCodec()
    path = tmp_path / "tables.xlsx"
    value = [[[1, 2], [3, 4]], [["a"]]]
    codec.encode_file(path, value)
    assert codec.decode_file(path) == value


def test_sheet_titles_are_sanitized(tmp_path):
    codec = SpreadsheetCodec()
    path = tmp_path / "titles.xlsx"
    value = {"a/b": [[1]], "x" * 40: [[2]]}
    with pytest.warns(UserWarning, match="renamed"):
        codec.encode_file(path, value)
    assert list(codec.decode_file(path)) == ["ab", "x" * 31]
    assert sanitize_title("[q]?") == "q"


def test_sniffed_media_type(tmp_path, extension):
    path = tmp_path / f"book.{extension}"
    SpreadsheetCodec().encode_file(path, [[1, 2]])
    sniffed = media_type_from_content(path)
    assert sniffed.essence == (ODS if extension == "ods" else XLSX)

    renamed = tmp_path / "book.bin"
    renamed.write_bytes(path.read_bytes())
    assert SpreadsheetCodec().can_decode_file(renamed)
    assert load_file(renamed, f"{sniffed}; flatten=1") == [[1, 2]]


def test_default_writer(tmp_path):
    codec = SpreadsheetCodec()
    path = tmp_path / "book.bin"
    codec.encode_file(path, [[1]])
    assert zipfile.is_zipfile(path)
    assert media_type_from_content(path).essence == ODS

    with pytest.raises(ValueError):
        SpreadsheetCodec(default_extension="xls")


def test_errors(tmp_path):
    codec = SpreadsheetCodec()
    with pytest.raises(SerializationIOError):
        codec.decode_file(tmp_path / "missing.xlsx")

    broken = tmp_path / "broken.xlsx"
    broken.write_text("not a workbook")
    with pytest.raises(DecodeError):
        codec.decode_file(broken)

    with pytest.raises(EncodeError):
        codec.encode_file(tmp_path / "out.xlsx", [[1]], XLS)
