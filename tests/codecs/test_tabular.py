"""Tests for the table codec in dataio.codecs.table."""

import datetime

import numpy as np
import pytest

from dataio.codecs import (
    cell_stringifier,
    coerce_numeric,
    default_stringifier,
    detect_heading,
    flatten,
    from_grid,
    to_sheets,
    to_table,
)
from dataio.model.table import HeadingMode


# =============================================================================
# Stringifiers and coercion
# =============================================================================


def test_default_stringifier():
    assert default_stringifier(None) == ""
    assert default_stringifier(True) == "true"
    assert default_stringifier(False) == "false"
    assert default_stringifier(42) == "42"
    assert default_stringifier(1.5) == "1.5"
    assert default_stringifier("text") == "text"
    assert default_stringifier(np.int64(3)) == "3"
    assert default_stringifier(datetime.date(2021, 3, 4)) == "2021-03-04"
    assert default_stringifier([1, 2]) == "[1, 2]"
    assert default_stringifier({"a": np.float64(0.5)}) == '{"a": 0.5}'

    class Opaque:
        pass

    assert default_stringifier(Opaque()).startswith("<")


def test_cell_stringifier():
    """Test that native cell types are kept for workbooks."""
    assert cell_stringifier(None) is None
    assert cell_stringifier(3) == 3
    assert cell_stringifier(np.float32(0.5)) == 0.5
    assert cell_stringifier(True) is True
    assert cell_stringifier([1]) == "[1]"


def test_coerce_numeric():
    assert coerce_numeric("42") == 42
    assert coerce_numeric("3.14") == 3.14
    assert coerce_numeric("-1") == -1.0
    assert coerce_numeric("1e3") == 1000.0
    assert coerce_numeric("abc") == "abc"
    assert coerce_numeric("") == ""
    assert coerce_numeric(None) is None


def test_coerce_numeric_is_lossy():
    """Numeric coercion is a heuristic: leading zeros are not preserved."""
    assert coerce_numeric("042") == 42


# =============================================================================
# Forward normalization
# =============================================================================


def test_to_table_scalar():
    assert to_table(42).to_rows() == [["42"]]


def test_to_table_property_list(person):
    """An associative map becomes a property list without header."""
    table = to_table(person)
    assert table.header is None
    assert table.to_rows() == [["id", "5"], ["name", "Bob"], ["age", "42"]]

    table = to_table(person, stringifier=lambda value: value)
    assert table.to_rows() == [["id", 5], ["name", "Bob"], ["age", 42]]


def test_to_table_collection_header(people):
    """Columns are discovered in order of first appearance."""
    rows = to_table(people).to_rows()
    assert rows == [
        ["id", "name", "age", "sex", "foo"],
        ["5", "Bob", "42", "", ""],
        ["", "Alice", "", "F", ""],
        ["", "", "", "", "bar"],
    ]


def test_to_table_column_padding(people):
    table = to_table(people, blank=None)
    assert len({len(row) for row in table.rows}) == 1
    assert table.rows[2] == [None, None, None, None, "bar"]


def test_to_table_positional_rows_have_no_header():
    """Positional keys never produce a header row."""
    table = to_table([[1, 2], [3], [4, 5, 6]])
    assert table.header is None
    assert table.to_rows() == [["1", "2", ""], ["3", "", ""], ["4", "5", "6"]]

    table = to_table([{0: "a", 1: "b"}, ["c"]])
    assert table.header is None


def test_to_table_single_header_row():
    """A single non-positional key gives exactly one header row."""
    table = to_table([[1, 2], {0: 3, "extra": 4}])
    rows = table.to_rows()
    assert rows[0] == [0, 1, "extra"]
    assert rows[1:] == [["1", "2", ""], ["3", "", "4"]]


def test_to_table_scalar_rows():
    assert to_table(["a", "b"]).to_rows() == [["a"], ["b"]]


def test_to_table_row_headings(app_messages):
    table = to_table(app_messages["start-app"], blank=None, row_headings=True)
    assert table.row_keys == ["welcome", "start", "end"]
    assert table.to_rows()[0] == [None, "en", "fr"]
    assert table.to_rows()[1] == ["welcome", "Welcome", "Bienvenue"]


def test_to_sheets(app_messages, people):
    """Values deeper than two levels give one table per top-level entry."""
    sheets = to_sheets(app_messages)
    assert [title for title, _ in sheets] == ["start-app", "final-app"]
    assert sheets[1][1].to_rows()[2] == ["start", "Continue", "Continuer"]

    sheets = to_sheets(people)
    assert len(sheets) == 1
    assert sheets[0][0] is None


# =============================================================================
# Inverse reconstruction
# =============================================================================


def test_detect_heading():
    assert detect_heading([]) == HeadingMode.NONE
    assert detect_heading([[None, "en"], ["a", "b"]]) == HeadingMode.BOTH
    assert detect_heading([["", "en"], ["a", "b"]]) == HeadingMode.BOTH
    assert detect_heading([["a", "b"], ["1", "2"]]) == HeadingMode.NONE
    assert detect_heading([["a", "b"], ["1", "2"]], structural=True) == HeadingMode.COLUMN
    assert detect_heading([["a", "b"], ["c", "d"]], structural=True) == HeadingMode.NONE


def test_from_grid_no_heading():
    """Empty cells keep their place in positional rows."""
    grid = [["1", "Alice", ""], ["2", "2.5", "x"]]
    assert from_grid(grid) == [[1, "Alice", ""], [2, 2.5, "x"]]
    assert from_grid(grid, coerce=False) == grid


def test_from_grid_omit_empty():
    """Without an explicit empty marker, gaps key the row by column index."""
    grid = [[1, None, 3], [4, 5, 6], [None, "x"], [7, None]]
    assert from_grid(grid, omit_empty=True) == [{0: 1, 2: 3}, [4, 5, 6], {1: "x"}, [7]]
    assert from_grid(grid) == [[1, None, 3], [4, 5, 6], [None, "x"], [7, None]]


def test_from_grid_column_heading(people):
    """Empty cells are omitted from keyed rows."""
    grid = to_table(people).to_rows()
    assert from_grid(grid, heading="column") == people
    assert from_grid(grid, heading="auto", structural=True) == people


def test_from_grid_both_headings(app_messages):
    grid = to_table(app_messages["final-app"], blank=None, row_headings=True).to_rows()
    assert from_grid(grid, heading=HeadingMode.AUTO) == app_messages["final-app"]


def test_from_grid_row_heading():
    grid = [["a", "1", "2"], ["b", "3"]]
    assert from_grid(grid, heading="row") == {"a": [1, 2], "b": [3]}


def test_from_grid_invalid_heading():
    with pytest.raises(ValueError):
        from_grid([["a"]], heading="sideways")


def test_flatten():
    assert flatten([[1, 2]]) == [1, 2]
    assert flatten({"Sheet1": {"a": 1}}) == {"a": 1}
    assert flatten([1, 2]) == [1, 2]
    assert flatten("a") == "a"
