"""Table codec: conversion between nested values and rectangular tables.

Row/column oriented formats (CSV, spreadsheet sheets) can only store grids of cells.
This module flattens arbitrary values into `Table`s and reconstructs values from
grids of cells read back from such formats.

Forward direction (`to_table`, `to_sheets`):

- A scalar becomes a single cell.
- A mapping with non-positional keys becomes a two-column property list.
- A list of rows is laid out by discovering column keys in order of first
  appearance. A header row is added only if some key is not its positional index.
- Values deeper than two levels become one table per top-level entry (`to_sheets`).

Inverse direction (`from_grid`) reads optional row/column headings and coerces numeric
text. Numeric coercion is a lossy heuristic: `"042"` becomes `42`.

Examples:
    >>> to_table({"id": 5, "name": "Bob"}).to_rows()
    [['id', '5'], ['name', 'Bob']]

    >>> table = to_table([{"id": 5, "name": "Bob"}, {"name": "Alice", "sex": "F"}])
    >>> table.to_rows()
    [['id', 'name', 'sex'], ['5', 'Bob', ''], ['', 'Alice', 'F']]
"""

from __future__ import annotations

import datetime
import re
from typing import Any, Callable, Optional

import numpy as np
import simplejson as json

from dataio.model.table import HeadingMode, Table
from dataio.model.value import (
    is_associative,
    is_traversable,
    iter_items,
    min_depth,
    to_builtin,
)

Stringifier = Callable[[Any], Any]
"""Function converting a leaf value to its cell representation."""

_INTEGER_RE = re.compile(r"^[0-9]+$")
_NUMBER_RE = re.compile(r"^\s*[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?\s*$")


def default_stringifier(value: Any) -> str:
    """Convert a value to its text representation for a text cell.

    Args:
        value: Any value.

    Returns:
        `""` for `None`, `"true"`/`"false"` for booleans, the usual text form for
        numbers and strings, ISO 8601 for dates and times, JSON for containers, the
        object's own `str()` when it defines one and `repr()` otherwise.
    """
    if isinstance(value, np.generic):
        value = value.item()
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8", errors="replace")
    if isinstance(value, (datetime.date, datetime.time)):
        return value.isoformat()
    if is_traversable(value):
        return json.dumps(to_builtin(value), default=repr, iterable_as_array=True)
    if type(value).__str__ is not object.__str__:
        return str(value)
    return repr(value)


def cell_stringifier(value: Any) -> Any:
    """Convert a value to a spreadsheet cell value.

    Native cell types (`None`, strings, numbers, booleans, dates) are kept as-is so
    that the workbook stores typed cells. Anything else is converted with
    `default_stringifier`.
    """
    if isinstance(value, np.generic):
        value = value.item()
    if value is None or isinstance(value, (str, bool, int, float)):
        return value
    if isinstance(value, (datetime.date, datetime.time)):
        return value
    return default_stringifier(value)


def coerce_numeric(value: Any) -> Any:
    """Opportunistically convert numeric text to a number.

    Text made only of ASCII digits becomes an `int`; any other numeric-looking text
    becomes a `float`. Other values are returned unchanged.

    Notes:
        This is a heuristic: there is no schema to tell `"042"` (text) from `42`.
    """
    if not isinstance(value, str):
        return value
    if _INTEGER_RE.match(value):
        return int(value)
    if _NUMBER_RE.match(value):
        return float(value)
    return value


def is_empty(value: Any) -> bool:
    """Check if a cell value is empty (`None` or the empty string)."""
    return value is None or (isinstance(value, str) and value == "")


def _discover_columns(
    rows: list[Any], stringifier: Stringifier
) -> tuple[dict[Any, int], list[dict[int, Any]]]:
    """Assign a column slot to every key in order of first appearance.

    Args:
        rows: Row values. Non-traversable rows are treated as single-cell rows.
        stringifier: Leaf conversion function.

    Returns:
        A tuple of `(columns, lines)` where `columns` maps each key to its slot and
        `lines` holds each row as a mapping of slot to cell.
    """
    columns: dict[Any, int] = {}
    lines = []
    for row in rows:
        items = iter_items(row) if is_traversable(row) else [(0, row)]
        line = {}
        for key, cell in items:
            slot = columns.setdefault(key, len(columns))
            line[slot] = stringifier(cell)
        lines.append(line)
    return columns, lines


def to_table(
    value: Any,
    stringifier: Stringifier = default_stringifier,
    blank: Any = "",
    row_headings: bool = False,
) -> Table:
    """Flatten a value into a rectangular table.

    Args:
        value: Value to flatten.
        stringifier: Function applied to every leaf value. Defaults to
            `default_stringifier`.
        blank: Marker for cells missing from a row.
        row_headings: If `True`, a mapping whose items are all containers is laid
            out as keyed rows: its keys form a row heading column and a header row
            with a blank pivot cell is always emitted. If `False` (the default), such
            a mapping is a property list like any other mapping.

    Returns:
        The `Table`. All its rows have the same number of cells.
    """
    if not is_traversable(value):
        return Table(rows=[[stringifier(value)]], blank=blank)

    items = list(iter_items(value))

    if is_associative(value):
        if row_headings and all(is_traversable(item) for _, item in items):
            columns, lines = _discover_columns([item for _, item in items], stringifier)
            rows = [[line.get(i, blank) for i in range(len(columns))] for line in lines]
            return Table(
                rows=rows,
                header=list(columns),
                row_keys=[key for key, _ in items],
                blank=blank,
            )
        return Table(
            rows=[[key, stringifier(item)] for key, item in items], blank=blank
        )

    columns, lines = _discover_columns([item for _, item in items], stringifier)
    rows = [[line.get(i, blank) for i in range(len(columns))] for line in lines]

    header = None
    if any(key != slot for key, slot in columns.items()):
        header = list(columns)

    return Table(rows=rows, header=header, blank=blank)


def to_sheets(
    value: Any,
    stringifier: Stringifier = cell_stringifier,
    blank: Any = None,
    row_headings: bool = True,
) -> list[tuple[Optional[str], Table]]:
    """Flatten a value into one or more titled tables.

    Values with a minimum depth greater than 2 (a collection of tables) produce one
    table per top-level entry, titled with the entry key. Anything else produces a
    single untitled table.

    Args:
        value: Value to flatten.
        stringifier: Function applied to every leaf value.
        blank: Marker for missing cells.
        row_headings: Passed to `to_table`.

    Returns:
        A list of `(title, table)` pairs. `title` is `None` for the single-table case.
    """
    kwargs = dict(stringifier=stringifier, blank=blank, row_headings=row_headings)
    if min_depth(value) > 2:
        return [(str(key), to_table(item, **kwargs)) for key, item in iter_items(value)]
    return [(None, to_table(value, **kwargs))]


def _looks_like_header(grid: list[list[Any]]) -> bool:
    """Check if the first row of a grid is the only row made of distinct labels."""

    def is_label_row(row):
        if not row or len(set(row)) != len(row):
            return False
        return all(
            isinstance(cell, str) and not is_empty(cell) and coerce_numeric(cell) == cell
            for cell in row
        )

    if len(grid) < 2 or not is_label_row(grid[0]):
        return False
    return not any(is_label_row(row) for row in grid[1:])


def detect_heading(grid: list[list[Any]], structural: bool = False) -> HeadingMode:
    """Detect which headings a grid carries.

    An empty pivot cell (top-left corner) means both a row heading and a column
    heading are present.

    Args:
        grid: Rows of raw cell values.
        structural: If `True`, also detect a column heading from a first row that is
            the only row made of distinct non-numeric labels.

    Returns:
        The detected `HeadingMode` (never `AUTO`).
    """
    if not grid or not grid[0]:
        return HeadingMode.NONE
    if is_empty(grid[0][0]):
        return HeadingMode.BOTH
    if structural and _looks_like_header(grid):
        return HeadingMode.COLUMN
    return HeadingMode.NONE


def _heading_key(cell: Any, index: int) -> Any:
    if is_empty(cell):
        return index
    if isinstance(cell, np.generic):
        cell = cell.item()
    if isinstance(cell, (str, int, float, bool)):
        return cell
    return default_stringifier(cell)


def _positional_row(cells: list[Any], convert: Callable, omit_empty: bool) -> Any:
    if not omit_empty:
        return [convert(cell) for cell in cells]
    kept = {i: convert(cell) for i, cell in enumerate(cells) if not is_empty(cell)}
    if list(kept) == list(range(len(kept))):
        return list(kept.values())
    return kept


def from_grid(
    grid: list[list[Any]],
    heading: HeadingMode | str | bool | None = HeadingMode.NONE,
    coerce: bool = True,
    structural: bool = False,
    omit_empty: bool = False,
) -> Any:
    """Reconstruct a value from a grid of cells.

    Args:
        grid: Rows of raw cell values. Rows may have different lengths.
        heading: Heading mode (see `HeadingMode.parse`). `AUTO` detects the mode
            with `detect_heading`.
        coerce: If `True` (the default), numeric text is converted with
            `coerce_numeric`.
        structural: Passed to `detect_heading` when detecting headings.
        omit_empty: If `True`, empty cells are dropped from rows without a column
            heading too. Use it for sources without an explicit empty marker.

    Returns:
        With a row heading, a dictionary keyed by row key; otherwise a list of rows.
        With a column heading, rows are dictionaries keyed by column key and empty
        cells are omitted. Otherwise rows are lists and empty cells keep their
        place with the grid's own empty marker, unless `omit_empty` is set: then
        a row with a gap becomes a dictionary keyed by column index.
    """
    mode = HeadingMode.parse(heading)
    if mode == HeadingMode.AUTO:
        mode = detect_heading(grid, structural=structural)
    has_row_heading = bool(mode & HeadingMode.ROW)
    has_column_heading = bool(mode & HeadingMode.COLUMN)

    convert = coerce_numeric if coerce else (lambda cell: cell)

    width = max((len(row) for row in grid), default=0)
    first_row = 1 if has_column_heading and grid else 0
    first_column = 1 if has_row_heading else 0

    column_keys = []
    for c in range(first_column, width):
        if has_column_heading:
            cell = grid[0][c] if c < len(grid[0]) else None
            column_keys.append(_heading_key(cell, c - first_column))
        else:
            column_keys.append(c - first_column)

    row_keys = []
    rows = []
    for r in range(first_row, len(grid)):
        cells = grid[r]
        if has_row_heading:
            cell = cells[0] if cells else None
            row_keys.append(_heading_key(cell, r - first_row))
        if has_column_heading:
            row = {}
            for c in range(first_column, len(cells)):
                if is_empty(cells[c]):
                    continue
                row[column_keys[c - first_column]] = convert(cells[c])
        else:
            row = _positional_row(cells[first_column:], convert, omit_empty)
        rows.append(row)

    if has_row_heading:
        return dict(zip(row_keys, rows))
    return rows


def flatten(value: Any) -> Any:
    """Unwrap a container holding exactly one element."""
    if isinstance(value, dict) and len(value) == 1:
        return next(iter(value.values()))
    if isinstance(value, list) and len(value) == 1:
        return value[0]
    return value
