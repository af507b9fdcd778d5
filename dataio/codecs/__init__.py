"""In-memory conversion codecs.

This package holds transformations between values and intermediate in-memory
representations, separate from the format codecs in `dataio.io`:

- **Tables**: nested values to rectangular `Table`s and back, used by the CSV and
  spreadsheet codecs.

Examples:
    Flatten a list of records:

    >>> from dataio.codecs import to_table
    >>> to_table([{"a": 1}, {"b": 2}]).to_rows()
    [['a', 'b'], ['1', ''], ['', '2']]

    Rebuild records from a grid with a heading row:

    >>> from dataio.codecs import from_grid
    >>> from_grid([["a", "b"], ["1", ""]], heading="column")
    [{'a': 1}]
"""

from dataio.codecs.table import (
    Stringifier,
    cell_stringifier,
    coerce_numeric,
    default_stringifier,
    detect_heading,
    flatten,
    from_grid,
    to_sheets,
    to_table,
)

__all__ = [
    "Stringifier",
    "cell_stringifier",
    "coerce_numeric",
    "default_stringifier",
    "detect_heading",
    "flatten",
    "from_grid",
    "to_sheets",
    "to_table",
]
