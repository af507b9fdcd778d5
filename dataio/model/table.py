"""Data model for the intermediate rectangular representation of values."""

from __future__ import annotations

from enum import Flag
from typing import Any, Optional

import pandas as pd
from attrs import define, field


class HeadingMode(Flag):
    """Which headings a sheet or CSV grid carries.

    `AUTO` is not a combination of flags: it requests detection from the grid.
    """

    NONE = 0
    """No heading: keys are positional."""

    ROW = 1
    """The first column holds row keys."""

    COLUMN = 2
    """The first row holds column keys."""

    BOTH = ROW | COLUMN
    """Row keys in the first column and column keys in the first row."""

    AUTO = 4
    """Detect headings from the content."""

    @classmethod
    def parse(cls, mode: Any) -> HeadingMode:
        """Parse a heading mode from a media type parameter or keyword argument.

        Args:
            mode: A `HeadingMode`, a boolean (`True` is `BOTH`, `False` is `NONE`),
                `None` (`AUTO`) or one of the strings `"auto"`, `""`, `"none"`,
                `"row"`, `"rows"`, `"column"`, `"columns"` or `"both"`
                (case-insensitive).

        Returns:
            The heading mode.

        Raises:
            ValueError: If the mode is not recognized.
        """
        if isinstance(mode, HeadingMode):
            return mode
        if mode is None:
            return cls.AUTO
        if mode is True:
            return cls.BOTH
        if mode is False:
            return cls.NONE
        name = str(mode).strip().lower()
        if name in ("", "auto"):
            return cls.AUTO
        if name == "none":
            return cls.NONE
        if name in ("row", "rows"):
            return cls.ROW
        if name in ("column", "columns"):
            return cls.COLUMN
        if name == "both":
            return cls.BOTH
        raise ValueError(f"Unexpected heading mode '{mode}'.")


@define
class Table:
    """A rectangular table produced from a value for row/column-oriented formats.

    Attributes:
        rows: Data rows. All rows have the same number of cells once a table is
            normalized; missing cells hold the blank marker.
        header: Synthetic header row: the original column key of each column, or
            `None` when columns are purely positional.
        row_keys: Row heading: the original key of each row, or `None` when rows
            are not keyed.
        blank: Marker used for missing cells and for the pivot cell.
    """

    rows: list[list[Any]] = field(factory=list)
    header: Optional[list[Any]] = None
    row_keys: Optional[list[Any]] = None
    blank: Any = ""

    @property
    def n_columns(self) -> int:
        """Number of cells in each emitted row (including the row heading)."""
        width = max((len(row) for row in self.rows), default=0)
        if self.header is not None:
            width = max(width, len(self.header))
        return width + (1 if self.row_keys is not None else 0)

    def __len__(self) -> int:
        """Return the number of data rows."""
        return len(self.rows)

    def to_rows(self) -> list[list[Any]]:
        """Return the table as a list of rows, headings included.

        The header row comes first when present. When the table has row keys, each
        row starts with its key and the header row starts with the blank pivot cell.
        """
        rows = []
        if self.header is not None:
            pivot = [self.blank] if self.row_keys is not None else []
            rows.append(pivot + list(self.header))
        for i, row in enumerate(self.rows):
            if self.row_keys is not None:
                rows.append([self.row_keys[i]] + list(row))
            else:
                rows.append(list(row))
        return rows

    def to_dataframe(self) -> pd.DataFrame:
        """Return the emitted rows as a DataFrame with positional columns.

        Headings are part of the data, not of the DataFrame index or columns, so the
        frame maps one-to-one onto sheet cells.
        """
        rows = self.to_rows()
        if not rows:
            return pd.DataFrame()
        width = self.n_columns
        padded = [row + [None] * (width - len(row)) for row in rows]
        return pd.DataFrame(padded, dtype=object)


def grid_from_dataframe(df: pd.DataFrame) -> list[list[Any]]:
    """Extract the cell grid of a DataFrame read without header or index.

    Missing cells (`NaN`, `NaT`, `None`) become `None`.

    Args:
        df: DataFrame whose cells are the sheet cells.

    Returns:
        A list of rows of cell values.
    """
    grid = []
    for row in df.itertuples(index=False, name=None):
        grid.append([None if _is_missing(cell) else cell for cell in row])
    return grid


def _is_missing(value: Any) -> bool:
    """Check if a scalar cell value is a missing-value marker."""
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False
