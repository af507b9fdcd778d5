"""CSV (comma separated values) codec.

Values are flattened to a table with `dataio.codecs.table.to_table` before being
written, and rebuilt from the cell grid with `dataio.codecs.table.from_grid` when
read back.

Supported media type parameters:
    separator: Field separator (default `","`).
    enclosure: Field quote character (default `'"'`).
    escape: Escape character (default `"\\"`, empty to disable).
    eol: Line terminator used when writing (default `"\\n"`).
    heading: Headings carried by the grid when reading: `"auto"` (the default),
        `"none"`, `"row"`, `"column"` or `"both"`. In auto mode, an empty first
        cell means both headings, and a first row of distinct non-numeric labels
        is a column heading when no other row is made of such labels.
    flatten: If true, a single decoded row is returned without the outer list.

Example:
    >>> from dataio.io.csv import CsvCodec
    >>> codec = CsvCodec()
    >>> codec.encode_data([{"id": 5, "name": "Bob"}, {"name": "Alice"}])
    'id,name\\n5,Bob\\n,Alice\\n'
"""

from __future__ import annotations

import csv
import io
from pathlib import Path
from typing import Any, Iterable, Optional

from dataio.codecs.table import Stringifier, default_stringifier, flatten, from_grid, to_table
from dataio.io.base import (
    Capability,
    DecodeError,
    EncodeError,
    FileCodecMixin,
    MediaTypeListMixin,
    SerializationIOError,
)
from dataio.io.utils import get_flag, get_parameter, normalize_media_type
from dataio.model.media_type import MediaType

_STANDARD_EOLS = ("\n", "\r\n", "\r")


def split_records(
    data: str, eol: str, quotechar: Optional[str] = '"', escapechar: Optional[str] = None
) -> list[str]:
    """Split CSV text on a custom line terminator.

    Terminators inside quoted fields or following the escape character are part of
    the field.

    Args:
        data: CSV text.
        eol: Line terminator.
        quotechar: Field quote character.
        escapechar: Escape character, or `None`.

    Returns:
        The records, without their terminators.

    Raises:
        ValueError: If the line terminator is empty.
    """
    if not eol:
        raise ValueError("Line terminator must not be empty.")
    records = []
    start = i = 0
    quoted = False
    while i < len(data):
        char = data[i]
        if escapechar and char == escapechar:
            i += 2
            continue
        if char == quotechar:
            quoted = not quoted
        elif not quoted and data.startswith(eol, i):
            records.append(data[start:i])
            i = start = i + len(eol)
            continue
        i += 1
    records.append(data[start:])
    return records


class CsvCodec(MediaTypeListMixin, FileCodecMixin):
    """Codec for CSV text and files.

    Attributes:
        separator: Default field separator.
        enclosure: Default quote character.
        escape: Default escape character. An empty string disables escaping.
        eol: Default line terminator for writing.
        heading: Default heading mode for reading.
        stringifier: Function converting leaf values to cell text.
    """

    capabilities = Capability.all()
    extensions = ("csv",)

    def __init__(
        self,
        separator: str = ",",
        enclosure: str = '"',
        escape: str = "\\",
        eol: str = "\n",
        heading: str = "auto",
        stringifier: Stringifier = default_stringifier,
    ):
        self.separator = separator
        self.enclosure = enclosure
        self.escape = escape
        self.eol = eol
        self.heading = heading
        self.set_stringifier(stringifier)

    def set_stringifier(self, stringifier: Stringifier):
        """Set the function converting leaf values to cell text.

        Raises:
            TypeError: If `stringifier` is not callable.
        """
        if not callable(stringifier):
            raise TypeError("Stringifier must be a callable.")
        self.stringifier = stringifier

    def build_media_types(self) -> list[str]:
        # application/csv is not registered but some content sniffers report it.
        return ["text/csv", "application/csv"]

    def dialect_options(self, media_type: Optional[MediaType] = None) -> dict[str, Any]:
        """Return `csv` module formatting parameters for a media type."""
        escape = get_parameter(media_type, "escape", self.escape)
        return dict(
            delimiter=get_parameter(media_type, "separator", self.separator),
            quotechar=get_parameter(media_type, "enclosure", self.enclosure),
            escapechar=escape or None,
            lineterminator=get_parameter(media_type, "eol", self.eol),
        )

    def can_decode_data(self, data: Any, media_type: Any = None) -> bool:
        if not isinstance(data, str):
            return False
        if media_type is not None:
            return self.match_media_type(media_type, Capability.DECODE_DATA)
        return True

    def decode_data(self, data: str, media_type: Any = None) -> Any:
        media_type = normalize_media_type(media_type=media_type)
        options = self.dialect_options(media_type)
        eol = options.pop("lineterminator")
        try:
            if eol in _STANDARD_EOLS:
                lines: Iterable[str] = io.StringIO(data, newline="")
            else:
                lines = split_records(
                    data, eol, options["quotechar"], options["escapechar"]
                )
            grid = [row for row in csv.reader(lines, **options) if row]
        except (csv.Error, TypeError, ValueError) as e:
            raise DecodeError(f"Invalid CSV data: {e}") from e
        return self._build_value(grid, media_type)

    def decode_file(self, path: str | Path, media_type: Any = None) -> Any:
        media_type = normalize_media_type(path, media_type)
        options = self.dialect_options(media_type)
        del options["lineterminator"]
        try:
            with open(path, "r", encoding=self.encoding, newline="") as f:
                grid = [row for row in csv.reader(f, **options) if row]
        except (OSError, UnicodeDecodeError) as e:
            raise SerializationIOError(path, e) from e
        except (csv.Error, TypeError) as e:
            raise DecodeError(f"Invalid CSV file '{path}': {e}") from e
        return self._build_value(grid, media_type)

    def _build_value(self, grid: list[list[str]], media_type: Optional[MediaType]) -> Any:
        try:
            value = from_grid(
                grid,
                heading=get_parameter(media_type, "heading", self.heading),
                structural=True,
            )
            if get_flag(media_type, "flatten"):
                value = flatten(value)
        except ValueError as e:
            raise DecodeError(str(e)) from e
        return value

    def can_encode_data(self, value: Any, media_type: Any = None) -> bool:
        if media_type is not None:
            return self.match_media_type(media_type, Capability.ENCODE_DATA)
        return True

    def encode_data(self, value: Any, media_type: Any = None) -> str:
        media_type = normalize_media_type(media_type=media_type)
        stream = io.StringIO(newline="")
        self._write_rows(stream, value, media_type)
        return stream.getvalue()

    def encode_file(self, path: str | Path, value: Any, media_type: Any = None):
        media_type = normalize_media_type(path, media_type, sniff=False)
        rows = self._prepare_rows(value)
        try:
            with open(path, "w", encoding=self.encoding, newline="") as f:
                self._write_rows(f, rows, media_type, prepared=True)
        except OSError as e:
            raise SerializationIOError(path, e) from e

    def _prepare_rows(self, value: Any) -> list[list[Any]]:
        try:
            return to_table(value, stringifier=self.stringifier).to_rows()
        except (TypeError, ValueError) as e:
            raise EncodeError(f"Cannot convert value to CSV rows: {e}") from e

    def _write_rows(
        self,
        stream: Any,
        value: Any,
        media_type: Optional[MediaType],
        prepared: bool = False,
    ):
        rows = value if prepared else self._prepare_rows(value)
        try:
            writer = csv.writer(stream, **self.dialect_options(media_type))
            writer.writerows(rows)
        except (csv.Error, TypeError) as e:
            raise EncodeError(f"Failed to write CSV line: {e}") from e
