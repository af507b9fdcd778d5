"""Spreadsheet workbook codec (Office Open XML, OpenDocument, legacy Excel).

Workbooks are read with `pandas.read_excel` and written with `pandas.ExcelWriter`,
using the `openpyxl` (`.xlsx`), `odf` (`.ods`) and `xlrd` (`.xls`, read only) engines.

Values are laid out with `dataio.codecs.table.to_sheets`: a collection of tables (a
value deeper than two levels) is written as one sheet per top-level entry, titled by
its key. Anything else is written to a single sheet.

Reading returns a dictionary keyed by sheet title. Numeric titles become integer keys,
and a workbook whose titles are all `0..n-1` is returned as a list.

Empty cells are omitted: a row with a gap is returned as a dictionary keyed by
column index.

Supported media type parameters:
    heading: `"auto"` (the default), `"none"`, `"row"`, `"column"` or `"both"`. In
        auto mode, an empty top-left cell means the sheet has both a row heading and
        a column heading.
    flatten: If set, a workbook with a single sheet is returned as that sheet's
        content.
"""

from __future__ import annotations

import re
import warnings
from enum import Flag
from pathlib import Path
from typing import Any, Optional

import pandas as pd
from attrs import define, field

from dataio.codecs.table import (
    Stringifier,
    cell_stringifier,
    coerce_numeric,
    flatten,
    from_grid,
    to_sheets,
)
from dataio.io.base import (
    Capability,
    DecodeError,
    EncodeError,
    FileCodecMixin,
    MediaTypeListMixin,
    SerializationIOError,
)
from dataio.io.utils import file_extension, get_flag, get_parameter, normalize_media_type
from dataio.model.media_type import MediaType, media_type_list
from dataio.model.table import grid_from_dataframe

MAX_TITLE_LENGTH = 31
"""Maximum length of a worksheet title."""

DEFAULT_TITLE = "Sheet1"

_INVALID_TITLE_CHARS_RE = re.compile(r"[\[\]:*?/\\]")


class IOMode(Flag):
    """Whether a workbook type can be read, written or both."""

    READABLE = 1
    WRITABLE = 2
    READ_WRITE = READABLE | WRITABLE


@define(frozen=True)
class SpreadsheetIOEntry:
    """A workbook file type and the pandas engine handling it.

    Attributes:
        engine: Name of the pandas Excel engine.
        mode: Supported directions.
        media_type: Media type of the workbook type.
        extension: File extension, without the dot.
    """

    engine: str
    mode: IOMode
    media_type: MediaType = field(converter=MediaType.parse)
    extension: str

    def supports(self, mode: IOMode) -> bool:
        return (self.mode & mode) == mode


IO_ENTRIES: tuple[SpreadsheetIOEntry, ...] = (
    SpreadsheetIOEntry(
        "openpyxl",
        IOMode.READ_WRITE,
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        "xlsx",
    ),
    SpreadsheetIOEntry(
        "odf", IOMode.READ_WRITE, "application/vnd.oasis.opendocument.spreadsheet", "ods"
    ),
    SpreadsheetIOEntry("xlrd", IOMode.READABLE, "application/vnd.ms-excel", "xls"),
)


def _mode(capability: Optional[Capability]) -> IOMode:
    if capability in (Capability.ENCODE_FILE, Capability.ENCODE_DATA):
        return IOMode.WRITABLE
    return IOMode.READABLE


def sanitize_title(title: str) -> str:
    """Remove characters that are not allowed in worksheet titles and truncate."""
    return _INVALID_TITLE_CHARS_RE.sub("", title)[:MAX_TITLE_LENGTH].strip("'")


def _title_key(title: Any) -> Any:
    if isinstance(title, str):
        key = coerce_numeric(title)
        if isinstance(key, float) and key.is_integer():
            return title
        return key
    return title


class SpreadsheetCodec(MediaTypeListMixin, FileCodecMixin):
    """Codec for spreadsheet workbook files.

    Attributes:
        heading: Default heading mode for reading.
        default_entry: Workbook type written when neither the media type nor the file
            extension selects one.
        stringifier: Function converting leaf values to cell values.
    """

    capabilities = frozenset({Capability.DECODE_FILE, Capability.ENCODE_FILE})

    def __init__(
        self,
        heading: str = "auto",
        default_extension: str = "ods",
        stringifier: Stringifier = cell_stringifier,
    ):
        self.heading = heading
        self.default_entry = self.entry_for_extension(IOMode.WRITABLE, default_extension)
        if self.default_entry is None:
            raise ValueError(f"No workbook writer for extension '{default_extension}'.")
        self.stringifier = stringifier

    @property
    def extensions(self) -> tuple[str, ...]:
        return tuple(entry.extension for entry in IO_ENTRIES)

    def entries(self, mode: IOMode) -> list[SpreadsheetIOEntry]:
        """Return the workbook types supporting a direction."""
        return [entry for entry in IO_ENTRIES if entry.supports(mode)]

    def entry_for_media_type(
        self, mode: IOMode, media_type: MediaType
    ) -> Optional[SpreadsheetIOEntry]:
        for entry in self.entries(mode):
            if entry.media_type.matches(media_type):
                return entry
        return None

    def entry_for_extension(self, mode: IOMode, extension: str) -> Optional[SpreadsheetIOEntry]:
        for entry in self.entries(mode):
            if entry.extension == extension.lower():
                return entry
        return None

    def build_media_types(self) -> list[MediaType]:
        return [entry.media_type for entry in IO_ENTRIES]

    def media_types(self, capability: Optional[Capability] = None) -> dict[str, MediaType]:
        if capability is None:
            return super().media_types()
        return media_type_list(*(e.media_type for e in self.entries(_mode(capability))))

    def _select_entry(
        self, mode: IOMode, path: str | Path, media_type: Optional[MediaType]
    ) -> Optional[SpreadsheetIOEntry]:
        if media_type is not None:
            return self.entry_for_media_type(mode, media_type)
        return self.entry_for_extension(mode, file_extension(path))

    def can_decode_file(self, path: str | Path, media_type: Any = None) -> bool:
        media_type = normalize_media_type(path, media_type)
        return self._select_entry(IOMode.READABLE, path, media_type) is not None

    def can_encode_file(self, path: str | Path, value: Any, media_type: Any = None) -> bool:
        media_type = normalize_media_type(path, media_type, sniff=False)
        return self._select_entry(IOMode.WRITABLE, path, media_type) is not None

    def decode_file(self, path: str | Path, media_type: Any = None) -> Any:
        media_type = normalize_media_type(path, media_type)
        entry = self._select_entry(IOMode.READABLE, path, media_type)
        try:
            sheets = pd.read_excel(
                path,
                sheet_name=None,
                header=None,
                dtype=object,
                keep_default_na=False,
                na_values=[""],
                engine=entry.engine if entry is not None else None,
            )
        except OSError as e:
            raise SerializationIOError(path, e) from e
        except Exception as e:
            raise DecodeError(f"Failed to read workbook '{path}': {e}") from e

        try:
            heading = get_parameter(media_type, "heading", self.heading)
            data = {
                _title_key(title): from_grid(
                    grid_from_dataframe(df), heading=heading, omit_empty=True
                )
                for title, df in sheets.items()
            }
            flat = get_flag(media_type, "flatten")
        except ValueError as e:
            raise DecodeError(str(e)) from e

        if list(data) == list(range(len(data))):
            data = list(data.values())
        if flat:
            data = flatten(data)
        return data

    def _sheet_titles(self, titles: list[Optional[str]]) -> list[str]:
        result = []
        for i, title in enumerate(titles):
            if title is None:
                title = DEFAULT_TITLE if len(titles) == 1 else f"Sheet{i + 1}"
            cleaned = sanitize_title(title) or f"Sheet{i + 1}"
            base, n = cleaned, 1
            while cleaned.lower() in (t.lower() for t in result):
                n += 1
                suffix = f" ({n})"
                cleaned = base[: MAX_TITLE_LENGTH - len(suffix)] + suffix
            if cleaned != title:
                warnings.warn(f"Worksheet title '{title}' was renamed to '{cleaned}'.")
            result.append(cleaned)
        return result

    def encode_file(self, path: str | Path, value: Any, media_type: Any = None):
        media_type = normalize_media_type(path, media_type, sniff=False)
        entry = self._select_entry(IOMode.WRITABLE, path, media_type)
        if entry is None:
            if media_type is not None:
                raise EncodeError(f"No workbook writer available for {media_type}.")
            entry = self.default_entry

        try:
            sheets = to_sheets(value, stringifier=self.stringifier)
        except (TypeError, ValueError) as e:
            raise EncodeError(f"Cannot convert value to worksheets: {e}") from e
        titles = self._sheet_titles([title for title, _ in sheets])

        # Writing through a handle lets the engine ignore the file extension.
        try:
            with open(path, "wb") as f, pd.ExcelWriter(f, engine=entry.engine) as writer:
                for title, (_, table) in zip(titles, sheets):
                    table.to_dataframe().to_excel(
                        writer, sheet_name=title, header=False, index=False
                    )
        except OSError as e:
            raise SerializationIOError(path, e) from e
        except Exception as e:
            raise EncodeError(f"Failed to write workbook '{path}': {e}") from e
