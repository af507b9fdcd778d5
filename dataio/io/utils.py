"""Miscellaneous utilities for working with files and media types."""

from __future__ import annotations

import mimetypes
import zipfile
from pathlib import Path
from typing import Any, Optional

from dataio.io.errors import SerializationIOError
from dataio.model.media_type import MediaType

# Extensions not covered (or covered inconsistently) by the mimetypes defaults.
EXTRA_TYPES: dict[str, str] = {
    ".csv": "text/csv",
    ".json": "application/json",
    ".jsn": "application/json",
    ".yaml": "text/x-yaml",
    ".yml": "text/x-yaml",
    ".ini": "text/x-ini",
    ".lua": "text/x-lua",
    ".txt": "text/plain",
    ".xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    ".xls": "application/vnd.ms-excel",
    ".ods": "application/vnd.oasis.opendocument.spreadsheet",
}

SNIFF_SIZE = 2048
"""Number of bytes read from the head of a file for content sniffing."""

_OLE2_SIGNATURE = b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1"
_ZIP_SIGNATURE = b"PK\x03\x04"

# Inferred types that say nothing about the content format.
_UNINFORMATIVE_TYPES = ("text/plain", "application/octet-stream")

_mime_types = mimetypes.MimeTypes()
for _ext, _type in EXTRA_TYPES.items():
    _mime_types.add_type(_type, _ext)


def file_extension(filename: str | Path) -> str:
    """Return the lower-case extension of a file name without the leading dot."""
    return Path(filename).suffix[1:].lower()


def media_type_from_extension(filename: str | Path) -> Optional[MediaType]:
    """Infer a media type from a file name extension.

    Args:
        filename: Path to a file. The file does not need to exist.

    Returns:
        The media type, or `None` if the extension is unknown.
    """
    suffix = Path(filename).suffix.lower()
    if not suffix:
        return None
    for strict in (True, False):
        type_ = _mime_types.types_map[strict].get(suffix)
        if type_ is not None:
            return MediaType.parse(type_)
    return None


def _sniff_zip(filename: str | Path) -> Optional[MediaType]:
    try:
        with zipfile.ZipFile(filename) as archive:
            names = archive.namelist()
            if "mimetype" in names:
                return MediaType.parse(archive.read("mimetype").decode("ascii").strip())
    except (zipfile.BadZipFile, UnicodeDecodeError, ValueError, OSError):
        return None
    if "xl/workbook.xml" in names:
        return MediaType.parse(EXTRA_TYPES[".xlsx"])
    return MediaType.parse("application/zip")


def media_type_from_content(filename: str | Path) -> Optional[MediaType]:
    """Infer a media type by sniffing the head of a file.

    Recognizes spreadsheet containers (OpenDocument, Office Open XML, legacy Excel),
    JSON documents, YAML documents with an explicit marker and Lua chunks returning
    a value. Any other text is `text/plain`.

    Args:
        filename: Path to an existing file.

    Returns:
        The media type, or `None` if the file cannot be read or is binary data of an
        unknown kind.
    """
    try:
        with open(filename, "rb") as f:
            head = f.read(SNIFF_SIZE)
    except (OSError, ValueError):
        return None

    if head.startswith(_ZIP_SIGNATURE):
        return _sniff_zip(filename)
    if head.startswith(_OLE2_SIGNATURE):
        return MediaType.parse(EXTRA_TYPES[".xls"])
    if b"\x00" in head:
        return None

    text = head.decode("utf-8", errors="replace").lstrip("\ufeff").lstrip()
    if text[:1] in ("{", "["):
        return MediaType.parse("application/json")
    if text.startswith(("---", "%YAML")):
        return MediaType.parse("text/x-yaml")
    if text.startswith("return") and "{" in text:
        return MediaType.parse("text/x-lua")
    return MediaType.parse("text/plain")


def normalize_media_type(
    filename: Optional[str | Path] = None,
    media_type: Optional[MediaType | str] = None,
    sniff: bool = True,
) -> Optional[MediaType]:
    """Resolve the media type of a conversion request.

    Args:
        filename: Optional path of the file being read or written.
        media_type: Explicit media type. If provided, it is returned as-is (parsed
            if given as a string).
        sniff: If `True` (the default), sniff the file content when the extension
            is not conclusive. Disable for files that are about to be written.

    Returns:
        The explicit media type, the inferred one, or `None`. Generic `text/plain`
        and `application/octet-stream` inference carries no information and is
        returned as `None`.

    Notes:
        Inference never raises: unknown extensions and unreadable files give `None`.
    """
    if media_type is not None:
        return MediaType.parse(media_type)
    if filename is None:
        return None

    inferred = media_type_from_extension(filename)
    if sniff and (inferred is None or inferred.essence in _UNINFORMATIVE_TYPES):
        inferred = media_type_from_content(filename)
    if inferred is None or inferred.essence in _UNINFORMATIVE_TYPES:
        return None
    return inferred


def get_parameter(media_type: Optional[MediaType], name: str, default: Any = None) -> Any:
    """Return a media type parameter, or `default` if absent or no media type."""
    if media_type is None:
        return default
    return media_type.get(name, default)


def parse_flag(value: Any) -> bool:
    """Interpret a media type parameter as a boolean.

    Args:
        value: A boolean, or text such as `"1"`, `"true"`, `"yes"`, `"on"` (true) and
            `"0"`, `"false"`, `"no"`, `"off"`, `""` (false).

    Raises:
        ValueError: If the text is not recognized.
    """
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in ("1", "true", "yes", "on"):
        return True
    if text in ("", "0", "false", "no", "off"):
        return False
    raise ValueError(f"Unexpected boolean parameter value '{value}'.")


def get_flag(media_type: Optional[MediaType], name: str, default: bool = False) -> bool:
    """Return a boolean media type parameter.

    A parameter present with an empty value (`flatten=""`) counts as set.
    """
    if media_type is None or not media_type.has(name):
        return default
    value = media_type.get(name)
    return True if value == "" else parse_flag(value)


def read_text(filename: str | Path, encoding: str = "utf-8") -> str:
    """Read a whole text file.

    Raises:
        SerializationIOError: If the file cannot be opened or read.
    """
    try:
        with open(filename, "r", encoding=encoding, newline="") as f:
            return f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise SerializationIOError(filename, e) from e


def write_text(filename: str | Path, text: str, encoding: str = "utf-8"):
    """Write a whole text file, replacing any previous content.

    Raises:
        SerializationIOError: If the file cannot be opened or written.
    """
    try:
        with open(filename, "w", encoding=encoding, newline="") as f:
            f.write(text)
    except OSError as e:
        raise SerializationIOError(filename, e) from e
