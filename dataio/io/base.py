"""Codec interface and the behavior shared by the built-in codecs.

A codec is any object implementing the `Codec` protocol. Capabilities are declared
up front as flags; the predicate (`can_<capability>`) and operation (`<capability>`)
methods only need to exist for the declared capabilities.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any, Optional, Protocol, runtime_checkable

from dataio.io.errors import (
    AllCodecsFailed,
    DecodeError,
    EncodeError,
    NoCodecFound,
    SerializationError,
    SerializationIOError,
)
from dataio.io.utils import file_extension, normalize_media_type, read_text, write_text
from dataio.model.media_type import MediaType, media_type_list

__all__ = [
    "AllCodecsFailed",
    "Capability",
    "Codec",
    "DecodeError",
    "EncodeError",
    "FileCodecMixin",
    "MediaTypeListMixin",
    "NoCodecFound",
    "SerializationError",
    "SerializationIOError",
]


class Capability(str, Enum):
    """One of the four conversions a codec can provide."""

    DECODE_DATA = "decode_data"
    ENCODE_DATA = "encode_data"
    DECODE_FILE = "decode_file"
    ENCODE_FILE = "encode_file"

    @property
    def predicate(self) -> str:
        """Name of the codec method telling if a payload is supported."""
        return f"can_{self.value}"

    @property
    def operation(self) -> str:
        """Name of the codec method performing the conversion."""
        return self.value

    @property
    def is_file(self) -> bool:
        """Whether the first payload argument is a file path."""
        return self in (Capability.DECODE_FILE, Capability.ENCODE_FILE)

    @classmethod
    def all(cls) -> frozenset[Capability]:
        """All four capabilities."""
        return frozenset(cls)


@runtime_checkable
class Codec(Protocol):
    """Protocol for codecs.

    Besides the members below, a codec implements for every declared capability:

    - `can_decode_data(data, media_type=None) -> bool` and
      `decode_data(data, media_type=None) -> Any`
    - `can_encode_data(value, media_type=None) -> bool` and
      `encode_data(value, media_type=None) -> str`
    - `can_decode_file(path, media_type=None) -> bool` and
      `decode_file(path, media_type=None) -> Any`
    - `can_encode_file(path, value, media_type=None) -> bool` and
      `encode_file(path, value, media_type=None) -> None`

    Predicates must not raise for payloads they do not support. Operations raise
    `DecodeError`, `EncodeError` or `SerializationIOError`.
    """

    capabilities: frozenset[Capability]
    extensions: tuple[str, ...]

    def media_types(self, capability: Optional[Capability] = None) -> dict[str, MediaType]:
        """Media types supported for a capability, keyed by canonical string."""
        ...


class MediaTypeListMixin:
    """Lazily built, cached list of supported media types.

    Subclasses implement `build_media_types`. The list is built on first use and
    de-duplicated by canonical string form.
    """

    _media_types: Optional[dict[str, MediaType]] = None

    def build_media_types(self) -> list[MediaType | str]:
        """Return the media types supported by this codec."""
        raise NotImplementedError

    def media_types(self, capability: Optional[Capability] = None) -> dict[str, MediaType]:
        """Media types supported for a capability, keyed by canonical string."""
        if self._media_types is None:
            self._media_types = media_type_list(*self.build_media_types())
        return dict(self._media_types)

    def match_media_type(
        self, media_type: MediaType | str, capability: Optional[Capability] = None
    ) -> bool:
        """Check if a media type matches one of the supported media types.

        Parameters are ignored; ranges and structured syntax suffixes match (so
        `application/ld+json` matches `application/json`).
        """
        try:
            media_type = MediaType.parse(media_type)
        except ValueError:
            return False
        return any(
            supported.matches(media_type)
            for supported in self.media_types(capability).values()
        )


class FileCodecMixin:
    """File conversions implemented on top of text data conversions.

    A file is supported when its media type (explicit, or inferred from the file)
    matches the codec, or, when no media type is known, when its extension is one of
    the codec `extensions`. Reading and writing go through UTF-8 text.
    """

    extensions: tuple[str, ...] = ()
    encoding: str = "utf-8"

    def match_extension(self, path: str | Path) -> bool:
        """Check if a file name has one of the codec extensions."""
        return file_extension(path) in self.extensions

    def can_decode_file(self, path: str | Path, media_type: Any = None) -> bool:
        media_type = normalize_media_type(path, media_type)
        if media_type is not None:
            return self.match_media_type(media_type, Capability.DECODE_FILE)
        return self.match_extension(path)

    def decode_file(self, path: str | Path, media_type: Any = None) -> Any:
        media_type = normalize_media_type(path, media_type)
        return self.decode_data(read_text(path, self.encoding), media_type)

    def can_encode_file(self, path: str | Path, value: Any, media_type: Any = None) -> bool:
        media_type = normalize_media_type(path, media_type, sniff=False)
        if media_type is not None:
            return self.match_media_type(media_type, Capability.ENCODE_FILE)
        return self.match_extension(path)

    def encode_file(self, path: str | Path, value: Any, media_type: Any = None):
        media_type = normalize_media_type(path, media_type, sniff=False)
        write_text(path, self.encode_data(value, media_type), self.encoding)
