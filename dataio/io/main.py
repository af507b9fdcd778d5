"""This module contains the dispatch engine and high-level conversion wrappers."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

from attrs import define, field

from dataio.io.base import AllCodecsFailed, Capability, NoCodecFound
from dataio.io.csv import CsvCodec
from dataio.io.ini import IniCodec
from dataio.io.json import JsonCodec
from dataio.io.lua import LuaCodec
from dataio.io.registry import FormatRegistry
from dataio.io.spreadsheet import SpreadsheetCodec
from dataio.io.urlencoded import UrlEncodedCodec
from dataio.io.utils import normalize_media_type
from dataio.io.yaml import YamlCodec
from dataio.model.media_type import MediaType


def create_registry(builtins: bool = True) -> FormatRegistry:
    """Create a codec registry.

    Args:
        builtins: If `True` (the default), register the built-in codecs. JSON is
            registered last and is therefore tried first, followed by YAML,
            spreadsheets, URL-encoded, Lua, CSV and INI.

    Returns:
        A new `FormatRegistry`.

    Notes:
        `PlainTextCodec` is not registered by default. Register it explicitly to
        handle `text/plain`.
    """
    registry = FormatRegistry()
    if builtins:
        for codec in (
            IniCodec(),
            CsvCodec(),
            LuaCodec(),
            UrlEncodedCodec(),
            SpreadsheetCodec(),
            YamlCodec(),
            JsonCodec(),
        ):
            registry.register(codec)
    return registry


def _describe(capability: Capability, payload: tuple) -> str:
    if capability.is_file:
        return f"'{payload[0]}'"
    value = payload[0]
    return f"{type(value).__name__} value"


@define
class Dispatcher:
    """Route conversion requests to the codecs of a registry.

    Candidates are attempted in priority order. A codec failing with any exception
    does not stop the dispatch: the failure is recorded and the next candidate is
    attempted.

    Attributes:
        registry: Codecs available for dispatch. Defaults to a registry holding the
            built-in codecs.
    """

    registry: FormatRegistry = field(factory=create_registry)

    def normalize_media_type(
        self,
        filename: Optional[str | Path] = None,
        media_type: Optional[MediaType | str] = None,
        sniff: bool = True,
    ) -> Optional[MediaType]:
        """Resolve the media type of a request. See `dataio.io.utils.normalize_media_type`."""
        return normalize_media_type(filename, media_type, sniff=sniff)

    def _request_media_type(
        self, capability: Capability, payload: tuple, media_type: Any
    ) -> Optional[MediaType]:
        try:
            if not capability.is_file:
                return self.normalize_media_type(media_type=media_type)
            return self.normalize_media_type(
                payload[0], media_type, sniff=capability == Capability.DECODE_FILE
            )
        except ValueError as e:
            raise NoCodecFound(
                capability, target=f"with invalid media type '{media_type}'"
            ) from e

    def candidates(
        self, capability: Capability | str, *payload: Any, media_type: Any = None
    ) -> list:
        """Return the codecs that accept a request, in priority order.

        A media type that cannot be parsed is accepted by no codec.
        """
        capability = Capability(capability)
        try:
            media_type = self._request_media_type(capability, payload, media_type)
        except NoCodecFound:
            return []
        return self.registry.candidates(capability, *payload, media_type=media_type)

    def resolve(
        self, capability: Capability | str, *payload: Any, media_type: Any = None
    ) -> Any:
        """Perform a conversion with the first codec that succeeds.

        Args:
            capability: The requested capability.
            *payload: Operation arguments: `(data,)`, `(value,)`, `(path,)` or
                `(path, value)` for decode data, encode data, decode file and encode
                file respectively.
            media_type: Optional media type (a `MediaType` or a string). When absent,
                file media types are inferred from the file name and content.

        Returns:
            The result of the first successful codec operation.

        Raises:
            NoCodecFound: If no registered codec accepts the request, or if the
                media type cannot be parsed.
            AllCodecsFailed: If every accepting codec failed. The error lists the
                failures in the order the codecs were attempted.
        """
        capability = Capability(capability)
        media_type = self._request_media_type(capability, payload, media_type)
        candidates = self.registry.candidates(capability, *payload, media_type=media_type)
        if not candidates:
            raise NoCodecFound(capability, media_type, _describe(capability, payload))

        failures = []
        for codec in candidates:
            operation = getattr(codec, capability.operation)
            try:
                return operation(*payload, media_type=media_type)
            except Exception as e:
                failures.append((codec, e))
        raise AllCodecsFailed(capability, failures)

    def can_decode_data(self, data: Any, media_type: Any = None) -> bool:
        return bool(self.candidates(Capability.DECODE_DATA, data, media_type=media_type))

    def decode_data(self, data: Any, media_type: Any = None) -> Any:
        return self.resolve(Capability.DECODE_DATA, data, media_type=media_type)

    def can_encode_data(self, value: Any, media_type: Any = None) -> bool:
        return bool(self.candidates(Capability.ENCODE_DATA, value, media_type=media_type))

    def encode_data(self, value: Any, media_type: Any = None) -> str:
        return self.resolve(Capability.ENCODE_DATA, value, media_type=media_type)

    def can_decode_file(self, filename: str | Path, media_type: Any = None) -> bool:
        return bool(self.candidates(Capability.DECODE_FILE, filename, media_type=media_type))

    def decode_file(self, filename: str | Path, media_type: Any = None) -> Any:
        return self.resolve(Capability.DECODE_FILE, filename, media_type=media_type)

    def can_encode_file(
        self, filename: str | Path, value: Any, media_type: Any = None
    ) -> bool:
        return bool(
            self.candidates(Capability.ENCODE_FILE, filename, value, media_type=media_type)
        )

    def encode_file(self, filename: str | Path, value: Any, media_type: Any = None):
        return self.resolve(Capability.ENCODE_FILE, filename, value, media_type=media_type)

    def media_types(self, capability: Capability | str) -> dict[str, MediaType]:
        """Return all media types supported for a capability."""
        return self.registry.media_types(capability)


def load_file(
    filename: str | Path,
    media_type: Optional[MediaType | str] = None,
    registry: Optional[FormatRegistry] = None,
) -> Any:
    """Load a value from a file.

    Args:
        filename: Path to the file.
        media_type: Optional media type. If not provided, it is inferred from the file
            extension, then from the file content.
        registry: Codecs to use. If not provided, the built-in codecs are used.

    Returns:
        The decoded value.
    """
    return _dispatcher(registry).decode_file(filename, media_type=media_type)


def save_file(
    value: Any,
    filename: str | Path,
    media_type: Optional[MediaType | str] = None,
    registry: Optional[FormatRegistry] = None,
):
    """Save a value to a file.

    Args:
        value: The value to save.
        filename: Path to the output file.
        media_type: Optional media type. If not provided, it is inferred from the file
            extension.
        registry: Codecs to use. If not provided, the built-in codecs are used.
    """
    _dispatcher(registry).encode_file(filename, value, media_type=media_type)


def decode(
    data: str | bytes,
    media_type: Optional[MediaType | str] = None,
    registry: Optional[FormatRegistry] = None,
) -> Any:
    """Decode a value from text.

    Args:
        data: Serialized data.
        media_type: Optional media type. Without one, each codec decides whether it
            accepts the data (JSON is attempted first).
        registry: Codecs to use. If not provided, the built-in codecs are used.

    Returns:
        The decoded value.
    """
    return _dispatcher(registry).decode_data(data, media_type=media_type)


def encode(
    value: Any,
    media_type: Optional[MediaType | str] = None,
    registry: Optional[FormatRegistry] = None,
) -> str:
    """Encode a value to text.

    Args:
        value: The value to encode.
        media_type: Optional media type. Without one, the highest priority codec
            accepting the value is used (JSON with the built-in codecs).
        registry: Codecs to use. If not provided, the built-in codecs are used.

    Returns:
        The serialized value.
    """
    return _dispatcher(registry).encode_data(value, media_type=media_type)


def _dispatcher(registry: Optional[FormatRegistry]) -> Dispatcher:
    if registry is None:
        return Dispatcher()
    return Dispatcher(registry)
