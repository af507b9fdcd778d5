"""JSON codec.

Handles `application/json` and every media type using the `+json` structured syntax
suffix (e.g. `application/ld+json`).

Supported media type parameters:
    indent: Number of spaces used to indent encoded output. Output is compact when
        omitted.
"""

from __future__ import annotations

from typing import Any

import simplejson as json

from dataio.io.base import (
    Capability,
    DecodeError,
    EncodeError,
    FileCodecMixin,
    MediaTypeListMixin,
)
from dataio.io.utils import get_parameter, normalize_media_type
from dataio.model.media_type import MediaType
from dataio.model.value import to_builtin


class JsonCodec(MediaTypeListMixin, FileCodecMixin):
    """Codec for JSON text and files."""

    capabilities = Capability.all()
    extensions = ("json", "jsn")

    def __init__(self, indent: int | None = None, sort_keys: bool = False):
        self.indent = indent
        self.sort_keys = sort_keys

    def build_media_types(self) -> list[str]:
        return ["application/json"]

    def match_media_type(self, media_type: MediaType | str, capability=None) -> bool:
        try:
            media_type = MediaType.parse(media_type)
        except ValueError:
            return False
        return media_type.structured_syntax == "json" or super().match_media_type(
            media_type, capability
        )

    def can_decode_data(self, data: Any, media_type: Any = None) -> bool:
        if not isinstance(data, (str, bytes, bytearray)):
            return False
        if media_type is not None:
            return self.match_media_type(media_type, Capability.DECODE_DATA)
        return True

    def decode_data(self, data: str | bytes, media_type: Any = None) -> Any:
        try:
            return json.loads(data)
        except json.JSONDecodeError as e:
            raise DecodeError(f"Invalid JSON: {e}") from e

    def can_encode_data(self, value: Any, media_type: Any = None) -> bool:
        if media_type is not None:
            return self.match_media_type(media_type, Capability.ENCODE_DATA)
        return True

    def encode_data(self, value: Any, media_type: Any = None) -> str:
        media_type = normalize_media_type(media_type=media_type)
        indent = get_parameter(media_type, "indent", self.indent)
        try:
            if isinstance(indent, str):
                indent = int(indent) if indent.strip() else None
            return json.dumps(
                to_builtin(value),
                indent=indent,
                sort_keys=self.sort_keys,
                ensure_ascii=False,
                iterable_as_array=True,
            )
        except (TypeError, ValueError) as e:
            raise EncodeError(f"Cannot encode value as JSON: {e}") from e
