"""YAML codec based on PyYAML safe loading and dumping."""

from __future__ import annotations

from typing import Any

import yaml

from dataio.io.base import (
    Capability,
    DecodeError,
    EncodeError,
    FileCodecMixin,
    MediaTypeListMixin,
)
from dataio.io.utils import get_parameter, normalize_media_type
from dataio.model.value import to_builtin


class YamlCodec(MediaTypeListMixin, FileCodecMixin):
    """Codec for YAML text and files.

    Only plain data is loaded and dumped (`yaml.safe_load` / `yaml.safe_dump`); YAML
    tags for arbitrary Python objects are rejected.

    The `charset` media type parameter controls the output: with a charset other
    than UTF-8 (e.g. `us-ascii`), non-ASCII characters are escaped.
    """

    capabilities = Capability.all()
    extensions = ("yaml", "yml")

    def build_media_types(self) -> list[str]:
        return ["text/x-yaml", "application/yaml", "application/x-yaml", "text/yaml"]

    def can_decode_data(self, data: Any, media_type: Any = None) -> bool:
        if not isinstance(data, (str, bytes)):
            return False
        if media_type is not None:
            return self.match_media_type(media_type, Capability.DECODE_DATA)
        return True

    def decode_data(self, data: str | bytes, media_type: Any = None) -> Any:
        try:
            return yaml.safe_load(data)
        except yaml.YAMLError as e:
            raise DecodeError(f"Invalid YAML: {e}") from e

    def can_encode_data(self, value: Any, media_type: Any = None) -> bool:
        if media_type is not None:
            return self.match_media_type(media_type, Capability.ENCODE_DATA)
        return True

    def encode_data(self, value: Any, media_type: Any = None) -> str:
        media_type = normalize_media_type(media_type=media_type)
        charset = get_parameter(media_type, "charset", "utf-8")
        try:
            return yaml.safe_dump(
                to_builtin(value),
                allow_unicode=charset.lower().replace("_", "-") in ("utf-8", "utf8"),
                default_flow_style=False,
                sort_keys=False,
            )
        except yaml.YAMLError as e:
            raise EncodeError(f"Cannot encode value as YAML: {e}") from e
