"""INI configuration file decoder."""

from __future__ import annotations

import configparser
import warnings
from pathlib import Path
from typing import Any

from dataio.io.base import Capability, DecodeError, FileCodecMixin, MediaTypeListMixin
from dataio.io.utils import normalize_media_type

# Section holding the keys that appear before the first section header.
_TOP_SECTION = "\x00top"


def _unquote(value: str | None) -> str | None:
    if value is not None and len(value) >= 2 and value[0] == value[-1] == '"':
        return value[1:-1]
    return value


class IniCodec(MediaTypeListMixin, FileCodecMixin):
    """Decoder for INI text and files.

    Sections become nested dictionaries and keys that appear before the first
    section land at the top level. Values are returned as text (without surrounding
    double quotes); keys without a value map to `None`. Key case is preserved.

    INI has no reliable content signature, so data is only decoded when the media
    type is given explicitly.
    """

    capabilities = frozenset({Capability.DECODE_DATA, Capability.DECODE_FILE})
    extensions = ("ini",)

    def build_media_types(self) -> list[str]:
        return ["text/x-ini"]

    def can_decode_data(self, data: Any, media_type: Any = None) -> bool:
        if media_type is None or not isinstance(data, str):
            return False
        return self.match_media_type(media_type, Capability.DECODE_DATA)

    def can_decode_file(self, path: str | Path, media_type: Any = None) -> bool:
        # Only an explicit media type or the extension identify an INI file.
        media_type = normalize_media_type(media_type=media_type)
        if media_type is not None:
            return self.match_media_type(media_type, Capability.DECODE_FILE)
        return self.match_extension(path)

    def _parse(self, text: str, strict: bool) -> configparser.ConfigParser:
        parser = configparser.ConfigParser(
            interpolation=None,
            allow_no_value=True,
            strict=strict,
            default_section=_TOP_SECTION + "defaults",
            inline_comment_prefixes=(";",),
        )
        parser.optionxform = str
        parser.read_string(f"[{_TOP_SECTION}]\n" + text)
        return parser

    def decode_data(self, data: str, media_type: Any = None) -> dict[str, Any]:
        try:
            try:
                parser = self._parse(data, strict=True)
            except (configparser.DuplicateSectionError, configparser.DuplicateOptionError) as e:
                warnings.warn(f"Duplicate INI entry, the last one is kept: {e}")
                parser = self._parse(data, strict=False)
        except configparser.Error as e:
            raise DecodeError(f"Invalid INI data: {e}") from e

        result: dict[str, Any] = {}
        for name in parser.sections():
            items = {
                key: _unquote(value)
                for key, value in parser.items(name, raw=True)
            }
            if name == _TOP_SECTION:
                result.update(items)
            else:
                result[name] = items
        return result
