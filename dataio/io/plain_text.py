"""Plain text codec: one leaf value per line."""

from __future__ import annotations

import re
from typing import Any

from dataio.codecs.table import coerce_numeric, default_stringifier
from dataio.io.base import Capability, EncodeError, FileCodecMixin, MediaTypeListMixin
from dataio.model.value import is_traversable, iter_items

_EOL_RE = re.compile(r"\r\n|\r|\n")


class PlainTextCodec(MediaTypeListMixin, FileCodecMixin):
    """Codec for `text/plain`.

    Encoding writes every leaf of a value on its own line, depth first. Decoding
    splits text on any line ending (`\\r\\n`, `\\r` or `\\n`) and coerces numeric
    lines; a single line is returned as a scalar.

    Not registered by default: any value and any text is acceptable plain text, so
    this codec would shadow the structured ones when no media type is given.
    """

    capabilities = Capability.all()
    extensions = ("txt", "plain")

    def build_media_types(self) -> list[str]:
        return ["text/plain"]

    def can_decode_data(self, data: Any, media_type: Any = None) -> bool:
        if not isinstance(data, str):
            return False
        if media_type is not None:
            return self.match_media_type(media_type, Capability.DECODE_DATA)
        return True

    def decode_data(self, data: str, media_type: Any = None) -> Any:
        lines = [coerce_numeric(line) for line in _EOL_RE.split(data)]
        if len(lines) == 1:
            return lines[0]
        return lines

    def can_encode_data(self, value: Any, media_type: Any = None) -> bool:
        if media_type is not None:
            return self.match_media_type(media_type, Capability.ENCODE_DATA)
        return True

    def encode_data(self, value: Any, media_type: Any = None) -> str:
        if not is_traversable(value):
            return default_stringifier(value)
        lines: list[str] = []
        self._collect_lines(value, lines, set())
        return "\n".join(lines)

    def _collect_lines(self, value: Any, lines: list[str], visiting: set[int]):
        if not is_traversable(value):
            lines.append(default_stringifier(value))
            return
        if id(value) in visiting:
            raise EncodeError("Cannot encode a value containing a reference cycle.")
        visiting.add(id(value))
        for _, item in iter_items(value):
            self._collect_lines(item, lines, visiting)
        visiting.discard(id(value))
