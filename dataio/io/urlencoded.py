"""URL-encoded (`application/x-www-form-urlencoded`) codec.

Mappings and lists are encoded as query strings. Nested containers use bracket keys
(`user[name]=Bob&tags[0]=a`); decoding rebuilds the nesting, turning containers keyed
by `0..n-1` (or by `[]`) into lists. Any other value is encoded as a single escaped
string. Query string values are always decoded as text.

Since nearly any text is a valid query string, this codec only accepts requests that
name its media type explicitly.

Example:
    >>> from dataio.io.urlencoded import UrlEncodedCodec
    >>> codec = UrlEncodedCodec()
    >>> codec.encode_data({"user": {"name": "Bob"}}, "application/x-www-form-urlencoded")
    'user%5Bname%5D=Bob'
"""

from __future__ import annotations

import re
from typing import Any, Iterator
from urllib.parse import parse_qsl, quote_plus, unquote_plus, urlencode

from dataio.codecs.table import default_stringifier
from dataio.io.base import Capability, DecodeError, EncodeError, MediaTypeListMixin
from dataio.model.value import is_traversable, iter_items

_KEY_RE = re.compile(r"^([^\[\]]+)((?:\[[^\[\]]*\])+)$")
_SEGMENT_RE = re.compile(r"\[([^\[\]]*)\]")


def _key_path(key: str) -> list[str]:
    """Split a bracket key such as `a[b][]` into `["a", "b", ""]`."""
    match = _KEY_RE.match(key)
    if match is None:
        return [key]
    return [match.group(1)] + _SEGMENT_RE.findall(match.group(2))


def _listify(node: Any) -> Any:
    """Turn nested dictionaries keyed by `"0".."n-1"` into lists."""
    if not isinstance(node, dict):
        return node
    items = {key: _listify(item) for key, item in node.items()}
    if items and list(items) == [str(i) for i in range(len(items))]:
        return list(items.values())
    return items


def _iter_pairs(value: Any, prefix: str = "") -> Iterator[tuple[str, str]]:
    for key, item in iter_items(value):
        name = f"{prefix}[{key}]" if prefix else str(key)
        if is_traversable(item):
            yield from _iter_pairs(item, name)
        elif item is not None:
            yield name, default_stringifier(item)


class UrlEncodedCodec(MediaTypeListMixin):
    """Codec for URL-encoded query strings."""

    capabilities = frozenset({Capability.DECODE_DATA, Capability.ENCODE_DATA})
    extensions = ()

    def build_media_types(self) -> list[str]:
        return ["application/x-www-form-urlencoded"]

    def can_decode_data(self, data: Any, media_type: Any = None) -> bool:
        if media_type is None or not isinstance(data, str):
            return False
        return self.match_media_type(media_type, Capability.DECODE_DATA)

    def decode_data(self, data: str, media_type: Any = None) -> Any:
        """Decode a query string.

        Returns:
            A dictionary (or list) when the text contains `=`, else the unescaped
            text.
        """
        if "=" not in data:
            return unquote_plus(data)
        try:
            pairs = parse_qsl(data, keep_blank_values=True, strict_parsing=False)
        except ValueError as e:
            raise DecodeError(f"Invalid URL-encoded data: {e}") from e

        result: dict[str, Any] = {}
        for key, value in pairs:
            path = _key_path(key)
            node = result
            for i, segment in enumerate(path):
                if segment == "":
                    segment = str(len(node))
                if i == len(path) - 1:
                    node[segment] = value
                else:
                    child = node.get(segment)
                    if not isinstance(child, dict):
                        child = node[segment] = {}
                    node = child
        return _listify(result)

    def can_encode_data(self, value: Any, media_type: Any = None) -> bool:
        if media_type is None:
            return False
        return self.match_media_type(media_type, Capability.ENCODE_DATA)

    def encode_data(self, value: Any, media_type: Any = None) -> str:
        try:
            if is_traversable(value):
                return urlencode(list(_iter_pairs(value)))
            return quote_plus(default_stringifier(value))
        except (TypeError, ValueError) as e:
            raise EncodeError(f"Cannot URL-encode value: {e}") from e
