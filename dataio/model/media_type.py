"""Data model for media types.

A `MediaType` identifies a content type (`type/subtype`) and carries optional named
parameters such as `separator` or `heading`. Codecs advertise the media types they
support and the dispatcher uses them to select a codec.
"""

from __future__ import annotations

import re
from typing import Any, Optional

from attrs import define, field

STRUCTURED_SYNTAXES: frozenset[str] = frozenset(
    {"json", "yaml", "xml", "ini", "csv", "lua", "zip"}
)
"""Subtype names that are also recognized as structured syntax identifiers."""

_TOKEN = r"[A-Za-z0-9!#$&^_.+*-]+"
_MEDIA_TYPE_RE = re.compile(rf"^\s*({_TOKEN})/({_TOKEN})\s*(;.*)?$")
_PARAMETER_RE = re.compile(rf'\s*({_TOKEN})\s*=\s*("(?:[^"\\]|\\.)*"|[^;]*)\s*')


def _freeze_parameters(parameters: Any) -> tuple[tuple[str, str], ...]:
    """Convert a parameter mapping into a tuple of lower-cased `(name, value)` pairs."""
    if parameters is None:
        return ()
    if isinstance(parameters, dict):
        parameters = parameters.items()
    return tuple((str(name).lower(), str(value)) for name, value in parameters)


@define(frozen=True)
class MediaType:
    """An immutable media type.

    Attributes:
        type: Top-level type, e.g. `"text"`. Stored in lower case.
        subtype: Subtype, e.g. `"csv"` or `"ld+json"`. Stored in lower case.
        params: Parameters as a tuple of `(name, value)` pairs. Names are stored in
            lower case, values keep their case. Use `parameters` for a mapping.
    """

    type: str = field(converter=str.lower)
    subtype: str = field(converter=str.lower)
    params: tuple[tuple[str, str], ...] = field(
        default=(), converter=_freeze_parameters
    )

    @classmethod
    def parse(cls, text: str | MediaType) -> MediaType:
        """Create a `MediaType` from its textual form.

        Args:
            text: Media type string such as `"text/csv; separator=;"`. A `MediaType`
                is returned unchanged.

        Returns:
            The parsed `MediaType`.

        Raises:
            ValueError: If the text is not a valid media type.
        """
        if isinstance(text, MediaType):
            return text
        match = _MEDIA_TYPE_RE.match(str(text))
        if match is None:
            raise ValueError(f"Invalid media type: '{text}'.")
        type_, subtype, rest = match.groups()
        params = []
        if rest:
            for chunk in _split_parameters(rest[1:]):
                if not chunk.strip():
                    continue
                param = _PARAMETER_RE.fullmatch(chunk)
                if param is None:
                    raise ValueError(f"Invalid media type parameter: '{chunk}'.")
                name, value = param.groups()
                if value.startswith('"'):
                    value = re.sub(r"\\(.)", r"\1", value[1:-1])
                else:
                    value = value.strip()
                params.append((name, value))
        return cls(type_, subtype, params)

    @property
    def essence(self) -> str:
        """The `type/subtype` part without parameters."""
        return f"{self.type}/{self.subtype}"

    @property
    def parameters(self) -> dict[str, str]:
        """Parameters as a dictionary keyed by lower-case name."""
        return dict(self.params)

    @property
    def structured_syntax(self) -> Optional[str]:
        """Structured syntax this media type is expressed in, if any.

        This is the `+suffix` of the subtype (`application/ld+json` is `"json"`) or,
        for well-known syntax names, the subtype itself without its `x-` prefix
        (`text/x-yaml` is `"yaml"`).
        """
        if "+" in self.subtype:
            return self.subtype.rsplit("+", 1)[1] or None
        name = self.subtype[2:] if self.subtype.startswith("x-") else self.subtype
        if name in STRUCTURED_SYNTAXES:
            return name
        return None

    @property
    def is_range(self) -> bool:
        """`True` if this media type contains a wildcard (`*/*` or `text/*`)."""
        return self.type == "*" or self.subtype == "*"

    def get(self, name: str, default: Any = None) -> Any:
        """Return the value of a parameter (case-insensitive name) or `default`."""
        name = name.lower()
        for key, value in self.params:
            if key == name:
                return value
        return default

    def has(self, name: str) -> bool:
        """Return `True` if the parameter is present."""
        name = name.lower()
        return any(key == name for key, _ in self.params)

    def matches(self, other: MediaType | str) -> bool:
        """Check whether two media types designate the same content.

        Parameters are ignored. Two media types match if their `type/subtype` are
        equal, if one of them is a range covering the other, or if both resolve to
        the same structured syntax.

        Args:
            other: Media type to compare with.

        Returns:
            `True` if the media types match.
        """
        other = MediaType.parse(other)
        if self.essence == other.essence:
            return True
        if self.is_range or other.is_range:
            if self.type == "*" or other.type == "*":
                return True
            return self.type == other.type and (
                self.subtype == "*" or other.subtype == "*"
            )
        syntax = self.structured_syntax
        return syntax is not None and syntax == other.structured_syntax

    def __str__(self) -> str:
        """Return the canonical string form `type/subtype[; name=value]*`."""
        text = self.essence
        for name, value in self.params:
            if value == "" or re.search(r'[\s;,"=]', value):
                value = '"' + value.replace("\\", "\\\\").replace('"', '\\"') + '"'
            text += f"; {name}={value}"
        return text


def _split_parameters(text: str) -> list[str]:
    """Split a parameter list on `;` while respecting quoted strings."""
    chunks = []
    current = ""
    quoted = False
    escaped = False
    for char in text:
        if escaped:
            escaped = False
        elif char == "\\" and quoted:
            escaped = True
        elif char == '"':
            quoted = not quoted
        elif char == ";" and not quoted:
            chunks.append(current)
            current = ""
            continue
        current += char
    chunks.append(current)
    return chunks


def media_type_list(*media_types: MediaType | str) -> dict[str, MediaType]:
    """Build a media type list keyed by canonical string, dropping duplicates."""
    result: dict[str, MediaType] = {}
    for media_type in media_types:
        media_type = MediaType.parse(media_type)
        result.setdefault(str(media_type), media_type)
    return result
