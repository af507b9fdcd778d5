"""Lua table literal codec.

Values are written as Lua table constructors:

    {
     name = "Bob",
     ["not an identifier"] = true,
     tags = {
      "a",
      "b"
     }
    }

Lists are written with positional entries, other mappings with keyed entries.
Files hold a Lua chunk returning the value (`return {...}`), so they can be loaded
with `dofile`.

The decoder accepts the subset of Lua needed to read such data back: an optional
leading `return`, `nil`, booleans, decimal and hexadecimal numbers, quoted and long
strings, table constructors and comments.
"""

from __future__ import annotations

import math
import re
from pathlib import Path
from typing import Any

import numpy as np

from dataio.io.base import (
    Capability,
    DecodeError,
    EncodeError,
    FileCodecMixin,
    MediaTypeListMixin,
)
from dataio.io.utils import normalize_media_type, read_text, write_text
from dataio.model.value import is_list, is_traversable, iter_items

LUA_KEYWORDS = frozenset(
    {
        "and", "break", "do", "else", "elseif", "end", "false", "for", "function",
        "goto", "if", "in", "local", "nil", "not", "or", "repeat", "return", "then",
        "true", "until", "while",
    }
)  # fmt: skip

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "'": "\\'",
    # Three digits so that a following digit is not read as part of the escape
    "\0": "\\000",
    "\n": "\\n",
    "\r": "\\r",
}


def quote_string(text: str) -> str:
    """Quote a string as a double-quoted Lua string literal."""
    return '"' + "".join(_ESCAPES.get(char, char) for char in text) + '"'


def encode_key(key: Any) -> str:
    """Encode a table key: bare identifier, `[integer]` or `["string"]`."""
    if isinstance(key, np.generic):
        key = key.item()
    if isinstance(key, str) and _IDENTIFIER_RE.match(key) and key not in LUA_KEYWORDS:
        return key
    if isinstance(key, int) and not isinstance(key, bool):
        return f"[{key}]"
    return f"[{quote_string(str(key))}]"


def encode_literal(value: Any) -> str:
    """Encode a scalar value as a Lua literal.

    Raises:
        EncodeError: If the value has no Lua literal form (non-finite numbers,
            arbitrary objects).
    """
    if isinstance(value, np.generic):
        value = value.item()
    if value is None:
        return "nil"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if not math.isfinite(value):
            raise EncodeError(f"Cannot encode non-finite number {value} as Lua.")
        return repr(value)
    if isinstance(value, str):
        return quote_string(value)
    raise EncodeError(f"Cannot encode {type(value).__name__} value as Lua.")


def encode_table(value: Any, level: int = 0) -> str:
    """Encode a container as a table constructor, one entry per line.

    Nested tables are indented by one space per nesting level.
    """
    positional = is_list(value)
    entries = []
    for key, item in iter_items(value):
        entry = " " if positional else f" {encode_key(key)} = "
        if is_traversable(item):
            entry += encode_table(item, level + 1)
        else:
            entry += encode_literal(item)
        entries.append(entry)
    body = ",\n".join(entries) + "\n}"
    if level:
        body = re.sub(r"^", " " * level, body, flags=re.MULTILINE)
    return "{\n" + body


class _Parser:
    """Recursive descent parser for Lua literal expressions."""

    _NUMBER_RE = re.compile(
        r"0[xX][0-9A-Fa-f]+|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?"
    )
    _NAME_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
    _LONG_BRACKET_RE = re.compile(r"\[(=*)\[")
    _SIMPLE_ESCAPES = {
        "n": "\n", "t": "\t", "r": "\r", "a": "\a", "b": "\b", "f": "\f",
        "v": "\v", "\\": "\\", '"': '"', "'": "'", "\n": "\n",
    }  # fmt: skip

    def __init__(self, text: str):
        self.text = text
        self.pos = 0

    def error(self, message: str) -> DecodeError:
        line = self.text.count("\n", 0, self.pos) + 1
        return DecodeError(f"Invalid Lua data at line {line}: {message}")

    def skip(self):
        """Skip whitespace and comments."""
        while True:
            while self.pos < len(self.text) and self.text[self.pos].isspace():
                self.pos += 1
            if not self.text.startswith("--", self.pos):
                return
            self.pos += 2
            match = self._LONG_BRACKET_RE.match(self.text, self.pos)
            if match:
                self.pos = match.end()
                self._long_bracket_end(match.group(1))
            else:
                end = self.text.find("\n", self.pos)
                self.pos = len(self.text) if end < 0 else end + 1

    def peek(self, token: str) -> bool:
        self.skip()
        return self.text.startswith(token, self.pos)

    def expect(self, token: str):
        if not self.peek(token):
            raise self.error(f"expected '{token}'")
        self.pos += len(token)

    def parse(self) -> Any:
        self.skip()
        name = self._NAME_RE.match(self.text, self.pos)
        if name and name.group() == "return":
            self.pos = name.end()
        value = self.value()
        self.skip()
        if self.peek(";"):
            self.pos += 1
            self.skip()
        if self.pos != len(self.text):
            raise self.error("unexpected trailing content")
        return value

    def value(self) -> Any:
        self.skip()
        if self.pos >= len(self.text):
            raise self.error("unexpected end of data")
        char = self.text[self.pos]
        if char == "{":
            return self.table()
        if char in "\"'":
            return self.quoted_string()
        if self._LONG_BRACKET_RE.match(self.text, self.pos):
            return self.long_string()
        if char == "-" or char == "." or char.isdigit():
            return self.number()
        name = self._NAME_RE.match(self.text, self.pos)
        if name:
            literals = {"nil": None, "true": True, "false": False}
            if name.group() in literals:
                self.pos = name.end()
                return literals[name.group()]
        raise self.error(f"unexpected character '{char}'")

    def number(self) -> int | float:
        sign = 1
        if self.text[self.pos] == "-":
            sign = -1
            self.pos += 1
            self.skip()
        match = self._NUMBER_RE.match(self.text, self.pos)
        if match is None:
            raise self.error("invalid number")
        self.pos = match.end()
        token = match.group()
        if token[:2] in ("0x", "0X"):
            return sign * int(token, 16)
        if re.fullmatch(r"\d+", token):
            return sign * int(token)
        return sign * float(token)

    def quoted_string(self) -> str:
        quote = self.text[self.pos]
        self.pos += 1
        chars = []
        while True:
            if self.pos >= len(self.text):
                raise self.error("unterminated string")
            char = self.text[self.pos]
            self.pos += 1
            if char == quote:
                return "".join(chars)
            if char == "\n":
                raise self.error("unterminated string")
            if char != "\\":
                chars.append(char)
                continue
            if self.pos >= len(self.text):
                raise self.error("unterminated string")
            escape = self.text[self.pos]
            self.pos += 1
            if escape in self._SIMPLE_ESCAPES:
                chars.append(self._SIMPLE_ESCAPES[escape])
            elif escape.isdigit():
                digits = re.match(r"\d{1,3}", self.text[self.pos - 1 :]).group()
                self.pos += len(digits) - 1
                chars.append(chr(int(digits)))
            elif escape == "x":
                digits = self.text[self.pos : self.pos + 2]
                if not re.fullmatch(r"[0-9A-Fa-f]{2}", digits):
                    raise self.error("invalid hexadecimal escape")
                self.pos += 2
                chars.append(chr(int(digits, 16)))
            elif escape == "z":
                while self.pos < len(self.text) and self.text[self.pos].isspace():
                    self.pos += 1
            else:
                raise self.error(f"invalid escape sequence '\\{escape}'")

    def _long_bracket_end(self, level: str) -> str:
        close = "]" + level + "]"
        end = self.text.find(close, self.pos)
        if end < 0:
            raise self.error("unterminated long bracket")
        content = self.text[self.pos : end]
        self.pos = end + len(close)
        return content

    def long_string(self) -> str:
        match = self._LONG_BRACKET_RE.match(self.text, self.pos)
        self.pos = match.end()
        content = self._long_bracket_end(match.group(1))
        # A newline right after the opening bracket is not part of the string.
        if content.startswith("\r\n"):
            return content[2:]
        if content.startswith(("\n", "\r")):
            return content[1:]
        return content

    def table(self) -> Any:
        self.expect("{")
        positional = []
        keyed: dict[Any, Any] = {}
        while not self.peek("}"):
            if self.peek("["):
                if self._LONG_BRACKET_RE.match(self.text, self.pos):
                    positional.append(self.long_string())
                else:
                    self.pos += 1
                    key = self.value()
                    self.expect("]")
                    self.expect("=")
                    keyed[key] = self.value()
            else:
                name = self._NAME_RE.match(self.text, self.pos)
                after = name.end() if name else self.pos
                if (
                    name
                    and name.group() not in LUA_KEYWORDS
                    and re.match(r"\s*=(?!=)", self.text[after:])
                ):
                    self.pos = after
                    self.expect("=")
                    keyed[name.group()] = self.value()
                else:
                    positional.append(self.value())
            if self.peek(",") or self.peek(";"):
                self.pos += 1
            elif not self.peek("}"):
                raise self.error("expected ',' or '}'")
        self.pos += 1

        if not keyed:
            return positional
        # Positional entries take the integer keys 1..n, as in Lua.
        for index, item in enumerate(positional, start=1):
            keyed[index] = item
        return keyed


def decode(text: str) -> Any:
    """Parse a Lua literal expression or a chunk returning one."""
    return _Parser(text).parse()


class LuaCodec(MediaTypeListMixin, FileCodecMixin):
    """Codec for Lua table literals and Lua data files.

    Lua literals overlap with several other syntaxes, so data is only decoded when
    the media type is given explicitly. Files are recognized by extension.
    """

    capabilities = Capability.all()
    extensions = ("lua",)

    def build_media_types(self) -> list[str]:
        return ["text/x-lua"]

    def can_decode_data(self, data: Any, media_type: Any = None) -> bool:
        if media_type is None or not isinstance(data, str):
            return False
        return self.match_media_type(media_type, Capability.DECODE_DATA)

    def decode_data(self, data: str, media_type: Any = None) -> Any:
        return decode(data)

    def can_encode_data(self, value: Any, media_type: Any = None) -> bool:
        if media_type is not None:
            return self.match_media_type(media_type, Capability.ENCODE_DATA)
        if isinstance(value, np.generic):
            return True
        return value is None or isinstance(value, (bool, int, float, str)) or (
            is_traversable(value)
        )

    def encode_data(self, value: Any, media_type: Any = None) -> str:
        if is_traversable(value):
            return encode_table(value)
        return encode_literal(value)

    def decode_file(self, path: str | Path, media_type: Any = None) -> Any:
        return decode(read_text(path, self.encoding))

    def encode_file(self, path: str | Path, value: Any, media_type: Any = None):
        media_type = normalize_media_type(path, media_type, sniff=False)
        write_text(path, "return " + self.encode_data(value, media_type), self.encoding)
