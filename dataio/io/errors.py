"""Exceptions raised by codecs and by the dispatcher."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional


class SerializationError(Exception):
    """Base class for all serialization errors."""


class DecodeError(SerializationError, ValueError):
    """Raised by a codec when its input is malformed or has an unsupported shape."""


class EncodeError(SerializationError, ValueError):
    """Raised by a codec when a value cannot be represented in its format."""


class SerializationIOError(SerializationError, OSError):
    """Raised when the file or stream behind a conversion cannot be accessed.

    Attributes:
        path: The path that was being opened, read or written.
    """

    def __init__(self, path: str | Path, reason: Any):
        self.path = str(path)
        self.reason = reason
        super().__init__(f"Failed to access '{self.path}': {reason}")


class NoCodecFound(SerializationError, LookupError):
    """Raised when no registered codec claims a conversion.

    Attributes:
        capability: The requested capability.
        media_type: The normalized media type, or `None` if it was unknown.
        target: Description of the payload (file name or value type).
    """

    def __init__(self, capability: Any, media_type: Any = None, target: Optional[str] = None):
        self.capability = capability
        self.media_type = media_type
        self.target = target
        what = str(media_type) if media_type is not None else (target or "input")
        super().__init__(f"No codec found to {_describe(capability)} {what}.")


class AllCodecsFailed(SerializationError):
    """Raised when every candidate codec failed.

    Attributes:
        capability: The requested capability.
        failures: `(codec, error)` pairs in the order the codecs were attempted.
    """

    def __init__(self, capability: Any, failures: list[tuple[Any, BaseException]]):
        self.capability = capability
        self.failures = list(failures)
        lines = [
            f"{type(codec).__name__}: {error}" for codec, error in self.failures
        ]
        super().__init__(
            f"All {len(self.failures)} codec(s) failed to {_describe(capability)}:\n"
            + "\n".join(f"- {line}" for line in lines)
        )

    @property
    def messages(self) -> list[str]:
        """The failure messages in attempt order."""
        return [str(error) for _, error in self.failures]


def _describe(capability: Any) -> str:
    return str(getattr(capability, "value", capability)).replace("_", " ")
