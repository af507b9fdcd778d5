"""Registry of codecs organized by capability."""

from __future__ import annotations

import warnings
from typing import Any, Optional

from attrs import define, field

from dataio.io.base import Capability, Codec
from dataio.model.media_type import MediaType, media_type_list


def _empty_stacks() -> dict[Capability, list[Codec]]:
    return {capability: [] for capability in Capability}


@define
class FormatRegistry:
    """Codecs registered for each capability.

    Each capability has its own stack. Codecs registered later are tried first, so
    registering a codec overrides previously registered codecs for the media types
    they share.

    Attributes:
        stacks: Registered codecs for each capability, in registration order.
    """

    stacks: dict[Capability, list[Codec]] = field(factory=_empty_stacks)

    def register(self, codec: Codec) -> Codec:
        """Register a codec for every capability it declares.

        The same codec may be registered more than once; it is then tried once per
        registration.

        Args:
            codec: The codec to register.

        Returns:
            The codec, so that registration can be chained.
        """
        capabilities = frozenset(getattr(codec, "capabilities", ()))
        if not capabilities:
            warnings.warn(
                f"Codec {type(codec).__name__} declares no capabilities and was not "
                "registered."
            )
            return codec
        for capability in Capability:
            if capability in capabilities:
                self.stacks[capability].append(codec)
        return codec

    def codecs(self, capability: Capability | str) -> list[Codec]:
        """Return the codecs registered for a capability in priority order."""
        return list(reversed(self.stacks[Capability(capability)]))

    def candidates(
        self,
        capability: Capability | str,
        *payload: Any,
        media_type: Optional[MediaType] = None,
    ) -> list[Codec]:
        """Return the codecs accepting a payload, in priority order.

        Args:
            capability: The requested capability.
            *payload: Arguments of the predicate: the data (decode data), the value
                (encode data), the path (decode file) or the path and the value
                (encode file).
            media_type: The normalized media type, or `None` to let each codec infer
                it.

        Returns:
            Codecs whose predicate accepts the payload.
        """
        capability = Capability(capability)
        return [
            codec
            for codec in self.codecs(capability)
            if getattr(codec, capability.predicate)(*payload, media_type=media_type)
        ]

    def media_types(self, capability: Capability | str) -> dict[str, MediaType]:
        """Return all media types supported for a capability.

        Media types are de-duplicated by canonical string form.
        """
        capability = Capability(capability)
        types = []
        for codec in self.codecs(capability):
            types.extend(codec.media_types(capability).values())
        return media_type_list(*types)

    def __len__(self) -> int:
        """Return the number of distinct registered codecs."""
        seen = {id(codec) for stack in self.stacks.values() for codec in stack}
        return len(seen)

    def __contains__(self, codec: Any) -> bool:
        """Check if a codec is registered for any capability."""
        return any(codec is other for stack in self.stacks.values() for other in stack)
