"""Process-wide and per-client codec registries."""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Optional

from .protocols import Decoder, Encoder

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Codec:
    """Encoder/decoder pair for one format token."""

    encode: Encoder
    decode: Decoder


class CodecRegistry:
    """
    Mapping from format token (``json``, ``yaml``...) to a Codec.

    Lookups read an immutable snapshot and never take the lock, so they are
    safe from any thread. Registration copies the snapshot under a lock and
    swaps it in; it is meant for startup or test setup.

    Example:
        registry = CodecRegistry()
        registry.register("json", json_encode, json_decode)

        codec = registry.lookup("json")
        if codec is None:
            ...
    """

    def __init__(self, codecs: Optional[Mapping[str, Codec]] = None) -> None:
        self._lock = threading.Lock()
        self._codecs: Mapping[str, Codec] = MappingProxyType(
            {name.lower(): codec for name, codec in (codecs or {}).items()}
        )

    def register(self, format: str, encoder: Encoder, decoder: Decoder) -> None:
        """
        Register a codec, replacing any previous one for the same format.

        Args:
            format: Format token, matched case-insensitively
            encoder: Callable turning a value into bytes
            decoder: Callable turning a binary stream into a payload
        """
        key = format.lower()
        with self._lock:
            codecs = dict(self._codecs)
            if key in codecs:
                logger.debug(f"Replacing codec for format {key}")
            codecs[key] = Codec(encode=encoder, decode=decoder)
            self._codecs = MappingProxyType(codecs)

    def unregister(self, format: str) -> None:
        """Remove the codec for ``format`` if one is registered."""
        key = format.lower()
        with self._lock:
            if key not in self._codecs:
                return
            codecs = dict(self._codecs)
            del codecs[key]
            self._codecs = MappingProxyType(codecs)

    def lookup(self, format: str) -> Optional[Codec]:
        """Return the codec for ``format``, or None when none is registered."""
        return self._codecs.get(format.lower())

    def formats(self) -> list[str]:
        return sorted(self._codecs)

    def copy(self) -> CodecRegistry:
        """Independent registry with the same codecs, for scoped overrides."""
        return CodecRegistry(self._codecs)

    def __contains__(self, format: object) -> bool:
        return isinstance(format, str) and format.lower() in self._codecs

    def __iter__(self) -> Iterator[str]:
        return iter(self.formats())

    def __len__(self) -> int:
        return len(self._codecs)


_default_registry: Optional[CodecRegistry] = None
_default_lock = threading.Lock()


def default_registry() -> CodecRegistry:
    """
    Get the shared registry, populated with the built-in codecs on first use.

    Returns:
        Process-wide CodecRegistry
    """
    global _default_registry

    if _default_registry is None:
        with _default_lock:
            if _default_registry is None:
                from .codecs import register_builtin_codecs

                registry = CodecRegistry()
                register_builtin_codecs(registry)
                _default_registry = registry
    return _default_registry
