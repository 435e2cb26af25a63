"""Media type parsing and codec dispatch."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from functools import lru_cache
from typing import IO, TYPE_CHECKING, Any, Optional, TypeVar

from ..exceptions import CodecNotFound, DecodeError, EncodeError, ParseError
from .binding import bind

if TYPE_CHECKING:
    from .registry import CodecRegistry

logger = logging.getLogger(__name__)

T = TypeVar("T")

_TOKEN = r"[!#$%&'*+.^_`|~0-9A-Za-z-]+"
_TOKEN_RE = re.compile(rf"^{_TOKEN}$")
_PARAM_RE = re.compile(rf'\s*;\s*(?:({_TOKEN})\s*=\s*("(?:[^"\\]|\\.)*"|{_TOKEN}))?\s*')
_ESCAPE_RE = re.compile(r"\\(.)")
_VERSION_RE = re.compile(r"^v\d+$")

# Bare subtypes that name a format under another spelling
FORMAT_ALIASES = {
    "x-json": "json",
    "x-yaml": "yaml",
    "yml": "yaml",
}


@dataclass(frozen=True)
class MediaType:
    """
    Parsed MIME type.

    ``application/vnd.github.v3.raw+json; charset=utf-8`` parses to
    main_type ``application``, sub_type ``vnd.github.v3.raw+json``,
    vendor ``github``, version ``v3``, param ``raw``, suffix ``json`` and
    parameters ``(("charset", "utf-8"),)``. The format token used for codec
    lookup is ``json``.

    Instances are immutable and compare equal when their canonical string
    forms are equal.
    """

    main_type: str
    sub_type: str
    suffix: str = ""
    vendor: str = ""
    version: str = ""
    param: str = ""
    parameters: tuple[tuple[str, str], ...] = ()

    @property
    def base_type(self) -> str:
        """``type/subtype`` without parameters."""
        return f"{self.main_type}/{self.sub_type}"

    @property
    def params(self) -> dict[str, str]:
        return dict(self.parameters)

    @property
    def format(self) -> str:
        """Registry key: the structured suffix, else the aliased subtype."""
        if self.suffix:
            return self.suffix
        name = FORMAT_ALIASES.get(self.sub_type, self.sub_type)
        if name.startswith("x-"):
            name = name[2:]
        return name

    def is_vendor(self) -> bool:
        return bool(self.vendor)

    def encode(self, value: Any, registry: Optional[CodecRegistry] = None) -> bytes:
        """
        Serialize ``value`` with the codec registered for this format.

        Args:
            value: Object to serialize; it is not modified
            registry: Codec registry (defaults to the process-wide one)

        Returns:
            Encoded body bytes

        Raises:
            CodecNotFound: No codec is registered for the format
            EncodeError: The codec failed to serialize the value
        """
        codec = _resolve_registry(registry).lookup(self.format)
        if codec is None:
            raise CodecNotFound(self.format, "encoder")

        try:
            data = codec.encode(value)
        except Exception as e:
            raise EncodeError(f"Unable to encode {type(value).__name__} as {self.format}: {e}") from e

        logger.debug(f"Encoded {type(value).__name__} as {self} ({len(data)} bytes)")
        return data

    def decode(self, target: T, stream: IO[bytes], registry: Optional[CodecRegistry] = None) -> T:
        """
        Read ``stream`` with the codec for this format and bind it to ``target``.

        A ``None`` target means no decode was requested: the stream is not
        touched and ``None`` is returned.

        Args:
            target: Class or instance to populate, or None
            stream: Binary stream holding the encoded body
            registry: Codec registry (defaults to the process-wide one)

        Returns:
            The populated target (a new instance when a class was given)

        Raises:
            CodecNotFound: No codec is registered for the format
            DecodeError: The body could not be parsed or bound
        """
        if target is None:
            return target

        codec = _resolve_registry(registry).lookup(self.format)
        if codec is None:
            raise CodecNotFound(self.format, "decoder")

        try:
            payload = codec.decode(stream)
        except Exception as e:
            raise DecodeError(f"Unable to decode {self.format} body: {e}") from e

        result = bind(target, payload)
        logger.debug(f"Decoded {self} body into {type(result).__name__}")
        return result

    def __str__(self) -> str:
        rendered = self.base_type
        for name, value in self.parameters:
            rendered += f"; {name}={_quote(value)}"
        return rendered


def _resolve_registry(registry: Optional[CodecRegistry]) -> CodecRegistry:
    if registry is not None:
        return registry
    from .registry import default_registry

    return default_registry()


def _quote(value: str) -> str:
    if _TOKEN_RE.match(value):
        return value
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def _parse_parameters(raw: str, text: str) -> tuple[tuple[str, str], ...]:
    params: dict[str, str] = {}
    pos = 0
    while pos < len(text):
        match = _PARAM_RE.match(text, pos)
        if match is None:
            raise ParseError(raw, f"malformed parameter near {text[pos:]!r}")
        name, value = match.group(1), match.group(2)
        if name is not None:
            if value.startswith('"'):
                value = _ESCAPE_RE.sub(r"\1", value[1:-1])
            params[name.lower()] = value
        pos = match.end()
    return tuple(sorted(params.items()))


@lru_cache(maxsize=256)
def parse(raw: str) -> MediaType:
    """
    Parse a ``type/subtype[+suffix][; name=value]*`` string.

    Type, subtype and parameter names are case-insensitive and stored
    lower-cased. When the subtype carries several ``+`` segments, the last
    one is the structured syntax suffix.

    Raises:
        ParseError: If ``raw`` is not a well-formed media type
    """
    head, sep, rest = raw.partition(";")
    full = head.strip().lower()
    main_type, slash, sub_type = full.partition("/")

    if not slash:
        raise ParseError(raw, "missing '/' between type and subtype")
    if not _TOKEN_RE.match(main_type) or not _TOKEN_RE.match(sub_type):
        raise ParseError(raw, "type and subtype must be non-empty tokens")

    name, suffix = sub_type, ""
    if "+" in sub_type:
        name, _, suffix = sub_type.rpartition("+")
        if not name or not suffix:
            raise ParseError(raw, "empty subtype or suffix around '+'")

    vendor = version = param = ""
    if name.startswith("vnd."):
        segments = name[4:].split(".")
        vendor = segments.pop(0)
        if segments and _VERSION_RE.match(segments[0]):
            version = segments.pop(0)
        param = ".".join(segments)

    parameters = _parse_parameters(raw, sep + rest) if sep else ()

    return MediaType(
        main_type=main_type,
        sub_type=sub_type,
        suffix=suffix,
        vendor=vendor,
        version=version,
        param=param,
        parameters=parameters,
    )
