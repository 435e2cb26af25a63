"""Media types, codec registry and payload binding."""

from .binding import bind
from .codecs import json_decode, json_encode, register_builtin_codecs, yaml_decode, yaml_encode
from .mediatype import MediaType, parse
from .protocols import Decoder, Encoder
from .registry import Codec, CodecRegistry, default_registry

__all__ = [
    "Codec",
    "CodecRegistry",
    "Decoder",
    "Encoder",
    "MediaType",
    "bind",
    "default_registry",
    "json_decode",
    "json_encode",
    "parse",
    "register_builtin_codecs",
    "yaml_decode",
    "yaml_encode",
]
