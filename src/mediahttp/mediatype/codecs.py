"""Built-in JSON and YAML codecs."""

from __future__ import annotations

import dataclasses
import json
from typing import IO, Any

import yaml
from pydantic import BaseModel

from .registry import CodecRegistry


def to_plain(value: Any) -> Any:
    """
    Convert models and dataclasses into plain containers for serialization.

    Builds new containers rather than modifying ``value``.
    """
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return to_plain(dataclasses.asdict(value))
    if isinstance(value, dict):
        return {key: to_plain(val) for key, val in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [to_plain(item) for item in value]
    return value


def json_encode(value: Any) -> bytes:
    return json.dumps(to_plain(value), ensure_ascii=False).encode("utf-8")


def json_decode(stream: IO[bytes]) -> Any:
    return json.load(stream)


def yaml_encode(value: Any) -> bytes:
    return yaml.safe_dump(to_plain(value), allow_unicode=True, sort_keys=False).encode("utf-8")


def yaml_decode(stream: IO[bytes]) -> Any:
    return yaml.safe_load(stream)


def register_builtin_codecs(registry: CodecRegistry) -> None:
    """Register the ``json`` and ``yaml`` codecs on ``registry``."""
    registry.register("json", json_encode, json_decode)
    registry.register("yaml", yaml_encode, yaml_decode)
