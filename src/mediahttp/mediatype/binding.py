"""Bind decoded payloads to caller-supplied targets."""

from __future__ import annotations

import dataclasses
from typing import Any, TypeVar, get_origin

from pydantic import BaseModel, TypeAdapter, ValidationError

from ..exceptions import DecodeError

T = TypeVar("T")


def bind(target: T, payload: Any) -> T:
    """
    Populate ``target`` from a decoded payload.

    Class targets (models, dataclasses, scalars, ``list[User]``-style
    generics) are validated from the payload, nested values included;
    ``object`` keeps the plain payload. Instances are updated in place so
    callers holding a reference see the decoded values.

    Args:
        target: Type or model/dataclass/dict/list instance
        payload: Plain data returned by a codec

    Returns:
        The populated target

    Raises:
        DecodeError: If the payload does not fit the target
    """
    try:
        if _is_type_target(target):
            return _build(target, payload)
        return _populate(target, payload)
    except ValidationError as e:
        raise DecodeError(f"Body does not match {_name(target)}: {e}") from e
    except (TypeError, ValueError, AttributeError) as e:
        raise DecodeError(f"Cannot bind {type(payload).__name__} payload to {_name(target)}: {e}") from e


def _is_type_target(target: Any) -> bool:
    return isinstance(target, type) or get_origin(target) is not None


def _name(target: Any) -> str:
    if _is_type_target(target):
        return getattr(target, "__name__", str(target))
    return type(target).__name__


def _require_mapping(payload: Any, target: Any) -> dict:
    if not isinstance(payload, dict):
        raise TypeError(f"expected an object for {_name(target)}, got {type(payload).__name__}")
    return payload


def _build(cls: Any, payload: Any) -> Any:
    if cls is object:
        return payload
    return TypeAdapter(cls).validate_python(payload)


def _populate(target: Any, payload: Any) -> Any:
    if isinstance(target, BaseModel):
        data = _require_mapping(payload, target)
        fields = type(target).model_fields
        names = {(info.alias or name): name for name, info in fields.items()}
        names.update({name: name for name in fields})
        known = {key: value for key, value in data.items() if key in names}
        # Validate against the model first so a bad body leaves the target untouched
        validated = type(target).model_validate({**target.model_dump(by_alias=True), **known})
        for key in known:
            setattr(target, names[key], getattr(validated, names[key]))
        return target
    if dataclasses.is_dataclass(target):
        data = _require_mapping(payload, target)
        current = {f.name: getattr(target, f.name) for f in dataclasses.fields(target) if f.init}
        known = {key: value for key, value in data.items() if key in current}
        validated = TypeAdapter(type(target)).validate_python({**current, **known})
        for key in known:
            setattr(target, key, getattr(validated, key))
        return target
    if isinstance(target, dict):
        target.update(_require_mapping(payload, target))
        return target
    if isinstance(target, list):
        if not isinstance(payload, list):
            raise TypeError(f"expected an array, got {type(payload).__name__}")
        target[:] = payload
        return target
    raise TypeError(f"unsupported target {type(target).__name__}")
