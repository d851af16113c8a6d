"""Base dataclass for config/status models with unknown-field capture.

Devices add fields with new firmware. A model keeps the members it knows as
typed dataclass fields and everything else in ``extra``, so decoding and
re-encoding a payload never drops or duplicates a member.
"""

from __future__ import annotations

import dataclasses
import types
import typing
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, TypeVar

from .errors import DecodeError

_ModelT = TypeVar("_ModelT", bound="RpcModel")

_SCALARS: tuple[type, ...] = (bool, int, float, str)
_INTERNAL = frozenset({"extra", "_fields_set"})

_hints_cache: dict[type, dict[str, Any]] = {}


def rpc_field(
    *,
    json_name: str | None = None,
    model: type[RpcModel] | None = None,
    default: Any = None,
) -> Any:
    """Declare a model field with a wire name or a nested model type.

    Args:
        json_name: Member name on the wire, when it differs from the attribute
        model: Nested model type for object (or list of objects) values
        default: Default value when the member is absent
    """
    metadata: dict[str, Any] = {}
    if json_name is not None:
        metadata["json"] = json_name
    if model is not None:
        metadata["model"] = model
    return field(default=default, metadata=metadata)


def _type_hints(cls: type) -> dict[str, Any]:
    hints = _hints_cache.get(cls)
    if hints is None:
        hints = typing.get_type_hints(cls)
        _hints_cache[cls] = hints
    return hints


def _scalar_types(hint: Any) -> tuple[type, ...] | None:
    """Return accepted runtime types for a scalar annotation, else None."""
    if hint in _SCALARS:
        return (hint,)
    if typing.get_origin(hint) in (typing.Union, types.UnionType):
        accepted: list[type] = []
        for arg in typing.get_args(hint):
            if arg is type(None) or arg in _SCALARS:
                accepted.append(arg)
            else:
                return None
        return tuple(accepted)
    return None


def _matches(value: Any, accepted: tuple[type, ...]) -> bool:
    if isinstance(value, bool):
        return bool in accepted
    if isinstance(value, int) and (int in accepted or float in accepted):
        return True
    return isinstance(value, accepted)


def _is_required(f: dataclasses.Field) -> bool:
    return f.default is dataclasses.MISSING and f.default_factory is dataclasses.MISSING


def _encode(value: Any) -> Any:
    if isinstance(value, RpcModel):
        return value.to_dict()
    if isinstance(value, list):
        return [_encode(item) for item in value]
    return value


@dataclass
class RpcModel:
    """Known fields plus a residual bag of unknown JSON members."""

    extra: dict[str, Any] = field(default_factory=dict, kw_only=True, repr=False)
    _fields_set: set[str] = field(default_factory=set, init=False, repr=False, compare=False)

    @classmethod
    def _known_fields(cls) -> list[dataclasses.Field]:
        return [f for f in dataclasses.fields(cls) if f.name not in _INTERNAL]

    @classmethod
    def from_dict(cls: type[_ModelT], data: Any) -> _ModelT:
        """Decode a JSON object into this model.

        Raises:
            DecodeError: If data is not an object, a required member is
                missing or a member has the wrong type
        """
        if not isinstance(data, Mapping):
            raise DecodeError(
                f"Expected JSON object for {cls.__name__}, got {type(data).__name__}",
                payload=data,
                target=cls,
            )

        hints = _type_hints(cls)
        kwargs: dict[str, Any] = {}
        present: set[str] = set()
        known_keys: set[str] = set()

        for f in cls._known_fields():
            key = f.metadata.get("json", f.name)
            known_keys.add(key)
            if key not in data:
                if _is_required(f):
                    raise DecodeError(
                        f"Missing required field '{key}' for {cls.__name__}",
                        payload=data,
                        target=cls,
                    )
                continue

            value = data[key]
            nested = f.metadata.get("model")
            if nested is not None:
                value = cls._decode_nested(nested, key, value, data)
            else:
                accepted = _scalar_types(hints.get(f.name))
                if accepted is not None and not _matches(value, accepted):
                    raise DecodeError(
                        f"Field '{key}' of {cls.__name__} has unexpected type {type(value).__name__}",
                        payload=data,
                        target=cls,
                    )
            kwargs[f.name] = value
            present.add(f.name)

        extra = {k: v for k, v in data.items() if k not in known_keys}
        obj = cls(**kwargs, extra=extra)
        obj._fields_set = present
        return obj

    @classmethod
    def _decode_nested(cls, nested: type[RpcModel], key: str, value: Any, data: Any) -> Any:
        if value is None:
            return None
        if isinstance(value, list):
            return [nested.from_dict(item) for item in value]
        if isinstance(value, Mapping):
            return nested.from_dict(value)
        raise DecodeError(
            f"Field '{key}' of {cls.__name__} is not an object",
            payload=data,
            target=cls,
        )

    def to_dict(self) -> dict[str, Any]:
        """Encode known fields and unknown members back into one JSON object.

        A known field is emitted when it was present in the decoded payload,
        is required, or holds a non-None value.
        """
        result: dict[str, Any] = {}
        for f in self._known_fields():
            value = getattr(self, f.name)
            if value is None and f.name not in self._fields_set and not _is_required(f):
                continue
            result[f.metadata.get("json", f.name)] = _encode(value)

        for key, value in self.extra.items():
            if key not in result:
                result[key] = value
        return result
