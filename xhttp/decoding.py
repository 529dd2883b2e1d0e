"""Storing a response body into a caller-supplied result target."""

from __future__ import annotations

import dataclasses
import json
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, PydanticUserError, TypeAdapter, ValidationError

from xhttp.errors import DecodeError

T = TypeVar("T")

MSG_NOT_POINTER = "result must be a pointer"
MSG_NOT_STRING = "result must be a string"
MSG_NOT_SETTABLE = "result can not set"


class Ref(Generic[T]):
    """A settable slot the response is written into.

    ``kind`` is the type the decoded JSON is validated against; only a
    ``str`` kind accepts a body that is not JSON. A ``readonly`` ref
    refuses every assignment.

    Usage::

        out = Ref(dict)
        client.get("http://x/a", out)
        out.value
    """

    __slots__ = ("kind", "readonly", "value")

    def __init__(self, kind: Any = Any, value: T | None = None, *, readonly: bool = False) -> None:
        self.kind = kind
        self.value = value
        self.readonly = readonly

    def __repr__(self) -> str:
        name = getattr(self.kind, "__name__", repr(self.kind))
        return f"Ref[{name}]({self.value!r})"


class _Invalid(Exception):
    pass


def _reject_constant(name: str) -> Any:
    raise _Invalid(name)


def parse_json(body: bytes) -> tuple[bool, Any]:
    """Return ``(True, value)`` when ``body`` is valid JSON, else ``(False, None)``.

    ``NaN`` and ``Infinity`` are not JSON and are rejected.
    """
    try:
        return True, json.loads(body, parse_constant=_reject_constant)
    except (_Invalid, ValueError):
        return False, None


def _is_frozen(target: Any) -> bool:
    if isinstance(target, Ref):
        return target.readonly
    if isinstance(target, BaseModel):
        return bool(target.model_config.get("frozen"))
    if dataclasses.is_dataclass(target):
        return bool(target.__dataclass_params__.frozen)  # type: ignore[attr-defined]
    return False


def _validate(kind: Any, data: Any) -> Any:
    try:
        return TypeAdapter(kind).validate_python(data)
    except PydanticUserError as e:
        raise DecodeError(f"request json un err, unsupported result type: {kind!r}") from e
    except ValidationError as e:
        raise DecodeError(f"request json un err, result: {kind!r}") from e


def _merge_object(target: Any, data: Any, names: list[str]) -> None:
    if not isinstance(data, dict):
        raise DecodeError(f"request json un err, cannot store {type(data).__name__} into {type(target).__name__}")
    merged = {name: getattr(target, name) for name in names}
    merged.update({k: v for k, v in data.items() if k in merged})
    validated = _validate(type(target), merged)
    for name in names:
        if name in data:
            setattr(target, name, getattr(validated, name))


def decode_into(target: Any, data: Any) -> None:
    """Store already-parsed JSON ``data`` into ``target``.

    Dicts are merged, lists replaced, dataclasses and pydantic models get
    the fields present in ``data`` overwritten. A JSON ``null`` leaves
    ``target`` untouched.
    """
    if data is None:
        return
    if _is_frozen(target):
        raise DecodeError(MSG_NOT_SETTABLE)

    if isinstance(target, Ref):
        target.value = _validate(target.kind, data)
    elif isinstance(target, dict):
        if not isinstance(data, dict):
            raise DecodeError(f"request json un err, cannot store {type(data).__name__} into dict")
        target.update(data)
    elif isinstance(target, list):
        if not isinstance(data, list):
            raise DecodeError(f"request json un err, cannot store {type(data).__name__} into list")
        target[:] = data
    elif isinstance(target, BaseModel):
        _merge_object(target, data, list(type(target).model_fields))
    elif dataclasses.is_dataclass(target) and not isinstance(target, type):
        _merge_object(target, data, [f.name for f in dataclasses.fields(target)])
    else:
        raise DecodeError(MSG_NOT_POINTER)


def assign_text(target: Any, text: str) -> None:
    """Store a non-JSON body verbatim; only a ``str`` Ref accepts it."""
    if not isinstance(target, (Ref, dict, list, BaseModel)) and not dataclasses.is_dataclass(target):
        raise DecodeError(MSG_NOT_POINTER)
    if not isinstance(target, Ref) or not (isinstance(target.kind, type) and issubclass(target.kind, str)):
        raise DecodeError(MSG_NOT_STRING)
    if target.readonly:
        raise DecodeError(MSG_NOT_SETTABLE)
    target.value = target.kind(text)
