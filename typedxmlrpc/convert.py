"""Typed conversion between native Python values and XML-RPC values.

``pack`` maps a native value to its XML-RPC variant; ``unpack`` maps a
variant back to a requested native type, checking the tag structurally.

Supported natives: bool, int (32-bit), float, str, datetime/date, bytes-like,
lists and tuples, NamedTuple and dataclass records (packed as arrays),
str-keyed mappings and pydantic models (packed as structs).

Widening on unpack is limited to Int -> float and numeric-literal
String -> float. Custom classes can be added with ``register_type``.
"""

from __future__ import annotations

import dataclasses
import types
from collections.abc import Mapping, Sequence
from datetime import date, datetime, timezone
from typing import Any, Callable, Iterable, Union, get_args, get_origin, get_type_hints

from pydantic import BaseModel, ValidationError

from typedxmlrpc.errors import TypeMismatch, UnsupportedType
from typedxmlrpc.values import (
    INT_MAX,
    INT_MIN,
    VALUE_TYPES,
    Array,
    Binary,
    Boolean,
    DateTime,
    Double,
    Int,
    String,
    Struct,
    Value,
    check_xml_text,
    is_numeric_literal,
    kind_of,
)

PackFn = Callable[[Any], Any]
UnpackFn = Callable[[Value], Any]

# ------------------ registry for custom param types ------------
_converters: dict[type, tuple[PackFn, UnpackFn]] = {}


def register_type(cls: type, pack_fn: PackFn, unpack_fn: UnpackFn) -> None:
    """Register converters for ``cls``.

    ``pack_fn`` may return a Value or any packable native; ``unpack_fn``
    receives the Value and returns an instance of ``cls``.
    """
    _converters[cls] = (pack_fn, unpack_fn)


def unregister_type(cls: type) -> None:
    _converters.pop(cls, None)


def is_registered(cls: type) -> bool:
    return cls in _converters


# ------------------ pack ------------------


def pack(native: Any) -> Value:
    """Convert a native value to its XML-RPC value."""
    if isinstance(native, VALUE_TYPES):
        return native
    converter = _converters.get(type(native))
    if converter is not None:
        return pack(converter[0](native))
    if isinstance(native, bool):
        return Boolean(native)
    if isinstance(native, int):
        if not INT_MIN <= native <= INT_MAX:
            raise UnsupportedType(f"int {native} does not fit in a 32-bit XML-RPC integer", "int")
        return Int(int(native))
    if isinstance(native, float):
        return Double(native)
    if isinstance(native, str):
        try:
            return String(native)
        except ValueError as exc:
            raise UnsupportedType(str(exc), "str") from exc
    if isinstance(native, datetime):
        if native.tzinfo is not None:
            native = native.astimezone(timezone.utc).replace(tzinfo=None)
        return DateTime(native)
    if isinstance(native, date):
        return DateTime(datetime(native.year, native.month, native.day))
    if isinstance(native, (bytes, bytearray, memoryview)):
        return Binary(bytes(native))
    if isinstance(native, BaseModel):
        return pack(native.model_dump())
    if dataclasses.is_dataclass(native) and not isinstance(native, type):
        return Array(tuple(pack(getattr(native, f.name)) for f in _init_fields(native)))
    if isinstance(native, (list, tuple)):
        return Array(tuple(pack(item) for item in native))
    if isinstance(native, Mapping):
        members = {}
        for key, item in native.items():
            if not isinstance(key, str):
                raise UnsupportedType(
                    f"struct keys must be str, got {type(key).__name__}", type(key).__name__
                )
            try:
                check_xml_text(key, "struct member name")
            except ValueError as exc:
                raise UnsupportedType(str(exc), "str") from exc
            members[key] = pack(item)
        return Struct(members)
    type_name = type(native).__name__
    raise UnsupportedType(f"{type_name} has no XML-RPC representation", type_name)


def pack_all(natives: Iterable[Any]) -> tuple[Value, ...]:
    return tuple(pack(native) for native in natives)


# ------------------ unpack ------------------


def to_python(value: Value) -> Any:
    """Natural native form of a value (lists for arrays, dicts for structs)."""
    if isinstance(value, (Int, Double, Boolean, String, DateTime, Binary)):
        return value.value
    if isinstance(value, Array):
        return [to_python(item) for item in value.items]
    if isinstance(value, Struct):
        return {key: to_python(item) for key, item in value.members.items()}
    raise TypeError(f"not an XML-RPC value: {type(value).__name__}")


def unpack(value: Value, target: Any) -> Any:
    """Convert ``value`` to ``target``, raising TypeMismatch when it cannot."""
    if not isinstance(value, VALUE_TYPES):
        raise TypeMismatch(target, type(value).__name__, "not an XML-RPC value")
    return _unpack(value, target, "")


def unpack_all(values: Sequence[Value], targets: Sequence[Any]) -> tuple[Any, ...]:
    """Unpack results position by position; counts must agree."""
    if len(values) != len(targets):
        raise TypeMismatch(
            tuple(targets),
            f"{len(values)} result(s)",
            f"expected {len(targets)} result(s)",
        )
    return tuple(_unpack(value, target, f"[{index}]") for index, (value, target) in enumerate(zip(values, targets)))


def _mismatch(target: Any, value: Value, path: str, reason: str | None = None) -> TypeMismatch:
    where = f"at {path}" if path else None
    detail = "; ".join(part for part in (where, reason) if part) or None
    return TypeMismatch(target, kind_of(value), detail)


def _unpack(value: Value, target: Any, path: str) -> Any:
    if target is Any or target is object:
        return to_python(value)
    if target == Value:
        return value
    is_class = isinstance(target, type) and get_origin(target) is None
    if is_class and target in VALUE_TYPES:
        if not isinstance(value, target):
            raise _mismatch(target, value, path)
        return value

    converter = _converters.get(target) if is_class else None
    if converter is not None:
        try:
            return converter[1](value)
        except TypeMismatch:
            raise
        except (TypeError, ValueError, KeyError) as exc:
            raise _mismatch(target, value, path, str(exc)) from exc

    origin = get_origin(target)
    args = get_args(target)

    if origin is Union or origin is types.UnionType:
        for option in args:
            try:
                return _unpack(value, option, path)
            except (TypeMismatch, UnsupportedType):
                continue
        raise _mismatch(target, value, path)

    if target is bool:
        if not isinstance(value, Boolean):
            raise _mismatch(target, value, path)
        return value.value
    if target is int:
        if not isinstance(value, Int):
            raise _mismatch(target, value, path)
        return value.value
    if target is float:
        return _unpack_float(value, path)
    if target is str:
        if not isinstance(value, String):
            raise _mismatch(target, value, path)
        return value.value
    if target in (bytes, bytearray):
        if not isinstance(value, Binary):
            raise _mismatch(target, value, path)
        return target(value.value)
    if target is datetime:
        if not isinstance(value, DateTime):
            raise _mismatch(target, value, path)
        return value.value
    if target is date:
        if not isinstance(value, DateTime):
            raise _mismatch(target, value, path)
        return value.value.date()

    if is_class and issubclass(target, BaseModel):
        return _unpack_model(value, target, path)
    if is_class and issubclass(target, tuple) and hasattr(target, "_fields"):
        hints = get_type_hints(target)
        field_types = [hints.get(name, Any) for name in target._fields]
        return target(*_unpack_record(value, target, field_types, path))
    if is_class and dataclasses.is_dataclass(target):
        hints = get_type_hints(target)
        fields = _init_fields(target)
        items = _unpack_record(value, target, [hints.get(f.name, Any) for f in fields], path)
        try:
            return target(**{f.name: item for f, item in zip(fields, items)})
        except (TypeError, ValueError) as exc:
            raise _mismatch(target, value, path, str(exc)) from exc

    container = origin or target
    if container in (list, Sequence) or container is tuple:
        if not isinstance(value, Array):
            raise _mismatch(target, value, path)
        if container is tuple and args and not (len(args) == 2 and args[1] is Ellipsis):
            return tuple(_unpack_record(value, target, list(args), path))
        item_type = args[0] if args else Any
        items = [_unpack(item, item_type, f"{path}[{index}]") for index, item in enumerate(value.items)]
        return tuple(items) if container is tuple else items
    if container in (dict, Mapping):
        if not isinstance(value, Struct):
            raise _mismatch(target, value, path)
        key_type, item_type = args if args else (str, Any)
        if key_type not in (str, Any):
            raise UnsupportedType(f"struct keys are strings, cannot produce {key_type!r} keys")
        return {key: _unpack(item, item_type, f"{path}[{key!r}]") for key, item in value.members.items()}

    raise UnsupportedType(f"no XML-RPC conversion to {target!r}")


def _unpack_float(value: Value, path: str) -> float:
    if isinstance(value, Double):
        return value.value
    if isinstance(value, Int):
        return float(value.value)
    if isinstance(value, String):
        if is_numeric_literal(value.value):
            return float(value.value.strip())
        raise _mismatch(float, value, path, f"{value.value!r} is not a numeric literal")
    raise _mismatch(float, value, path)


def _init_fields(record: Any) -> list[dataclasses.Field]:
    """Dataclass fields set through __init__, in declaration order."""
    return [f for f in dataclasses.fields(record) if f.init]


def _unpack_record(value: Value, target: Any, field_types: list[Any], path: str) -> list[Any]:
    if not isinstance(value, Array):
        raise _mismatch(target, value, path)
    if len(value.items) != len(field_types):
        raise _mismatch(target, value, path, f"expected {len(field_types)} items, got {len(value.items)}")
    return [
        _unpack(item, field_type, f"{path}[{index}]")
        for index, (item, field_type) in enumerate(zip(value.items, field_types))
    ]


def _unpack_model(value: Value, target: type[BaseModel], path: str) -> BaseModel:
    if not isinstance(value, Struct):
        raise _mismatch(target, value, path)
    try:
        return target.model_validate(to_python(value))
    except ValidationError as exc:
        raise _mismatch(target, value, path, f"{exc.error_count()} validation error(s)") from exc
