"""XML-RPC value model: one immutable variant per wire type.

Every decoded or packed value is an instance of exactly one of the classes
below; ``Value`` is their union. Arrays and structs own their children, so a
value is always a tree.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Any, ClassVar, Iterator, Mapping, Union

INT_MIN = -(2**31)
INT_MAX = 2**31 - 1

_NUMERIC_LITERAL_RE = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?", re.ASCII)
# Characters outside the XML 1.0 Char production, lone surrogates included.
_INVALID_XML_CHAR_RE = re.compile("[^\x09\x0a\x0d\x20-\ud7ff\ue000-\ufffd\U00010000-\U0010ffff]")


def is_numeric_literal(text: str) -> bool:
    """True for plain decimal literals such as "42", "-1.5" or "6e-3"."""
    return _NUMERIC_LITERAL_RE.fullmatch(text.strip()) is not None


def check_xml_text(text: str, what: str = "string") -> None:
    """Raise ValueError when ``text`` holds a character XML 1.0 cannot carry."""
    match = _INVALID_XML_CHAR_RE.search(text)
    if match is not None:
        raise ValueError(f"{what} contains a character not allowed in XML: {match.group()!r} at {match.start()}")


@dataclass(frozen=True)
class Int:
    value: int
    tag: ClassVar[str] = "i4"

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise TypeError(f"Int requires an int, got {type(self.value).__name__}")
        if not INT_MIN <= self.value <= INT_MAX:
            raise ValueError(f"Int out of 32-bit range: {self.value}")


@dataclass(frozen=True)
class Double:
    value: float
    tag: ClassVar[str] = "double"

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, (int, float)):
            raise TypeError(f"Double requires a float, got {type(self.value).__name__}")
        object.__setattr__(self, "value", float(self.value))


@dataclass(frozen=True)
class Boolean:
    value: bool
    tag: ClassVar[str] = "boolean"

    def __post_init__(self) -> None:
        if not isinstance(self.value, bool):
            raise TypeError(f"Boolean requires a bool, got {type(self.value).__name__}")


@dataclass(frozen=True)
class String:
    value: str
    tag: ClassVar[str] = "string"

    def __post_init__(self) -> None:
        if not isinstance(self.value, str):
            raise TypeError(f"String requires a str, got {type(self.value).__name__}")
        check_xml_text(self.value)


@dataclass(frozen=True)
class DateTime:
    """Naive date and time with second precision."""

    value: datetime
    tag: ClassVar[str] = "dateTime.iso8601"

    def __post_init__(self) -> None:
        if not isinstance(self.value, datetime):
            raise TypeError(f"DateTime requires a datetime, got {type(self.value).__name__}")
        if self.value.tzinfo is not None:
            raise ValueError("DateTime values carry no timezone")
        if self.value.microsecond:
            object.__setattr__(self, "value", self.value.replace(microsecond=0))


@dataclass(frozen=True)
class Binary:
    value: bytes
    tag: ClassVar[str] = "base64"

    def __post_init__(self) -> None:
        if not isinstance(self.value, (bytes, bytearray, memoryview)):
            raise TypeError(f"Binary requires bytes, got {type(self.value).__name__}")
        object.__setattr__(self, "value", bytes(self.value))


@dataclass(frozen=True)
class Array:
    items: tuple[Value, ...] = ()
    tag: ClassVar[str] = "array"

    def __post_init__(self) -> None:
        items = tuple(self.items)
        for item in items:
            if not isinstance(item, VALUE_TYPES):
                raise TypeError(f"Array items must be values, got {type(item).__name__}")
        object.__setattr__(self, "items", items)

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[Value]:
        return iter(self.items)

    def __getitem__(self, index: int) -> Value:
        return self.items[index]


@dataclass(frozen=True, eq=True)
class Struct:
    """String-keyed members; member order does not take part in equality."""

    members: Mapping[str, Value] = field(default_factory=dict)
    tag: ClassVar[str] = "struct"

    def __post_init__(self) -> None:
        members = dict(self.members)
        for key, item in members.items():
            if not isinstance(key, str):
                raise TypeError(f"Struct keys must be str, got {type(key).__name__}")
            check_xml_text(key, "struct member name")
            if not isinstance(item, VALUE_TYPES):
                raise TypeError(f"Struct member {key!r} must be a value, got {type(item).__name__}")
        object.__setattr__(self, "members", MappingProxyType(members))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Struct):
            return NotImplemented
        return dict(self.members) == dict(other.members)

    def __hash__(self) -> int:
        return hash(frozenset(self.members.items()))

    def __repr__(self) -> str:
        return f"Struct(members={dict(self.members)!r})"

    def __len__(self) -> int:
        return len(self.members)

    def __iter__(self) -> Iterator[str]:
        return iter(self.members)

    def __contains__(self, key: object) -> bool:
        return key in self.members

    def __getitem__(self, key: str) -> Value:
        return self.members[key]

    def get(self, key: str, default: Any = None) -> Any:
        return self.members.get(key, default)

    def keys(self):
        return self.members.keys()

    def items(self):
        return self.members.items()


Value = Union[Int, Double, Boolean, String, DateTime, Binary, Array, Struct]
VALUE_TYPES: tuple[type, ...] = (Int, Double, Boolean, String, DateTime, Binary, Array, Struct)


def kind_of(value: Value) -> str:
    """Variant name used in diagnostics ("Int", "Struct", ...)."""
    return type(value).__name__


def format_value(value: Value) -> str:
    """Render a value compactly for log lines and error messages."""
    if isinstance(value, Boolean):
        return "true" if value.value else "false"
    if isinstance(value, (Int, Double)):
        return repr(value.value)
    if isinstance(value, String):
        return repr(value.value)
    if isinstance(value, DateTime):
        return value.value.isoformat()
    if isinstance(value, Binary):
        return f"<base64 {len(value.value)} bytes>"
    if isinstance(value, Array):
        return "[" + ", ".join(format_value(item) for item in value.items) + "]"
    if isinstance(value, Struct):
        inner = ", ".join(f"{key!r}: {format_value(item)}" for key, item in value.members.items())
        return "{" + inner + "}"
    raise TypeError(f"not an XML-RPC value: {type(value).__name__}")
