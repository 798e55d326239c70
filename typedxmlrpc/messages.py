"""Call and response envelopes."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from typedxmlrpc.values import VALUE_TYPES, Int, String, Struct, Value, check_xml_text, format_value


@dataclass(frozen=True)
class MethodCall:
    method_name: str
    params: tuple[Value, ...] = ()

    def __post_init__(self) -> None:
        if not isinstance(self.method_name, str) or not self.method_name:
            raise ValueError("method name must be a non-empty string")
        check_xml_text(self.method_name, "method name")
        params = tuple(self.params)
        for param in params:
            if not isinstance(param, VALUE_TYPES):
                raise TypeError(f"call params must be values, got {type(param).__name__}")
        object.__setattr__(self, "params", params)

    def __str__(self) -> str:
        return f"{self.method_name}({', '.join(format_value(p) for p in self.params)})"


@dataclass(frozen=True)
class Success:
    params: tuple[Value, ...] = ()

    is_fault = False

    def __post_init__(self) -> None:
        params = tuple(self.params)
        for param in params:
            if not isinstance(param, VALUE_TYPES):
                raise TypeError(f"response params must be values, got {type(param).__name__}")
        object.__setattr__(self, "params", params)

    def __str__(self) -> str:
        return f"({', '.join(format_value(p) for p in self.params)})"


@dataclass(frozen=True)
class Fault:
    """Fault response; ``value`` is the struct holding faultCode/faultString."""

    value: Struct

    is_fault = True

    def __post_init__(self) -> None:
        if not isinstance(self.value, Struct):
            raise TypeError("fault value must be a Struct")
        if not isinstance(self.value.get("faultCode"), Int):
            raise ValueError("fault struct requires an Int faultCode")
        if not isinstance(self.value.get("faultString"), String):
            raise ValueError("fault struct requires a String faultString")

    @classmethod
    def of(cls, fault_code: int, fault_string: str) -> Fault:
        return cls(Struct({"faultCode": Int(fault_code), "faultString": String(fault_string)}))

    @property
    def fault_code(self) -> int:
        return self.value["faultCode"].value

    @property
    def fault_string(self) -> str:
        return self.value["faultString"].value

    @property
    def params(self) -> tuple[Value, ...]:
        return (self.value,)

    def __str__(self) -> str:
        return f"fault {self.fault_code}: {self.fault_string!r}"


MethodResponse = Union[Success, Fault]
