"""
Exception hierarchy for typedxmlrpc.

Provides:
- Custom exception classes with error codes
- Error categorization (transport, protocol, fault, conversion)
- URI redaction so credentials never reach log lines or messages
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Any, get_origin

from typedxmlrpc.values import Int, String, Struct


class ErrorCategory(Enum):
    """Error categories for classification."""
    TRANSPORT = "transport"
    PROTOCOL = "protocol"
    FAULT = "fault"
    CONVERSION = "conversion"


class XmlRpcError(Exception):
    """Base exception for all typedxmlrpc errors."""

    def __init__(
        self,
        message: str,
        code: str = "XMLRPC_ERROR",
        category: ErrorCategory = ErrorCategory.PROTOCOL,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": self.code,
            "message": self.message,
            "category": self.category.value,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


class TransportError(XmlRpcError):
    """Raised by custom transports for their own network failures."""

    def __init__(self, message: str, *, timed_out: bool = False):
        super().__init__(
            message,
            code="TRANSPORT_ERROR",
            category=ErrorCategory.TRANSPORT,
            details={"timed_out": timed_out},
        )
        self.timed_out = timed_out


class TransportFailure(XmlRpcError):
    """The request never produced a response body (connection, DNS, timeout)."""

    def __init__(self, server_uri: str, cause: BaseException, *, timed_out: bool = False):
        code = "TRANSPORT_TIMEOUT" if timed_out else "TRANSPORT_FAILURE"
        detail = str(cause) or type(cause).__name__
        super().__init__(
            f"transport failure calling {redact_uri(server_uri)}: {detail}",
            code=code,
            category=ErrorCategory.TRANSPORT,
            details={"server_uri": redact_uri(server_uri), "timed_out": timed_out},
        )
        self.cause = cause
        self.timed_out = timed_out


class MalformedResponse(XmlRpcError):
    """Response bytes are not a valid XML-RPC methodResponse."""

    def __init__(self, message: str, *, snippet: str | None = None):
        details = {"snippet": snippet} if snippet else {}
        super().__init__(message, code="MALFORMED_RESPONSE", category=ErrorCategory.PROTOCOL, details=details)


class MethodFault(XmlRpcError):
    """The remote method answered with a fault response."""

    def __init__(self, value: Any, message: str, *, call: Any = None):
        fault_code: int | None = None
        fault_string: str | None = None
        if isinstance(value, Struct):
            code_value = value.get("faultCode")
            string_value = value.get("faultString")
            if isinstance(code_value, Int):
                fault_code = code_value.value
            if isinstance(string_value, String):
                fault_string = string_value.value
        super().__init__(
            message,
            code="METHOD_FAULT",
            category=ErrorCategory.FAULT,
            details={"fault_code": fault_code, "fault_string": fault_string},
        )
        self.value = value
        self.fault_code = fault_code
        self.fault_string = fault_string
        self.call = call


class TypeMismatch(XmlRpcError, TypeError):
    """A decoded value cannot satisfy the requested native type."""

    def __init__(self, expected: Any, actual: str, reason: str | None = None):
        expected_name = _type_name(expected)
        message = f"cannot convert {actual} to {expected_name}"
        if reason:
            message += f": {reason}"
        super().__init__(
            message,
            code="TYPE_MISMATCH",
            category=ErrorCategory.CONVERSION,
            details={"expected": expected_name, "actual": actual},
        )
        self.expected = expected
        self.actual = actual


class UnsupportedType(XmlRpcError, TypeError):
    """A native value has no XML-RPC representation."""

    def __init__(self, message: str, type_name: str | None = None):
        details = {"type": type_name} if type_name else {}
        super().__init__(message, code="UNSUPPORTED_TYPE", category=ErrorCategory.CONVERSION, details=details)


_USERINFO_RE = re.compile(r"^(?P<scheme>[a-zA-Z][a-zA-Z0-9+.-]*://)(?P<userinfo>[^@/]+)@")


def redact_uri(uri: str, replacement: str = "[REDACTED]") -> str:
    """Remove user:password from an endpoint URI."""
    return _USERINFO_RE.sub(lambda m: f"{m.group('scheme')}{replacement}@", uri)


def _type_name(tp: Any) -> str:
    if isinstance(tp, type) and get_origin(tp) is None:
        return tp.__name__
    return str(tp).replace("typing.", "")
