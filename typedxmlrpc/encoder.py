"""Serialize calls and responses to XML-RPC documents."""

from __future__ import annotations

import base64
from datetime import datetime

from typedxmlrpc.messages import Fault, MethodCall, MethodResponse
from typedxmlrpc.values import Array, Binary, Boolean, DateTime, Double, Int, String, Struct, Value

XML_DECLARATION = '<?xml version="1.0"?>'

_ESCAPES = str.maketrans({
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    "'": "&apos;",
    '"': "&quot;",
    "\r": "&#13;",
})


def escape(text: str) -> str:
    """Escape the five reserved XML characters (and CR, which parsers fold)."""
    return text.translate(_ESCAPES)


def format_datetime(value: datetime) -> str:
    """Wire form YYYYMMDDTHH:MM:SS, zero padded for any year."""
    return (
        f"{value.year:04d}{value.month:02d}{value.day:02d}"
        f"T{value.hour:02d}:{value.minute:02d}:{value.second:02d}"
    )


def _write_value(value: Value, out: list[str]) -> None:
    out.append("<value>")
    if isinstance(value, Boolean):
        out.append(f"<boolean>{'1' if value.value else '0'}</boolean>")
    elif isinstance(value, Int):
        out.append(f"<i4>{value.value}</i4>")
    elif isinstance(value, Double):
        out.append(f"<double>{value.value!r}</double>")
    elif isinstance(value, String):
        out.append(f"<string>{escape(value.value)}</string>")
    elif isinstance(value, DateTime):
        out.append(f"<dateTime.iso8601>{format_datetime(value.value)}</dateTime.iso8601>")
    elif isinstance(value, Binary):
        out.append(f"<base64>{base64.b64encode(value.value).decode('ascii')}</base64>")
    elif isinstance(value, Array):
        out.append("<array><data>")
        for item in value.items:
            _write_value(item, out)
        out.append("</data></array>")
    elif isinstance(value, Struct):
        out.append("<struct>")
        for name, item in value.members.items():
            out.append(f"<member><name>{escape(name)}</name>")
            _write_value(item, out)
            out.append("</member>")
        out.append("</struct>")
    else:
        raise TypeError(f"not an XML-RPC value: {type(value).__name__}")
    out.append("</value>")


def _write_params(params, out: list[str]) -> None:
    out.append("<params>")
    for param in params:
        out.append("<param>")
        _write_value(param, out)
        out.append("</param>")
    out.append("</params>")


def encode_value(value: Value) -> str:
    """Encode a single value as its ``<value>`` element."""
    out: list[str] = []
    _write_value(value, out)
    return "".join(out)


def encode_call(call: MethodCall) -> bytes:
    """Encode a methodCall document as UTF-8 bytes."""
    out = [XML_DECLARATION, "<methodCall>", f"<methodName>{escape(call.method_name)}</methodName>"]
    _write_params(call.params, out)
    out.append("</methodCall>")
    return "".join(out).encode("utf-8")


def encode_response(response: MethodResponse) -> bytes:
    """Encode a methodResponse document (success or fault) as UTF-8 bytes."""
    out = [XML_DECLARATION, "<methodResponse>"]
    if isinstance(response, Fault):
        out.append("<fault>")
        _write_value(response.value, out)
        out.append("</fault>")
    else:
        _write_params(response.params, out)
    out.append("</methodResponse>")
    return "".join(out).encode("utf-8")
