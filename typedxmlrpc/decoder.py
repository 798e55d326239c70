"""Parse XML-RPC methodResponse documents.

Parsing goes through defusedxml so entity expansion and external DTDs in a
hostile response cannot reach the process. Every structural or lexical
problem surfaces as MalformedResponse.
"""

from __future__ import annotations

import base64
import binascii
import re
from datetime import datetime
from typing import Callable
from xml.etree.ElementTree import Element, ParseError

from defusedxml import DefusedXmlException
from defusedxml.ElementTree import fromstring

from typedxmlrpc.errors import MalformedResponse
from typedxmlrpc.messages import Fault, MethodResponse, Success
from typedxmlrpc.values import (
    INT_MAX,
    INT_MIN,
    Array,
    Binary,
    Boolean,
    DateTime,
    Double,
    Int,
    String,
    Struct,
    Value,
    is_numeric_literal,
)

_INT_RE = re.compile(r"[+-]?\d+", re.ASCII)
_DATETIME_RE = re.compile(r"(\d{4})-?(\d{2})-?(\d{2})T(\d{2}):(\d{2}):(\d{2})", re.ASCII)
_SPECIAL_DOUBLES = {"nan", "+nan", "-nan", "inf", "+inf", "-inf", "infinity", "+infinity", "-infinity"}
_SNIPPET_CHARS = 200


def _text(elem: Element) -> str:
    return elem.text or ""


def _children(elem: Element) -> list[Element]:
    return list(elem)


def _read_int(elem: Element) -> Value:
    text = _text(elem).strip()
    if not _INT_RE.fullmatch(text):
        raise MalformedResponse(f"invalid <{elem.tag}> content: {text!r}")
    number = int(text)
    if not INT_MIN <= number <= INT_MAX:
        raise MalformedResponse(f"<{elem.tag}> out of 32-bit range: {text}")
    return Int(number)


def _read_double(elem: Element) -> Value:
    text = _text(elem).strip()
    if not is_numeric_literal(text) and text.lower() not in _SPECIAL_DOUBLES:
        raise MalformedResponse(f"invalid <double> content: {text!r}")
    return Double(float(text))


def _read_boolean(elem: Element) -> Value:
    text = _text(elem).strip()
    if text not in ("0", "1"):
        raise MalformedResponse(f"invalid <boolean> content: {text!r}")
    return Boolean(text == "1")


def _read_string(elem: Element) -> Value:
    return String(_text(elem))


def _read_datetime(elem: Element) -> Value:
    text = _text(elem).strip()
    match = _DATETIME_RE.fullmatch(text)
    if match is None:
        raise MalformedResponse(f"invalid <dateTime.iso8601> content: {text!r}")
    try:
        return DateTime(datetime(*(int(part) for part in match.groups())))
    except ValueError as exc:
        raise MalformedResponse(f"invalid <dateTime.iso8601> content: {text!r}") from exc


def _read_base64(elem: Element) -> Value:
    text = "".join(_text(elem).split())
    try:
        return Binary(base64.b64decode(text, validate=True))
    except (binascii.Error, ValueError) as exc:
        raise MalformedResponse(f"invalid <base64> content: {exc}") from exc


def _read_array(elem: Element) -> Value:
    children = _children(elem)
    if len(children) != 1 or children[0].tag != "data":
        raise MalformedResponse("<array> must contain exactly one <data>")
    items = []
    for child in _children(children[0]):
        if child.tag != "value":
            raise MalformedResponse(f"unexpected <{child.tag}> inside <data>")
        items.append(read_value(child))
    return Array(tuple(items))


def _read_struct(elem: Element) -> Value:
    members: dict[str, Value] = {}
    for member in _children(elem):
        if member.tag != "member":
            raise MalformedResponse(f"unexpected <{member.tag}> inside <struct>")
        parts = _children(member)
        names = [p for p in parts if p.tag == "name"]
        values = [p for p in parts if p.tag == "value"]
        if len(parts) != 2 or len(names) != 1 or len(values) != 1:
            raise MalformedResponse("<member> must contain one <name> and one <value>")
        name = _text(names[0])
        if name in members:
            raise MalformedResponse(f"duplicate struct member {name!r}")
        members[name] = read_value(values[0])
    return Struct(members)


_READERS: dict[str, Callable[[Element], Value]] = {
    "i4": _read_int,
    "int": _read_int,
    "double": _read_double,
    "boolean": _read_boolean,
    "string": _read_string,
    "dateTime.iso8601": _read_datetime,
    "base64": _read_base64,
    "array": _read_array,
    "struct": _read_struct,
}


def read_value(elem: Element) -> Value:
    """Decode one ``<value>`` element."""
    if elem.tag != "value":
        raise MalformedResponse(f"expected <value>, found <{elem.tag}>")
    children = _children(elem)
    if not children:
        # untyped content is an implicit string
        return String(_text(elem))
    if len(children) != 1:
        raise MalformedResponse("<value> must hold exactly one typed element")
    typed = children[0]
    reader = _READERS.get(typed.tag)
    if reader is None:
        raise MalformedResponse(f"unknown value type <{typed.tag}>")
    return reader(typed)


def _read_params(elem: Element) -> Success:
    params = []
    for param in _children(elem):
        if param.tag != "param":
            raise MalformedResponse(f"unexpected <{param.tag}> inside <params>")
        inner = _children(param)
        if len(inner) != 1:
            raise MalformedResponse("<param> must contain exactly one <value>")
        params.append(read_value(inner[0]))
    return Success(tuple(params))


def _read_fault(elem: Element) -> Fault:
    inner = _children(elem)
    if len(inner) != 1:
        raise MalformedResponse("<fault> must contain exactly one <value>")
    value = read_value(inner[0])
    if not isinstance(value, Struct):
        raise MalformedResponse(f"fault value must be a struct, got {type(value).__name__}")
    if not isinstance(value.get("faultCode"), Int):
        raise MalformedResponse("fault struct lacks an integer faultCode")
    if not isinstance(value.get("faultString"), String):
        raise MalformedResponse("fault struct lacks a string faultString")
    return Fault(value)


def decode_response(data: bytes | str) -> MethodResponse:
    """Decode a methodResponse document into Success or Fault."""
    snippet = _snippet(data)
    try:
        root = fromstring(data)
    except (ParseError, DefusedXmlException) as exc:
        raise MalformedResponse(f"response is not well-formed XML: {exc}", snippet=snippet) from exc
    if root.tag != "methodResponse":
        raise MalformedResponse(f"expected <methodResponse> root, found <{root.tag}>", snippet=snippet)
    children = _children(root)
    if len(children) != 1:
        raise MalformedResponse("<methodResponse> must contain exactly one element", snippet=snippet)
    body = children[0]
    try:
        if body.tag == "params":
            return _read_params(body)
        if body.tag == "fault":
            return _read_fault(body)
    except MalformedResponse as exc:
        if snippet and not exc.details.get("snippet"):
            exc.details["snippet"] = snippet
        raise
    raise MalformedResponse(f"unexpected <{body.tag}> inside <methodResponse>", snippet=snippet)


def _snippet(data: bytes | str) -> str:
    if isinstance(data, bytes):
        data = data[: _SNIPPET_CHARS * 4].decode("utf-8", errors="replace")
    return data[:_SNIPPET_CHARS]
