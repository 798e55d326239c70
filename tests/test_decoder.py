import math
from datetime import datetime

import pytest

from typedxmlrpc.decoder import decode_response
from typedxmlrpc.encoder import encode_response
from typedxmlrpc.errors import MalformedResponse
from typedxmlrpc.messages import Fault, Success
from typedxmlrpc.values import Array, Binary, Boolean, DateTime, Double, Int, String, Struct

from conftest import fault_body, success_body


def _single(value_xml: str):
    response = decode_response(success_body(value_xml))
    assert isinstance(response, Success)
    assert len(response.params) == 1
    return response.params[0]


def test_decode_scalars() -> None:
    assert _single("<i4>42</i4>") == Int(42)
    assert _single("<int>-3</int>") == Int(-3)
    assert _single("<boolean>1</boolean>") == Boolean(True)
    assert _single("<double>-1.25</double>") == Double(-1.25)
    assert _single("<string>a &amp; b</string>") == String("a & b")
    assert _single("<base64>aGVs\n bG8=</base64>") == Binary(b"hello")
    assert _single("<dateTime.iso8601>19980717T14:08:55</dateTime.iso8601>") == DateTime(
        datetime(1998, 7, 17, 14, 8, 55)
    )


def test_untyped_value_is_a_string() -> None:
    assert _single("plain text") == String("plain text")
    assert _single("") == String("")


def test_string_whitespace_is_preserved() -> None:
    assert _single("<string>  padded  </string>") == String("  padded  ")


def test_special_doubles() -> None:
    assert math.isnan(_single("<double>NaN</double>").value)
    assert _single("<double>-inf</double>").value == float("-inf")


def test_dashed_datetime_is_accepted() -> None:
    assert _single("<dateTime.iso8601>2024-01-02T03:04:05</dateTime.iso8601>") == DateTime(
        datetime(2024, 1, 2, 3, 4, 5)
    )


def test_decode_multiple_params() -> None:
    response = decode_response(success_body("<i4>1</i4>", "<string>two</string>"))
    assert response.params == (Int(1), String("two"))


def test_decode_accepts_str_input() -> None:
    response = decode_response(success_body("<i4>1</i4>").decode("utf-8"))
    assert response.params == (Int(1),)


def test_array_of_structs() -> None:
    xml = (
        "<array><data>"
        "<value><struct><member><name>id</name><value><i4>1</i4></value></member></struct></value>"
        "<value><struct><member><name>id</name><value><i4>2</i4></value></member>"
        "<member><name>tag</name><value>x</value></member></struct></value>"
        "</data></array>"
    )
    value = _single(xml)
    assert isinstance(value, Array)
    assert all(isinstance(item, Struct) for item in value)
    assert value[1] == Struct({"tag": String("x"), "id": Int(2)})


def test_decode_fault() -> None:
    response = decode_response(fault_body(1, "Not implemented"))
    assert isinstance(response, Fault)
    assert response.is_fault
    assert response.fault_code == 1
    assert response.fault_string == "Not implemented"


def test_decode_what_the_encoder_writes() -> None:
    original = Success((Struct({"when": DateTime(datetime(2020, 2, 29)), "raw": Binary(b"\x00\xff")}),))
    assert decode_response(encode_response(original)) == original


@pytest.mark.parametrize(
    "body",
    [
        b"",
        b"not xml at all",
        b"<methodResponse><params>",
        b"<methodCall><params/></methodCall>",
        b"<methodResponse/>",
        b"<methodResponse><params/><params/></methodResponse>",
        b"<methodResponse><bogus/></methodResponse>",
    ],
)
def test_malformed_documents(body: bytes) -> None:
    with pytest.raises(MalformedResponse):
        decode_response(body)


@pytest.mark.parametrize(
    "value_xml",
    [
        "<i4>12abc</i4>",
        "<i4>2147483648</i4>",
        "<boolean>true</boolean>",
        "<double>one</double>",
        "<dateTime.iso8601>yesterday</dateTime.iso8601>",
        "<dateTime.iso8601>20241341T00:00:00</dateTime.iso8601>",
        "<base64>!!!</base64>",
        "<nil/>",
        "<i4>1</i4><i4>2</i4>",
        "<array><value><i4>1</i4></value></array>",
        "<struct><member><name>a</name></member></struct>",
        "<struct><member><name>a</name><value>1</value></member>"
        "<member><name>a</name><value>2</value></member></struct>",
    ],
)
def test_malformed_values(value_xml: str) -> None:
    with pytest.raises(MalformedResponse):
        decode_response(success_body(value_xml))


@pytest.mark.parametrize(
    "fault_xml",
    [
        "<value><string>boom</string></value>",
        "<value><struct><member><name>faultString</name><value>x</value></member></struct></value>",
        "<value><struct><member><name>faultCode</name><value><string>1</string></value></member>"
        "<member><name>faultString</name><value>x</value></member></struct></value>",
    ],
)
def test_invalid_fault_structs(fault_xml: str) -> None:
    body = f"<methodResponse><fault>{fault_xml}</fault></methodResponse>".encode()
    with pytest.raises(MalformedResponse):
        decode_response(body)


def test_entity_expansion_is_refused() -> None:
    body = (
        b'<?xml version="1.0"?><!DOCTYPE bomb [<!ENTITY a "aaaa">]>'
        b"<methodResponse><params><param><value>&a;</value></param></params></methodResponse>"
    )
    with pytest.raises(MalformedResponse):
        decode_response(body)


def test_malformed_response_carries_snippet() -> None:
    with pytest.raises(MalformedResponse) as exc_info:
        decode_response(b"<html>502 Bad Gateway</html>")
    assert exc_info.value.details["snippet"].startswith("<html>")


def test_special_characters_survive_encoding() -> None:
    text = "A < C ' > 45\" 12 &"
    response = decode_response(encode_response(Success((String(text),))))
    assert response.params == (String(text),)


def test_array_of_structs_keeps_order_and_keys() -> None:
    rows = Array(
        (
            Struct({"a": Int(1), "b": Int(2)}),
            Struct({"a": Int(-3), "b": Int(4)}),
        )
    )
    decoded = decode_response(encode_response(Success((rows,)))).params[0]
    assert decoded == rows
    assert [list(row.keys()) for row in decoded] == [["a", "b"], ["a", "b"]]
    assert [row["a"] for row in decoded] == [Int(1), Int(-3)]


@pytest.mark.parametrize(
    "value_xml",
    [
        "<i4>١٢</i4>",
        "<dateTime.iso8601>٢٠٢٤٠١٠٢T03:04:05</dateTime.iso8601>",
    ],
)
def test_non_ascii_digits_are_malformed(value_xml: str) -> None:
    with pytest.raises(MalformedResponse):
        decode_response(success_body(value_xml))


def test_control_and_astral_characters_survive_encoding() -> None:
    text = "tab\there\r\nline \U0001f600"
    value = Struct({"kéy": String(text)})
    response = decode_response(encode_response(Success((value,))))
    assert response.params == (value,)
