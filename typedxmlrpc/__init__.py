"""typedxmlrpc - typed XML-RPC client."""

__version__ = "0.1.0"

from typedxmlrpc.client import Client, MethodProxy
from typedxmlrpc.convert import pack, register_type, to_python, unpack
from typedxmlrpc.decoder import decode_response
from typedxmlrpc.encoder import encode_call, encode_response
from typedxmlrpc.errors import (
    ErrorCategory,
    MalformedResponse,
    MethodFault,
    TransportError,
    TransportFailure,
    TypeMismatch,
    UnsupportedType,
    XmlRpcError,
)
from typedxmlrpc.messages import Fault, MethodCall, MethodResponse, Success
from typedxmlrpc.transport import HttpxTransport, Transport
from typedxmlrpc.values import Array, Binary, Boolean, DateTime, Double, Int, String, Struct, Value

__all__ = [
    "__version__",
    "Client",
    "MethodProxy",
    "pack",
    "unpack",
    "to_python",
    "register_type",
    "encode_call",
    "encode_response",
    "decode_response",
    "ErrorCategory",
    "XmlRpcError",
    "TransportError",
    "TransportFailure",
    "MalformedResponse",
    "MethodFault",
    "TypeMismatch",
    "UnsupportedType",
    "MethodCall",
    "MethodResponse",
    "Success",
    "Fault",
    "Transport",
    "HttpxTransport",
    "Value",
    "Int",
    "Double",
    "Boolean",
    "String",
    "DateTime",
    "Binary",
    "Array",
    "Struct",
]
