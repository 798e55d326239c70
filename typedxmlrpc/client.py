"""XML-RPC client: typed calls over a pluggable HTTP transport."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from loguru import logger

from typedxmlrpc.convert import pack_all, unpack_all
from typedxmlrpc.decoder import decode_response
from typedxmlrpc.encoder import encode_call
from typedxmlrpc.errors import MalformedResponse, MethodFault, TransportFailure, redact_uri
from typedxmlrpc.messages import MethodCall, MethodResponse
from typedxmlrpc.transport import TRANSPORT_EXCEPTIONS, HttpxTransport, Transport, is_timeout

if TYPE_CHECKING:
    from typedxmlrpc.config.schema import ClientConfig

DEFAULT_TIMEOUT_SECONDS = 10.0


class Client:
    """
    Calls methods on one XML-RPC endpoint.

    Args:
        server_uri: Remote endpoint, like "http://localhost:8000/RPC2".
        timeout: Request timeout in seconds.
        transport: Collaborator that sends request bytes; defaults to HttpxTransport.
    """

    def __init__(
        self,
        server_uri: str,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        *,
        transport: Transport | None = None,
    ):
        if not server_uri:
            raise ValueError("server_uri is required")
        self._server_uri = server_uri
        self.timeout = timeout
        self._transport: Transport = transport if transport is not None else HttpxTransport()

    @classmethod
    def from_config(cls, config: ClientConfig, *, transport: Transport | None = None) -> Client:
        if transport is None:
            transport = HttpxTransport(
                user_agent=config.user_agent,
                verify=config.verify_tls,
                follow_redirects=config.follow_redirects,
                headers=config.headers,
            )
        return cls(config.server_uri, config.timeout_seconds, transport=transport)

    @property
    def server_uri(self) -> str:
        return self._server_uri

    @property
    def timeout(self) -> float:
        return self._timeout

    @timeout.setter
    def timeout(self, value: float) -> None:
        if value <= 0:
            raise ValueError(f"timeout must be positive, got {value}")
        self._timeout = float(value)

    @property
    def transport(self) -> Transport:
        return self._transport

    @property
    def methods(self) -> MethodProxy:
        """Dotted-name access: ``client.methods.examples.add(1, 2)``."""
        return MethodProxy(self, "")

    def call(self, method_name: str, *args: Any, returns: Any = None) -> Any:
        """
        Call ``method_name`` with native arguments.

        With ``returns=None`` the raw list of result values is returned. A
        single type unpacks the first result; a list or tuple of types
        unpacks every result position and returns a tuple.

        Raises:
            TransportFailure, MalformedResponse, MethodFault, TypeMismatch
        """
        call = MethodCall(method_name, pack_all(args))
        results = self.raw_call(call).params

        if returns is None:
            return list(results)
        if isinstance(returns, (list, tuple)):
            return unpack_all(results, returns)
        return unpack_all(results, (returns,))[0]

    def try_call(self, method_name: str, *args: Any) -> MethodResponse:
        """Like ``call`` but a fault comes back as a ``Fault`` instead of raising."""
        return self.raw_call(MethodCall(method_name, pack_all(args)), suppress_fault=True)

    def raw_call(self, call: MethodCall, suppress_fault: bool = False) -> MethodResponse:
        """
        Send an already packed call with no type conversion.

        Raises:
            TransportFailure on connection, DNS or timeout errors
            MalformedResponse when the body is not an XML-RPC response
            MethodFault on a fault response unless ``suppress_fault`` is set
        """
        request_body = encode_call(call)
        logger.debug(f"xmlrpc ==> {call}")

        response_body = self._send(request_body)
        try:
            response = decode_response(response_body)
        except MalformedResponse as exc:
            logger.warning(f"xmlrpc malformed response from {redact_uri(self._server_uri)} for {call.method_name}: {exc.message}")
            raise

        logger.debug(f"xmlrpc <== {response}")

        if not suppress_fault and response.is_fault:
            msg = f"XML-RPC method failure: {response} / Call: {call}"
            raise MethodFault(response.value, msg, call=call)

        return response

    def _send(self, body: bytes) -> bytes:
        timeout = self._timeout
        try:
            return self._transport.send(self._server_uri, body, timeout)
        except TRANSPORT_EXCEPTIONS as exc:
            timed_out = is_timeout(exc)
            logger.warning(
                f"xmlrpc transport {'timeout' if timed_out else 'failure'} "
                f"({redact_uri(self._server_uri)}, timeout={timeout}s): {exc}"
            )
            raise TransportFailure(self._server_uri, exc, timed_out=timed_out) from exc

    def close(self) -> None:
        close = getattr(self._transport, "close", None)
        if callable(close):
            close()

    def __enter__(self) -> Client:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"Client({redact_uri(self._server_uri)!r}, timeout={self._timeout})"


class MethodProxy:
    """Builds dotted method names from attribute access."""

    def __init__(self, client: Client, name: str):
        self._client = client
        self._name = name

    def __getattr__(self, part: str) -> MethodProxy:
        if part.startswith("__"):
            raise AttributeError(part)
        name = f"{self._name}.{part}" if self._name else part
        return MethodProxy(self._client, name)

    def __call__(self, *args: Any, returns: Any = None) -> Any:
        if not self._name:
            raise AttributeError("no method name given")
        return self._client.call(self._name, *args, returns=returns)

    def __repr__(self) -> str:
        return f"<MethodProxy {self._name or '(root)'}>"
