"""HTTP(S) transport collaborator for the XML-RPC client."""

from __future__ import annotations

import threading
from typing import Any, Protocol, runtime_checkable

import httpx
from loguru import logger

from typedxmlrpc import __version__
from typedxmlrpc.errors import TransportError, redact_uri

DEFAULT_USER_AGENT = f"typedxmlrpc/{__version__}"

# Exceptions a transport may raise that the client translates to TransportFailure.
TRANSPORT_EXCEPTIONS: tuple[type[BaseException], ...] = (httpx.RequestError, OSError, TransportError)


@runtime_checkable
class Transport(Protocol):
    def send(self, endpoint_uri: str, body: bytes, timeout: float) -> bytes: ...


def is_timeout(exc: BaseException) -> bool:
    """True when a transport exception means the timeout elapsed."""
    if isinstance(exc, httpx.TimeoutException):
        return True
    if isinstance(exc, TransportError):
        return exc.timed_out
    return isinstance(exc, TimeoutError)


class HttpxTransport:
    """POST request bodies with httpx, reusing one connection pool."""

    def __init__(
        self,
        *,
        user_agent: str = DEFAULT_USER_AGENT,
        verify: bool = True,
        follow_redirects: bool = False,
        headers: dict[str, str] | None = None,
        client: httpx.Client | None = None,
    ):
        self.user_agent = user_agent
        self.verify = verify
        self.follow_redirects = follow_redirects
        self.headers = dict(headers or {})
        self._client = client
        self._owns_client = client is None
        self._lock = threading.Lock()

    def _get_client(self) -> httpx.Client:
        with self._lock:
            if self._client is None:
                self._client = httpx.Client(verify=self.verify, follow_redirects=self.follow_redirects)
                self._owns_client = True
            return self._client

    def _request_headers(self) -> dict[str, str]:
        headers = {"Content-Type": "text/xml", "User-Agent": self.user_agent}
        headers.update(self.headers)
        return headers

    def send(self, endpoint_uri: str, body: bytes, timeout: float) -> bytes:
        resp = self._get_client().post(
            endpoint_uri,
            content=body,
            headers=self._request_headers(),
            timeout=timeout,
        )
        status_code = int(getattr(resp, "status_code", 0) or 0)
        if status_code >= 300:
            # the body still goes to the decoder; a fault may arrive with any status
            logger.warning(f"XML-RPC endpoint {redact_uri(endpoint_uri)} answered HTTP {status_code}")
        return resp.content

    def close(self) -> None:
        with self._lock:
            if self._client is not None and self._owns_client:
                self._client.close()
            self._client = None

    def __enter__(self) -> HttpxTransport:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()
