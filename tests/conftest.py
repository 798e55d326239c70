"""Pytest hooks and fixtures."""

import os
import socket

import pytest


def pytest_configure(config):
    """Register custom markers (also in pyproject.toml)."""
    config.addinivalue_line(
        "markers",
        "network: opens local sockets to exercise the real HTTP transport",
    )


def pytest_collection_modifyitems(config, items):
    """Skip network tests when TYPEDXMLRPC_SKIP_NETWORK=1."""
    if os.environ.get("TYPEDXMLRPC_SKIP_NETWORK") != "1":
        return
    skip = pytest.mark.skip(reason="Local socket tests disabled")
    for item in items:
        if "network" in item.keywords:
            item.add_marker(skip)


class FakeTransport:
    """Records requests and answers with canned bodies or exceptions."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests: list[tuple[str, bytes, float]] = []
        self.closed = False

    def send(self, endpoint_uri: str, body: bytes, timeout: float) -> bytes:
        self.requests.append((endpoint_uri, body, timeout))
        item = self.responses.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def silent_server():
    """A listening TCP socket that never reads or answers."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    sock.listen(8)
    host, port = sock.getsockname()
    try:
        yield f"http://{host}:{port}/RPC2"
    finally:
        sock.close()


def success_body(*values_xml: str) -> bytes:
    params = "".join(f"<param><value>{v}</value></param>" for v in values_xml)
    return f'<?xml version="1.0"?><methodResponse><params>{params}</params></methodResponse>'.encode()


def fault_body(code: int, message: str) -> bytes:
    return (
        '<?xml version="1.0"?><methodResponse><fault><value><struct>'
        f"<member><name>faultCode</name><value><int>{code}</int></value></member>"
        f"<member><name>faultString</name><value><string>{message}</string></value></member>"
        "</struct></value></fault></methodResponse>"
    ).encode()
