"""Shared fixtures and fakes for the RCON client tests."""

from __future__ import annotations

import os
from io import BytesIO
from typing import TYPE_CHECKING

import pytest

from source_rcon.rconclient import packet as codec
from source_rcon.rconclient.types import Origin, PacketKind

if TYPE_CHECKING:
    from collections.abc import Callable

RCON_ENV_VARS = (
    "RCON_HOST",
    "RCON_PORT",
    "RCON_PASSWORD",
    "RCON_TIMEOUT",
    "RCON_MULTI_PACKET",
    "LOGGING_LEVEL",
)


class FakeTransport:
    """In-memory transport replaying canned server bytes."""

    def __init__(self, data: bytes = b"") -> None:
        """Initialize the fake with the bytes the server will send."""
        self._data = BytesIO(data)
        self.sent: list[bytes] = []
        self.requested: list[int] = []
        self.closed = False

    def send(self, data: bytes) -> None:
        """Record the bytes written by the session."""
        self.sent.append(data)

    def receive(self, count: int) -> bytes | None:
        """Read exactly count bytes, None once the canned data runs out."""
        if count < 0:
            msg = f"Cannot read {count} bytes"
            raise ValueError(msg)
        self.requested.append(count)
        data = self._data.read(count)
        if len(data) < count:
            return None
        return data

    def close(self) -> None:
        """Mark the transport as closed."""
        self.closed = True


def server_packets(responses: list[tuple[PacketKind, int, bytes]]) -> bytes:
    """Create mock server data containing multiple packets."""
    return b"".join(
        codec.encode(kind, packet_id, body, Origin.SERVER)
        for kind, packet_id, body in responses
    )


@pytest.fixture(autouse=True)
def clean_rcon_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the developer's RCON environment out of the tests.

    The environment is swapped for a copy so values loaded from .env files
    do not leak between tests.
    """
    monkeypatch.setattr(os, "environ", os.environ.copy())
    for name in RCON_ENV_VARS:
        os.environ.pop(name, None)


@pytest.fixture
def encode_server_packets() -> Callable[[list[tuple[PacketKind, int, bytes]]], bytes]:
    """Provide a helper building raw server replies."""
    return server_packets


@pytest.fixture
def make_transport() -> Callable[[list[tuple[PacketKind, int, bytes]]], FakeTransport]:
    """Provide a factory for fake transports preloaded with server replies."""

    def _make(responses: list[tuple[PacketKind, int, bytes]]) -> FakeTransport:
        return FakeTransport(server_packets(responses))

    return _make


@pytest.fixture
def raw_transport() -> type[FakeTransport]:
    """Provide the fake transport class for tests that need raw bytes."""
    return FakeTransport
