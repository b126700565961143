"""Blocking byte-stream transports for the RCON session.

The session only needs exact-length writes and reads, so anything that
implements :class:`Transport` can carry it; tests use in-memory fakes.
"""

from __future__ import annotations

import logging
import socket
from typing import Protocol

LOGGER = logging.getLogger(__name__)

# Upper bound on the bytes requested by a single recv call
RECV_CHUNK_SIZE = 4096


class Transport(Protocol):
    """Byte stream the session sends packets over."""

    def send(self, data: bytes) -> None:
        """Write all of ``data`` or raise."""

    def receive(self, count: int) -> bytes | None:
        """Read exactly ``count`` bytes, or return None at end of stream."""

    def close(self) -> None:
        """Release the underlying connection."""


class SocketTransport:
    """TCP transport over a blocking socket.

    Supports single-threaded access only.
    """

    def __init__(self, rcon_socket: socket.socket) -> None:
        """Wrap an already connected socket.

        :param rcon_socket: The connected TCP socket
        """
        self._socket = rcon_socket

    @classmethod
    def connect(
        cls,
        address: str,
        port: int,
        timeout: float | None = None,
    ) -> SocketTransport:
        """Open a TCP connection to the RCON server.

        The timeout bounds the connect call and stays on the socket as the
        read and write timeout.

        :param address: Hostname or IP address of the server
        :param port: The RCON port
        :param timeout: Timeout in seconds, None to block forever
        :return: The connected transport

        :raises TimeoutError: if the connection times out
        :raises ConnectionRefusedError: if the connection is refused
        :raises OSError: if an OS error occurs during connection
        """
        try:
            rcon_socket = socket.create_connection((address, port), timeout=timeout)
        except OSError as e:
            LOGGER.error(
                "Could not connect to RCON server at %s:%d: %s",
                address,
                port,
                e,
            )
            raise

        LOGGER.debug("Connected to RCON server at %s:%d", address, port)
        return cls(rcon_socket)

    def send(self, data: bytes) -> None:
        """Write all of ``data`` to the socket.

        :param data: The bytes to send
        :raises OSError: if the socket fails
        """
        self._socket.sendall(data)

    def receive(self, count: int) -> bytes | None:
        """Read exactly ``count`` bytes from the socket.

        :param count: The number of bytes to read
        :return: The bytes read, or None if the server closed the connection
            first

        :raises TimeoutError: if the socket times out
        :raises OSError: if the socket fails
        """
        all_bytes = bytearray()
        while len(all_bytes) < count:
            chunk = self._socket.recv(min(count - len(all_bytes), RECV_CHUNK_SIZE))
            if not chunk:
                return None
            all_bytes += chunk
        return bytes(all_bytes)

    def close(self) -> None:
        """Close the socket (best effort)."""
        try:
            self._socket.close()
        except OSError:
            LOGGER.exception("Error while closing RCON socket")
