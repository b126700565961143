"""RCON client session over asyncio streams.

Intended for callers that already run an event loop, e.g. a bot or web
backend. Follows the same packet sequencing as
:class:`~source_rcon.rconclient.connection.RCONSession`; only the waiting is
different. Because we consider mainly long-lived connections, the session
supports the async context manager pattern for cleanup.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from . import packet as codec
from .connection import (
    ResponseCollector,
    check_auth_response,
    next_packet_id,
    to_body,
)
from .errors import UnexpectedEndOfStream
from .types import INITIAL_ID, SIZE_PART_LEN, Origin, Packet, PacketKind

LOGGER = logging.getLogger(__name__)


class AsyncRCONSession:
    """A single connection to an RCON server, driven by coroutines.

    Supports single-coroutine access only.
    """

    def __init__(
        self,
        reader: asyncio.StreamReader,
        writer: asyncio.StreamWriter,
        *,
        multi: bool = True,
    ) -> None:
        """Initialize the session with the packet id counter at 0.

        :param reader: The StreamReader for the socket
        :param writer: The StreamWriter for the socket
        :param multi: Whether command output may span several packets
        """
        self._reader = reader
        self._writer = writer
        self._packet_id = INITIAL_ID
        self.multi = multi

    @classmethod
    async def connect(
        cls,
        address: str,
        port: int,
        *,
        timeout: float | None = None,
        multi: bool = True,
    ) -> AsyncRCONSession:
        """Connect to an RCON server without authenticating.

        :param address: Hostname or IP address of the server
        :param port: The RCON port
        :param timeout: Connect timeout in seconds, None to wait forever
        :param multi: Whether command output may span several packets
        :return: A new session

        :raises TimeoutError: if the connection times out
        :raises OSError: if the connection fails
        """
        try:
            reader, writer = await asyncio.wait_for(
                asyncio.open_connection(address, port),
                timeout,
            )
        except OSError as e:
            LOGGER.error(
                "Could not connect to RCON server at %s:%d: %s",
                address,
                port,
                e,
            )
            raise

        LOGGER.debug("Connected to RCON server at %s:%d", address, port)
        return cls(reader, writer, multi=multi)

    @property
    def next_id(self) -> int:
        """The id of the packet most recently sent, 0 on a new session."""
        return self._packet_id

    async def __aenter__(self) -> AsyncRCONSession:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the connection (best effort)."""
        try:
            self._writer.close()
            await self._writer.wait_closed()
        except OSError:
            LOGGER.exception("Error while closing RCON socket")
        LOGGER.debug("RCON session closed")

    async def send(self, kind: PacketKind, body: bytes | str) -> int:
        """Send one packet to the server.

        :param kind: The kind of packet to send
        :param body: The packet body
        :return: The id the packet was sent with

        :raises BodyTooLarge: if the body is longer than ``MAX_BODY_LEN``
        :raises UnsupportedKind: if a client cannot send ``kind``
        :raises ConnectionError: if the socket is no longer connected
        """
        packet_id = next_packet_id(self._packet_id)
        data = codec.encode(kind, packet_id, to_body(body), Origin.CLIENT)
        self._packet_id = packet_id

        LOGGER.debug("Sending %s packet with id %d", kind.value, packet_id)
        self._writer.write(data)
        await self._writer.drain()
        return packet_id

    async def receive(self) -> Packet:
        """Receive one packet from the server.

        :return: The decoded packet

        :raises UnexpectedEndOfStream: if the server closed the connection
        :raises RCONPacketError: if the packet cannot be decoded
        :raises ConnectionError: if the socket is no longer connected
        """
        try:
            size_bytes = await self._reader.readexactly(SIZE_PART_LEN)
            size = codec.check_size(codec.decode_size(size_bytes))
            payload = await self._reader.readexactly(size)
        except asyncio.IncompleteReadError as e:
            msg = "Unexpected end of stream"
            raise UnexpectedEndOfStream(msg) from e

        response = codec.decode_payload(size, payload, Origin.SERVER)
        LOGGER.debug(
            "Received %s packet with id %d, %d body bytes",
            response.kind.value,
            response.id,
            response.body_len,
        )
        return response

    async def authenticate(self, password: str) -> bool:
        """Log in to the server.

        :param password: The RCON password
        :return: True if the server accepted the password, else False

        :raises UnexpectedPacket: if the server answers out of protocol
        :raises ConnectionError: if the socket is no longer connected
        """
        auth_id = await self.send(PacketKind.AUTH, password)
        while True:
            authenticated = check_auth_response(await self.receive(), auth_id)
            if authenticated is not None:
                return authenticated

    async def execute(self, command: bytes | str) -> bytes:
        """Run a command and return its output.

        :param command: The command to run
        :return: The raw command output

        :raises UnexpectedPacket: if the server answers out of protocol
        :raises ConnectionError: if the socket is no longer connected
        """
        command_id = await self.send(PacketKind.EXEC, command)
        end_id = None
        if self.multi:
            end_id = await self.send(PacketKind.EXEC_RESPONSE, b"")

        collector = ResponseCollector(command_id, end_id)
        while not collector.feed(await self.receive()):
            pass
        return collector.body
