"""RCON client session.

Drives the packet codec over a blocking transport. The philosophy is to
bubble up socket exceptions for the caller to handle reconnects/retries,
and to return False rather than raise for a rejected password.

Packet ids advance before every send, starting from 1 on a new session and
wrapping from ``MAX_ID`` back to 0. ``-1`` is never sent because servers
use it to reject a login.

Multi-packet responses are handled by following every command with an empty
exec response packet. Servers answer in order and mirror that packet back,
so its echo marks the end of the command output:
https://developer.valvesoftware.com/wiki/Source_RCON_Protocol#Multiple-packet_Responses
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from . import packet as codec
from .errors import UnexpectedEndOfStream, UnexpectedPacket
from .transport import SocketTransport
from .types import (
    AUTH_FAILED_ID,
    INITIAL_ID,
    MAX_ID,
    SIZE_PART_LEN,
    Origin,
    Packet,
    PacketKind,
)

if TYPE_CHECKING:
    from .transport import Transport

LOGGER = logging.getLogger(__name__)


def next_packet_id(current_id: int) -> int:
    """Get the id that follows ``current_id``, wrapping at ``MAX_ID``.

    :param current_id: The id most recently used
    :return: The id for the next packet
    """
    if current_id >= MAX_ID:
        return INITIAL_ID
    return current_id + 1


def to_body(payload: bytes | str) -> bytes:
    """Encode text payloads as UTF-8, pass bytes through unchanged."""
    if isinstance(payload, str):
        return payload.encode("utf-8")
    return payload


def check_auth_response(response: Packet, auth_id: int) -> bool | None:
    """Classify a packet received while waiting for an auth response.

    :param response: The packet received from the server
    :param auth_id: The id of the auth packet that was sent
    :return: True if authenticated, False if the password was rejected,
        None if the packet should be skipped

    :raises UnexpectedPacket: for any other packet
    """
    # Some servers (seen with CS:GO) send an empty exec response first
    if response.kind is PacketKind.EXEC_RESPONSE and response.id == auth_id:
        LOGGER.debug("Skipping exec response echoed before auth response")
        return None

    if response.kind is PacketKind.AUTH_RESPONSE:
        if response.id == auth_id:
            return True
        if response.id == AUTH_FAILED_ID:
            LOGGER.warning("RCON authentication failed")
            return False

    raise UnexpectedPacket(response.kind, response.id)


class ResponseCollector:
    """Reassembles the output of one command from a stream of packets.

    :param command_id: The id of the exec packet
    :param end_id: The id of the empty exec response sent after it, or None
        in single-packet mode
    """

    def __init__(self, command_id: int, end_id: int | None = None) -> None:
        self.command_id = command_id
        self.end_id = end_id
        self.done = False
        self._parts: list[bytes] = []

    @property
    def body(self) -> bytes:
        """The output collected so far."""
        return b"".join(self._parts)

    def feed(self, response: Packet) -> bool:
        """Consume one packet from the server.

        :param response: The packet received from the server
        :return: True once the full response has been collected

        :raises UnexpectedPacket: if the packet is not an exec response, or in
            single-packet mode, not the response to this command
        """
        if response.kind is not PacketKind.EXEC_RESPONSE:
            raise UnexpectedPacket(response.kind, response.id)

        if self.end_id is None:
            if response.id != self.command_id:
                raise UnexpectedPacket(response.kind, response.id)
            self._parts.append(response.body)
            self.done = True
        elif response.id == self.command_id:
            self._parts.append(response.body)
        elif response.id == self.end_id:
            self.done = True
        else:
            # Untracked ids are dropped. A server holding a bad password
            # (CS:GO, Nov 2016) never mirrors the end packet back.
            LOGGER.debug("Dropping untracked exec response with id %d", response.id)

        return self.done


class RCONSession:
    """A single connection to an RCON server.

    Supports single-threaded access only. The session owns its transport
    and closes it on :meth:`close` or when leaving a ``with`` block.
    """

    def __init__(self, transport: Transport, *, multi: bool = True) -> None:
        """Initialize the session with the packet id counter at 0.

        :param transport: The connected transport
        :param multi: Whether command output may span several packets
        """
        self._transport = transport
        self._packet_id = INITIAL_ID
        self.multi = multi

    @classmethod
    def connect(
        cls,
        address: str,
        port: int,
        *,
        timeout: float | None = None,
        multi: bool = True,
    ) -> RCONSession:
        """Connect to an RCON server without authenticating.

        :param address: Hostname or IP address of the server
        :param port: The RCON port
        :param timeout: Socket timeout in seconds, None to block forever
        :param multi: Whether command output may span several packets
        :return: A new session

        :raises TimeoutError: if the connection times out
        :raises OSError: if the connection fails
        """
        transport = SocketTransport.connect(address, port, timeout)
        return cls(transport, multi=multi)

    @property
    def next_id(self) -> int:
        """The id of the packet most recently sent, 0 on a new session."""
        return self._packet_id

    def __enter__(self) -> RCONSession:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        """Close the underlying transport."""
        self._transport.close()
        LOGGER.debug("RCON session closed")

    def send(self, kind: PacketKind, body: bytes | str) -> int:
        """Send one packet to the server.

        :param kind: The kind of packet to send
        :param body: The packet body
        :return: The id the packet was sent with

        :raises BodyTooLarge: if the body is longer than ``MAX_BODY_LEN``
        :raises UnsupportedKind: if a client cannot send ``kind``
        :raises OSError: if the transport fails
        """
        packet_id = next_packet_id(self._packet_id)
        data = codec.encode(kind, packet_id, to_body(body), Origin.CLIENT)
        self._packet_id = packet_id

        LOGGER.debug("Sending %s packet with id %d", kind.value, packet_id)
        self._transport.send(data)
        return packet_id

    def receive(self) -> Packet:
        """Receive one packet from the server.

        :return: The decoded packet

        :raises UnexpectedEndOfStream: if the server closed the connection
        :raises RCONPacketError: if the packet cannot be decoded
        :raises OSError: if the transport fails
        """
        size_bytes = self._transport.receive(SIZE_PART_LEN)
        if size_bytes is None:
            msg = "Unexpected end of stream"
            raise UnexpectedEndOfStream(msg)
        size = codec.check_size(codec.decode_size(size_bytes))

        payload = self._transport.receive(size)
        if payload is None:
            msg = "Unexpected end of stream"
            raise UnexpectedEndOfStream(msg)

        response = codec.decode_payload(size, payload, Origin.SERVER)
        LOGGER.debug(
            "Received %s packet with id %d, %d body bytes",
            response.kind.value,
            response.id,
            response.body_len,
        )
        return response

    def authenticate(self, password: str) -> bool:
        """Log in to the server.

        :param password: The RCON password
        :return: True if the server accepted the password, else False

        :raises UnexpectedPacket: if the server answers out of protocol
        :raises OSError: if the transport fails
        """
        auth_id = self.send(PacketKind.AUTH, password)
        while True:
            authenticated = check_auth_response(self.receive(), auth_id)
            if authenticated is not None:
                return authenticated

    def execute(self, command: bytes | str) -> bytes:
        """Run a command and return its output.

        In multi-packet mode this blocks until the server mirrors the end
        packet back. There is no limit on how many packets are read while
        waiting; only the transport timeout can interrupt it.

        :param command: The command to run
        :return: The raw command output

        :raises UnexpectedPacket: if the server answers out of protocol
        :raises OSError: if the transport fails
        """
        command_id = self.send(PacketKind.EXEC, command)
        end_id = self.send(PacketKind.EXEC_RESPONSE, b"") if self.multi else None

        collector = ResponseCollector(command_id, end_id)
        while not collector.feed(self.receive()):
            pass
        return collector.body
