"""Data classes and constants used in the RCON client module.

Defined following the `Valve Developer Community RCON documentation
<https://developer.valvesoftware.com/wiki/Source_RCON_Protocol>`_.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .errors import BodyTooLarge

INITIAL_ID = 0
AUTH_FAILED_ID = -1
MAX_ID = 2_147_483_647

# Minecraft accepts request bodies up to 1446 bytes, but only bodies of
# 1413 bytes or fewer are delivered reliably.
MAX_BODY_LEN = 1413

SIZE_PART_LEN = 4
ID_PART_LEN = 4
KIND_PART_LEN = 4
TERMINATOR = b"\x00\x00"

# request id (4) + packet kind (4) + 2 null bytes (2)
MIN_SIZE = ID_PART_LEN + KIND_PART_LEN + len(TERMINATOR)


class PacketKind(Enum):
    """Logical kinds of an RCON packet.

    The raw integer code of a kind depends on which side sent the packet,
    so the members deliberately carry no wire value. See
    :func:`source_rcon.rconclient.packet.kind_to_code`.

    :cvar EXEC: Command sent by the client
    :cvar EXEC_RESPONSE: Command output, or the echoed end-of-response marker
    :cvar AUTH: Authentication request carrying the password
    :cvar AUTH_RESPONSE: Result of an authentication request
    """

    EXEC = "exec"
    EXEC_RESPONSE = "exec_response"
    AUTH = "auth"
    AUTH_RESPONSE = "auth_response"


class Origin(Enum):
    """Side of the connection a packet was sent from."""

    CLIENT = "client"
    SERVER = "server"


@dataclass(frozen=True)
class Packet:
    """A single logical RCON packet.

    :param kind: The logical packet kind
    :param id: The packet id, or ``AUTH_FAILED_ID`` for a rejected login
    :param body: The raw packet body, without the null terminator
    :param origin: Which side sent, or will send, the packet
    """

    kind: PacketKind
    id: int
    body: bytes
    origin: Origin = Origin.CLIENT

    @property
    def body_len(self) -> int:
        """Length of the body in bytes, excluding the terminator."""
        return len(self.body)

    @classmethod
    def create(
        cls,
        kind: PacketKind,
        body: bytes,
        packet_id: int = INITIAL_ID,
        origin: Origin = Origin.CLIENT,
    ) -> Packet:
        """Create a packet, checking the body fits in a single request.

        :param kind: The logical packet kind
        :param body: The raw packet body
        :param packet_id: The packet id
        :param origin: Which side will send the packet
        :return: The created packet

        :raises BodyTooLarge: if the body is longer than ``MAX_BODY_LEN``
        """
        if len(body) > MAX_BODY_LEN:
            raise BodyTooLarge(len(body))
        return cls(kind=kind, id=packet_id, body=body, origin=origin)
