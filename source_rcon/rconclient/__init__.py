"""Source RCON packet codec and client sessions."""

from .async_connection import AsyncRCONSession
from .connection import RCONSession
from .errors import (
    BadSize,
    BodyTooLarge,
    Malformed,
    RCONClientMissingPassword,
    RCONError,
    RCONPacketError,
    RCONProtocolError,
    UnexpectedEndOfStream,
    UnexpectedPacket,
    UnknownKindCode,
    UnsupportedKind,
)
from .transport import SocketTransport, Transport
from .types import Origin, Packet, PacketKind

__all__ = [
    "AsyncRCONSession",
    "BadSize",
    "BodyTooLarge",
    "Malformed",
    "Origin",
    "Packet",
    "PacketKind",
    "RCONClientMissingPassword",
    "RCONError",
    "RCONPacketError",
    "RCONProtocolError",
    "RCONSession",
    "SocketTransport",
    "Transport",
    "UnexpectedEndOfStream",
    "UnexpectedPacket",
    "UnknownKindCode",
    "UnsupportedKind",
]
