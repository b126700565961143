"""Custom exceptions for the RCON client module.

Socket level failures are not wrapped: ``OSError``, ``TimeoutError`` and
``ConnectionError`` from the transport bubble up unchanged so callers can
decide on reconnects or retries.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .types import Origin, PacketKind


class RCONError(Exception):
    """Base class for every error raised by the RCON client."""


class RCONPacketError(RCONError):
    """Raised when a packet cannot be encoded or decoded."""


class BodyTooLarge(RCONPacketError):
    """Raised when an outgoing packet body exceeds the maximum length."""

    def __init__(self, length: int) -> None:
        self.length = length
        super().__init__(f"Packet body too large: {length} bytes")


class UnsupportedKind(RCONPacketError):
    """Raised when a packet kind has no wire code for the sending side."""

    def __init__(self, kind: PacketKind, origin: Origin) -> None:
        self.kind = kind
        self.origin = origin
        super().__init__(f"Bad packet kind: {kind.value} from {origin.value}")


class BadSize(RCONPacketError):
    """Raised when the size prefix is not exactly four bytes."""


class Malformed(RCONPacketError):
    """Raised when a payload does not match the declared packet size."""


class UnknownKindCode(RCONPacketError):
    """Raised when a kind code has no meaning for the sending side."""

    def __init__(self, code: int, origin: Origin) -> None:
        self.code = code
        self.origin = origin
        super().__init__(f"Bad packet kind code: {code} from {origin.value}")


class RCONProtocolError(RCONError):
    """Raised when the server breaks the expected packet sequence."""


class UnexpectedEndOfStream(RCONProtocolError):
    """Raised when the server closes the connection in the middle of a packet."""


class UnexpectedPacket(RCONProtocolError):
    """Raised when a valid packet arrives where the protocol does not allow it."""

    def __init__(self, kind: PacketKind, packet_id: int) -> None:
        self.kind = kind
        self.packet_id = packet_id
        super().__init__(f"Unexpected packet: kind={kind.value}, id={packet_id}")


class RCONClientMissingPassword(RCONError):
    """Raised when the RCON password is missing from the configuration."""
