"""RCON packet encoding and decoding.

Pure functions only, no sockets and no state. The session modules drive
these over a transport.

Packet format reference:
https://developer.valvesoftware.com/wiki/Source_RCON_Protocol#Basic_Packet_Structure

.. code-block:: text

    [ int32 size ][ int32 id ][ int32 kind code ][ body ][ 0x00 ][ 0x00 ]

All integers are little-endian and ``size`` counts every byte after the
size field itself.
"""

from __future__ import annotations

import struct

from .errors import BadSize, Malformed, UnknownKindCode, UnsupportedKind
from .types import (
    MIN_SIZE,
    SIZE_PART_LEN,
    TERMINATOR,
    Origin,
    Packet,
    PacketKind,
)

_HEADER = struct.Struct("<iii")
_ID_AND_KIND = struct.Struct("<ii")
_SIZE = struct.Struct("<i")

# The protocol reuses code 2: a client sends it for a command, a server
# sends it for an auth response.
_KIND_TO_CODE: dict[tuple[PacketKind, Origin], int] = {
    (PacketKind.EXEC_RESPONSE, Origin.CLIENT): 0,
    (PacketKind.EXEC_RESPONSE, Origin.SERVER): 0,
    (PacketKind.EXEC, Origin.CLIENT): 2,
    (PacketKind.AUTH_RESPONSE, Origin.SERVER): 2,
    (PacketKind.AUTH, Origin.CLIENT): 3,
    (PacketKind.AUTH, Origin.SERVER): 3,
}

_CODE_TO_KIND: dict[tuple[int, Origin], PacketKind] = {
    (code, origin): kind for (kind, origin), code in _KIND_TO_CODE.items()
}


def kind_to_code(kind: PacketKind, origin: Origin) -> int:
    """Get the wire code for a packet kind sent from ``origin``.

    :param kind: The logical packet kind
    :param origin: The side sending the packet
    :return: The raw kind code

    :raises UnsupportedKind: if ``origin`` never sends ``kind``
    """
    try:
        return _KIND_TO_CODE[(kind, origin)]
    except KeyError:
        raise UnsupportedKind(kind, origin) from None


def kind_from_code(code: int, origin: Origin) -> PacketKind:
    """Get the packet kind for a raw code sent from ``origin``.

    :param code: The raw kind code read from the wire
    :param origin: The side that sent the packet
    :return: The logical packet kind

    :raises UnknownKindCode: if the code means nothing coming from ``origin``
    """
    try:
        return _CODE_TO_KIND[(code, origin)]
    except KeyError:
        raise UnknownKindCode(code, origin) from None


def encode(kind: PacketKind, packet_id: int, body: bytes, origin: Origin) -> bytes:
    """Encode a packet for transmission.

    :param kind: The logical packet kind
    :param packet_id: The packet id
    :param body: The raw body, sent unmodified
    :param origin: The side sending the packet
    :return: The wire bytes, size prefix included

    :raises BodyTooLarge: if the body is longer than ``MAX_BODY_LEN``
    :raises UnsupportedKind: if ``origin`` never sends ``kind``
    """
    packet = Packet.create(kind, body, packet_id, origin)
    kind_code = kind_to_code(packet.kind, packet.origin)
    header = _HEADER.pack(packet.body_len + MIN_SIZE, packet.id, kind_code)
    return header + packet.body + TERMINATOR


def decode_size(size_bytes: bytes) -> int:
    """Decode the size prefix of a packet.

    :param size_bytes: Exactly four bytes read from the wire
    :return: The number of bytes still to read for this packet

    :raises BadSize: if ``size_bytes`` is not four bytes long
    """
    if len(size_bytes) != SIZE_PART_LEN:
        msg = "Bad packet size"
        raise BadSize(msg)
    return _SIZE.unpack(size_bytes)[0]


def check_size(size: int) -> int:
    """Check a decoded size prefix before reading the rest of the packet.

    :param size: The decoded size prefix
    :return: ``size`` unchanged

    :raises Malformed: if ``size`` is too small to hold an id, kind and
        terminator
    """
    if size < MIN_SIZE:
        msg = f"Malformed packet: size {size} is below {MIN_SIZE}"
        raise Malformed(msg)
    return size


def decode_payload(
    size: int,
    payload: bytes,
    origin: Origin = Origin.SERVER,
) -> Packet:
    """Decode everything after the size prefix into a packet.

    The body length comes from ``size``, so a body may itself contain null
    bytes.

    :param size: The decoded size prefix
    :param payload: The ``size`` bytes following the prefix
    :param origin: The side that sent the packet
    :return: The decoded packet

    :raises Malformed: if the payload does not have the declared shape
    :raises UnknownKindCode: if the kind code means nothing from ``origin``
    """
    body_size = size - MIN_SIZE
    if body_size < 0 or len(payload) != size:
        msg = f"Malformed packet: size {size}, got {len(payload)} bytes"
        raise Malformed(msg)

    if payload[-len(TERMINATOR) :] != TERMINATOR:
        msg = "Malformed packet: missing terminator"
        raise Malformed(msg)

    packet_id, kind_code = _ID_AND_KIND.unpack_from(payload)
    body_start = _ID_AND_KIND.size
    body = payload[body_start : body_start + body_size]

    return Packet(
        kind=kind_from_code(kind_code, origin),
        id=packet_id,
        body=body,
        origin=origin,
    )


def decode(data: bytes, origin: Origin = Origin.SERVER) -> Packet:
    """Decode a complete frame, size prefix included.

    :param data: The full packet as read from the wire
    :param origin: The side that sent the packet
    :return: The decoded packet

    :raises BadSize: if the frame is shorter than a size prefix
    :raises Malformed: if the frame does not match its size prefix
    """
    size = decode_size(data[:SIZE_PART_LEN])
    return decode_payload(size, data[SIZE_PART_LEN:], origin)
