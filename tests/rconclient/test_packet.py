"""Unit tests for the RCON packet codec.

Covers the wire layout, the direction dependent kind codes and every way a
payload can be rejected.
"""

import struct

import pytest

from source_rcon.rconclient import packet as codec
from source_rcon.rconclient.errors import (
    BadSize,
    BodyTooLarge,
    Malformed,
    UnknownKindCode,
    UnsupportedKind,
)
from source_rcon.rconclient.types import (
    AUTH_FAILED_ID,
    MAX_BODY_LEN,
    MAX_ID,
    Origin,
    Packet,
    PacketKind,
)

VALID_PAIRS = [
    (PacketKind.EXEC, Origin.CLIENT),
    (PacketKind.EXEC_RESPONSE, Origin.CLIENT),
    (PacketKind.AUTH, Origin.CLIENT),
    (PacketKind.EXEC_RESPONSE, Origin.SERVER),
    (PacketKind.AUTH_RESPONSE, Origin.SERVER),
    (PacketKind.AUTH, Origin.SERVER),
]


class TestEncode:
    """Test suite for packet encoding."""

    def test_encode_produces_exact_wire_layout(self) -> None:
        """Test the byte layout of an encoded command packet."""
        data = codec.encode(PacketKind.EXEC, 7, b"status", Origin.CLIENT)

        assert data == struct.pack("<iii", 16, 7, 2) + b"status" + b"\x00\x00"

    @pytest.mark.parametrize("body", [b"", b"x", b"say hello", b"a" * MAX_BODY_LEN])
    def test_size_field_counts_everything_after_itself(self, body: bytes) -> None:
        """Test that the size prefix is always the body length plus 10."""
        data = codec.encode(PacketKind.EXEC, 1, body, Origin.CLIENT)

        assert codec.decode_size(data[:4]) == len(body) + 10
        assert len(data) == len(body) + 14

    def test_max_body_length_is_accepted(self) -> None:
        """Test that a body of exactly the maximum length encodes."""
        data = codec.encode(PacketKind.EXEC, 1, b"a" * 1413, Origin.CLIENT)

        assert len(data) == 1413 + 14

    def test_oversized_body_is_rejected(self) -> None:
        """Test that a body one byte over the maximum is refused, not truncated."""
        with pytest.raises(BodyTooLarge) as exc_info:
            codec.encode(PacketKind.EXEC, 1, b"a" * 1414, Origin.CLIENT)

        assert exc_info.value.length == 1414

    @pytest.mark.parametrize(
        ("kind", "origin"),
        [
            (PacketKind.AUTH_RESPONSE, Origin.CLIENT),
            (PacketKind.EXEC, Origin.SERVER),
        ],
    )
    def test_kind_without_code_is_rejected(
        self,
        kind: PacketKind,
        origin: Origin,
    ) -> None:
        """Test that protocol-invalid kind and origin pairs are not coerced."""
        with pytest.raises(UnsupportedKind):
            codec.encode(kind, 1, b"", origin)

    def test_packet_create_checks_body_length(self) -> None:
        """Test that Packet.create applies the same body limit."""
        packet = Packet.create(PacketKind.AUTH, b"secret", 3)

        assert packet.origin is Origin.CLIENT
        assert packet.body_len == len(b"secret")
        assert packet.id == 3

        with pytest.raises(BodyTooLarge):
            Packet.create(PacketKind.AUTH, b"a" * (MAX_BODY_LEN + 1))


class TestKindCodes:
    """Test suite for the direction dependent kind code tables."""

    def test_code_two_depends_on_origin(self) -> None:
        """Test that identical bytes decode differently by sender."""
        data = struct.pack("<ii", 4, 2) + b"\x00\x00"

        from_client = codec.decode_payload(10, data, Origin.CLIENT)
        from_server = codec.decode_payload(10, data, Origin.SERVER)

        assert from_client.kind is PacketKind.EXEC
        assert from_server.kind is PacketKind.AUTH_RESPONSE

    def test_codes_shared_by_both_sides(self) -> None:
        """Test the codes that mean the same thing in both directions."""
        for origin in Origin:
            assert codec.kind_from_code(0, origin) is PacketKind.EXEC_RESPONSE
            assert codec.kind_from_code(3, origin) is PacketKind.AUTH
            assert codec.kind_to_code(PacketKind.EXEC_RESPONSE, origin) == 0
            assert codec.kind_to_code(PacketKind.AUTH, origin) == 3

    @pytest.mark.parametrize("code", [-1, 1, 4, 200])
    def test_unknown_codes_are_rejected(self, code: int) -> None:
        """Test that unmapped codes raise for either side."""
        for origin in Origin:
            with pytest.raises(UnknownKindCode) as exc_info:
                codec.kind_from_code(code, origin)
            assert exc_info.value.code == code


class TestDecode:
    """Test suite for packet decoding."""

    @pytest.mark.parametrize(("kind", "origin"), VALID_PAIRS)
    def test_decode_reproduces_encoded_packet(
        self,
        kind: PacketKind,
        origin: Origin,
    ) -> None:
        """Test that decoding as the sender gives back the same packet."""
        data = codec.encode(kind, MAX_ID, b"some output", origin)

        packet = codec.decode(data, origin)

        assert packet == Packet(kind, MAX_ID, b"some output", origin)

    def test_decode_auth_failed_id(self) -> None:
        """Test that the -1 sentinel id survives decoding."""
        data = codec.encode(
            PacketKind.AUTH_RESPONSE,
            AUTH_FAILED_ID,
            b"",
            Origin.SERVER,
        )

        packet = codec.decode(data)

        assert packet.kind is PacketKind.AUTH_RESPONSE
        assert packet.id == AUTH_FAILED_ID

    def test_body_may_contain_null_bytes(self) -> None:
        """Test that the body length comes from the size, not a terminator scan."""
        body = b"first\x00\x00second\x00"
        data = codec.encode(PacketKind.EXEC_RESPONSE, 9, body, Origin.SERVER)

        assert codec.decode(data).body == body

    def test_server_bodies_are_not_length_checked(self) -> None:
        """Test that long server responses still decode."""
        body = b"b" * 4096
        payload = struct.pack("<ii", 1, 0) + body + b"\x00\x00"

        packet = codec.decode_payload(len(payload), payload, Origin.SERVER)

        assert packet.body == body

    @pytest.mark.parametrize(
        "size_bytes",
        [b"", b"\x0a\x00\x00", b"\x0a\x00\x00\x00\x00"],
    )
    def test_decode_size_requires_four_bytes(self, size_bytes: bytes) -> None:
        """Test that the size prefix must be exactly four bytes."""
        with pytest.raises(BadSize):
            codec.decode_size(size_bytes)

    @pytest.mark.parametrize("size", [-1, 0, 9])
    def test_check_size_rejects_short_sizes(self, size: int) -> None:
        """Test that sizes below the header length are malformed."""
        with pytest.raises(Malformed):
            codec.check_size(size)

    def test_check_size_accepts_empty_body(self) -> None:
        """Test that the smallest valid size passes through."""
        assert codec.check_size(10) == 10

    def test_missing_terminator_is_malformed(self) -> None:
        """Test that the final two bytes must be nulls."""
        payload = struct.pack("<ii", 1, 0) + b"abc\x00"

        with pytest.raises(Malformed):
            codec.decode_payload(len(payload), payload, Origin.SERVER)

    def test_truncated_payload_is_malformed(self) -> None:
        """Test that a payload shorter than its size is refused."""
        payload = struct.pack("<ii", 1, 0) + b"abc\x00\x00"

        with pytest.raises(Malformed):
            codec.decode_payload(len(payload) + 5, payload, Origin.SERVER)

    def test_size_below_minimum_is_malformed(self) -> None:
        """Test that a size too small for the header is refused."""
        with pytest.raises(Malformed):
            codec.decode_payload(6, b"\x00" * 6, Origin.SERVER)

    def test_unknown_kind_code_in_payload(self) -> None:
        """Test that a well-formed payload with an unknown code is refused."""
        payload = struct.pack("<ii", 1, 200) + b"\x00\x00"

        with pytest.raises(UnknownKindCode):
            codec.decode_payload(len(payload), payload, Origin.SERVER)
