"""
BITS Packet Encoder

Serializes packet trees back into BITS transmissions. Used to build test
fixtures and benchmark data; the decoder does not depend on it.
"""

from typing import List

from .bitio import BitWriter
from .errors import EncodeError
from .packet import Literal, Operator, Packet
from .tokens import (
    CONTINUE_FLAG,
    LENGTH_TYPE_BITS,
    LITERAL_GROUP_BITS,
    MAX_SUB_PACKET_COUNT,
    MAX_TOTAL_LENGTH,
    MAX_VERSION,
    NIBBLE_BITS,
    NIBBLE_MASK,
    SUB_PACKET_COUNT_BITS,
    TOTAL_LENGTH_BITS,
    TYPE_ID_BITS,
    VERSION_BITS,
    LengthType,
)


def literal_nibbles(value: int) -> List[int]:
    """
    Split a non-negative value into 4-bit groups, most significant first.

    Zero is a single group.
    """
    if value < 0:
        raise EncodeError(f"Literal values must be non-negative, got {value}")
    nibbles = [value & NIBBLE_MASK]
    value >>= NIBBLE_BITS
    while value:
        nibbles.append(value & NIBBLE_MASK)
        value >>= NIBBLE_BITS
    nibbles.reverse()
    return nibbles


class PacketEncoder:
    """
    Encodes packet trees as BITS bit streams.

    Example:
        encoder = PacketEncoder(length_type=LengthType.SUB_PACKET_COUNT)
        encoder.encode_hex(Literal(6, 2021))  # 'D2FE28'
    """

    def __init__(self, length_type: LengthType = LengthType.TOTAL_LENGTH):
        """
        Initialize encoder.

        Args:
            length_type: How operator packets bound their sub-packets
        """
        self.length_type = LengthType(length_type)

    def encode(self, packet: Packet) -> bytes:
        """
        Encode a packet tree.

        Args:
            packet: Root of the tree

        Returns:
            Transmission bytes, zero-padded to a whole byte

        Raises:
            EncodeError: If a field does not fit its width
        """
        writer = BitWriter()
        self.write_packet(writer, packet)
        return writer.flush()

    def encode_hex(self, packet: Packet) -> str:
        """Encode a packet tree as uppercase hex digits."""
        return self.encode(packet).hex().upper()

    def write_packet(self, writer: BitWriter, packet: Packet) -> None:
        """Append one packet (and its children) to a writer."""
        if not 0 <= packet.version <= MAX_VERSION:
            raise EncodeError(f"Version must be between 0 and {MAX_VERSION}, got {packet.version}")

        writer.write_bits(packet.version, VERSION_BITS)
        writer.write_bits(packet.type_id, TYPE_ID_BITS)

        if isinstance(packet, Literal):
            nibbles = literal_nibbles(packet.value)
            for i, nibble in enumerate(nibbles):
                flag = CONTINUE_FLAG if i < len(nibbles) - 1 else 0
                writer.write_bits(flag | nibble, LITERAL_GROUP_BITS)
            return

        self._write_children(writer, packet)

    def _write_children(self, writer: BitWriter, packet: Operator) -> None:
        writer.write_bits(self.length_type, LENGTH_TYPE_BITS)

        if self.length_type == LengthType.SUB_PACKET_COUNT:
            if len(packet.children) > MAX_SUB_PACKET_COUNT:
                raise EncodeError(
                    f"At most {MAX_SUB_PACKET_COUNT} sub-packets fit, got {len(packet.children)}"
                )
            writer.write_bits(len(packet.children), SUB_PACKET_COUNT_BITS)
            for child in packet.children:
                self.write_packet(writer, child)
            return

        # Children go to a scratch writer first to learn their bit length
        body = BitWriter()
        for child in packet.children:
            self.write_packet(body, child)
        if body.bit_length > MAX_TOTAL_LENGTH:
            raise EncodeError(
                f"Sub-packets take {body.bit_length} bits, at most {MAX_TOTAL_LENGTH} fit"
            )
        writer.write_bits(body.bit_length, TOTAL_LENGTH_BITS)
        writer.extend(body)


def encode_packet(packet: Packet, length_type: LengthType = LengthType.TOTAL_LENGTH) -> bytes:
    return PacketEncoder(length_type=length_type).encode(packet)
