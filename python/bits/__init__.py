"""
BITS - Buoyancy Interchange Transmission System decoder
"""

__version__ = "0.1.0"

from .tokens import TypeId, LengthType
from .errors import (
    BitsError,
    DecodeError,
    UnexpectedEndOfInput,
    MalformedLengthField,
    InvalidTypeId,
    InvalidOperatorArity,
    NestingTooDeep,
    EncodeError,
)
from .hexcodec import HexDecoder, decode_hex
from .bitio import BitReader, BoundedWindow, BitWriter, bit_reader_over
from .packet import Literal, Operator, OperatorKind, Packet
from .parser import PacketParser, parse_packet
from .evaluator import total_version_sum, evaluate
from .encoder import PacketEncoder, encode_packet
from .render import format_packet, packet_to_dict


def decode_transmission(source, **parser_options) -> Packet:
    """Decode a hex transmission into its outermost packet."""
    return PacketParser(**parser_options).parse_hex(source)


__all__ = [
    "TypeId",
    "LengthType",
    "BitsError",
    "DecodeError",
    "UnexpectedEndOfInput",
    "MalformedLengthField",
    "InvalidTypeId",
    "InvalidOperatorArity",
    "NestingTooDeep",
    "EncodeError",
    "HexDecoder",
    "decode_hex",
    "BitReader",
    "BoundedWindow",
    "BitWriter",
    "bit_reader_over",
    "Literal",
    "Operator",
    "OperatorKind",
    "Packet",
    "PacketParser",
    "parse_packet",
    "total_version_sum",
    "evaluate",
    "PacketEncoder",
    "encode_packet",
    "format_packet",
    "packet_to_dict",
    "decode_transmission",
]
