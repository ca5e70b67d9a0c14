"""
BITS Packet Parser

Parser turning a bit stream into a packet tree.

Each packet starts with a 3-bit version and a 3-bit type id. Type 4 is a
literal made of 5-bit groups; every other type is an operator whose
sub-packets are bounded either by their total bit length (length type 0)
or by their count (length type 1).
"""

import logging
from typing import List, Optional, Type, Union

from .bitio import BitReader, BoundedWindow, bit_reader_over
from .errors import (
    InvalidTypeId,
    MalformedLengthField,
    NestingTooDeep,
    UnexpectedEndOfInput,
)
from .evaluator import check_arity
from .hexcodec import HexSource, decode_hex
from .packet import Literal, Operator, OperatorKind, Packet
from .tokens import (
    CONTINUE_FLAG,
    DEFAULT_MAX_DEPTH,
    LENGTH_TYPE_BITS,
    LITERAL_GROUP_BITS,
    NIBBLE_BITS,
    NIBBLE_MASK,
    NO_DATA,
    SUB_PACKET_COUNT_BITS,
    TOTAL_LENGTH_BITS,
    TYPE_ID_BITS,
    VERSION_BITS,
    LengthType,
    TypeId,
)

logger = logging.getLogger(__name__)


def _read_field(reader: BitReader, width: int, name: str,
                error: Type[UnexpectedEndOfInput] = UnexpectedEndOfInput) -> int:
    """Read a field that must be present in full."""
    start = reader.position
    value = reader.read_bits(width)
    if value == NO_DATA or reader.position - start != width:
        raise error(name)
    return value


class _PendingOperator:
    """An operator packet whose sub-packets are still being parsed."""

    def __init__(self, version: int, kind: OperatorKind, source: BitReader,
                 window: Optional[BoundedWindow] = None, count: int = 0):
        self.version = version
        self.kind = kind
        self.source = source
        self.window = window
        self.count = count
        self.children: List[Packet] = []

    def next_version(self) -> Optional[int]:
        """Read the version of the next sub-packet, or None when there is none."""
        if self.window is None:
            if len(self.children) == self.count:
                return None
            return _read_field(self.source, VERSION_BITS, 'version')

        start = self.window.position
        version = self.window.read_bits(VERSION_BITS)
        if version == NO_DATA:
            return None
        if self.window.position - start != VERSION_BITS:
            raise UnexpectedEndOfInput('version')
        return version

    def release(self) -> None:
        if self.window is not None:
            self.window.close()


class PacketParser:
    """
    Parses one BITS packet, with everything nested in it, from a reader.

    Operators under construction are kept on an explicit stack, so nesting
    depth is bounded by max_depth alone, never by the interpreter's
    recursion limit. Every window opened for a length-type 0 operator is
    released on the way out, including when the parse fails.

    Example:
        parser = PacketParser()
        packet = parser.parse_hex('D2FE28')  # Literal(version=6, value=2021)
    """

    def __init__(self, max_depth: int = DEFAULT_MAX_DEPTH, validate_arity: bool = False):
        """
        Initialize parser.

        Args:
            max_depth: Deepest packet nesting accepted (outermost packet is 1)
            validate_arity: Reject operators whose child count does not fit
                their operation while parsing instead of at evaluation
        """
        if max_depth < 1:
            raise ValueError(f"max_depth must be at least 1, got {max_depth}")
        self.max_depth = max_depth
        self.validate_arity = validate_arity

    def parse(self, reader: BitReader) -> Packet:
        """
        Parse the outermost packet.

        Padding after the packet is left unread.

        Args:
            reader: BitReader positioned at the start of a packet

        Returns:
            The packet tree

        Raises:
            BitsError: If the transmission is malformed
        """
        stack: List[_PendingOperator] = []
        version = _read_field(reader, VERSION_BITS, 'version')
        try:
            while True:
                source = stack[-1].source if stack else reader
                if len(stack) + 1 > self.max_depth:
                    raise NestingTooDeep(self.max_depth)

                started = self._start_packet(source, version, len(stack) + 1)
                if isinstance(started, _PendingOperator):
                    stack.append(started)
                    finished = None
                else:
                    finished = started

                # Close operators until one still expects a sub-packet
                while True:
                    if finished is not None:
                        if not stack:
                            logger.debug("Parsed packet tree in %d bits", reader.position)
                            return finished
                        stack[-1].children.append(finished)
                    version = stack[-1].next_version()
                    if version is not None:
                        break
                    finished = self._finish(stack.pop())
        finally:
            for pending in reversed(stack):
                pending.release()

    def parse_hex(self, source: HexSource) -> Packet:
        """Decode hex digits and parse the outermost packet."""
        with bit_reader_over(decode_hex(source)) as reader:
            return self.parse(reader)

    def _start_packet(self, reader: BitReader, version: int,
                      depth: int) -> Union[Literal, _PendingOperator]:
        """Parse a literal outright, or an operator's header up to its first sub-packet."""
        raw_type = _read_field(reader, TYPE_ID_BITS, 'type id')
        try:
            type_id = TypeId(raw_type)
        except ValueError:
            raise InvalidTypeId(raw_type) from None

        if type_id == TypeId.LITERAL:
            return Literal(version, self._read_literal(reader))

        kind = OperatorKind(type_id)
        length_type = _read_field(reader, LENGTH_TYPE_BITS, 'length type', MalformedLengthField)

        if length_type == LengthType.SUB_PACKET_COUNT:
            count = _read_field(reader, SUB_PACKET_COUNT_BITS, 'sub-packet count', MalformedLengthField)
            return _PendingOperator(version, kind, reader, count=count)

        total = _read_field(reader, TOTAL_LENGTH_BITS, 'total length', MalformedLengthField)
        available = reader.remaining
        if available is not None and total > available:
            raise MalformedLengthField(
                'total length',
                f"Sub-packet length {total} exceeds the {available} bits left in the enclosing packet",
            )

        logger.debug("Opening %d-bit window at depth %d", total, depth)
        window = reader.take(total)
        return _PendingOperator(version, kind, window, window=window)

    def _read_literal(self, reader: BitReader) -> int:
        value = 0
        while True:
            group = _read_field(reader, LITERAL_GROUP_BITS, 'literal group')
            value = (value << NIBBLE_BITS) | (group & NIBBLE_MASK)
            if not group & CONTINUE_FLAG:
                return value

    def _finish(self, pending: _PendingOperator) -> Operator:
        pending.release()
        window = pending.window
        if window is not None and window.position != window.size:
            raise UnexpectedEndOfInput(
                'sub-packets', f"Input ended inside a {window.size}-bit sub-packet block"
            )

        packet = Operator(pending.version, pending.kind, pending.children)
        if self.validate_arity:
            check_arity(packet)
        return packet


def parse_packet(reader: BitReader, max_depth: int = DEFAULT_MAX_DEPTH,
                 validate_arity: bool = False) -> Packet:
    """
    Parse the outermost packet from a bit reader.

    Args:
        reader: Source of bits
        max_depth: Deepest packet nesting accepted
        validate_arity: Check operator child counts while parsing

    Returns:
        The packet tree
    """
    return PacketParser(max_depth=max_depth, validate_arity=validate_arity).parse(reader)
