"""
BITS Type IDs and Field Layout

Defines the packet type identifiers, length-type selectors and the bit
widths of every field in a BITS packet header.
"""

from enum import IntEnum


# Header field widths (bits)
VERSION_BITS = 3
TYPE_ID_BITS = 3
LENGTH_TYPE_BITS = 1
TOTAL_LENGTH_BITS = 15
SUB_PACKET_COUNT_BITS = 11

# Literal groups: 1 continuation bit + 4 value bits
LITERAL_GROUP_BITS = 5
NIBBLE_BITS = 4
NIBBLE_MASK = 0x0F
CONTINUE_FLAG = 0x10

MAX_VERSION = (1 << VERSION_BITS) - 1
MAX_TOTAL_LENGTH = (1 << TOTAL_LENGTH_BITS) - 1
MAX_SUB_PACKET_COUNT = (1 << SUB_PACKET_COUNT_BITS) - 1

# Widest single read served by a bit reader
MAX_READ_BITS = 32

# Returned by read_bits() when no bits could be read
NO_DATA = -1

DEFAULT_MAX_DEPTH = 200


class TypeId(IntEnum):
    """Packet type identifiers carried in the 3-bit type field."""

    SUM = 0
    PRODUCT = 1
    MINIMUM = 2
    MAXIMUM = 3
    LITERAL = 4
    GREATER_THAN = 5
    LESS_THAN = 6
    EQUAL_TO = 7


class LengthType(IntEnum):
    """Operator length-type selector (the bit after the header)."""

    TOTAL_LENGTH = 0      # followed by 15-bit total sub-packet length
    SUB_PACKET_COUNT = 1  # followed by 11-bit sub-packet count

