"""
BITS Decoder Errors

Every failure raised while decoding a transmission derives from BitsError,
itself a ValueError, so malformed input can be caught either way.
"""

from typing import Optional


class BitsError(ValueError):
    """Base class for malformed-transmission errors."""


class DecodeError(BitsError):
    """A byte in the hex input is not a hexadecimal digit."""

    def __init__(self, byte: int, offset: int):
        self.byte = byte
        self.offset = offset
        super().__init__(f"Invalid hex digit {bytes([byte])!r} at offset {offset}")


class UnexpectedEndOfInput(BitsError):
    """The transmission ended before a required field was read in full."""

    def __init__(self, field: str, message: Optional[str] = None):
        self.field = field
        super().__init__(message or f"Unexpected end of input while reading {field}")


class MalformedLengthField(UnexpectedEndOfInput):
    """An operator's length-type bit or length field is truncated or inconsistent."""


class InvalidTypeId(BitsError):
    def __init__(self, type_id: int):
        self.type_id = type_id
        super().__init__(f"Invalid type id: {type_id}")


class InvalidOperatorArity(BitsError):
    """An operator packet has a child count its operation cannot accept."""

    def __init__(self, kind_name: str, count: int, expected: str):
        self.kind_name = kind_name
        self.count = count
        super().__init__(f"{kind_name} expects {expected} sub-packets, got {count}")


class NestingTooDeep(BitsError):
    def __init__(self, max_depth: int):
        self.max_depth = max_depth
        super().__init__(f"Packet nesting exceeds maximum depth of {max_depth}")


class EncodeError(ValueError):
    """A packet cannot be represented in the BITS encoding."""
