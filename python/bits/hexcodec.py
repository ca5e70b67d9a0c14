"""
BITS Hex Decoding

Turns a stream of ASCII hex digits into the byte stream a BitReader
consumes. Decoding is lazy: bytes are produced only as they are pulled.
"""

import io
from typing import BinaryIO, Iterator, Optional, Union

from .errors import DecodeError


DEFAULT_CHUNK_SIZE = 4096

# ASCII code -> nibble value, both cases
_HEX_VALUES = {code: int(chr(code), 16) for code in b'0123456789abcdefABCDEF'}

HexSource = Union[bytes, bytearray, memoryview, str, BinaryIO]


def _hex_value(byte: int, offset: int) -> int:
    value = _HEX_VALUES.get(byte)
    if value is None:
        raise DecodeError(byte, offset)
    return value


class HexDecoder:
    """
    Lazy hex-to-byte decoder.

    Each output byte combines two consecutive input digits, high nibble
    first. An odd trailing digit is emitted with a zero low nibble.

    Example:
        with HexDecoder(b'D2FE28') as decoder:
            data = bytes(decoder)  # b'\\xd2\\xfe\\x28'
    """

    def __init__(self, source: HexSource, chunk_size: int = DEFAULT_CHUNK_SIZE):
        """
        Initialize decoder over a hex source.

        Args:
            source: Hex digits as bytes/str, or a binary stream with read()
            chunk_size: Bytes fetched per read() call on stream sources
        """
        if chunk_size < 1:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")
        if isinstance(source, str):
            source = source.encode('ascii', errors='replace')
        if isinstance(source, (bytes, bytearray, memoryview)):
            source = io.BytesIO(bytes(source))
        self._source: Optional[BinaryIO] = source
        self._chunk_size = chunk_size
        self._offset = 0
        self._bytes = self._decode()

    def _digits(self) -> Iterator[int]:
        while self._source is not None:
            chunk = self._source.read(self._chunk_size)
            if not chunk:
                return
            yield from chunk

    def _decode(self) -> Iterator[int]:
        digits = self._digits()
        for high in digits:
            value = _hex_value(high, self._offset) << 4
            self._offset += 1
            low = next(digits, None)
            if low is not None:
                value |= _hex_value(low, self._offset)
                self._offset += 1
            yield value

    def __iter__(self) -> Iterator[int]:
        return self

    def __next__(self) -> int:
        return next(self._bytes)

    def read_byte(self) -> Optional[int]:
        """Return the next decoded byte, or None at end of input."""
        return next(self._bytes, None)

    @property
    def closed(self) -> bool:
        return self._source is None

    def close(self) -> None:
        """Release the underlying source, whether or not it was drained."""
        if self._source is None:
            return
        self._bytes.close()
        source, self._source = self._source, None
        source.close()

    def __enter__(self) -> 'HexDecoder':
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def decode_hex(source: HexSource, chunk_size: int = DEFAULT_CHUNK_SIZE) -> HexDecoder:
    """
    Decode a stream of hex digits into a lazy byte stream.

    Args:
        source: Hex digits as bytes/str, or a binary stream with read()
        chunk_size: Bytes fetched per read() call on stream sources

    Returns:
        HexDecoder yielding one int (0-255) per pair of digits
    """
    return HexDecoder(source, chunk_size=chunk_size)
