"""
BITS Bit I/O

Bit-level reading and writing, MSB first.

BitReader serves reads of 1-32 bits from any iterable of byte values and
buffers the unread bits of the last fetched byte. BoundedWindow limits a
reader to a fixed number of bits and, when released, skips whatever was
left unread so the parent ends up exactly at the window boundary.
"""

from typing import Iterable, Iterator, Optional

from .tokens import MAX_READ_BITS, NO_DATA


def _check_count(count: int) -> None:
    if not 1 <= count <= MAX_READ_BITS:
        raise ValueError(f"read_bits count must be between 1 and {MAX_READ_BITS}, got {count}")


class BitReader:
    """
    Bit-level reader over a byte stream.

    End of input is signalled in-band: read_bits() returns -1 when none of
    the requested bits were available, and the partial value when only
    some of them were.
    """

    def __init__(self, source: Iterable[int]):
        """
        Initialize with a byte source.

        Args:
            source: Iterable of byte values (bytes, HexDecoder, ...)
        """
        self._source = source
        self._bytes: Iterator[int] = iter(source)
        self._buffer = 0
        self._buffer_size = 0
        self._exhausted = False
        self._position = 0

    @property
    def position(self) -> int:
        """Total bits consumed so far."""
        return self._position

    @property
    def root(self) -> 'BitReader':
        """The reader that owns the byte source."""
        return self

    @property
    def remaining(self) -> Optional[int]:
        """Bits left before the bound, or None when unbounded."""
        return None

    def _fill(self) -> bool:
        byte = next(self._bytes, None)
        if byte is None:
            self._exhausted = True
            return False
        self._buffer = byte
        self._buffer_size = 8
        return True

    def read_bits(self, count: int) -> int:
        """
        Read up to `count` bits as an unsigned integer.

        Args:
            count: Number of bits to read (1-32)

        Returns:
            The bits MSB first, the partial value if the input ran out
            part-way, or -1 if no bits were left at all
        """
        _check_count(count)
        if self._exhausted:
            return NO_DATA

        result = 0
        remaining = count
        while remaining > 0:
            if self._buffer_size == 0 and not self._fill():
                return NO_DATA if remaining == count else result

            take = min(remaining, self._buffer_size)
            self._buffer_size -= take
            bits = (self._buffer >> self._buffer_size) & ((1 << take) - 1)
            result = (result << take) | bits
            remaining -= take
            self._position += take

        return result

    def take(self, count: int) -> 'BoundedWindow':
        """Return a window over the next `count` bits of this reader."""
        return BoundedWindow(self, count)

    def close(self) -> None:
        close = getattr(self._source, 'close', None)
        if close is not None:
            close()

    def __enter__(self) -> 'BitReader':
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class BoundedWindow(BitReader):
    """
    A reader limited to the next `size` bits of its parent.

    Reads never cross the bound: a read is cut short at the bound and any
    read starting at the bound returns -1. Closing the window drains the
    unread remainder so the parent ends up exactly `size` bits further on.

    A window reads straight from the root BitReader and tracks only its
    own end position, so nesting windows costs nothing per read. A window
    opened inside another never extends past the enclosing bound.

    Example:
        with reader.take(27) as window:
            children = read_all(window)
        # reader is now exactly 27 bits further on
    """

    def __init__(self, parent: BitReader, size: int):
        if size < 0:
            raise ValueError(f"Window size must be non-negative, got {size}")
        self._root = parent.root
        self._size = size
        self._start = self._root.position
        self._end = self._start + size
        bound = parent.remaining
        if bound is not None:
            self._end = min(self._end, self._start + bound)
        self._closed = False

    @property
    def root(self) -> BitReader:
        return self._root

    @property
    def size(self) -> int:
        return self._size

    @property
    def position(self) -> int:
        """Bits consumed since the window was opened."""
        return self._root.position - self._start

    @property
    def remaining(self) -> int:
        return max(self._end - self._root.position, 0)

    @property
    def closed(self) -> bool:
        return self._closed

    def read_bits(self, count: int) -> int:
        _check_count(count)
        available = self._end - self._root.position
        if available <= 0:
            return NO_DATA
        return self._root.read_bits(min(count, available))

    def close(self) -> None:
        """Skip the unread remainder of the window."""
        if self._closed:
            return
        self._closed = True
        while self._root.position < self._end:
            skip = min(MAX_READ_BITS, self._end - self._root.position)
            if self._root.read_bits(skip) == NO_DATA:
                break


class BitWriter:
    """
    Collects MSB-first bit fields for the packet encoder.

    Bits are kept in an integer accumulator until a whole byte is ready.
    """

    def __init__(self):
        self._buffer = bytearray()
        self._pending = 0
        self._pending_bits = 0

    def write_bits(self, value: int, count: int) -> None:
        """
        Append the low `count` bits of `value`.

        Args:
            value: Field value; higher bits are ignored
            count: Field width in bits
        """
        if count < 0:
            raise ValueError(f"Bit count must be non-negative, got {count}")
        self._pending = (self._pending << count) | (value & ((1 << count) - 1))
        self._pending_bits += count
        while self._pending_bits >= 8:
            self._pending_bits -= 8
            self._buffer.append((self._pending >> self._pending_bits) & 0xFF)
        self._pending &= (1 << self._pending_bits) - 1

    def extend(self, other: 'BitWriter') -> None:
        """Append everything written to `other` so far."""
        if self._pending_bits == 0:
            self._buffer += other._buffer
        else:
            for byte in other._buffer:
                self.write_bits(byte, 8)
        self.write_bits(other._pending, other._pending_bits)

    @property
    def bit_length(self) -> int:
        """Total bits written so far."""
        return len(self._buffer) * 8 + self._pending_bits

    def flush(self) -> bytes:
        """Return the written bits as bytes, zero-filling the last byte."""
        if self._pending_bits:
            self._buffer.append(self._pending << (8 - self._pending_bits))
            self._pending = 0
            self._pending_bits = 0
        return bytes(self._buffer)


def bit_reader_over(source: Iterable[int]) -> BitReader:
    """Wrap a byte stream in a BitReader."""
    return BitReader(source)
