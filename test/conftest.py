import pytest

from bits import BitWriter, Literal, OperatorKind, PacketEncoder
from bits.tokens import LengthType


def nested_sum_transmission(depth: int, version: int = 1, value: int = 5) -> str:
    """
    Hex for `depth - 1` length-type 0 Sum packets wrapped around one literal.

    Built inside-out with a loop so the depth is not limited by recursion.
    """
    body = BitWriter()
    PacketEncoder().write_packet(body, Literal(version, value))
    for _ in range(depth - 1):
        outer = BitWriter()
        outer.write_bits(version, 3)
        outer.write_bits(OperatorKind.SUM, 3)
        outer.write_bits(LengthType.TOTAL_LENGTH, 1)
        outer.write_bits(body.bit_length, 15)
        outer.extend(body)
        body = outer
    return body.flush().hex().upper()


@pytest.fixture
def nested_sums_hex():
    return nested_sum_transmission
