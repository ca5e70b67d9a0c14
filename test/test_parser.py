"""Tests for packet parsing."""

import pytest

from bits import (
    BitWriter,
    InvalidOperatorArity,
    Literal,
    MalformedLengthField,
    NestingTooDeep,
    Operator,
    OperatorKind,
    PacketEncoder,
    PacketParser,
    UnexpectedEndOfInput,
    bit_reader_over,
    decode_hex,
    decode_transmission,
    evaluate,
    parse_packet,
    total_version_sum,
)
from bits.tokens import LengthType


def parse(hex_text, **options):
    return parse_packet(bit_reader_over(decode_hex(hex_text)), **options)


def test_literal():
    assert parse('D2FE28') == Literal(version=6, value=2021)


def test_operator_with_total_length():
    packet = parse('38006F45291200')
    assert isinstance(packet, Operator)
    assert packet.version == 1
    assert packet.kind == OperatorKind.LESS_THAN
    assert packet.children == (Literal(6, 10), Literal(2, 20))


def test_operator_with_sub_packet_count():
    packet = parse('EE00D40C823060')
    assert packet.version == 7
    assert packet.kind == OperatorKind.MAXIMUM
    assert [child.value for child in packet] == [1, 2, 3]
    assert len(packet) == 3


def test_nested_operators():
    packet = parse('8A004A801A8002F478')
    assert packet.version == 4
    inner = packet[0]
    assert inner.version == 1
    innermost = inner[0]
    assert innermost.version == 5
    assert innermost[0] == Literal(6, 15)


def test_operator_packet_mixing_length_types():
    # Sum of an operator bounded by count and one bounded by length
    packet = parse('620080001611562C8802118E34')
    assert packet.version == 3
    assert len(packet) == 2
    assert all(len(child) == 2 for child in packet)


def test_trailing_padding_is_not_read():
    reader = bit_reader_over(decode_hex('D2FE28'))
    parse_packet(reader)
    assert reader.position == 21


def test_large_literal_value():
    value = (1 << 100) + 12345
    hex_text = PacketEncoder().encode_hex(Literal(0, value))
    assert parse(hex_text) == Literal(0, value)


def test_siblings_resume_after_window():
    # Total-length operator first, then a literal sibling in a count operator
    tree = Operator(2, OperatorKind.SUM, [
        Operator(1, OperatorKind.PRODUCT, [Literal(0, 3), Literal(0, 4)]),
        Literal(5, 9),
    ])
    writer = BitWriter()
    writer.write_bits(2, 3)
    writer.write_bits(0, 3)
    writer.write_bits(LengthType.SUB_PACKET_COUNT, 1)
    writer.write_bits(2, 11)
    PacketEncoder(LengthType.TOTAL_LENGTH).write_packet(writer, tree[0])
    PacketEncoder().write_packet(writer, tree[1])
    assert parse_packet(bit_reader_over(writer.flush())) == tree


def test_window_ending_inside_version_field():
    # 13-bit window holding one 11-bit literal and 2 bits of zero padding
    writer = BitWriter()
    writer.write_bits(0, 3)
    writer.write_bits(OperatorKind.SUM, 3)
    writer.write_bits(LengthType.TOTAL_LENGTH, 1)
    writer.write_bits(13, 15)
    PacketEncoder().write_packet(writer, Literal(1, 7))
    writer.write_bits(0, 2)
    with pytest.raises(UnexpectedEndOfInput) as excinfo:
        parse_packet(bit_reader_over(writer.flush()))
    assert excinfo.value.field == "version"


def test_empty_input():
    with pytest.raises(UnexpectedEndOfInput) as excinfo:
        parse('')
    assert excinfo.value.field == 'version'


def test_truncated_literal():
    with pytest.raises(UnexpectedEndOfInput) as excinfo:
        parse('D2FE')
    assert excinfo.value.field == 'literal group'


def test_truncated_length_field():
    # Version 1, type 6, length type 0, then only 9 bits of the 15-bit length
    with pytest.raises(MalformedLengthField) as excinfo:
        parse('3800')
    assert excinfo.value.field == 'total length'


def test_truncated_sub_packets():
    with pytest.raises(UnexpectedEndOfInput):
        parse('38006F4529')


def test_truncated_count_operator():
    with pytest.raises(UnexpectedEndOfInput):
        parse('EE00D40C82')


def test_window_exceeding_enclosing_window():
    inner = BitWriter()
    inner.write_bits(0, 3)
    inner.write_bits(OperatorKind.SUM, 3)
    inner.write_bits(LengthType.TOTAL_LENGTH, 1)
    inner.write_bits(500, 15)

    writer = BitWriter()
    writer.write_bits(0, 3)
    writer.write_bits(OperatorKind.SUM, 3)
    writer.write_bits(LengthType.TOTAL_LENGTH, 1)
    writer.write_bits(inner.bit_length, 15)
    writer.extend(inner)
    with pytest.raises(MalformedLengthField):
        parse_packet(bit_reader_over(writer.flush()))


def test_errors_are_value_errors():
    with pytest.raises(ValueError):
        parse('D2FE')


def nested_sums(depth):
    packet = Literal(0, 1)
    for _ in range(depth - 1):
        packet = Operator(0, OperatorKind.SUM, [packet])
    return packet


def test_nesting_depth_limit():
    hex_text = PacketEncoder().encode_hex(nested_sums(6))
    assert parse(hex_text, max_depth=6) == nested_sums(6)
    with pytest.raises(NestingTooDeep):
        parse(hex_text, max_depth=5)


def test_invalid_max_depth():
    with pytest.raises(ValueError):
        PacketParser(max_depth=0)


def test_arity_not_checked_by_default():
    hex_text = PacketEncoder().encode_hex(Operator(0, OperatorKind.GREATER_THAN, [Literal(0, 1)]))
    packet = parse(hex_text)
    assert packet.children == (Literal(0, 1),)


def test_strict_arity():
    hex_text = PacketEncoder().encode_hex(Operator(0, OperatorKind.EQUAL_TO, [Literal(0, 1)]))
    with pytest.raises(InvalidOperatorArity):
        parse(hex_text, validate_arity=True)


def test_empty_total_length_operator():
    hex_text = PacketEncoder().encode_hex(Operator(0, OperatorKind.SUM, []))
    assert parse(hex_text) == Operator(0, OperatorKind.SUM, ())


def test_parse_hex():
    assert PacketParser().parse_hex(b'D2FE28') == Literal(6, 2021)


def test_decode_transmission():
    packet = decode_transmission('C200B40A82', max_depth=2)
    assert packet.kind == OperatorKind.SUM


def test_deeply_nested_total_length_packets(nested_sums_hex):
    hex_text = nested_sums_hex(400)
    packet = PacketParser(max_depth=1000).parse_hex(hex_text)
    assert total_version_sum(packet) == 400
    assert evaluate(packet) == 5


def test_depth_limit_on_deep_transmission(nested_sums_hex):
    with pytest.raises(NestingTooDeep):
        PacketParser(max_depth=399).parse_hex(nested_sums_hex(400))


def test_windows_released_when_parse_fails():
    # Count operator around a 30-bit window; the GreaterThan inside it has one
    # child and is rejected with a bit of the window still unread
    writer = BitWriter()
    writer.write_bits(0, 3)
    writer.write_bits(OperatorKind.SUM, 3)
    writer.write_bits(LengthType.SUB_PACKET_COUNT, 1)
    writer.write_bits(1, 11)
    writer.write_bits(0, 3)
    writer.write_bits(OperatorKind.SUM, 3)
    writer.write_bits(LengthType.TOTAL_LENGTH, 1)
    writer.write_bits(30, 15)
    encoder = PacketEncoder(LengthType.SUB_PACKET_COUNT)
    encoder.write_packet(writer, Operator(0, OperatorKind.GREATER_THAN, [Literal(0, 3)]))
    writer.write_bits(0, 1)
    writer.write_bits(0xFFFF, 16)
    reader = bit_reader_over(writer.flush())

    with pytest.raises(InvalidOperatorArity):
        parse_packet(reader, validate_arity=True)
    assert reader.position == 18 + 22 + 30
