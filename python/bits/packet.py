"""
BITS Packet Model

Immutable packet tree produced by the parser. A packet is either a
Literal carrying a number or an Operator carrying an ordered tuple of
sub-packets and the operation applied to them.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Iterator, Tuple, Union

from .tokens import TypeId


class OperatorKind(IntEnum):
    """Operator packet kinds, valued by their type id."""

    SUM = 0
    PRODUCT = 1
    MINIMUM = 2
    MAXIMUM = 3
    GREATER_THAN = 5
    LESS_THAN = 6
    EQUAL_TO = 7

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]

    @property
    def is_relational(self) -> bool:
        return self in RELATIONAL_KINDS


_DISPLAY_NAMES = {
    OperatorKind.SUM: 'Sum',
    OperatorKind.PRODUCT: 'Product',
    OperatorKind.MINIMUM: 'Min',
    OperatorKind.MAXIMUM: 'Max',
    OperatorKind.GREATER_THAN: 'GreaterThan',
    OperatorKind.LESS_THAN: 'LessThan',
    OperatorKind.EQUAL_TO: 'EqualTo',
}

RELATIONAL_KINDS = frozenset({
    OperatorKind.GREATER_THAN,
    OperatorKind.LESS_THAN,
    OperatorKind.EQUAL_TO,
})


@dataclass(frozen=True)
class Literal:
    """
    Literal value packet (type id 4).

    Attributes:
        version: 3-bit packet version
        value: Unsigned value assembled from the nibble groups
    """
    version: int
    value: int

    @property
    def type_id(self) -> TypeId:
        return TypeId.LITERAL


@dataclass(frozen=True)
class Operator:
    """
    Operator packet.

    Attributes:
        version: 3-bit packet version
        kind: Operation applied to the sub-packets
        children: Sub-packets in transmission order
    """
    version: int
    kind: OperatorKind
    children: Tuple['Packet', ...] = field(default_factory=tuple)

    def __post_init__(self):
        object.__setattr__(self, 'kind', OperatorKind(self.kind))
        object.__setattr__(self, 'children', tuple(self.children))

    @property
    def type_id(self) -> TypeId:
        return TypeId(self.kind)

    def __iter__(self) -> Iterator['Packet']:
        return iter(self.children)

    def __len__(self) -> int:
        return len(self.children)

    def __getitem__(self, index: int) -> 'Packet':
        return self.children[index]


Packet = Union[Literal, Operator]
