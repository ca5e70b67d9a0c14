"""
BITS Evaluation

Post-order walks over a packet tree: the version-number total and the
arithmetic value of the expression the tree encodes. Both walks use an
explicit stack, so tree depth is not limited by the interpreter's
recursion limit.
"""

import math
from typing import Callable, Dict, List, Sequence, Tuple

from .errors import InvalidOperatorArity
from .packet import Literal, Operator, OperatorKind, Packet


def _relation(compare: Callable[[int, int], bool]) -> Callable[[Sequence[int]], int]:
    return lambda values: 1 if compare(values[0], values[1]) else 0


_OPERATIONS: Dict[OperatorKind, Callable[[Sequence[int]], int]] = {
    OperatorKind.SUM: sum,
    OperatorKind.PRODUCT: math.prod,
    OperatorKind.MINIMUM: min,
    OperatorKind.MAXIMUM: max,
    OperatorKind.GREATER_THAN: _relation(lambda a, b: a > b),
    OperatorKind.LESS_THAN: _relation(lambda a, b: a < b),
    OperatorKind.EQUAL_TO: _relation(lambda a, b: a == b),
}


def check_arity(packet: Operator) -> None:
    """
    Verify an operator has a child count its operation accepts.

    Relational operators take exactly two sub-packets; the others need at
    least one.

    Raises:
        InvalidOperatorArity: If the child count does not fit
    """
    count = len(packet.children)
    if packet.kind.is_relational:
        if count != 2:
            raise InvalidOperatorArity(packet.kind.display_name, count, 'exactly 2')
    elif count == 0:
        raise InvalidOperatorArity(packet.kind.display_name, count, 'at least 1')


def total_version_sum(packet: Packet) -> int:
    """Sum the version numbers of a packet and all packets nested in it."""
    total = 0
    stack: List[Packet] = [packet]
    while stack:
        current = stack.pop()
        total += current.version
        if isinstance(current, Operator):
            stack.extend(current.children)
    return total


def evaluate(packet: Packet) -> int:
    """
    Compute the value of the expression a packet tree encodes.

    Args:
        packet: Root of the tree

    Returns:
        The literal value, or the operator applied to its children's values
        (relational operators yield 1 or 0)

    Raises:
        InvalidOperatorArity: If any operator has an unusable child count
    """
    values: List[int] = []
    stack: List[Tuple[Packet, bool]] = [(packet, False)]

    while stack:
        current, expanded = stack.pop()
        if isinstance(current, Literal):
            values.append(current.value)
        elif not expanded:
            check_arity(current)
            stack.append((current, True))
            # Reversed so the first child is evaluated first
            stack.extend((child, False) for child in reversed(current.children))
        else:
            count = len(current.children)
            operands = values[-count:]
            del values[-count:]
            values.append(_OPERATIONS[current.kind](operands))

    return values[0]
