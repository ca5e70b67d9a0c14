"""
BITS Packet Rendering

Text and JSON-compatible views of a packet tree.
"""

from typing import Any, Dict, List

from .packet import Literal, Operator, Packet


INDENT = '  '


def _write(packet: Packet, out: List[str], indent: str) -> None:
    if isinstance(packet, Literal):
        out.append(str(packet.value))
        return

    out.append(packet.kind.display_name)
    out.append(' {')
    if all(isinstance(child, Literal) for child in packet.children):
        out.append(' ')
        out.append(', '.join(str(child.value) for child in packet.children))
        out.append(' ')
    else:
        inner = indent + INDENT
        for i, child in enumerate(packet.children):
            out.append(',\n' + inner if i else '\n' + inner)
            _write(child, out, inner)
        out.append('\n' + indent)
    out.append('}')


def format_packet(packet: Packet) -> str:
    """
    Render a packet tree as nested text.

    Operators whose children are all literals stay on one line:

        Sum {
          Product { 6, 9 },
          12
        }
    """
    out: List[str] = []
    _write(packet, out, '')
    return ''.join(out)


def packet_to_dict(packet: Packet) -> Dict[str, Any]:
    """Convert a packet tree to plain dicts/lists for JSON output."""
    if isinstance(packet, Literal):
        return {'version': packet.version, 'type': 'literal', 'value': packet.value}
    return {
        'version': packet.version,
        'type': packet.kind.name.lower(),
        'children': [packet_to_dict(child) for child in packet.children],
    }
