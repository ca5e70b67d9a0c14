#!/usr/bin/env python3
"""
BITS CLI Decoder

Usage:
    bits_decode.py input.txt
    bits_decode.py --hex D2FE28 --tree
    bits_decode.py --json --pretty < input.txt
"""

import argparse
import json
import logging
import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from bits import (
    BitsError,
    PacketParser,
    evaluate,
    format_packet,
    packet_to_dict,
    total_version_sum,
)
from bits.logging_utils import setup_logging, teardown_logging
from bits.tokens import DEFAULT_MAX_DEPTH

logger = logging.getLogger(__name__)


def read_transmission(input_path: str = None, hex_text: str = None) -> bytes:
    """
    Read hex digits from --hex, a file, or stdin, trimming the line terminator.

    Input is kept as raw bytes; anything that is not a hex digit is left
    for the decoder to report.
    """
    if hex_text is not None:
        return hex_text.strip().encode('utf-8')
    if input_path and input_path != '-':
        with open(input_path, 'rb') as f:
            return f.read().strip()
    return sys.stdin.buffer.read().strip()


def decode_report(text: bytes, parser: PacketParser, show_tree: bool = False,
                  as_json: bool = False, pretty: bool = False) -> str:
    """Decode a transmission and build the report printed on stdout."""
    packet = parser.parse_hex(text)
    version_sum = total_version_sum(packet)
    value = evaluate(packet)
    logger.info("Decoded %d hex digits", len(text))

    if as_json:
        document = {
            'version_sum': version_sum,
            'value': value,
            'packet': packet_to_dict(packet),
        }
        return json.dumps(document, indent=2 if pretty else None)

    lines = []
    if show_tree:
        lines.append(format_packet(packet))
    lines.append(f"Version sum: {version_sum}")
    lines.append(f"Value: {value}")
    return '\n'.join(lines)


def main(argv=None):
    parser = argparse.ArgumentParser(
        description='Decode a BITS transmission and evaluate it',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  bits_decode.py input.txt
  bits_decode.py --hex 9C0141080250320F1802104A08 --tree
  cat input.txt | bits_decode.py --json --pretty
"""
    )

    parser.add_argument('input', nargs='?', help='File holding the hex transmission (default: stdin)')
    parser.add_argument('--hex', dest='hex_text', help='Hex transmission given inline')
    parser.add_argument('--tree', action='store_true',
                        help='Print the decoded packet tree')
    parser.add_argument('--json', action='store_true',
                        help='Write the results and packet tree as JSON')
    parser.add_argument('--pretty', action='store_true',
                        help='Pretty-print JSON output')
    parser.add_argument('--max-depth', type=int, default=DEFAULT_MAX_DEPTH,
                        help=f'Deepest packet nesting accepted (default: {DEFAULT_MAX_DEPTH})')
    parser.add_argument('--strict-arity', action='store_true',
                        help='Reject operators with the wrong number of sub-packets while parsing')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Log decoder progress to stderr')
    parser.add_argument('--log-file',
                        help='Also write debug logging to this file')

    args = parser.parse_args(argv)

    if args.max_depth < 1:
        parser.error('--max-depth must be at least 1')

    setup_logging(console_level=logging.DEBUG if args.verbose else logging.WARNING,
                  file_path=args.log_file)
    try:
        run(args)
    finally:
        teardown_logging()


def run(args) -> None:
    if args.input and args.input != '-' and not os.path.exists(args.input):
        print(f"Error: file not found: {args.input}", file=sys.stderr)
        sys.exit(1)

    text = read_transmission(args.input, args.hex_text)
    packet_parser = PacketParser(max_depth=args.max_depth, validate_arity=args.strict_arity)

    try:
        report = decode_report(text, packet_parser, args.tree, args.json, args.pretty)
    except BitsError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except RecursionError:
        print("Error: packet tree is too deeply nested to render", file=sys.stderr)
        sys.exit(1)

    print(report)


if __name__ == '__main__':
    main()
