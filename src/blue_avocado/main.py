"""
Blue Avocado - Command Line Entry Point

    blue-avocado list
    blue-avocado encrypt --cipher salsa20 --key <hex> --nonce <hex> --text "hello"
    blue-avocado decrypt --cipher salsa20 --key <hex> --nonce <hex> --data <hex> --as-text
"""

import argparse
import logging
import sys
from typing import List, Optional

from .exceptions import UnknownCipherError
from .registry import CIPHERS, transform

logger = logging.getLogger(__name__)


def _hex_bytes(value: str) -> bytes:
    try:
        return bytes.fromhex(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a hex string: {value!r}") from None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='blue-avocado',
        description='Educational MARS, Salsa20 and Trivium ciphers.',
    )
    parser.add_argument('-v', '--verbose', action='store_true', help='Debug logging')

    commands = parser.add_subparsers(dest='command', required=True)
    commands.add_parser('list', help='List available ciphers')

    for command in ('encrypt', 'decrypt'):
        sub = commands.add_parser(command, help=f'{command.capitalize()} data')
        sub.add_argument('-c', '--cipher', required=True, choices=sorted(CIPHERS))
        sub.add_argument('-k', '--key', required=True, type=_hex_bytes, help='Key as hex')
        sub.add_argument('-n', '--nonce', type=_hex_bytes,
                         help='Salsa20 nonce or Trivium IV as hex')
        source = sub.add_mutually_exclusive_group(required=True)
        source.add_argument('-d', '--data', type=_hex_bytes, help='Input as hex')
        source.add_argument('-t', '--text', help='Input as UTF-8 text')
        if command == 'decrypt':
            sub.add_argument('--as-text', action='store_true',
                             help='Print the result as UTF-8 text instead of hex')

    return parser


def list_ciphers() -> None:
    """Print the registered ciphers."""
    for info in CIPHERS.values():
        key_sizes = info.key_sizes
        keys = (f"{key_sizes[0]}-{key_sizes[-1]}" if len(key_sizes) > 1
                else str(key_sizes[0]))
        nonce = f"{info.nonce_size} bytes" if info.nonce_size else "-"
        kind = "stateful" if info.stateful else "pure"
        print(f"  {info.name:<8} key {keys:>5} bytes | nonce/iv {nonce:<8} | "
              f"{kind:<8} | {info.description}")


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point. Returns the process exit status."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(levelname)s %(name)s: %(message)s',
    )

    if args.command == 'list':
        list_ciphers()
        return 0

    data = args.data if args.data is not None else args.text.encode('utf-8')
    decrypt = args.command == 'decrypt'

    try:
        result = transform(args.cipher, args.key, data, nonce=args.nonce, decrypt=decrypt)
    except (ValueError, UnknownCipherError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    logger.info("%s %s: %d bytes", args.command, args.cipher, len(data))

    if decrypt and args.as_text:
        print(result.decode('utf-8', errors='replace'))
    else:
        print(result.hex())
    return 0


if __name__ == "__main__":
    sys.exit(main())
