"""
Command Line Interface

    echo "passphrase" | pbkdf2 salt_hex count len > key_and_iv_hex

Prints the derived bytes as lowercase hex on stdout. Failures print a
one-line diagnostic on stderr and exit with the error's exit code.
"""

import argparse
import sys
from typing import List, Optional

from .. import __version__
from ..errors import KdfKeysError, UsageError
from ..utils.logger import enable_console_logging, disable_console_logging, log_exception
from .driver import run_pipeline


class _Parser(argparse.ArgumentParser):
    """ArgumentParser that raises UsageError instead of exiting with 2."""

    def error(self, message):
        raise UsageError(message)


def build_parser() -> argparse.ArgumentParser:
    parser = _Parser(
        prog='pbkdf2',
        description='Derive a key and IV from a passphrase read on stdin, using PBKDF2 (HMAC-SHA1).',
        usage='%(prog)s [options] salt count len <passwd >key_iv_hex',
    )
    parser.add_argument('salt', help='Salt as a hexadecimal string (typically 16 digits, 8 bytes)')
    parser.add_argument('count', help='Iteration count; pick one costing 0.5 to 2 seconds')
    parser.add_argument('len', help='Number of bytes to derive (48 for a 32-byte key and 16-byte IV)')
    parser.add_argument('--strict-newline', action='store_true',
                        help='Only strip the last passphrase byte when it is a newline')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Log progress and timing to stderr (never the passphrase or key)')
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    return parser


def main(argv: Optional[List[str]] = None, stdin=None, stdout=None, stderr=None) -> int:
    """
    Run the tool.

    Args:
        argv: Arguments without the program name; sys.argv[1:] by default
        stdin: Binary passphrase stream; sys.stdin.buffer by default
        stdout: Binary output stream; sys.stdout.buffer by default
        stderr: Text stream for diagnostics; sys.stderr by default

    Returns:
        Process exit code
    """
    stdin = stdin if stdin is not None else sys.stdin.buffer
    stdout = stdout if stdout is not None else sys.stdout.buffer
    stderr = stderr if stderr is not None else sys.stderr

    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except UsageError as e:
        print(parser.format_usage().rstrip(), file=stderr)
        print(f"Error: {e}", file=stderr)
        return e.exit_code

    handler = enable_console_logging(stderr) if args.verbose else None
    try:
        run_pipeline(args.salt, args.count, args.len, stdin, stdout,
                     strict=args.strict_newline)
    except KdfKeysError as e:
        log_exception(e, "main", service="cli")
        print(f"Error: {e}", file=stderr)
        return e.exit_code
    finally:
        if handler is not None:
            disable_console_logging(handler)

    return 0


if __name__ == "__main__":
    sys.exit(main())
