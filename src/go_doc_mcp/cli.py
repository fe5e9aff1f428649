"""Command line lookup: print documentation for the identifier at a byte offset.

Usage:
    go-doc -pos file.go:#123 [-modified] [-json] [-u] [-linelength N] [-tags "a b"]

Examples:
    # Plain text documentation
    go-doc -pos main.go:#1042

    # Extended JSON output for editor integrations
    go-doc -pos main.go:#1042 -json

    # Unsaved buffers supplied on standard input
    go-doc -pos main.go:#1042 -modified < archive
"""

import argparse
import json
import logging
import re
import sys
from typing import List, Optional, Tuple

from .constants import DEFAULT_LINE_LENGTH
from .engine import document_at
from .errors import DocLookupError, InvalidPositionError
from .settings import ToolchainSettings, parse_build_tags
from .toolchain.archive import MODIFIED_USAGE, parse_overlay_archive
from .utils import ValidationHelper, setup_logging

logger = logging.getLogger(__name__)

_OFFSET = re.compile(r'[0-9]+')


def parse_pos(value: str) -> Tuple[str, int]:
    """
    Split a ``file.go:#offset`` argument into its file name and byte offset.

    Raises:
        InvalidPositionError: If the value is empty or malformed
    """
    if not value:
        raise InvalidPositionError("missing required -pos flag")
    sep = value.rfind(':')
    # The separator needs a '#' and at least one digit after it
    if sep == -1 or sep > len(value) - 3 or value[sep + 1] != '#' \
            or not _OFFSET.fullmatch(value[sep + 2:]):
        raise InvalidPositionError(f"invalid option: -pos={value}")
    return value[:sep], int(value[sep + 2:])


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='go-doc',
        description='Print documentation for the Go identifier at a position',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=MODIFIED_USAGE,
    )
    parser.add_argument(
        '-pos', '--pos',
        default='',
        help='Filename and byte offset of item to document, e.g. foo.go:#123'
    )
    parser.add_argument(
        '-modified', '--modified',
        action='store_true',
        help='read an archive of modified files from standard input'
    )
    parser.add_argument(
        '-linelength', '--linelength',
        type=int,
        default=DEFAULT_LINE_LENGTH,
        help='maximum length of a line in the output (in Unicode code points)'
    )
    parser.add_argument(
        '-json', '--json',
        action='store_true',
        help='enable extended JSON output'
    )
    parser.add_argument(
        '-u',
        dest='unexported',
        action='store_true',
        help='show unexported fields'
    )
    parser.add_argument(
        '-tags', '--tags',
        default=None,
        help='a list of build tags to consider satisfied during the build'
    )
    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='log loader and resolver decisions to standard error'
    )
    return parser


def run(argv: Optional[List[str]] = None, stdin=None, stdout=None) -> int:
    """Run the tool and return its exit status."""
    stdin = stdin if stdin is not None else sys.stdin.buffer
    stdout = stdout if stdout is not None else sys.stdout

    args = build_parser().parse_args(argv)
    setup_logging(logging.DEBUG if args.verbose else logging.WARNING, stdout=False)

    try:
        filename, offset = parse_pos(args.pos)
        error = ValidationHelper.validate_line_length(args.linelength)
        if error:
            raise InvalidPositionError(error)

        overlay = parse_overlay_archive(stdin) if args.modified else None

        overrides = {}
        if args.tags is not None:
            overrides['build_tags'] = parse_build_tags(args.tags)
        settings = ToolchainSettings.from_env(**overrides)

        record = document_at(filename, offset, show_unexported=args.unexported,
                             overlay=overlay, settings=settings)
    except DocLookupError as e:
        print(e, file=sys.stderr)
        return 1

    if args.json:
        stdout.write(json.dumps(record.to_dict()) + "\n")
    else:
        stdout.write(record.to_text(args.linelength) + "\n")
    return 0


def main(argv: Optional[List[str]] = None) -> None:
    """Console script entry point."""
    sys.exit(run(argv))


if __name__ == "__main__":
    main()
