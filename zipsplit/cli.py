"""
Split one zip archive into several smaller ones without recompressing.

Usage:
    zipsplit --in <archive> [--s <size>] [--out <template>] [--manifest <file>]
             [--dry-run] [-q]

Options:
    --in <archive>      Source archive (required)
    --s <size>          Maximum size per part, e.g. 500k, 10Mb, 2G (default 10Mb)
    --out <template>    Part name template in printf format (default out-%03d.zip)
    --manifest <file>   Write the packing plan as JSON
    --dry-run           Plan only; do not write any part
    -q, --quiet         No progress output

Entries are sorted by descending compressed size and placed first-fit into
parts, each predicted byte-exact so no part exceeds the size limit. An entry
that cannot fit even in an empty part is an error and nothing is written.

Exit code:
    0 on success
    1 on any error (missing input, bad template, oversized entry, I/O failure)
    2 on argument syntax errors
"""

import argparse
import sys

from .archive import split
from .config import DEFAULT_SIZE, DEFAULT_TEMPLATE, SplitConfig
from .errors import ZipSplitError


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="zipsplit",
        description="Split a zip archive into size-limited parts without recompressing",
    )
    parser.add_argument('-i', '--in', dest='source', default='', help='Input archive name')
    parser.add_argument('-s', '--s', dest='size', default=DEFAULT_SIZE, help='Maximum size per part')
    parser.add_argument('-o', '--out', dest='template', default=DEFAULT_TEMPLATE,
                        help='Output name template in printf format')
    parser.add_argument('--manifest', help='Write the packing plan as JSON to this file')
    parser.add_argument('--dry-run', action='store_true', help='Plan parts without writing them')
    parser.add_argument('-q', '--quiet', action='store_true', help='Suppress progress output')
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    try:
        config = SplitConfig.from_args(args)
        split(config)
    except ZipSplitError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
