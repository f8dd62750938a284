#!/usr/bin/env python3
"""
Check a set of zipsplit parts against their source archive.

Every part must open and pass its CRC check, stay within the size limit, and
together the parts must hold each source entry exactly once with identical
bytes. When the system `unzip` is available, each part is also tested with
`unzip -t`.

Usage:
    ./verify_parts.py --in <source.zip> --s <size> [--output <file>] part.zip...

Options:
    --in <file>      Source archive the parts were split from
    --s <size>       Size limit the parts were produced with (default 10Mb)
    --output <file>  Write detailed results as JSON to the specified file

Exit code:
    0 when all checks pass
    1 when any check fails
"""

import argparse
import json
import shutil
import subprocess
import sys
import zipfile
from collections import Counter
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import List, Optional

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from zipsplit.units import parse_size  # noqa: E402


@dataclass
class PartResult:
    """Result of checking one part."""
    path: str
    size: int
    entries: int
    crc_ok: bool
    unzip_ok: Optional[bool]
    within_bound: bool


@dataclass
class VerifyResult:
    source: str
    bound: int
    parts: List[PartResult] = field(default_factory=list)
    differences: List[str] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return not self.differences


def unzip_test(archive: Path) -> Optional[bool]:
    """Verify archive integrity using system unzip -t; None when unzip is missing."""
    unzip = shutil.which('unzip')
    if unzip is None:
        return None
    result = subprocess.run([unzip, '-t', str(archive)], stdout=subprocess.PIPE, stderr=subprocess.PIPE, text=True)
    # unzip returns 0 for success, 1 for warnings, 2+ for errors
    return result.returncode <= 1


def entry_keys(zf: zipfile.ZipFile):
    return [(info.filename, zf.read(info)) for info in zf.infolist()]


def verify(source: Path, bound: int, parts: List[Path]) -> VerifyResult:
    result = VerifyResult(source=str(source), bound=bound)
    with zipfile.ZipFile(source) as zs:
        expected = Counter(entry_keys(zs))

    found = Counter()
    for part in parts:
        size = part.stat().st_size
        with zipfile.ZipFile(part) as zp:
            crc_ok = zp.testzip() is None
            keys = entry_keys(zp)
        found.update(keys)
        unzip_ok = unzip_test(part)
        pr = PartResult(
            path=str(part),
            size=size,
            entries=len(keys),
            crc_ok=crc_ok,
            unzip_ok=unzip_ok,
            within_bound=size <= bound,
        )
        result.parts.append(pr)
        if not pr.crc_ok:
            result.differences.append(f"{part}: CRC check failed")
        if pr.unzip_ok is False:
            result.differences.append(f"{part}: unzip -t failed")
        if not pr.within_bound:
            result.differences.append(f"{part}: {size} bytes exceeds limit {bound}")

    missing = expected - found
    extra = found - expected
    for name, _ in missing:
        result.differences.append(f"{name}: missing from parts")
    for name, _ in extra:
        result.differences.append(f"{name}: not in source or duplicated")
    return result


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Check zipsplit parts against their source")
    parser.add_argument('--in', dest='source', required=True, help='Source archive')
    parser.add_argument('--s', dest='size', default='10Mb', help='Size limit per part')
    parser.add_argument('--output', type=str, help='Output JSON file')
    parser.add_argument('parts', nargs='+', help='Part archives')
    args = parser.parse_args(argv)

    result = verify(Path(args.source), parse_size(args.size), [Path(p) for p in args.parts])

    print(f"{len(result.parts)} part(s) checked against {result.source}", file=sys.stderr)
    for diff in result.differences:
        print(f"  {diff}", file=sys.stderr)

    if args.output:
        with open(args.output, 'w') as f:
            json.dump(dict(asdict(result), passed=result.passed), f, indent=2)
        print(f"Results written to {args.output}", file=sys.stderr)

    return 0 if result.passed else 1


if __name__ == '__main__':
    sys.exit(main())
