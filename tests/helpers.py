import os
import subprocess
import sys
import zipfile
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]


def run_cli(args, cwd):
    """Run `python -m zipsplit` with the checkout importable."""
    env = os.environ.copy()
    env['PYTHONPATH'] = str(ROOT) + os.pathsep + env.get('PYTHONPATH', '')
    return subprocess.run(
        [sys.executable, '-m', 'zipsplit'] + list(args),
        cwd=cwd,
        env=env,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        text=True,
    )


def make_archive(path: Path, members, compression=zipfile.ZIP_STORED) -> Path:
    """
    Write a source archive. `members` is a list of (name, payload) pairs or
    ready-made ZipInfo objects paired with payloads.
    """
    with zipfile.ZipFile(path, 'w', compression) as zf:
        for name, payload in members:
            zf.writestr(name, payload)
    return path


def stored_archive(path: Path, sizes, prefix='f') -> Path:
    """Stored (uncompressed) random members, so compressed size == len(payload)."""
    members = [(f'{prefix}{i}', os.urandom(size)) for i, size in enumerate(sizes)]
    return make_archive(path, members)


def archive_contents(path: Path) -> dict:
    with zipfile.ZipFile(path, 'r') as zf:
        if zf.testzip() is not None:
            raise AssertionError(f"{path} failed CRC check")
        return {info.filename: zf.read(info) for info in zf.infolist()}
