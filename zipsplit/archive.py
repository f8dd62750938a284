"""
Reading the source archive and writing the output parts.

Entries are never decompressed: each one is copied as its raw compressed
payload, located through the source local header, and re-framed with the
records from layout.py.
"""

from __future__ import annotations

import json
import os
import sys
import zipfile
from collections import deque
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

from . import layout
from .cost import capacity
from .errors import ConfigError, SourceReadError, WriteError
from .namer import Namer
from .packer import Bucket, pack
from .units import format_size

CHUNK_SIZE = 1024 * 1024


@dataclass(frozen=True)
class Entry:
    """One member of the source archive, as listed in its central directory."""
    name: bytes
    compress_size: int
    comment: bytes = b""
    extra: bytes = b""
    file_size: int = 0

    @classmethod
    def from_zipinfo(cls, info: zipfile.ZipInfo) -> "Entry":
        return cls(
            name=encode_name(info),
            compress_size=info.compress_size,
            comment=info.comment,
            extra=info.extra,
            file_size=info.file_size,
        )

    @property
    def display_name(self) -> str:
        return self.name.decode("utf-8", errors="replace")


def encode_name(info: zipfile.ZipInfo) -> bytes:
    encoding = "utf-8" if info.flag_bits & layout.FLAG_UTF8 else "cp437"
    return info.orig_filename.encode(encoding)


def read_entries(path) -> List[Entry]:
    """List the source archive's entries in central directory order."""
    try:
        with zipfile.ZipFile(path, "r") as zf:
            return [Entry.from_zipinfo(info) for info in zf.infolist()]
    except (OSError, zipfile.BadZipFile) as exc:
        raise SourceReadError(f"Cannot read {path}: {exc}") from exc


def dos_datetime(date_time) -> tuple[int, int]:
    year, month, day, hour, minute, second = date_time
    dosdate = (year - 1980) << 9 | month << 5 | day
    dostime = hour << 11 | minute << 5 | (second // 2)
    return dostime, dosdate


def raw_payload(src, info: zipfile.ZipInfo):
    """Yield the compressed bytes of `info` from the open source file `src`."""
    src.seek(info.header_offset)
    header = src.read(layout.LOCAL_HEADER.size)
    if len(header) != layout.LOCAL_HEADER.size or \
            layout.LOCAL_HEADER.unpack(header)[0] != layout.LOCAL_HEADER_SIGNATURE:
        raise WriteError(f"Bad local header for {info.filename} in source archive")
    name_len, extra_len = layout.LOCAL_HEADER.unpack(header)[9:11]
    src.seek(info.header_offset + layout.LOCAL_HEADER.size + name_len + extra_len)

    remaining = info.compress_size
    while remaining > 0:
        chunk = src.read(min(remaining, CHUNK_SIZE))
        if not chunk:
            raise WriteError(f"Source data for {info.filename} is truncated")
        remaining -= len(chunk)
        yield chunk


class RawZipWriter:
    """
    Append-only zip writer for already-compressed entries.

    Every entry is written with flag bit 3: a local header with zero CRC and
    sizes and no extra field, the payload, then a signed data descriptor. Extra
    field and comment go to the central directory only. No Zip64 records are
    ever written; anything that would need them raises WriteError.
    """

    def __init__(self, fp):
        self.fp = fp
        self.offset = 0
        self._records = []
        self._closed = False

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        if exc_type is None:
            self.close()

    def _write(self, data: bytes) -> None:
        self.fp.write(data)
        self.offset += len(data)

    def copy(self, info: zipfile.ZipInfo, src) -> None:
        if self._closed:
            raise WriteError("Archive already finalized")
        if info.flag_bits & 0x1 and not info.flag_bits & layout.FLAG_DATA_DESCRIPTOR:
            # the password check byte would switch from CRC to mod time
            raise WriteError(f"Cannot copy encrypted entry {info.filename} without a data descriptor")
        if self.offset >= layout.ZIP32_LIMIT or \
                info.compress_size >= layout.ZIP32_LIMIT or info.file_size >= layout.ZIP32_LIMIT:
            raise WriteError(f"{info.filename} would need Zip64 records")

        name = encode_name(info)
        flags = info.flag_bits | layout.FLAG_DATA_DESCRIPTOR
        dostime, dosdate = dos_datetime(info.date_time)
        header_offset = self.offset

        self._write(layout.LOCAL_HEADER.pack(
            layout.LOCAL_HEADER_SIGNATURE,
            info.extract_version,
            flags,
            info.compress_type,
            dostime,
            dosdate,
            0,          # CRC-32, in the data descriptor
            0,          # compressed size
            0,          # uncompressed size
            len(name),
            0,          # extra length
        ) + name)
        for chunk in raw_payload(src, info):
            self._write(chunk)
        self._write(layout.DATA_DESCRIPTOR.pack(
            layout.DATA_DESCRIPTOR_SIGNATURE,
            info.CRC,
            info.compress_size,
            info.file_size,
        ))
        self._records.append((info, name, flags, dostime, dosdate, header_offset))

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if len(self._records) >= layout.ZIP32_ENTRY_LIMIT:
            raise WriteError("Too many entries for a non-Zip64 archive")

        cd_offset = self.offset
        for info, name, flags, dostime, dosdate, header_offset in self._records:
            self._write(layout.CENTRAL_DIR_RECORD.pack(
                layout.CENTRAL_DIR_SIGNATURE,
                info.create_system << 8 | info.create_version,
                info.extract_version,
                flags,
                info.compress_type,
                dostime,
                dosdate,
                info.CRC,
                info.compress_size,
                info.file_size,
                len(name),
                len(info.extra),
                len(info.comment),
                0,          # disk number start
                info.internal_attr,
                info.external_attr,
                header_offset,
            ) + name + info.extra + info.comment)
        cd_size = self.offset - cd_offset
        if cd_offset >= layout.ZIP32_LIMIT or cd_size >= layout.ZIP32_LIMIT:
            raise WriteError("Central directory would need Zip64 records")

        self._write(layout.END_OF_CENTRAL_DIR.pack(
            layout.END_OF_CENTRAL_DIR_SIGNATURE,
            0,          # number of this disk
            0,          # disk with the central directory
            len(self._records),
            len(self._records),
            cd_size,
            cd_offset,
            0,          # comment length
        ))


def index_by_name(infos) -> Dict[bytes, deque]:
    index: Dict[bytes, deque] = {}
    for info in infos:
        index.setdefault(encode_name(info), deque()).append(info)
    return index


def take(index: Dict[bytes, deque], entry: Entry) -> Optional[zipfile.ZipInfo]:
    """Remove and return the source member for `entry`; same-named members are told apart by size."""
    matches = index.get(entry.name)
    if not matches:
        return None
    for info in matches:
        if info.compress_size == entry.compress_size:
            matches.remove(info)
            return info
    return matches.popleft()


def discard(path: Path) -> None:
    try:
        path.unlink()
    except FileNotFoundError:
        pass


def materialize(bucket: Bucket, source) -> Path:
    """
    Write `bucket` as a zip file named after it, copying entries from `source`.

    On failure the incomplete output file is removed and WriteError is raised;
    files written for earlier buckets are left alone.
    """
    dest = Path(bucket.filename)
    try:
        src = open(source, "rb")
    except OSError as exc:
        raise SourceReadError(f"Cannot open {source}: {exc}") from exc

    with src:
        try:
            zf = zipfile.ZipFile(src, "r")
        except (OSError, zipfile.BadZipFile) as exc:
            raise SourceReadError(f"Cannot read {source}: {exc}") from exc
        with zf:
            index = index_by_name(zf.infolist())
            try:
                out = open(dest, "wb")
            except OSError as exc:
                raise WriteError(f"Cannot create {dest}: {exc}") from exc
            try:
                with out, RawZipWriter(out) as writer:
                    for entry in bucket.entries:
                        info = take(index, entry)
                        if info is None:
                            raise WriteError(f"{entry.display_name} not found in {source}")
                        writer.copy(info, src)
            except OSError as exc:
                discard(dest)
                raise WriteError(f"Cannot write {dest}: {exc}") from exc
            except WriteError:
                discard(dest)
                raise
    return dest


def write_manifest(path: Path, config, buckets: List[Bucket]) -> None:
    data = {
        "source": str(config.source),
        "bound": config.bound,
        "capacity": capacity(config.bound),
        "parts": [b.to_dict() for b in buckets],
    }
    try:
        with open(path, "w") as f:
            json.dump(data, f, indent=2)
    except OSError as exc:
        raise WriteError(f"Cannot write manifest {path}: {exc}") from exc


def split(config) -> List[Bucket]:
    """
    Run the whole pipeline for `config` and return the buckets.

    The template is validated and the source listed before anything is
    packed; nothing is written until every entry has a bucket.
    """
    def say(msg: str) -> None:
        if not config.quiet:
            print(msg, file=sys.stderr)

    namer = Namer(config.template)
    entries = read_entries(config.source)
    if not entries:
        raise ConfigError(f"{config.source} contains no entries")

    buckets = pack(entries, config.bound, namer)

    source_real = os.path.realpath(config.source)
    for bucket in buckets:
        if os.path.realpath(bucket.filename) == source_real:
            raise ConfigError(f"Output name {bucket.filename} would overwrite the source archive")

    say(f"{len(entries)} entries into {len(buckets)} part(s) of at most {format_size(config.bound)}")
    if config.manifest:
        write_manifest(config.manifest, config, buckets)
        say(f"manifest written to {config.manifest}")
    if config.dry_run:
        for bucket in buckets:
            say(f"would write {bucket.filename} ({len(bucket)} entries, {format_size(bucket.size)})")
        return buckets

    for bucket in buckets:
        dest = materialize(bucket, config.source)
        say(f"wrote {dest} ({len(bucket)} entries, {format_size(dest.stat().st_size)})")
    return buckets
