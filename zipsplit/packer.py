"""
First-fit-descending packing of entries into size-bounded buckets.

This is a heuristic, not an optimal bin packer: entries are sorted by
descending compressed size (stable, so equal sizes keep source order) and each
goes into the first existing bucket with room for it, else into a new one.
The bucket count is not guaranteed minimal; the size bound always holds.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional

from .config import DEFAULT_TEMPLATE
from .cost import ZIP, ContainerFormat, capacity, cost
from .errors import UnfittableEntryError
from .namer import Namer
from .units import format_size


@dataclass
class Bucket:
    """One future output archive: its name, predicted size and entries."""
    filename: str
    size: int = 0
    entries: list = field(default_factory=list)
    sealed: bool = False

    def add(self, entry, entry_cost: int) -> None:
        if self.sealed:
            raise RuntimeError(f"bucket {self.filename} is sealed")
        self.entries.append(entry)
        self.size += entry_cost

    def seal(self) -> None:
        self.sealed = True

    def __len__(self) -> int:
        return len(self.entries)

    def to_dict(self) -> dict[str, object]:
        return {
            "filename": self.filename,
            "predicted_size": self.size,
            "entries": [e.name.decode("utf-8", errors="replace") for e in self.entries],
        }


def sort_entries(entries: Iterable) -> list:
    """Largest compressed size first; ties keep their original order."""
    return sorted(entries, key=lambda e: e.compress_size, reverse=True)


def check_fits(entries: Iterable, bound: int, fmt: ContainerFormat = ZIP) -> None:
    """Raise UnfittableEntryError for the first entry that fits in no bucket at all."""
    room = capacity(bound, fmt)
    for entry in entries:
        name = entry.name.decode("utf-8", errors="replace")
        if entry.file_size > fmt.max_archive_size:
            raise UnfittableEntryError(
                entry,
                bound,
                f"Can never fit {name}: its uncompressed size {format_size(entry.file_size)} needs Zip64.",
            )
        if cost(entry, fmt) > room:
            raise UnfittableEntryError(
                entry,
                bound,
                f"Can never fit {name} ({format_size(entry.compress_size)}) "
                f"in parts of {format_size(bound)}.",
            )


def pack(
    entries: Iterable,
    bound: int,
    namer: Optional[Callable[[], str]] = None,
    fmt: ContainerFormat = ZIP,
) -> List[Bucket]:
    """
    Assign every entry to exactly one bucket of predicted size <= bound.

    A bucket also closes once it holds `fmt.max_entries` entries.

    `namer` is called once per new bucket; it defaults to a fresh Namer on the
    default template. Returns buckets in creation order, sealed. An empty
    entry list gives an empty result.
    """
    if namer is None:
        namer = Namer(DEFAULT_TEMPLATE)

    ordered = sort_entries(entries)
    check_fits(ordered, bound, fmt)

    room = capacity(bound, fmt)
    buckets: List[Bucket] = []
    for entry in ordered:
        entry_cost = cost(entry, fmt)
        for bucket in buckets:
            if len(bucket) < fmt.max_entries and bucket.size + entry_cost <= room:
                bucket.add(entry, entry_cost)
                break
        else:
            bucket = Bucket(filename=namer())
            bucket.add(entry, entry_cost)
            buckets.append(bucket)

    for bucket in buckets:
        bucket.seal()
    return buckets
