"""
Size model: the exact number of bytes one entry adds to an output archive.

For every entry the writer emits a local header (no extra field), the name, the
raw payload, a signed data descriptor, and a central directory record carrying
the name again plus the entry's extra field and comment. The archive itself
ends with one end-of-central-directory record.
"""

from __future__ import annotations

from dataclasses import dataclass

from . import layout


@dataclass(frozen=True)
class ContainerFormat:
    local_header: int
    local_extra_block: int
    central_record: int
    end_record: int
    max_entries: int
    max_archive_size: int


ZIP = ContainerFormat(
    local_header=layout.LOCAL_HEADER.size,
    local_extra_block=layout.DATA_DESCRIPTOR.size,
    central_record=layout.CENTRAL_DIR_RECORD.size,
    end_record=layout.END_OF_CENTRAL_DIR.size,
    # all-ones counts, sizes and offsets are Zip64 markers
    max_entries=layout.ZIP32_ENTRY_LIMIT - 1,
    max_archive_size=layout.ZIP32_LIMIT - 1,
)


def cost(entry, fmt: ContainerFormat = ZIP) -> int:
    """Bytes `entry` contributes to an archive of format `fmt`."""
    return (
        fmt.local_header
        + fmt.local_extra_block
        + fmt.central_record
        + 2 * len(entry.name)
        + len(entry.comment)
        + len(entry.extra)
        + entry.compress_size
    )


def capacity(bound: int, fmt: ContainerFormat = ZIP) -> int:
    """
    Room left for entries once the end record is paid for.

    Parts never grow past `fmt.max_archive_size`, whatever the bound, so no
    offset or size in a part needs Zip64 records.
    """
    return min(bound, fmt.max_archive_size) - fmt.end_record
