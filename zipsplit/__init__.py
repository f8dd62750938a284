"""
zipsplit - repartition the entries of one zip archive into size-bounded parts.

Entries are copied raw (no recompression) into as few output archives as a
first-fit-descending packing can manage, each no larger than the requested
bound.
"""

from .archive import Entry, materialize, read_entries, split
from .config import SplitConfig
from .cost import ZIP, ContainerFormat, capacity, cost
from .errors import (
    ConfigError,
    InvalidTemplateError,
    SourceReadError,
    TemplateError,
    UnfittableEntryError,
    WriteError,
    ZipSplitError,
)
from .namer import Namer
from .packer import Bucket, pack
from .units import format_size, parse_size

__version__ = "1.0.0"
__all__ = [
    "Bucket",
    "ConfigError",
    "ContainerFormat",
    "Entry",
    "InvalidTemplateError",
    "Namer",
    "SourceReadError",
    "SplitConfig",
    "TemplateError",
    "UnfittableEntryError",
    "WriteError",
    "ZIP",
    "ZipSplitError",
    "capacity",
    "cost",
    "format_size",
    "materialize",
    "pack",
    "parse_size",
    "read_entries",
    "split",
]
