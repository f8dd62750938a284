"""Run configuration, built once from the command line."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .errors import ConfigError
from .units import parse_size

DEFAULT_SIZE = "10Mb"
DEFAULT_TEMPLATE = "out-%03d.zip"


@dataclass(frozen=True)
class SplitConfig:
    source: Path
    bound: int
    template: str = DEFAULT_TEMPLATE
    manifest: Optional[Path] = None
    dry_run: bool = False
    quiet: bool = False

    @classmethod
    def from_args(cls, args) -> "SplitConfig":
        if not args.source:
            raise ConfigError("Please supply an input archive (--in).")
        return cls(
            source=Path(args.source),
            bound=parse_size(args.size),
            template=args.template,
            manifest=Path(args.manifest) if args.manifest else None,
            dry_run=args.dry_run,
            quiet=args.quiet,
        )
