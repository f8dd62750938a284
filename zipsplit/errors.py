"""Error kinds raised by zipsplit. None of them are retried."""

from __future__ import annotations


class ZipSplitError(Exception):
    """Base class; the CLI reports these and exits non-zero."""


class ConfigError(ZipSplitError):
    """Missing or unusable input, e.g. no source archive given."""


class TemplateError(ZipSplitError):
    pass


class InvalidTemplateError(TemplateError):
    """Output name template ignores its number or cannot be formatted."""


class UnfittableEntryError(ZipSplitError):
    def __init__(self, entry, bound: int, message: str):
        super().__init__(message)
        self.entry = entry
        self.bound = bound


class SourceReadError(ZipSplitError):
    pass


class WriteError(ZipSplitError):
    """Output archive could not be created or written."""
