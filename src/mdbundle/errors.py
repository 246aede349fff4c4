"""Exceptions raised by mdbundle."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional


class BundlerError(Exception):
    """Base exception for mdbundle errors."""


class InvalidRootError(BundlerError):
    """Raised when a root directory is missing or not a directory."""


class ConfigFileError(BundlerError):
    """Raised when an ignore source exists but cannot be read."""


class WalkError(BundlerError):
    """Raised when a directory tree cannot be traversed."""


class NothingToBundleError(BundlerError):
    """Raised when no file survives the read step."""


class OutputError(BundlerError):
    """Raised when a part cannot be written.

    ``written`` lists the parts that were completed before the failure;
    they are left on disk.
    """

    def __init__(self, message: str, written: Optional[List[Path]] = None) -> None:
        super().__init__(message)
        self.written: List[Path] = list(written or [])
