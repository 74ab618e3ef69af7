"""
rollpurge: retention for archive files written by a rolling file sink.
"""
from __future__ import annotations

from rollpurge.errors import InvalidArgument, PurgeError
from rollpurge.purger import (
    ArchiveFile,
    PurgePlan,
    RollingFilePurger,
    compare_archive_files,
    extract_sequence_token,
)

__version__ = "0.1.0"

__all__ = [
    "ArchiveFile",
    "InvalidArgument",
    "PurgeError",
    "PurgePlan",
    "RollingFilePurger",
    "compare_archive_files",
    "extract_sequence_token",
]
