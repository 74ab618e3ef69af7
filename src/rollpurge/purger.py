"""purger.py

Retention for archive files produced by a rolling file sink.

Archives share the sink's base name with a token spliced in before the
extension, e.g. ``app.log`` rolls into ``app.1.log``, ``app.2.log`` or
``app.2024-01-31.log``. The purger keeps the ``cap`` most recent archives
and deletes the rest.

Rules:
1) Ranking is by creation time, then by sequence number when both sides
   carry a non-zero one, then by the raw token compared ordinally.
2) Filesystem faults never escape purge(). Unlistable directories mean
   "no archives", unreadable timestamps rank a file oldest, and failed
   deletions are skipped until the next pass.
"""

from __future__ import annotations

import fnmatch
import functools
import glob
import logging
import os
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Union

from rollpurge.errors import InvalidArgument

log = logging.getLogger(__name__)

PathLike = Union[str, "os.PathLike[str]"]

# Sentinel for unreadable creation times: ranks the file as the oldest.
EARLIEST = datetime.min.replace(tzinfo=timezone.utc)

# Tokens are parsed as signed 32-bit values; anything larger is "no sequence".
MAX_SEQUENCE = 2**31 - 1


# ============================================================
# Pure helpers
# ============================================================


def extract_sequence_token(file_name: str) -> str:
    """
    Return the text between the last two dots of an archive file name.

    ``app.5.log`` -> ``"5"``; ``app.log`` -> ``""``; ``app..log`` -> ``""``.
    Only ``None`` is rejected; every string yields a (possibly empty) token.
    """
    if file_name is None:
        raise InvalidArgument("file_name must not be None")

    extension_dot = file_name.rfind(".")
    if extension_dot <= 0:
        # no dots, or a leading dot only
        return ""

    sequence_dot = file_name.rfind(".", 0, extension_dot)
    if sequence_dot < 0:
        # single dot
        return ""

    return file_name[sequence_dot + 1 : extension_dot]


def parse_sequence_number(token: str) -> int:
    """Plain ASCII digits only; no sign, no whitespace. Otherwise 0."""
    if not token or not (token.isascii() and token.isdigit()):
        return 0

    value = int(token)
    return value if value <= MAX_SEQUENCE else 0


# ============================================================
# Filesystem helpers (fault-tolerant)
# ============================================================


def read_creation_time(path: PathLike) -> datetime:
    try:
        st = os.stat(path)
        ts = getattr(st, "st_birthtime", None)
        if ts is None:
            ts = min(st.st_ctime, st.st_mtime)
        return datetime.fromtimestamp(ts, tz=timezone.utc)
    except PermissionError:
        log.debug(f"Creation time unreadable (permission denied): {path}")
        return EARLIEST
    except FileNotFoundError:
        # removed after enumeration; deletion will be a no-op
        return EARLIEST
    except (OSError, OverflowError, ValueError) as e:
        log.debug(f"Creation time unreadable: {path} ({e})")
        return EARLIEST


def try_delete(path: PathLike) -> bool:
    """Delete one file. Returns True only if this call removed it."""
    try:
        os.remove(path)
    except FileNotFoundError:
        log.debug(f"Already gone: {path}")
        return False
    except PermissionError:
        log.debug(f"Skipping {path}: permission denied")
        return False
    except OSError as e:
        log.debug(f"Skipping {path}: {e}")
        return False

    log.debug(f"Deleted {path}")
    return True


# ============================================================
# Archive descriptor + ordering
# ============================================================


@dataclass(frozen=True)
class ArchiveFile:
    path: Path
    creation_time: datetime

    file_name: str = field(init=False)
    sequence_token: str = field(init=False)
    sequence_number: int = field(init=False)

    def __post_init__(self) -> None:
        name = Path(self.path).name
        token = extract_sequence_token(name)
        object.__setattr__(self, "file_name", name)
        object.__setattr__(self, "sequence_token", token)
        object.__setattr__(self, "sequence_number", parse_sequence_number(token))

    @classmethod
    def from_path(cls, path: PathLike) -> "ArchiveFile":
        return cls(path=Path(path), creation_time=read_creation_time(path))


def _cmp(a, b) -> int:
    return (a > b) - (a < b)


def compare_archive_files(a: ArchiveFile, b: ArchiveFile) -> int:
    """
    Ascending order: older / lower-sequence archives first.

    Not transitive when numeric and non-numeric tokens share a creation
    time: 9 < 10 numerically, "10" < "1a" and "1a" < "9" as strings.
    """
    if a.path == b.path:
        return 0

    by_time = _cmp(a.creation_time, b.creation_time)
    if by_time:
        return by_time

    if a.sequence_number != 0 and b.sequence_number != 0:
        return _cmp(a.sequence_number, b.sequence_number)

    # str comparison is by code point, never locale-aware
    return _cmp(a.sequence_token, b.sequence_token)


archive_sort_key = functools.cmp_to_key(compare_archive_files)


# ============================================================
# Purger
# ============================================================


@dataclass(frozen=True)
class PurgePlan:
    retained: list[ArchiveFile]
    excess: list[ArchiveFile]


class RollingFilePurger:
    """
    Keeps the ``cap`` most recent archives of ``base_file_name`` in
    ``directory`` and deletes older ones.

    The active file (``app.log``) never matches the archive pattern
    (``app.*.log``), so it is never considered.
    """

    def __init__(self, directory: PathLike, base_file_name: str, cap: int):
        if directory is None:
            raise InvalidArgument("directory must not be None")
        if not os.fspath(directory):
            raise InvalidArgument("directory must not be empty")

        if base_file_name is None:
            raise InvalidArgument("base_file_name must not be None")
        if not isinstance(base_file_name, str) or not base_file_name:
            raise InvalidArgument("base_file_name must be a non-empty string")

        if isinstance(cap, bool) or not isinstance(cap, int):
            raise InvalidArgument(f"cap must be an integer, got {cap!r}")
        if cap < 1:
            raise InvalidArgument(f"cap must be >= 1, got {cap}")

        self.directory = Path(directory)
        self.base_file_name = base_file_name
        self.cap = cap

    def __repr__(self) -> str:
        return (
            f"RollingFilePurger(directory={str(self.directory)!r}, "
            f"base_file_name={self.base_file_name!r}, cap={self.cap})"
        )

    # ------------------------------------------------------------------
    # Matching
    # ------------------------------------------------------------------

    def _split_base(self) -> tuple[str, str]:
        return os.path.splitext(os.path.basename(self.base_file_name))

    @property
    def search_pattern(self) -> str:
        stem, ext = self._split_base()
        return f"{stem}.*{ext}"

    def matching_files(self) -> list[Path]:
        """Top-level regular files matching the archive pattern, by name."""
        stem, ext = self._split_base()
        pattern = f"{glob.escape(stem)}.*{glob.escape(ext)}"

        try:
            return sorted(
                p
                for p in self.directory.iterdir()
                if fnmatch.fnmatchcase(p.name, pattern) and p.is_file()
            )
        except OSError as e:
            log.debug(f"Cannot list {self.directory}: {e}")
            return []

    # ------------------------------------------------------------------
    # Ranking
    # ------------------------------------------------------------------

    @staticmethod
    def _rank(paths: list[Path]) -> list[ArchiveFile]:
        archives = [ArchiveFile.from_path(p) for p in paths]
        return sorted(archives, key=archive_sort_key, reverse=True)

    def rank(self) -> list[ArchiveFile]:
        """All matching archives, most recent first."""
        return self._rank(self.matching_files())

    def plan(self) -> PurgePlan:
        ranked = self.rank()
        return PurgePlan(retained=ranked[: self.cap], excess=ranked[self.cap :])

    # ------------------------------------------------------------------
    # Purge
    # ------------------------------------------------------------------

    def purge(self) -> None:
        matches = self.matching_files()

        if len(matches) <= self.cap:
            # bail out early; nothing is read or deleted
            return

        ranked = self._rank(matches)

        deleted = 0
        skipped = 0
        for archive in ranked[self.cap :]:
            if try_delete(archive.path):
                deleted += 1
            else:
                skipped += 1

        log.info(
            f"Purged {deleted} archive(s) matching {self.search_pattern} "
            f"in {self.directory} (kept {self.cap}, skipped {skipped})"
        )
