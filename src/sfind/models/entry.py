"""
Filesystem entry model for sfind.

A ``FileEntry`` is the short-lived view of one visited node that the filter
predicates look at. Entries are never stored; each one is built, judged and dropped.
"""

import logging
import os
import stat
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FileEntry:
    """
    One node seen during traversal.

    Attributes:
        path: Path as reached from the root (keeps the root's own prefix)
        is_dir: Whether the node is a directory
        modified_time: Last modification time in UTC, None if unknown
    """
    path: str
    is_dir: bool = False
    modified_time: Optional[datetime] = None

    @property
    def name(self) -> str:
        """Base name of the entry, ignoring trailing separators."""
        stripped = self.path.rstrip(os.sep)
        if os.altsep:
            stripped = stripped.rstrip(os.altsep)
        return os.path.basename(stripped) if stripped else self.path

    @classmethod
    def from_path(cls, path: str) -> Optional['FileEntry']:
        """
        Build an entry from a single ``lstat`` call.

        Args:
            path: Path of the node

        Returns:
            FileEntry, or None if the node cannot be stat'ed
        """
        try:
            stat_result = os.lstat(path)
        except OSError as e:
            logger.debug(f"Cannot stat {path}: {e}")
            return None

        return cls(
            path=path,
            is_dir=stat.S_ISDIR(stat_result.st_mode),
            modified_time=datetime.fromtimestamp(stat_result.st_mtime, tz=timezone.utc),
        )
