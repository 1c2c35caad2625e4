"""
Filesystem walker for sfind.

This module traverses a single root path depth-first, prunes directories and
accepts files through the filter predicates, and streams accepted paths to an
emit callback as soon as they are found. Listing and stat failures only skip the
node concerned; the rest of the tree is still walked.
"""

import os
import logging
from typing import Callable, Dict, Optional

from ..models.config import SearchConfig
from ..models.entry import FileEntry
from .filters import DirectoryAction, accept_file, directory_action


logger = logging.getLogger(__name__)

Emit = Callable[[str], None]
DirectoryPredicate = Callable[[str, SearchConfig], DirectoryAction]
FilePredicate = Callable[[FileEntry, SearchConfig], bool]


class FSWalker:
    """
    Depth-first walker over one root path.

    The predicates are injectable so that the traversal itself does not know
    which rules decide pruning and acceptance.
    """

    def __init__(
        self,
        config: SearchConfig,
        emit: Emit,
        directory_action: DirectoryPredicate = directory_action,
        accept_file: FilePredicate = accept_file,
    ):
        """
        Initialize the filesystem walker.

        Args:
            config: Shared, read-only search configuration
            emit: Called once with every accepted path
            directory_action: Decides whether to descend into a directory
            accept_file: Decides whether a file is emitted
        """
        self.config = config
        self.emit = emit
        self._directory_action = directory_action
        self._accept_file = accept_file
        self._stats = self._empty_stats()

    @staticmethod
    def _empty_stats() -> Dict[str, int]:
        return {
            'directories_traversed': 0,
            'directories_pruned': 0,
            'files_scanned': 0,
            'files_matched': 0,
            'errors': 0,
        }

    def walk(self, root: str) -> None:
        """
        Walk one root path and emit every accepted file.

        A root that is a directory is subject to pruning like any other directory;
        a root that is a file is judged on its own. A missing root yields nothing.

        Args:
            root: Root path exactly as supplied by the user
        """
        if os.path.isdir(root):
            logger.debug(f"Walking directory tree: {root}")
            self._walk_directory(root)
            return

        if not os.path.lexists(root):
            logger.debug(f"Root path does not exist: {root}")
            self._stats['errors'] += 1
            return

        self._visit_file(root)

    def _walk_directory(self, root: str) -> None:
        if self._directory_action(root, self.config) is DirectoryAction.PRUNE:
            self._stats['directories_pruned'] += 1
            return

        for current_dir, subdirs, files in os.walk(root, onerror=self._on_error):
            self._stats['directories_traversed'] += 1

            # Prune in place so os.walk never descends into skipped directories.
            # A symlink to a directory is not a directory: it is judged as a file.
            kept = []
            for name in subdirs:
                path = self._join(current_dir, name)
                if os.path.islink(path):
                    self._visit_file(path)
                elif self._directory_action(path, self.config) is DirectoryAction.PRUNE:
                    self._stats['directories_pruned'] += 1
                else:
                    kept.append(name)
            subdirs[:] = kept

            for filename in files:
                self._visit_file(self._join(current_dir, filename))

    def _visit_file(self, path: str) -> None:
        entry = FileEntry.from_path(path)
        if entry is None:
            self._stats['errors'] += 1
            return

        self._stats['files_scanned'] += 1
        if self._accept_file(entry, self.config):
            self._stats['files_matched'] += 1
            self.emit(path)

    def _on_error(self, error: OSError) -> None:
        logger.debug(f"Skipping unreadable directory {error.filename}: {error}")
        self._stats['errors'] += 1

    @staticmethod
    def _join(directory: str, name: str) -> str:
        """Join and clean, so a ``.`` root yields ``a.txt`` rather than ``./a.txt``."""
        return os.path.normpath(os.path.join(directory, name))

    def get_stats(self) -> Dict[str, int]:
        """
        Get statistics about the walk.

        Returns:
            Dictionary containing operation statistics
        """
        return self._stats.copy()

    def reset_stats(self) -> None:
        """Reset the statistics counters."""
        self._stats = self._empty_stats()


def walk_path(root: str, config: SearchConfig, emit: Emit) -> Dict[str, int]:
    """Walk a single root with the default predicates and return its statistics."""
    walker = FSWalker(config, emit)
    walker.walk(root)
    return walker.get_stats()
