"""
Filter predicates for sfind traversal.

Two pure decisions are made for every node the walker reaches: whether a
directory is pruned (with everything beneath it) and whether a file is emitted.
Neither keeps state, so they are safe to call from any number of walkers sharing
one configuration.
"""

import os
from enum import Enum
from typing import List

from ..models.config import SearchConfig
from ..models.entry import FileEntry


class DirectoryAction(Enum):
    """What the walker does with a directory."""
    DESCEND = "descend"
    PRUNE = "prune"


def _is_hidden(name: str) -> bool:
    return name.startswith('.')


def path_components(path: str) -> List[str]:
    """Split a path on every separator the platform accepts."""
    if os.altsep:
        path = path.replace(os.altsep, os.sep)
    return path.split(os.sep)


def directory_action(path: str, config: SearchConfig) -> DirectoryAction:
    """
    Decide whether to descend into a directory.

    A directory is pruned when its base name is hidden (``.`` itself is not,
    ``..`` is) or when any component of its path equals an excluded name.

    Args:
        path: Directory path as reached from the root
        config: Search configuration

    Returns:
        DirectoryAction.PRUNE or DirectoryAction.DESCEND
    """
    name = FileEntry(path, is_dir=True).name
    if name != '.' and _is_hidden(name):
        return DirectoryAction.PRUNE

    for component in path_components(config.fold(path)):
        if config.is_excluded(component):
            return DirectoryAction.PRUNE

    return DirectoryAction.DESCEND


def accept_file(entry: FileEntry, config: SearchConfig) -> bool:
    """
    Decide whether a file is part of the output.

    Args:
        entry: File entry with its modification time
        config: Search configuration

    Returns:
        True if the file is not hidden, not older than ``from`` and matches a glob
    """
    name = entry.name
    if _is_hidden(name):
        return False

    if entry.modified_time is None or entry.modified_time < config.from_time:
        return False

    # Pattern evaluation last, it is the only costly check
    return config.matches_glob(name)
