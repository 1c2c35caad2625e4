"""
Data models for sfind.

This module contains the search configuration and the filesystem entry model.
"""

from .config import SearchConfig
from .entry import FileEntry

__all__ = ['SearchConfig', 'FileEntry']
