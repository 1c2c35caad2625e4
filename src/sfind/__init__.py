"""
sfind - Core Package

Searches one or more root paths for files by modification date, filename
globs and excluded path components.
"""

__version__ = "1.0.0"
