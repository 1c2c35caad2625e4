"""
Search tools for sfind.

This module contains the filter predicates, the filesystem walker, the
concurrent dispatcher and the shared output sink.
"""
