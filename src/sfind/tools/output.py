"""
Thread-safe output sink for matched paths.
"""

import sys
import threading
from typing import Optional, TextIO


class PathSink:
    """
    Callable writer shared by all walkers.

    Each call writes one complete line under a lock, so concurrent walkers can
    interleave between paths but never inside one.
    """

    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream if stream is not None else sys.stdout
        self._lock = threading.Lock()
        self.count = 0

    def __call__(self, path: str) -> None:
        line = path + "\n"
        with self._lock:
            self.stream.write(line)
            self.count += 1

    def flush(self) -> None:
        with self._lock:
            self.stream.flush()
