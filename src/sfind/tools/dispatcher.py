"""
Concurrent dispatch of one walk per root path.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Dict, List, Optional

from ..models.config import SearchConfig
from .fs_walker import Emit, walk_path
from .output import PathSink


logger = logging.getLogger(__name__)


class SearchDispatcher:
    """
    Runs one independent walk per root path and waits for all of them.

    Walkers share the configuration by reference and write through the same
    sink. Nothing is ordered across roots: output is the union of every walk in
    whatever interleaving the scheduler produces.
    """

    def __init__(self, config: SearchConfig, emit: Optional[Emit] = None):
        """
        Args:
            config: Validated search configuration
            emit: Sink for accepted paths (defaults to a PathSink on stdout)
        """
        self.config = config
        self.emit = emit if emit is not None else PathSink()

    def run(self) -> Dict[str, int]:
        """
        Search every root path and block until all walks are done.

        Returns:
            Statistics summed over all roots

        Raises:
            Exception: Any unexpected error raised inside a walk
        """
        roots = list(self.config.paths)

        if len(roots) == 1:
            results = [walk_path(roots[0], self.config, self.emit)]
        else:
            results = self._run_concurrently(roots)

        if isinstance(self.emit, PathSink):
            self.emit.flush()

        return self._aggregate(results, len(roots))

    def _run_concurrently(self, roots: List[str]) -> List[Dict[str, int]]:
        results = []
        with ThreadPoolExecutor(max_workers=len(roots), thread_name_prefix='sfind-walk') as executor:
            futures = {
                executor.submit(walk_path, root, self.config, self.emit): root
                for root in roots
            }
            for future in as_completed(futures):
                stats = future.result()
                logger.debug(f"Finished {futures[future]}: {stats}")
                results.append(stats)
        return results

    @staticmethod
    def _aggregate(results: List[Dict[str, int]], root_count: int) -> Dict[str, int]:
        totals: Dict[str, int] = {'roots': root_count}
        for stats in results:
            for key, value in stats.items():
                totals[key] = totals.get(key, 0) + value
        return totals


def run_search(config: SearchConfig, emit: Optional[Emit] = None) -> Dict[str, int]:
    """Convenience wrapper: search all roots of ``config``."""
    return SearchDispatcher(config, emit).run()
