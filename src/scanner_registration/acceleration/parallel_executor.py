"""
Parallel execution infrastructure for pairwise scan alignment.

Provides PairParallelExecutor for distributing independent work items (scan
pairs) across multiple CPU cores using multiprocessing.
"""

from __future__ import annotations

import logging
import time
from multiprocessing import Pool, cpu_count
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)


def _worker_wrapper(args: Tuple[int, Any, Callable, Dict[str, Any]]) -> Tuple[int, Any, Optional[str]]:
    """
    Run one work item and report failures instead of raising.

    Must be at module level for pickling on Windows.

    Args:
        args: Tuple of (item_index, item, worker_fn, worker_kwargs)

    Returns:
        Tuple of (item_index, result, error_message)
    """
    idx, item, worker_fn, worker_kwargs = args
    try:
        return (idx, worker_fn(item, **worker_kwargs), None)
    except Exception as e:
        error_msg = f"{type(e).__name__}: {e}"
        logger.error(f"Worker error on item {idx}: {error_msg}")
        return (idx, None, error_msg)


class PairParallelExecutor:
    """
    Order-preserving parallel map over independent work items.

    Items are processed in a process pool and results are returned in input
    order. With one worker or one item the work runs in-process.

    Example:
        executor = PairParallelExecutor(n_workers=4)
        edges = executor.map_items(
            items=scan_pairs,
            worker_fn=align_scan_pair,
            worker_kwargs={'aligner': aligner},
        )
    """

    def __init__(self, n_workers: Optional[int] = None):
        """
        Initialize parallel executor.

        Args:
            n_workers: Number of worker processes. If None, uses cpu_count - 1
                to leave one core for coordination. Minimum is 1.
        """
        if n_workers is None:
            n_workers = max(1, cpu_count() - 1)
        else:
            n_workers = max(1, int(n_workers))
        self.n_workers = n_workers

        logger.info(
            f"Initialized PairParallelExecutor with {self.n_workers} workers "
            f"(total CPUs: {cpu_count()})"
        )

    def map_items(
        self,
        items: Sequence[Any],
        worker_fn: Callable,
        worker_kwargs: Optional[Dict[str, Any]] = None,
        progress_callback: Optional[Callable[[int, int], None]] = None,
    ) -> List[Any]:
        """
        Map worker function over items.

        Args:
            items: Work items (e.g. tuples of scans)
            worker_fn: Function with signature worker_fn(item, **worker_kwargs) -> result.
                Must be picklable (module level).
            worker_kwargs: Fixed keyword arguments passed to each call
            progress_callback: Optional callback(completed_count, total_count)

        Returns:
            List of results in the same order as ``items``

        Raises:
            RuntimeError: If any item fails
        """
        worker_kwargs = worker_kwargs or {}
        n_items = len(items)

        if n_items == 0:
            logger.debug("No items to process")
            return []

        start_time = time.time()

        if self.n_workers == 1 or n_items == 1:
            logger.debug(f"Processing {n_items} items sequentially")
            results = []
            for i, item in enumerate(items):
                try:
                    results.append(worker_fn(item, **worker_kwargs))
                except Exception as e:
                    logger.error(f"Error processing item {i}: {e}", exc_info=True)
                    raise RuntimeError(f"Item processing failed: {e}") from e
                if progress_callback:
                    progress_callback(i + 1, n_items)
            logger.debug(f"Sequential processing complete: {n_items} items in {time.time() - start_time:.2f}s")
            return results

        logger.info(f"Processing {n_items} items with {self.n_workers} workers")
        results = self._parallel_map(items, worker_fn, worker_kwargs, progress_callback)
        logger.info(f"Parallel processing complete: {n_items} items in {time.time() - start_time:.2f}s")
        return results

    def _parallel_map(
        self,
        items: Sequence[Any],
        worker_fn: Callable,
        worker_kwargs: Dict[str, Any],
        progress_callback: Optional[Callable[[int, int], None]],
    ) -> List[Any]:
        """
        Execute the map with multiprocessing.Pool.

        Uses imap_unordered for responsiveness, then reorders results to
        match input order.
        """
        n_items = len(items)
        worker_args = [(i, item, worker_fn, worker_kwargs) for i, item in enumerate(items)]
        # Keep chunks large enough that per-item IPC does not dominate
        chunksize = max(1, n_items // (self.n_workers * 4))

        results_dict: Dict[int, Any] = {}
        errors: List[Tuple[int, str]] = []
        with Pool(processes=self.n_workers) as pool:
            for completed, (idx, result, error) in enumerate(
                pool.imap_unordered(_worker_wrapper, worker_args, chunksize=chunksize), start=1
            ):
                if error:
                    errors.append((idx, error))
                else:
                    results_dict[idx] = result
                if progress_callback:
                    progress_callback(completed, n_items)

        if errors:
            error_msg = f"{len(errors)} items failed out of {n_items}"
            logger.error(error_msg)
            for idx, error in errors[:5]:
                logger.error(f"  Item {idx}: {error}")
            if len(errors) > 5:
                logger.error(f"  ... and {len(errors) - 5} more errors")
            raise RuntimeError(error_msg)

        return [results_dict[i] for i in range(n_items)]
