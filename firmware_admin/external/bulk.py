"""
Bulk task runner for per-firmware backend operations.

Bulk download and bulk delete send one request per selected firmware. The
runner executes those requests with a bounded number in flight (one by
default, i.e. strictly sequential) and collects a result per item.
"""

import logging
from concurrent.futures import FIRST_COMPLETED, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Hashable, List, Optional, Sequence

from firmware_admin.external.backend_api import APIError

logger = logging.getLogger(__name__)


@dataclass
class ItemResult:
    item: Hashable
    ok: bool
    value: Any = None
    error: Optional[APIError] = None


@dataclass
class BulkResult:
    results: List[ItemResult] = field(default_factory=list)
    skipped: List[Hashable] = field(default_factory=list)
    aborted: bool = False

    @property
    def succeeded(self) -> List[ItemResult]:
        return [r for r in self.results if r.ok]

    @property
    def failed(self) -> List[ItemResult]:
        return [r for r in self.results if not r.ok]

    @property
    def ok(self) -> bool:
        return not self.failed and not self.aborted


ProgressCallback = Callable[[ItemResult, int, int], None]


class BulkTaskRunner:
    """Runs one task per item with at most `concurrency` tasks in flight."""

    def __init__(self, concurrency: int = 1):
        if concurrency < 1:
            raise ValueError("concurrency must be at least 1")
        self.concurrency = concurrency

    def run(
        self,
        items: Sequence[Hashable],
        task: Callable[[Hashable], Any],
        stop_on_error: bool = False,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> BulkResult:
        """
        Run `task` for every item.

        Only APIError counts as an item failure; any other exception
        propagates to the caller.

        Args:
            items: Items to process, in order
            task: Callable invoked with one item
            stop_on_error: Start no new item after the first failure
            progress_callback: Optional callback(result, done, total) after each item

        Returns:
            BulkResult with results in item order and the items never started
        """
        items = list(items)
        if self.concurrency == 1 or len(items) <= 1:
            return self._run_sequential(items, task, stop_on_error, progress_callback)
        return self._run_pooled(items, task, stop_on_error, progress_callback)

    @staticmethod
    def _call(task: Callable[[Hashable], Any], item: Hashable) -> ItemResult:
        try:
            return ItemResult(item=item, ok=True, value=task(item))
        except APIError as e:
            logger.warning(f"Bulk task failed for {item}: {e}")
            return ItemResult(item=item, ok=False, error=e)

    def _run_sequential(self, items, task, stop_on_error, progress_callback) -> BulkResult:
        outcome = BulkResult()
        total = len(items)
        for index, item in enumerate(items):
            result = self._call(task, item)
            outcome.results.append(result)
            if progress_callback:
                progress_callback(result, index + 1, total)
            if not result.ok and stop_on_error:
                outcome.aborted = True
                outcome.skipped = items[index + 1:]
                break
        return outcome

    def _run_pooled(self, items, task, stop_on_error, progress_callback) -> BulkResult:
        total = len(items)
        by_item: Dict[int, ItemResult] = {}
        pending = {}
        next_index = 0
        done_count = 0
        stop = False

        with ThreadPoolExecutor(max_workers=self.concurrency) as executor:
            while pending or (next_index < total and not stop):
                # Keep at most `concurrency` items in flight
                while not stop and next_index < total and len(pending) < self.concurrency:
                    future = executor.submit(self._call, task, items[next_index])
                    pending[future] = next_index
                    next_index += 1

                finished, _ = wait(list(pending), return_when=FIRST_COMPLETED)
                for future in finished:
                    index = pending.pop(future)
                    result = future.result()
                    by_item[index] = result
                    done_count += 1
                    if progress_callback:
                        progress_callback(result, done_count, total)
                    if not result.ok and stop_on_error:
                        stop = True

        outcome = BulkResult(results=[by_item[i] for i in sorted(by_item)])
        if stop:
            outcome.aborted = True
            outcome.skipped = items[next_index:]
        return outcome
