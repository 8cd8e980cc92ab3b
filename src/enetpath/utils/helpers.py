# ============================================
# enetpath - src/enetpath/utils/helpers.py
# Task fan-out and small shared helpers
# ============================================

import os
import threading
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed

from .exceptions import EnetPathError
from .logger import get_logger

logger = get_logger('helpers')


@dataclass
class TaskOutcome:
    """Result of one fan-out task: a value, a package error, or a skip"""
    item: Any
    value: Any = None
    error: Optional[EnetPathError] = None
    skipped: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None and not self.skipped


def run_tasks(func: Callable, items: Sequence[Any], max_workers: Optional[int] = 1,
              cancel_event: Optional[threading.Event] = None) -> List[TaskOutcome]:
    """
    Execute ``func`` for every item, sequentially or on a thread pool

    Package errors (``EnetPathError``) are captured per task so sibling
    tasks keep running; any other exception propagates. Items whose turn
    comes after ``cancel_event`` is set are skipped.

    Args:
        func: Function to execute
        items: Items to process
        max_workers: Worker threads; ``None``/``1`` runs sequentially
        cancel_event: Optional event checked before each task starts

    Returns:
        One TaskOutcome per item, in the order of ``items``
    """
    def _run(item) -> TaskOutcome:
        if cancel_event is not None and cancel_event.is_set():
            return TaskOutcome(item=item, skipped=True)
        try:
            return TaskOutcome(item=item, value=func(item))
        except EnetPathError as e:
            return TaskOutcome(item=item, error=e)

    if not max_workers or max_workers == 1 or len(items) <= 1:
        return [_run(item) for item in items]

    results: List[Optional[TaskOutcome]] = [None] * len(items)

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        future_to_index = {
            executor.submit(_run, item): i
            for i, item in enumerate(items)
        }

        for future in as_completed(future_to_index):
            index = future_to_index[future]
            results[index] = future.result()

    return results


def resolve_n_jobs(n_jobs: Optional[int]) -> int:
    """Translate an sklearn-style ``n_jobs`` into a worker count"""
    if n_jobs is None or n_jobs == 0:
        return 1
    if n_jobs < 0:
        return max(1, (os.cpu_count() or 1) + 1 + n_jobs)
    return int(n_jobs)
