"""Bounded fork-join execution over a thread pool."""

from __future__ import annotations

import logging
from concurrent.futures import ALL_COMPLETED, FIRST_EXCEPTION, ThreadPoolExecutor, wait
from typing import Callable, List, Sequence, TypeVar

from .models import ItemFailure, TaskOutcome

logger = logging.getLogger("figma_exporter.pool")

T = TypeVar("T")


def run_tasks(
    func: Callable[[T], object],
    items: Sequence[T],
    max_workers: int,
    fail_fast: bool = True,
) -> List[TaskOutcome]:
    """Run ``func`` once per item and return one outcome per item, in item order.

    Every task writes only the slot at its own index, and the caller sees the
    slots only after all tasks have finished. With ``fail_fast`` a failure
    cancels tasks that have not started yet; once the running ones complete,
    the error of the earliest submitted failed item is re-raised.
    """
    slots = [TaskOutcome(item=item) for item in items]
    if not items:
        return slots

    def _run(index: int) -> None:
        slot = slots[index]
        try:
            slot.value = func(slot.item)
        except Exception as exc:  # pylint: disable=broad-except
            slot.error = exc
            if fail_fast:
                raise
        finally:
            slot.done = True

    workers = min(max_workers, len(items))
    logger.debug("Running %d task(s) on %d worker(s)", len(items), workers)
    executor = ThreadPoolExecutor(max_workers=workers)
    try:
        futures = [executor.submit(_run, index) for index in range(len(items))]
        done, _ = wait(
            futures, return_when=FIRST_EXCEPTION if fail_fast else ALL_COMPLETED
        )
        if any(future.exception() is not None for future in done):
            executor.shutdown(wait=True, cancel_futures=True)
            failed = [
                future for future in futures
                if not future.cancelled() and future.exception() is not None
            ]
            raise failed[0].exception()
    finally:
        executor.shutdown(wait=True)
    return slots


def collect_failures(outcomes: Sequence[TaskOutcome]) -> List[ItemFailure]:
    return [
        ItemFailure(item=outcome.item, error=outcome.error)
        for outcome in outcomes
        if outcome.error is not None
    ]
