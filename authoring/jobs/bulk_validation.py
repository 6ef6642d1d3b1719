"""
Bulk validation worker pool.

Runs one check per record, optionally across a thread pool, and always
hands results back in input order. A deadline stops new work from being
scheduled; checks already running are allowed to finish and everything
completed is kept. Because records are scheduled strictly in order, the
completed set is always a prefix of the input.
"""
import logging
import time
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from typing import Callable, Dict, Generic, List, Optional, Sequence, TypeVar

from authoring.core.config import get_settings

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")

Clock = Callable[[], float]


@dataclass(frozen=True)
class PartialResult:
    """Marker attached to a batch cut short by its deadline."""
    completed: int
    remaining_count: int

    def to_dict(self) -> dict:
        return {"completed": self.completed, "remainingCount": self.remaining_count}


@dataclass(frozen=True)
class BatchOutcome(Generic[R]):
    results: List[R]
    partial: Optional[PartialResult] = None


class _Deadline:
    def __init__(self, seconds: Optional[float], clock: Clock):
        self._clock = clock
        self._expires_at = None if seconds is None else clock() + seconds

    def expired(self) -> bool:
        return self._expires_at is not None and self._clock() >= self._expires_at


def run_batch(
    items: Sequence[T],
    check: Callable[[T], R],
    max_workers: Optional[int] = None,
    deadline_seconds: Optional[float] = None,
    clock: Clock = time.monotonic,
) -> BatchOutcome[R]:
    """
    Apply check to every item.

    max_workers defaults to IMPORT_MAX_WORKERS; 1 runs in the calling
    thread. When the deadline passes before every item was scheduled the
    outcome carries a PartialResult.
    """
    if max_workers is None:
        max_workers = get_settings().IMPORT_MAX_WORKERS
    if max_workers < 1:
        raise ValueError(f"max_workers must be at least 1, got {max_workers}")

    deadline = _Deadline(deadline_seconds, clock)
    if max_workers == 1 or len(items) <= 1:
        results = _run_inline(items, check, deadline)
    else:
        results = _run_pooled(items, check, min(max_workers, len(items)), deadline)

    remaining = len(items) - len(results)
    if remaining:
        logger.info(f"Bulk validation stopped at deadline: {len(results)}/{len(items)} records checked")
        return BatchOutcome(results=results, partial=PartialResult(len(results), remaining))
    return BatchOutcome(results=results)


def _run_inline(items: Sequence[T], check: Callable[[T], R], deadline: _Deadline) -> List[R]:
    results: List[R] = []
    for item in items:
        if deadline.expired():
            break
        results.append(check(item))
    return results


def _run_pooled(items: Sequence[T], check: Callable[[T], R], workers: int, deadline: _Deadline) -> List[R]:
    done_by_index: Dict[int, R] = {}
    in_flight: Dict[Future, int] = {}
    submitted = 0
    scheduling = True

    with ThreadPoolExecutor(max_workers=workers) as pool:
        while True:
            while scheduling and submitted < len(items) and len(in_flight) < workers:
                if deadline.expired():
                    scheduling = False
                    break
                in_flight[pool.submit(check, items[submitted])] = submitted
                submitted += 1

            if not in_flight:
                break

            finished, _ = wait(in_flight, return_when=FIRST_COMPLETED)
            for future in finished:
                done_by_index[in_flight.pop(future)] = future.result()

    return [done_by_index[i] for i in range(submitted)]
