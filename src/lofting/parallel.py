"""
Worker-pool helper for independent per-station / per-plank work.

Results come back in input order, and the first failure (in input order)
propagates to the caller, so parallel and serial runs are indistinguishable.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Iterable, List, Optional, TypeVar

T = TypeVar("T")
R = TypeVar("R")


def parallel_map(fn: Callable[[T], R], items: Iterable[T], max_workers: Optional[int] = 1) -> List[R]:
    work = list(items)
    workers = int(max_workers or 1)
    if workers <= 1 or len(work) <= 1:
        return [fn(item) for item in work]

    with ThreadPoolExecutor(max_workers=min(workers, len(work))) as executor:
        futures = [executor.submit(fn, item) for item in work]
        try:
            return [f.result() for f in futures]
        except BaseException:
            for f in futures:
                f.cancel()
            raise
