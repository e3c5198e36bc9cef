"""Best-effort fan-out for independent store operations.

Every item is attempted; a failure is caught and logged per item and never
cancels the others. Results come back once all items have settled.
"""

import asyncio
import contextlib
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass, field
from typing import Generic, TypeVar

from ragspace.utils import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


@dataclass
class BatchResult(Generic[T]):
    """Outcome of a best-effort batch."""

    succeeded: list[T] = field(default_factory=list)
    failed: list[tuple[T, Exception]] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.succeeded) + len(self.failed)

    @property
    def all_succeeded(self) -> bool:
        return not self.failed


async def run_best_effort(
    items: Iterable[T],
    action: Callable[[T], Awaitable[object]],
    describe: Callable[[T], str] = str,
    concurrency: int | None = None,
    operation: str = "Operation",
) -> BatchResult[T]:
    """Run ``action`` for every item concurrently and collect per-item outcomes.

    Args:
        items: Items to process
        action: Coroutine function applied to each item
        describe: Label for an item in log lines
        concurrency: Max in-flight actions (None = unbounded)
        operation: Operation name for log lines

    Returns:
        BatchResult with succeeded items and (item, error) pairs
    """
    if concurrency is not None and concurrency < 1:
        raise ValueError("concurrency must be >= 1")

    limiter = asyncio.Semaphore(concurrency) if concurrency else None

    async def run_one(item: T) -> tuple[T, Exception | None]:
        async with limiter if limiter is not None else contextlib.nullcontext():
            try:
                await action(item)
            except Exception as e:
                logger.warning(f"{operation} failed for {describe(item)}: {e}")
                return item, e
        return item, None

    outcomes = await asyncio.gather(*(run_one(item) for item in items))

    result: BatchResult[T] = BatchResult()
    for item, error in outcomes:
        if error is None:
            result.succeeded.append(item)
        else:
            result.failed.append((item, error))

    if result.failed:
        logger.warning(f"{operation}: {len(result.failed)}/{result.total} items failed")
    else:
        logger.debug(f"{operation}: all {result.total} items succeeded")
    return result
