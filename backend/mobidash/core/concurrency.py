"""
Fan-out helpers: launch every awaitable, wait for all of them, keep the winners.
"""

import asyncio
from dataclasses import dataclass
from typing import Any, Awaitable, Generic, Iterable, List, Optional, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Settled(Generic[T]):
    """Terminal state of one awaited operation."""

    value: Optional[T] = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None


async def gather_settled(aws: Iterable[Awaitable[T]]) -> List[Settled[T]]:
    """
    Await every operation concurrently and report each outcome in input order.

    A failing branch never cancels its siblings. Cancellation of the caller
    still propagates.
    """
    results: List[Any] = await asyncio.gather(*aws, return_exceptions=True)
    settled: List[Settled[T]] = []
    for result in results:
        if isinstance(result, asyncio.CancelledError):
            raise result
        if isinstance(result, BaseException):
            settled.append(Settled(error=result))
        else:
            settled.append(Settled(value=result))
    return settled


def successes(results: Iterable[Settled[T]]) -> List[T]:
    """Values of the operations that completed without error and produced data."""
    return [r.value for r in results if r.ok and r.value is not None]
