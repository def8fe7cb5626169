"""Cancellation token shared by one pipeline run."""

import asyncio
import logging
import uuid
from typing import Awaitable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class PipelineCancelled(Exception):
    """Raised when work is abandoned because its run's token was signaled."""


class CancellationToken:
    """
    One-shot cancellation handle for a single run.

    A token starts unsignaled and can be signaled exactly once; later
    calls to ``signal()`` are no-ops. Each token carries a ``run_id`` so
    consumers can tell which run a piece of work belongs to.
    """

    def __init__(self, run_id: str | None = None):
        self.run_id = run_id or uuid.uuid4().hex
        self._event = asyncio.Event()
        self.reason: str | None = None

    def signal(self, reason: str = "cancelled") -> None:
        if self._event.is_set():
            return
        self.reason = reason
        self._event.set()
        logger.debug(f"Token {self.run_id} signaled ({reason})")

    def is_signaled(self) -> bool:
        return self._event.is_set()

    def raise_if_signaled(self) -> None:
        if self._event.is_set():
            raise PipelineCancelled(f"Run {self.run_id} was {self.reason}")

    async def wait(self) -> None:
        await self._event.wait()

    async def guard(self, awaitable: Awaitable[T]) -> T:
        """
        Await ``awaitable`` unless the token is signaled first.

        If the token fires while the awaitable is pending, the awaitable is
        cancelled and ``PipelineCancelled`` is raised. A result that is
        already available wins over a simultaneous signal; callers check
        the token again after the await.
        """
        if self.is_signaled():
            if asyncio.iscoroutine(awaitable):
                awaitable.close()
            self.raise_if_signaled()

        work = asyncio.ensure_future(awaitable)
        waiter = asyncio.ensure_future(self._event.wait())
        try:
            done, _ = await asyncio.wait(
                {work, waiter}, return_when=asyncio.FIRST_COMPLETED
            )
        except asyncio.CancelledError:
            work.cancel()
            raise
        finally:
            waiter.cancel()

        if work in done:
            return work.result()

        work.cancel()
        await asyncio.gather(work, return_exceptions=True)
        raise PipelineCancelled(f"Run {self.run_id} was {self.reason} mid-flight")

    def __repr__(self) -> str:
        return f"CancellationToken(run_id={self.run_id!r}, signaled={self.is_signaled()})"
