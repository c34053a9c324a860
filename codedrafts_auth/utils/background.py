"""Detached background work for fire-and-forget side effects.

Auth flows hand email delivery to a `BackgroundDispatcher` so that the caller's
result never waits for, or fails because of, the mail provider.
"""

import asyncio
from typing import Any, Coroutine, Set

import structlog

logger = structlog.get_logger(__name__)


class BackgroundDispatcher:
    """Spawns detached tasks and logs their failures at the task boundary.

    Task references are kept until each task finishes, otherwise the event loop
    only holds a weak reference and a pending task may be garbage collected.
    """

    def __init__(self) -> None:
        self._tasks: Set[asyncio.Task] = set()

    def spawn(self, coro: Coroutine[Any, Any, Any], *, description: str) -> asyncio.Task:
        """Schedule ``coro`` without awaiting it.

        Args:
            coro: The side effect to run.
            description: Short label used in log events.

        Returns:
            asyncio.Task: The scheduled task (callers normally ignore it).
        """
        task = asyncio.create_task(self._run(coro, description), name=description)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _run(self, coro: Coroutine[Any, Any, Any], description: str) -> None:
        try:
            await coro
        except asyncio.CancelledError:
            logger.warning("Background task cancelled", task=description)
            raise
        except Exception as e:
            # Never re-raised: a failed side effect must not fail the originating flow.
            logger.error(
                "Background task failed",
                task=description,
                error=str(e),
                error_type=type(e).__name__,
            )

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def drain(self) -> None:
        """Wait for every task spawned so far, e.g. on shutdown."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
