"""
Tracking for background tasks that outlive the request that started them.
"""
import asyncio
import logging
from typing import Coroutine, Optional, Set

logger = logging.getLogger(__name__)


class BackgroundTaskTracker:
    """
    Keeps in-flight background tasks referenced until they finish.

    Tasks are spawned on the running loop and removed once done. On shutdown
    the tracker waits for them for a grace period, then cancels the rest.
    """

    def __init__(self):
        self._tasks: Set[asyncio.Task] = set()
        self._closed = False

    def __len__(self) -> int:
        return len(self._tasks)

    @property
    def closed(self) -> bool:
        return self._closed

    def spawn(self, coro: Coroutine, name: Optional[str] = None) -> asyncio.Task:
        """
        Schedule ``coro`` and track it until completion.

        Raises:
            RuntimeError: If the tracker has been shut down
        """
        if self._closed:
            coro.close()
            raise RuntimeError("Background task tracker is shut down")

        task = asyncio.create_task(coro, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._on_done)
        return task

    def _on_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            logger.debug(f"Background task {task.get_name()} cancelled")
            return

        error = task.exception()
        if error is not None:
            logger.error(
                f"Background task {task.get_name()} failed: {error}",
                exc_info=error,
            )

    async def shutdown(self, grace_period: float = 5.0) -> None:
        """Stop accepting tasks, wait up to ``grace_period`` seconds, cancel stragglers."""
        self._closed = True
        if not self._tasks:
            return

        logger.info(f"Waiting for {len(self._tasks)} in-flight background task(s)")
        _, pending = await asyncio.wait(set(self._tasks), timeout=grace_period)

        if pending:
            logger.warning(f"Cancelling {len(pending)} background task(s) after {grace_period}s")
            for task in pending:
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)
