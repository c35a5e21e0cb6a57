"""Owner of detached background work such as post-submission analysis."""

import asyncio
import logging
from typing import Awaitable, Dict

logger = logging.getLogger(__name__)


class BackgroundTaskRunner:
    """Keeps strong references to detached tasks until they finish.

    Failures are logged here; callers that need the outcome publish it
    themselves from inside the submitted coroutine.
    """

    def __init__(self):
        self._tasks: Dict[str, asyncio.Task] = {}

    def submit(self, name: str, coro: Awaitable) -> asyncio.Task:
        """Schedule ``coro`` on the running loop under ``name``."""
        task = asyncio.create_task(coro, name=name)
        self._tasks[name] = task
        task.add_done_callback(lambda done: self._on_done(name, done))
        logger.info(f"🚀 Background task started: {name}")
        return task

    def _on_done(self, name: str, task: asyncio.Task) -> None:
        if self._tasks.get(name) is task:
            self._tasks.pop(name, None)
        if task.cancelled():
            logger.info(f"🛑 Background task cancelled: {name}")
            return
        error = task.exception()
        if error is not None:
            logger.error(f"❌ Background task failed: {name}: {error}", exc_info=error)

    @property
    def pending_count(self) -> int:
        return len(self._tasks)

    async def wait_idle(self) -> None:
        """Wait until every submitted task has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks.values()), return_exceptions=True)
            # let done callbacks drop finished tasks
            await asyncio.sleep(0)

    async def shutdown(self) -> None:
        """Cancel outstanding tasks and wait for them to unwind."""
        logger.info("🔄 Shutting down background task runner...")
        tasks = list(self._tasks.values())
        for task in tasks:
            if not task.done():
                task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._tasks.clear()
        logger.info("✅ Background task runner shutdown completed")
