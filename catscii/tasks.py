"""
Background tasks for catscii.

The pre-warm task refreshes the cached art on a fixed interval so client
requests rarely wait on the upstream provider.
"""
import asyncio
import logging
from typing import Optional

from .errors import CatsciiError
from .services.coordinator import FetchCoordinator

logger = logging.getLogger(__name__)


class PrewarmTask:
    """
    Periodic task refreshing the art cache.

    A failed refresh is logged and left to the next tick; nothing is retried
    in between.
    """

    def __init__(self, coordinator: FetchCoordinator, interval_seconds: float):
        self.coordinator = coordinator
        self.interval_seconds = interval_seconds
        self._task: Optional[asyncio.Task] = None
        self._running = False

    async def _run_refresh(self) -> None:
        """Run the refresh loop."""
        while self._running:
            try:
                await self.coordinator.refresh()
            except CatsciiError as e:
                logger.warning("Cache pre-warm failed: %s", e.message)
            except Exception:
                logger.exception("Unexpected error during cache pre-warm")

            await asyncio.sleep(self.interval_seconds)

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start the pre-warm task."""
        if not self.running:
            self._running = True
            self._task = asyncio.create_task(self._run_refresh())
            logger.info("Cache pre-warm task started (interval: %ss)", self.interval_seconds)

    async def stop(self) -> None:
        """Stop the pre-warm task and wait for it to finish."""
        self._running = False
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
            logger.info("Cache pre-warm task stopped")
