"""
Fetch coordinator: single-flight fetching plus a one-slot art cache.

The slot moves through ``empty -> fetching -> cached -> (fetching | expired)``.
Concurrent callers share one upstream fetch, fresh art is served without
touching the upstream, and a failed refresh may fall back to the previous
art for a bounded time after it expired.

All slot transitions happen under one asyncio.Lock and the slot itself is
never handed out; callers only ever see finished AsciiArt or a classified
CatsciiError.
"""
import asyncio
import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Awaitable, Callable, Literal, Optional

from ..errors import CatsciiError
from .renderer import AsciiArt

logger = logging.getLogger(__name__)

SlotState = Literal["empty", "fetching", "cached", "expired"]


@dataclass(frozen=True)
class CacheEntry:
    """Cached art and the monotonic instant it stops being fresh."""
    art: AsciiArt
    expires_at: float

    def is_fresh(self, now: float) -> bool:
        return now < self.expires_at


@dataclass(frozen=True)
class CacheSnapshot:
    """Point-in-time view of the slot, for health reporting."""
    state: SlotState
    art_age_seconds: Optional[float]
    fetch_count: int


class FetchCoordinator:
    """
    Owns the art cache slot and the in-flight upstream fetch.

    Args:
        fetch_art: coroutine function producing fresh art, raising a
            CatsciiError subclass on failure.
        freshness_seconds: how long fetched art is served without refetching.
        serve_stale_on_error: when a refresh fails, return the expired art
            instead of the failure.
        stale_if_error_seconds: how long past expiry expired art may still be
            served on error.
        clock: monotonic clock, injectable for tests.
    """

    def __init__(
        self,
        fetch_art: Callable[[], Awaitable[AsciiArt]],
        freshness_seconds: float = 30.0,
        serve_stale_on_error: bool = True,
        stale_if_error_seconds: float = 300.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._fetch_art = fetch_art
        self.freshness_seconds = freshness_seconds
        self.serve_stale_on_error = serve_stale_on_error
        self.stale_if_error_seconds = stale_if_error_seconds
        self._clock = clock

        self._entry: Optional[CacheEntry] = None
        self._inflight: Optional[asyncio.Task] = None
        self._lock = asyncio.Lock()
        self._fetch_count = 0

    @property
    def state(self) -> SlotState:
        if self._inflight is not None:
            return "fetching"
        if self._entry is None:
            return "empty"
        return "cached" if self._entry.is_fresh(self._clock()) else "expired"

    @property
    def fetch_count(self) -> int:
        """Number of upstream fetches started so far."""
        return self._fetch_count

    def snapshot(self) -> CacheSnapshot:
        age = None
        if self._entry is not None:
            age = (datetime.now(timezone.utc) - self._entry.art.created_at).total_seconds()
        return CacheSnapshot(state=self.state, art_age_seconds=age, fetch_count=self._fetch_count)

    async def get(self) -> AsciiArt:
        """
        Return cat art, fetching it only when the cache has nothing fresh.

        Raises:
            CatsciiError: the fetch failed and no cached art could stand in.
        """
        async with self._lock:
            entry = self._entry
            if entry is not None and entry.is_fresh(self._clock()):
                logger.debug("Cache hit")
                return entry.art
            task = self._inflight if self._inflight is not None else self._begin_fetch()

        # A disconnecting caller only stops waiting, the fetch carries on
        return await asyncio.shield(task)

    async def refresh(self) -> AsciiArt:
        """Fetch new art even if the cached art is still fresh."""
        async with self._lock:
            task = self._inflight if self._inflight is not None else self._begin_fetch()
        return await asyncio.shield(task)

    # ========================================================================
    # Slot transitions (called with the lock held)
    # ========================================================================

    def _begin_fetch(self) -> asyncio.Task:
        self._fetch_count += 1
        logger.info("Fetching new cat art (fetch #%d)", self._fetch_count)
        task = asyncio.get_running_loop().create_task(self._run_fetch())
        task.add_done_callback(self._fetch_done)
        self._inflight = task
        return task

    def _complete_fetch(self, art: AsciiArt) -> AsciiArt:
        self._inflight = None
        self._entry = CacheEntry(art=art, expires_at=self._clock() + self.freshness_seconds)
        return art

    def _abandon_fetch(self) -> None:
        # Unclassified error or cancellation: free the slot, keep the entry
        self._inflight = None

    def _fail_fetch(self, exc: CatsciiError) -> AsciiArt:
        """Serve the previous art or raise ``exc``, leaving the slot consistent."""
        self._inflight = None
        entry = self._entry
        now = self._clock()

        if entry is not None and entry.is_fresh(now):
            logger.warning("Refresh failed, keeping cached art: %s", exc.message)
            raise exc

        if (
            entry is not None
            and self.serve_stale_on_error
            and now - entry.expires_at <= self.stale_if_error_seconds
        ):
            logger.warning(
                "Fetch failed (%s), serving art %.1f s past expiry",
                exc.message,
                now - entry.expires_at,
            )
            return entry.art

        self._entry = None
        logger.warning("Fetch failed: %s", exc.message)
        raise exc

    # ========================================================================
    # Shared fetch task
    # ========================================================================

    async def _run_fetch(self) -> AsciiArt:
        try:
            art = await self._fetch_art()
        except CatsciiError as exc:
            async with self._lock:
                return self._fail_fetch(exc)
        except BaseException:
            async with self._lock:
                self._abandon_fetch()
            raise

        async with self._lock:
            return self._complete_fetch(art)

    def _fetch_done(self, task: asyncio.Task) -> None:
        # Retrieve the outcome so an unawaited failure is not reported as lost
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None and not isinstance(exc, CatsciiError):
            logger.error("Unexpected error while fetching cat art", exc_info=exc)
