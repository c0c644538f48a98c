"""Status polling loop shared by the run and submission lanes."""

import asyncio
import logging
from enum import Enum
from typing import Awaitable, Callable, Optional, Set

from ..client.models import JobStatus, StatusSnapshot
from ..errors import StaleResponseError, TransportError


logger = logging.getLogger(__name__)

Fetch = Callable[[str], Awaitable[StatusSnapshot]]


class PollState(str, Enum):
    IDLE = "idle"
    POLLING = "polling"
    DONE = "done"
    FAILED = "failed"


class PollingEngine:
    """
    Polls a status url until the job reaches a terminal state.

    Every call to ``start`` that changes the url bumps an epoch counter.
    Timers and fetches carry the epoch they were created under, and every
    completion point compares it against the current one, dropping the
    result on mismatch. ``start(None)`` or ``start(other_url)`` therefore
    invalidates a running loop synchronously, whatever the timers or
    in-flight fetches are doing.

    Must be driven from inside a running asyncio event loop.
    """

    FIRST_TICK_DELAY = 0.3
    DEFAULT_INTERVAL = 0.5

    def __init__(
        self,
        fetch: Fetch,
        on_snapshot: Callable[[StatusSnapshot], None],
        on_error: Callable[[TransportError], None],
        interval: float = DEFAULT_INTERVAL,
        first_delay: float = FIRST_TICK_DELAY,
        name: str = "poller",
    ):
        self._fetch = fetch
        self._on_snapshot = on_snapshot
        self._on_error = on_error
        self.interval = interval
        self.first_delay = first_delay
        self.name = name

        self.state = PollState.IDLE
        self.fetch_count = 0
        self._current_url: Optional[str] = None
        self._epoch = 0
        self._timer: Optional[asyncio.TimerHandle] = None
        self._tasks: Set[asyncio.Task] = set()
        self._closed = False

    @property
    def current_url(self) -> Optional[str]:
        return self._current_url

    @property
    def pending_ticks(self) -> int:
        """Number of scheduled but not yet fired ticks (0 or 1)."""
        return 0 if self._timer is None else 1

    def start(self, url: Optional[str]) -> None:
        """Begin polling ``url``, superseding any previous loop.

        Calling again with the url already being polled does nothing.
        """
        if self._closed:
            raise RuntimeError(f"{self.name}: polling engine is closed")
        if url == self._current_url:
            return

        self._invalidate()
        self._current_url = url
        if url is None:
            self.state = PollState.IDLE
            logger.debug("%s: stopped", self.name)
            return

        self.state = PollState.POLLING
        self._schedule(self._epoch, url, self.first_delay)

    def stop(self) -> None:
        self.start(None)

    def close(self) -> None:
        """Tear down: no callback fires after this returns."""
        self._closed = True
        self._invalidate()
        self._current_url = None
        for task in list(self._tasks):
            task.cancel()
        self._tasks.clear()
        if self.state == PollState.POLLING:
            self.state = PollState.IDLE

    def _invalidate(self) -> None:
        self._epoch += 1
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _schedule(self, epoch: int, url: str, delay: float) -> None:
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(delay, self._fire, epoch, url)
        logger.debug("%s: next tick for %s in %.3fs", self.name, url, delay)

    def _fire(self, epoch: int, url: str) -> None:
        # Cancelled timers can still fire if cancellation raced the loop.
        if epoch != self._epoch:
            return
        self._timer = None
        task = asyncio.get_running_loop().create_task(self._tick(epoch, url))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def _ensure_current(self, epoch: int, url: str) -> None:
        if epoch != self._epoch:
            raise StaleResponseError(url, self._current_url)

    def _settle(self, state: PollState) -> None:
        # Invalidate so a later start() with the same url polls again.
        self._invalidate()
        self._current_url = None
        self.state = state

    async def _tick(self, epoch: int, url: str) -> None:
        self.fetch_count += 1
        try:
            try:
                snapshot = await self._fetch(url)
            except TransportError as e:
                self._ensure_current(epoch, url)
                logger.warning("%s: polling %s failed: %s", self.name, url, e)
                self._settle(PollState.IDLE)
                self._on_error(e)
                return

            self._ensure_current(epoch, url)
            if snapshot.is_terminal:
                self._settle(
                    PollState.DONE
                    if snapshot.status == JobStatus.DONE
                    else PollState.FAILED
                )
                logger.debug("%s: %s reached %s", self.name, url, snapshot.status.value)
                self._on_snapshot(snapshot)
                return

            self._on_snapshot(snapshot)
            # The subscriber may have started a different job.
            self._ensure_current(epoch, url)
            self._schedule(epoch, url, self.interval)
        except StaleResponseError as e:
            logger.debug("%s: discarding stale response: %s", self.name, e)
        except Exception as e:
            logger.exception("%s: tick for %s failed", self.name, url)
            if epoch != self._epoch:
                return
            self._settle(PollState.IDLE)
            self._on_error(TransportError(f"Polling {url} failed: {e}", url=url))
