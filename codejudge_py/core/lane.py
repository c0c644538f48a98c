"""Per-lane job state: one active job, one result store, one poller."""

import asyncio
import logging
from typing import Callable, List, Optional

from .polling import Fetch, PollingEngine, PollState
from ..client.models import Job, JobKind, StatusSnapshot
from ..errors import TransportError


logger = logging.getLogger(__name__)

Subscriber = Callable[["Lane"], None]


class Lane:
    """
    Tracks the single active job of one kind (run or submission).

    The only writers are ``begin``/``adopt``/``abandon`` (called by the
    submitter) and the lane's own polling engine. Everything else reads
    ``job``, ``snapshot`` and ``error`` or subscribes to changes.
    """

    def __init__(
        self,
        kind: JobKind,
        fetch: Fetch,
        interval: float = PollingEngine.DEFAULT_INTERVAL,
        first_delay: float = PollingEngine.FIRST_TICK_DELAY,
    ):
        self.kind = kind
        self.job: Optional[Job] = None
        self.snapshot: Optional[StatusSnapshot] = None
        self.error: Optional[TransportError] = None
        self.generation = 0
        self.engine = PollingEngine(
            fetch,
            on_snapshot=self._publish,
            on_error=self._fail,
            interval=interval,
            first_delay=first_delay,
            name=kind.value,
        )
        self._subscribers: List[Subscriber] = []
        self._settled: Optional[asyncio.Future] = None
        self._pending_create = False

    @property
    def busy(self) -> bool:
        """True while a job is being created or polled."""
        return self._pending_create or self.engine.state == PollState.POLLING

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register for change notifications. Returns an unsubscribe function."""
        self._subscribers.append(callback)
        return lambda: self._subscribers.remove(callback)

    def _notify(self) -> None:
        for callback in list(self._subscribers):
            try:
                callback(self)
            except Exception:
                logger.exception("%s: subscriber %r failed", self.kind.value, callback)

    def begin(self) -> int:
        """Reset the lane for a new job and return its generation token.

        Stops any running poll and releases waiters on the previous job.
        """
        self.generation += 1
        self.engine.stop()
        self.job = None
        self.snapshot = None
        self.error = None
        self._pending_create = True
        self._release()
        self._notify()
        return self.generation

    def adopt(self, generation: int, job: Job, status_url: str) -> bool:
        """Make ``job`` the active job and start polling it.

        Returns False, without touching the lane, if a newer ``begin`` has
        happened since ``generation`` was issued.
        """
        if generation != self.generation:
            logger.debug(
                "%s: job %s superseded before polling started", self.kind.value, job.id
            )
            return False
        self.job = job
        self._pending_create = False
        self._settled = asyncio.get_running_loop().create_future()
        self.engine.start(status_url)
        self._notify()
        return True

    def abandon(self, generation: int, error: TransportError) -> None:
        """Record a failed job creation for ``generation``."""
        if generation != self.generation:
            return
        self._pending_create = False
        self.error = error
        self._notify()

    def discard(self, generation: int) -> None:
        """Forget a job creation for ``generation`` that never completed."""
        if generation != self.generation or not self._pending_create:
            return
        self._pending_create = False
        self._notify()

    async def wait(self) -> Optional[StatusSnapshot]:
        """Wait for the active job to settle.

        Returns the terminal snapshot, raises the lane's ``TransportError``,
        or returns None when the job was superseded by a newer one.
        """
        job = self.job
        if self._settled is not None:
            await asyncio.shield(self._settled)
        if self.job is not job:
            return None
        if self.error is not None:
            raise self.error
        return self.snapshot

    def close(self) -> None:
        self.engine.close()
        self._release()
        self._subscribers.clear()

    def _release(self) -> None:
        if self._settled is not None and not self._settled.done():
            self._settled.set_result(None)
        self._settled = None

    def _publish(self, snapshot: StatusSnapshot) -> None:
        self.snapshot = snapshot
        if snapshot.is_terminal and self._settled is not None and not self._settled.done():
            self._settled.set_result(snapshot)
        self._notify()

    def _fail(self, error: TransportError) -> None:
        self.error = error
        if self._settled is not None and not self._settled.done():
            self._settled.set_result(None)
        self._notify()
