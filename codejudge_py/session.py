"""Problem session: wires test aggregation, lanes and history together."""

import asyncio
import logging
from typing import Optional, Set

from .client.client import JudgeClient
from .client.models import Job, JobKind, Language, Problem, StatusSnapshot
from .core.history import EditorTabs, SubmissionHistoryCache
from .core.lane import Lane
from .core.polling import PollingEngine
from .core.results import ResultProjector, ResultView
from .core.submitter import JobSubmitter
from .core.testcases import TestCaseAggregator
from .errors import TransportError, ValidationError


logger = logging.getLogger(__name__)


class ProblemSession:
    """
    Everything needed to run and submit code for one problem.

    Use as an async context manager, or call ``close()``, so that no timer
    or callback outlives the session.
    """

    def __init__(
        self,
        client: JudgeClient,
        problem: Problem,
        contest_id: Optional[str] = None,
        interval: float = PollingEngine.DEFAULT_INTERVAL,
        first_delay: float = PollingEngine.FIRST_TICK_DELAY,
        draft: str = "",
    ):
        self.client = client
        self.problem = problem
        self.contest_id = contest_id
        self.testcases = TestCaseAggregator(problem.test_cases)
        self.run_lane = Lane(JobKind.RUN, client.fetch_status, interval, first_delay)
        self.submission_lane = Lane(
            JobKind.SUBMISSION, client.fetch_status, interval, first_delay
        )
        self.submitter = JobSubmitter(client, self.run_lane, self.submission_lane)
        self.history = SubmissionHistoryCache(client, EditorTabs(draft))
        self.run_projector = ResultProjector(problem.test_cases)
        self._tasks: Set[asyncio.Task] = set()
        self.submission_lane.subscribe(self._on_submission_change)

    async def __aenter__(self) -> "ProblemSession":
        return self

    async def __aexit__(self, *exc_info) -> None:
        self.close()

    @property
    def editor(self) -> EditorTabs:
        return self.history.editor

    def _check_executable(self) -> None:
        if not self.editor.can_execute:
            raise ValidationError("Switch back to your draft to run or submit code.")

    async def run(self, language: Language) -> Optional[Job]:
        """Run the draft against predefined and custom tests."""
        self._check_executable()
        predefined = self.testcases.predefined
        custom = self.testcases.custom
        job = await self.submitter.submit_run(
            self.problem.id,
            self.editor.draft,
            language,
            self.testcases.merge(predefined, custom),
        )
        if job is not None:
            # Results are paired with the custom tests as they were sent.
            self.run_projector = ResultProjector(predefined, custom)
        return job

    async def submit(self, language: Language) -> Optional[Job]:
        """Submit the draft for scoring."""
        self._check_executable()
        return await self.submitter.submit_full(
            self.problem.id, language, self.editor.draft, self.contest_id
        )

    async def wait_run(self) -> Optional[StatusSnapshot]:
        return await self.run_lane.wait()

    async def wait_submission(self) -> Optional[StatusSnapshot]:
        return await self.submission_lane.wait()

    def run_view(self) -> Optional[ResultView]:
        """Render model for the latest run snapshot, if any."""
        if self.run_lane.snapshot is None:
            return None
        return self.run_projector.project(self.run_lane.snapshot)

    def submission_view(self) -> Optional[ResultView]:
        if self.submission_lane.snapshot is None:
            return None
        return ResultProjector(self.problem.test_cases).project(
            self.submission_lane.snapshot
        )

    def _on_submission_change(self, lane: Lane) -> None:
        if lane.snapshot is None or not lane.snapshot.is_terminal:
            return
        self.history.invalidate(self.problem.id)
        task = asyncio.get_running_loop().create_task(self._refresh_history())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _refresh_history(self) -> None:
        try:
            await self.history.refresh(self.problem.id)
        except TransportError as e:
            logger.warning("Refreshing submission history failed: %s", e)

    async def settle(self) -> None:
        """Wait for background history refreshes to finish."""
        if self._tasks:
            await asyncio.gather(*self._tasks)

    def close(self) -> None:
        self.run_lane.close()
        self.submission_lane.close()
        for task in list(self._tasks):
            task.cancel()
        self._tasks.clear()
