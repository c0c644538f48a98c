"""Creation of run and submission jobs."""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional

from .lane import Lane
from ..client.client import JudgeClient
from ..client.models import Job, Language
from ..errors import TransportError, ValidationError


logger = logging.getLogger(__name__)


class JobSubmitter:
    """
    Validates local preconditions and creates jobs on the judge service.

    Each submit resets its lane before the create call goes out, so a
    superseded job is never polled and at most one job per lane is active.
    Returns None when a newer submit on the same lane won the race.
    """

    def __init__(self, client: JudgeClient, run_lane: Lane, submission_lane: Lane):
        self.client = client
        self.run_lane = run_lane
        self.submission_lane = submission_lane

    async def submit_run(
        self,
        problem_id: str,
        code: str,
        language: Language,
        test_cases: List[Dict[str, str]],
    ) -> Optional[Job]:
        """Create a run job against the given merged test list."""
        if not code.strip():
            raise ValidationError("Please write some code first.")
        if not test_cases:
            raise ValidationError("No test cases available to run.")

        payload = {
            "problemId": problem_id,
            "testCases": test_cases,
            "code": code,
            "languageId": language.id,
            "languageCode": self.client.language_code(language.judge0_code),
        }
        return await self._create(
            self.run_lane, self.client.create_run, self.client.run_status_url, payload
        )

    async def submit_full(
        self,
        problem_id: str,
        language: Language,
        code: str,
        contest_id: Optional[str] = None,
    ) -> Optional[Job]:
        """Create a scored submission."""
        if not code.strip():
            raise ValidationError("Please write some code first.")

        payload = {
            "problemId": problem_id,
            "languageId": language.id,
            "code": code,
            "submissionTime": self.client.submission_time(),
            "languageCode": self.client.language_code(language.judge0_code),
        }
        if contest_id:
            payload["contestId"] = contest_id
        return await self._create(
            self.submission_lane,
            self.client.create_submission,
            self.client.submission_status_url,
            payload,
        )

    async def _create(self, lane: Lane, create, status_url, payload: dict) -> Optional[Job]:
        # Reset happens before the first await so pollers never see old state.
        generation = lane.begin()
        try:
            job_id = await asyncio.to_thread(create, payload)
        except TransportError as e:
            if generation != lane.generation:
                return None
            logger.warning("Creating %s job failed: %s", lane.kind.value, e)
            lane.abandon(generation, e)
            raise
        except BaseException:
            # Cancelled or failed unexpectedly: the lane is no longer creating.
            lane.discard(generation)
            raise

        job = Job(id=job_id, kind=lane.kind, created_at=datetime.now(timezone.utc))
        if not lane.adopt(generation, job, status_url(job_id)):
            return None
        return job
