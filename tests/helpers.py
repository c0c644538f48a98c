"""Test doubles shared across the test modules."""

import asyncio
import threading

from codejudge_py.client.client import JudgeClient
from codejudge_py.client.models import (
    ExecutionResult,
    JobStatus,
    RunSummary,
    StatusSnapshot,
)


BASE_URL = "http://judge.test/api/v1"


class FakeJudgeClient:
    """In-memory stand-in for JudgeClient used by orchestration tests.

    Status urls map to scripted snapshot sequences; the last entry repeats.
    Create calls can be held back with ``hold_next_create``.
    """

    def __init__(self):
        self.create_calls = []
        self.status_calls = []
        self.history_calls = []
        self.statuses = {}
        self.history = []
        self._job_ids = iter(f"job-{n}" for n in range(1, 1000))
        self._holds = []

    language_code = staticmethod(JudgeClient.language_code)
    submission_time = staticmethod(JudgeClient.submission_time)

    def run_status_url(self, job_id):
        return f"{BASE_URL}/run/{job_id}"

    def submission_status_url(self, submission_id):
        return f"{BASE_URL}/submissions/active/{submission_id}"

    def hold_next_create(self) -> threading.Event:
        release = threading.Event()
        self._holds.append(release)
        return release

    def _create(self, kind, payload):
        job_id = next(self._job_ids)
        hold = self._holds.pop(0) if self._holds else None
        self.create_calls.append((kind, payload))
        if hold is not None:
            hold.wait(5)
        return job_id

    def create_run(self, payload):
        return self._create("run", payload)

    def create_submission(self, payload):
        return self._create("submission", payload)

    async def fetch_status(self, url):
        self.status_calls.append(url)
        script = self.statuses.get(url, [StatusSnapshot(JobStatus.QUEUED)])
        item = script.pop(0) if len(script) > 1 else script[0]
        if isinstance(item, Exception):
            raise item
        return item

    def get_submission_history(self, problem_id):
        self.history_calls.append(problem_id)
        return list(self.history)


async def wait_for(predicate, timeout=2.0):
    """Spin the event loop until ``predicate()`` holds."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not reached in time")
        await asyncio.sleep(0.005)


def done_snapshot(statuses):
    """Terminal snapshot with one result per status string."""
    results = [ExecutionResult(status=s, output="out") for s in statuses]
    return StatusSnapshot(
        JobStatus.DONE,
        RunSummary(
            total_test_cases=len(results),
            passed_test_cases=sum(s == "Accepted" for s in statuses),
            results=results,
        ),
    )
