"""End-to-end tests for ProblemSession with an in-memory judge."""

import asyncio
import logging
from unittest.mock import patch

import pytest

from codejudge_py.client.models import (
    ExecutionResult,
    JobStatus,
    RunSummary,
    StatusSnapshot,
)
from codejudge_py.core.results import Severity
from codejudge_py.errors import TransportError, ValidationError
from codejudge_py.session import ProblemSession

from helpers import FakeJudgeClient, done_snapshot, wait_for


def make_session(client, problem, **kwargs):
    kwargs.setdefault("interval", 0.001)
    kwargs.setdefault("first_delay", 0)
    kwargs.setdefault("draft", "print(sum(map(int, input().split())))")
    return ProblemSession(client, problem, **kwargs)


class TestRun:
    def test_run_merges_tests_and_projects_results(self, problem, python_language):
        async def scenario():
            client = FakeJudgeClient()
            client.statuses[client.run_status_url("job-1")] = [
                StatusSnapshot(JobStatus.RUNNING),
                done_snapshot(["Accepted", "Accepted", "Rejected"]),
            ]
            async with make_session(client, problem) as session:
                session.testcases.add_custom("10\n20", "30")
                await session.run(python_language)
                await session.wait_run()
                return client, session.run_view()

        client, view = asyncio.run(scenario())
        _, payload = client.create_calls[0]
        assert payload["testCases"] == [
            {"input": "2\n3", "output": "5"},
            {"input": "7\n8", "output": "15"},
            {"input": "10\n20", "output": "30"},
        ]
        assert [row.label for row in view.rows] == [
            "Test Case 1",
            "Test Case 2",
            "Custom Test 1",
        ]
        assert view.rows[2].failed is True
        assert view.rows[2].expected_output == "30"
        assert view.finished is True

    def test_projection_uses_tests_as_sent(self, problem, python_language):
        async def scenario():
            client = FakeJudgeClient()
            client.statuses[client.run_status_url("job-1")] = [
                done_snapshot(["Accepted", "Accepted", "Accepted"])
            ]
            async with make_session(client, problem) as session:
                case = session.testcases.add_custom("1", "1")
                await session.run(python_language)
                await session.wait_run()
                session.testcases.remove_custom(case.id)
                return session.run_view()

        view = asyncio.run(scenario())
        assert view.rows[2].label == "Custom Test 1"
        assert view.rows[2].expected_output == "1"

    def test_removing_custom_test_during_create(self, problem, python_language):
        async def scenario():
            client = FakeJudgeClient()
            client.statuses[client.run_status_url("job-1")] = [
                done_snapshot(["Accepted", "Accepted", "Accepted"])
            ]
            async with make_session(client, problem) as session:
                case = session.testcases.add_custom("1", "1")
                release = client.hold_next_create()
                task = asyncio.ensure_future(session.run(python_language))
                await wait_for(lambda: client.create_calls)
                session.testcases.remove_custom(case.id)
                release.set()
                await task
                await session.wait_run()
                return client, session.run_view()

        client, view = asyncio.run(scenario())
        assert client.create_calls[0][1]["testCases"][-1] == {"input": "1", "output": "1"}
        assert view.rows[2].label == "Custom Test 1"
        assert view.rows[2].expected_output == "1"

    def test_raising_subscriber_does_not_stall_lane(self, problem, python_language):
        async def scenario():
            client = FakeJudgeClient()
            client.statuses[client.run_status_url("job-1")] = [
                StatusSnapshot(JobStatus.RUNNING),
                done_snapshot(["Accepted", "Accepted"]),
            ]

            def broken(lane):
                if lane.snapshot is not None and lane.snapshot.status == JobStatus.RUNNING:
                    raise RuntimeError("display failed")

            async with make_session(client, problem) as session:
                session.run_lane.subscribe(broken)
                await session.run(python_language)
                snapshot = await asyncio.wait_for(session.wait_run(), 2.0)
                return snapshot, session.run_lane

        snapshot, lane = asyncio.run(scenario())
        assert snapshot.status == JobStatus.DONE
        assert lane.busy is False

    def test_run_view_before_any_snapshot(self, problem):
        session = make_session(FakeJudgeClient(), problem)
        assert session.run_view() is None
        assert session.submission_view() is None

    def test_judge_errors_are_data(self, problem, python_language):
        async def scenario():
            client = FakeJudgeClient()
            client.statuses[client.run_status_url("job-1")] = [
                StatusSnapshot(
                    JobStatus.DONE,
                    RunSummary(
                        total_test_cases=2,
                        passed_test_cases=0,
                        results=[
                            ExecutionResult(status="Rejected", compiler_error="E1"),
                            ExecutionResult(status="Rejected", runtime_error="R1"),
                        ],
                    ),
                )
            ]
            async with make_session(client, problem) as session:
                await session.run(python_language)
                snapshot = await session.wait_run()
                return snapshot, session.run_view()

        snapshot, view = asyncio.run(scenario())
        assert snapshot.status == JobStatus.DONE
        assert [row.severity for row in view.rows] == [
            Severity.COMPILE_ERROR,
            Severity.RUNTIME_ERROR,
        ]


class TestSubmit:
    def test_terminal_submission_refreshes_history(self, problem, python_language, record):
        async def scenario():
            client = FakeJudgeClient()
            client.history = [record]
            client.statuses[client.submission_status_url("job-1")] = [
                StatusSnapshot(JobStatus.QUEUED),
                done_snapshot(["Accepted", "Accepted"]),
            ]
            async with make_session(client, problem, contest_id="c1") as session:
                session.history.fetch(problem.id)
                await session.submit(python_language)
                await session.wait_submission()
                await session.settle()
                return client, session.history.cached(problem.id), session.submission_view()

        client, history, view = asyncio.run(scenario())
        assert client.create_calls[0][1]["contestId"] == "c1"
        assert client.history_calls == [problem.id, problem.id]
        assert history == [record]
        assert view.passed == 2

    def test_failed_submission_also_refreshes(self, problem, python_language):
        async def scenario():
            client = FakeJudgeClient()
            client.statuses[client.submission_status_url("job-1")] = [
                StatusSnapshot(JobStatus.FAILED)
            ]
            async with make_session(client, problem) as session:
                await session.submit(python_language)
                await session.wait_submission()
                await session.settle()
                return client

        assert asyncio.run(scenario()).history_calls == ["prob-1"]

    def test_history_refresh_failure_is_logged(self, problem, python_language, caplog):
        async def scenario():
            client = FakeJudgeClient()
            client.statuses[client.submission_status_url("job-1")] = [
                done_snapshot(["Accepted", "Accepted"])
            ]
            async with make_session(client, problem) as session:
                with patch.object(
                    client, "get_submission_history", side_effect=TransportError("boom")
                ) as history:
                    await session.submit(python_language)
                    await session.wait_submission()
                    await session.settle()
                return history, session.history.cached(problem.id)

        with caplog.at_level(logging.WARNING, logger="codejudge_py.session"):
            history, cached = asyncio.run(scenario())

        history.assert_called_once_with("prob-1")
        assert cached is None
        assert "Refreshing submission history failed: boom" in caplog.text

    def test_lanes_are_independent(self, problem, python_language):
        async def scenario():
            client = FakeJudgeClient()
            async with make_session(client, problem, interval=60) as session:
                await session.run(python_language)
                await session.submit(python_language)
                await wait_for(lambda: len(client.status_calls) == 2)
                return (
                    session.run_lane.engine.current_url,
                    session.submission_lane.engine.current_url,
                    client,
                )

        run_url, submission_url, client = asyncio.run(scenario())
        assert run_url == client.run_status_url("job-1")
        assert submission_url == client.submission_status_url("job-2")


class TestReadOnlyHistory:
    def test_run_blocked_while_viewing_history(self, problem, python_language, record):
        async def scenario():
            client = FakeJudgeClient()
            async with make_session(client, problem) as session:
                session.history.open_as_tab(record)
                with pytest.raises(ValidationError):
                    await session.run(python_language)
                with pytest.raises(ValidationError):
                    await session.submit(python_language)
                session.history.close_tab(record)
                return client, session.editor.displayed_code

        client, code = asyncio.run(scenario())
        assert client.create_calls == []
        assert code == "print(sum(map(int, input().split())))"


class TestTeardown:
    def test_close_stops_polling(self, problem, python_language):
        async def scenario():
            client = FakeJudgeClient()
            session = make_session(client, problem, first_delay=0.05)
            await session.run(python_language)
            session.close()
            await asyncio.sleep(0.1)
            return client

        assert asyncio.run(scenario()).status_calls == []
