"""Job orchestration: test aggregation, submission, polling and projection."""

from .history import EditorTabs, SubmissionHistoryCache
from .lane import Lane
from .polling import PollingEngine, PollState
from .results import ResultProjector, ResultView, Severity
from .submitter import JobSubmitter
from .testcases import TestCaseAggregator

__all__ = [
    "EditorTabs",
    "JobSubmitter",
    "Lane",
    "PollingEngine",
    "PollState",
    "ResultProjector",
    "ResultView",
    "Severity",
    "SubmissionHistoryCache",
    "TestCaseAggregator",
]
