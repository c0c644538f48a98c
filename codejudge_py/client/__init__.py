"""Client module for judge service interaction."""

from .client import JudgeClient
from .models import (
    CustomTestCase,
    ExecutionResult,
    Job,
    JobKind,
    JobStatus,
    Language,
    Problem,
    RunSummary,
    StatusSnapshot,
    SubmissionRecord,
    SubmissionStatus,
    TestCase,
)

__all__ = [
    "JudgeClient",
    "CustomTestCase",
    "ExecutionResult",
    "Job",
    "JobKind",
    "JobStatus",
    "Language",
    "Problem",
    "RunSummary",
    "StatusSnapshot",
    "SubmissionRecord",
    "SubmissionStatus",
    "TestCase",
]
