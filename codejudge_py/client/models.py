"""Data models for judge service entities."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional


class JobKind(str, Enum):
    """Which lane a job belongs to."""

    RUN = "run"
    SUBMISSION = "submission"


class JobStatus(str, Enum):
    """Remote execution status of a job."""

    QUEUED = "Queued"
    RUNNING = "Running"
    DONE = "Done"
    FAILED = "Failed"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.DONE, JobStatus.FAILED)


@dataclass
class Job:
    """A single run or submission tracked until it reaches a terminal state."""

    id: str
    kind: JobKind
    created_at: datetime


@dataclass
class TestCase:
    """Problem-provided test case. Never modified by the client."""

    __test__ = False

    id: str
    input: str
    output: str
    is_sample: bool = False
    weight: Optional[float] = None
    explanation: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> "TestCase":
        return cls(
            id=str(data.get("id", "")),
            input=data.get("input", ""),
            output=data.get("output", ""),
            is_sample=bool(data.get("isSample", False)),
            weight=data.get("weight"),
            explanation=data.get("explanation"),
        )


@dataclass
class CustomTestCase:
    """User-authored test case. Local only and never scored."""

    __test__ = False

    id: str
    input: str
    output: str
    is_custom: bool = True


@dataclass
class ExecutionResult:
    """Outcome of one test case, positionally aligned with the submitted list."""

    status: str
    output: str = ""
    expected_output: Optional[str] = None
    execution_time: Optional[float] = None
    memory: Optional[float] = None
    passed: Optional[bool] = None
    compiler_error: Optional[str] = None
    runtime_error: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> "ExecutionResult":
        return cls(
            status=data.get("status", ""),
            output=data.get("output") or "",
            expected_output=data.get("expectedOutput"),
            execution_time=data.get("executionTime"),
            memory=data.get("memory"),
            passed=data.get("passed"),
            compiler_error=data.get("compilerError"),
            runtime_error=data.get("runtimeError"),
        )


@dataclass
class RunSummary:
    """Aggregated result attached to a status snapshot."""

    total_test_cases: int = 0
    passed_test_cases: int = 0
    results: List[ExecutionResult] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> "RunSummary":
        return cls(
            total_test_cases=int(data.get("totalTestCases") or 0),
            passed_test_cases=int(data.get("passedTestCases") or 0),
            results=[ExecutionResult.from_dict(r) for r in data.get("results") or []],
        )


@dataclass
class StatusSnapshot:
    """One polled view of a job's status."""

    status: JobStatus
    result: Optional[RunSummary] = None

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    @classmethod
    def from_dict(cls, data: dict) -> "StatusSnapshot":
        """Build a snapshot; raises ValueError on an unknown status."""
        result = data.get("result")
        return cls(
            status=JobStatus(data["status"]),
            result=RunSummary.from_dict(result) if result else None,
        )


@dataclass
class Language:
    """A language offered for a problem."""

    id: str
    name: str
    judge0_code: int
    boilerplate: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "Language":
        language = data.get("language") or {}
        return cls(
            id=str(language.get("id", data.get("id", ""))),
            name=language.get("name", ""),
            judge0_code=int(language.get("judge0Code", 0)),
            boilerplate=data.get("boilerplate", ""),
        )


@dataclass
class Problem:
    """Problem detail with its predefined test cases and languages."""

    id: str
    title: str
    test_cases: List[TestCase] = field(default_factory=list)
    languages: List[Language] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> "Problem":
        detail = data.get("problemDetail") or {}
        return cls(
            id=str(detail.get("id", "")),
            title=detail.get("title", ""),
            test_cases=[TestCase.from_dict(t) for t in data.get("testcases") or []],
            languages=[
                Language.from_dict(l) for l in detail.get("problemLanguage") or []
            ],
        )


class SubmissionStatus(str, Enum):
    ACCEPTED = "Accepted"
    PARTIALLY_ACCEPTED = "Partially Accepted"
    REJECTED = "Rejected"


@dataclass(frozen=True)
class SubmissionRecord:
    """A past submission as returned by the history endpoint."""

    id: str
    status: SubmissionStatus
    language: str
    submitted_at: str
    code: str
    execution_time: Optional[float] = None
    memory_used: Optional[float] = None

    @classmethod
    def from_dict(cls, data: dict) -> "SubmissionRecord":
        language = data.get("language")
        if isinstance(language, dict):
            language = language.get("name", "")
        return cls(
            id=str(data["id"]),
            status=SubmissionStatus(data["status"]),
            language=language or "",
            submitted_at=data.get("submittedAt", ""),
            code=data.get("code", ""),
            execution_time=data.get("executionTime"),
            memory_used=data.get("memoryUsed"),
        )
