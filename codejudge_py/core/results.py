"""Projection of status snapshots into display rows."""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence

from ..client.models import (
    CustomTestCase,
    ExecutionResult,
    JobStatus,
    StatusSnapshot,
    TestCase,
)


NOT_AVAILABLE = "<not available>"
BLANK_OUTPUT = "<blank>"


class Severity(str, Enum):
    """Display severity, in precedence order."""

    COMPILE_ERROR = "compile_error"
    RUNTIME_ERROR = "runtime_error"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


@dataclass
class ResultRow:
    index: int
    label: str
    severity: Severity
    status_text: str
    output: str
    expected_output: str
    error_text: Optional[str] = None
    execution_time: Optional[float] = None
    memory: Optional[float] = None
    is_custom: bool = False

    @property
    def failed(self) -> bool:
        return self.severity != Severity.ACCEPTED


@dataclass
class ResultView:
    status: JobStatus
    total: int = 0
    passed: int = 0
    rows: List[ResultRow] = field(default_factory=list)

    @property
    def finished(self) -> bool:
        return self.status.is_terminal


class ResultProjector:
    """
    Pairs each per-test result with its label and expected output.

    Pairing is positional: result ``i`` belongs to the ``i``-th entry of the
    merged list (predefined first, then custom). The judge is trusted to
    return results in submission order; there is no per-test correlation id.
    """

    def __init__(
        self,
        predefined: Sequence[TestCase],
        custom: Sequence[CustomTestCase] = (),
    ):
        self.predefined = list(predefined)
        self.custom = list(custom)

    def label(self, index: int) -> str:
        count = len(self.predefined)
        if index < count:
            return f"Test Case {index + 1}"
        return f"Custom Test {index - count + 1}"

    def expected_output(self, index: int) -> str:
        count = len(self.predefined)
        if 0 <= index < count:
            return self.predefined[index].output
        if 0 <= index - count < len(self.custom):
            return self.custom[index - count].output
        return NOT_AVAILABLE

    @staticmethod
    def classify(result: ExecutionResult) -> Severity:
        if result.compiler_error:
            return Severity.COMPILE_ERROR
        if result.runtime_error:
            return Severity.RUNTIME_ERROR
        if result.status == "Accepted":
            return Severity.ACCEPTED
        return Severity.REJECTED

    def row(self, index: int, result: ExecutionResult) -> ResultRow:
        severity = self.classify(result)
        if severity == Severity.COMPILE_ERROR:
            status_text, error_text = "Compile Error", result.compiler_error
        elif severity == Severity.RUNTIME_ERROR:
            status_text, error_text = "Runtime Error", result.runtime_error
        else:
            status_text, error_text = result.status, None

        return ResultRow(
            index=index,
            label=self.label(index),
            severity=severity,
            status_text=status_text,
            output=result.output or BLANK_OUTPUT,
            expected_output=self.expected_output(index),
            error_text=error_text,
            execution_time=result.execution_time,
            memory=result.memory,
            is_custom=index >= len(self.predefined),
        )

    def project(self, snapshot: StatusSnapshot) -> ResultView:
        """Build the render model for a snapshot, with or without results."""
        view = ResultView(status=snapshot.status)
        if snapshot.result is None:
            return view

        view.total = snapshot.result.total_test_cases
        view.passed = snapshot.result.passed_test_cases
        view.rows = [self.row(i, r) for i, r in enumerate(snapshot.result.results)]
        return view
