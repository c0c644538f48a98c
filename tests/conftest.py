import pytest

from codejudge_py.client.models import (
    Language,
    Problem,
    SubmissionRecord,
    SubmissionStatus,
    TestCase,
)

from helpers import FakeJudgeClient


@pytest.fixture
def python_language():
    return Language(id="lang-py", name="Python", judge0_code=71, boilerplate="")


@pytest.fixture
def problem(python_language):
    return Problem(
        id="prob-1",
        title="Sum",
        test_cases=[
            TestCase(id="tc-1", input="2\n3", output="5", is_sample=True),
            TestCase(id="tc-2", input=" 7\n8 ", output=" 15\n", is_sample=False),
        ],
        languages=[python_language],
    )


@pytest.fixture
def fake_client():
    return FakeJudgeClient()


@pytest.fixture
def record():
    return SubmissionRecord(
        id="sub-9",
        status=SubmissionStatus.ACCEPTED,
        language="Python",
        submitted_at="2026-10-01T10:00:00Z",
        code="print(sum(map(int, open(0).read().split())))",
    )
