"""Error types raised by the judge client."""

from typing import Optional


class CodeJudgeError(Exception):
    """Base class for all codejudge_py errors."""


class ValidationError(CodeJudgeError):
    """Local precondition failed; no network call was made."""


class TransportError(CodeJudgeError):
    """Network failure, non-2xx response or unreadable body."""

    def __init__(
        self, message: str, url: Optional[str] = None, status_code: Optional[int] = None
    ):
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class StaleResponseError(CodeJudgeError):
    """A fetch completed for a resource that is no longer current.

    Only used inside the polling engine; never reaches callers.
    """

    def __init__(self, url: Optional[str], current: Optional[str]):
        super().__init__(f"Response for {url} superseded by {current}")
        self.url = url
        self.current = current
