"""HTTP client for the judge service JSON API."""

import asyncio
import json
import logging
from datetime import datetime, timezone
from typing import Any, List, Optional

import requests

from .models import Problem, StatusSnapshot, SubmissionRecord
from ..errors import TransportError


logger = logging.getLogger(__name__)


class JudgeClient:
    """HTTP client for interacting with the judge service.

    Session credentials are passed in as a cookie jar; the client never
    acquires or renews them itself.
    """

    DEFAULT_BASE_URL = "http://localhost:4000/api/v1"

    def __init__(
        self,
        base_url: Optional[str] = None,
        cookies: Optional[requests.cookies.RequestsCookieJar] = None,
        session: Optional[requests.Session] = None,
    ):
        """Initialize the client."""
        self.base_url = (base_url or self.DEFAULT_BASE_URL).rstrip("/")
        self.session = session or requests.Session()
        self.session.headers.update({"Content-Type": "application/json"})
        if cookies is not None:
            self.session.cookies.update(cookies)

    def _url(self, path: str) -> str:
        if path.startswith("http://") or path.startswith("https://"):
            return path
        return f"{self.base_url}{path}"

    def _request(self, method: str, path: str, **kwargs) -> Any:
        """Make a request and unwrap the ``data`` envelope of the JSON body."""
        url = self._url(path)
        try:
            response = self.session.request(method, url, **kwargs)
            response.raise_for_status()
        except requests.HTTPError as e:
            status_code = e.response.status_code if e.response is not None else None
            raise TransportError(
                f"{method} {url} failed: HTTP {status_code}",
                url=url,
                status_code=status_code,
            ) from e
        except requests.RequestException as e:
            raise TransportError(f"{method} {url} failed: {e}", url=url) from e

        try:
            body = response.json()
        except ValueError as e:
            raise TransportError(f"{method} {url} returned non-JSON body", url=url) from e

        if isinstance(body, dict) and "data" in body:
            return body["data"]
        return body

    def _get(self, path: str, **kwargs) -> Any:
        return self._request("GET", path, **kwargs)

    def _post(self, path: str, data: dict, **kwargs) -> Any:
        return self._request("POST", path, json=data, **kwargs)

    @staticmethod
    def _field(data: Any, *keys: str) -> str:
        """Pick the first present key out of a response payload."""
        if isinstance(data, dict):
            for key in keys:
                if data.get(key):
                    return str(data[key])
        raise TransportError(f"Response is missing {' / '.join(keys)}: {data!r}")

    def get_problem(self, problem_id: str, contest_id: Optional[str] = None) -> Problem:
        """Fetch problem detail with predefined test cases and languages."""
        if contest_id:
            data = self._get(
                f"/contests/problem/detail/{problem_id}",
                params={"contestId": contest_id},
            )
        else:
            data = self._get(f"/problems/detail/{problem_id}")
        try:
            return Problem.from_dict(data)
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise TransportError(f"Malformed problem detail for {problem_id}: {e}") from e

    def create_run(self, payload: dict) -> str:
        """Create a run job. Returns the job id."""
        data = self._post("/run", payload)
        job_id = self._field(data, "runId", "jobId")
        logger.info("Created run job %s", job_id)
        return job_id

    def create_submission(self, payload: dict) -> str:
        """Create a scored submission. Returns the submission id."""
        data = self._post("/submissions", payload)
        submission_id = self._field(data, "submissionId")
        logger.info("Created submission %s", submission_id)
        return submission_id

    def run_status_url(self, job_id: str) -> str:
        return self._url(f"/run/{job_id}")

    def submission_status_url(self, submission_id: str) -> str:
        return self._url(f"/submissions/active/{submission_id}")

    def get_status(self, url: str) -> StatusSnapshot:
        """Fetch the status snapshot behind a status url."""
        data = self._get(url)
        try:
            return StatusSnapshot.from_dict(data)
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise TransportError(f"Malformed status from {url}: {e}", url=url) from e

    async def fetch_status(self, url: str) -> StatusSnapshot:
        """Fetch a status snapshot without blocking the event loop."""
        return await asyncio.to_thread(self.get_status, url)

    def get_submission_history(self, problem_id: str) -> List[SubmissionRecord]:
        """Fetch past submissions for a problem, in server order."""
        data = self._get(f"/submissions/history/{problem_id}")
        submissions = data.get("submissions", []) if isinstance(data, dict) else data
        try:
            return [SubmissionRecord.from_dict(s) for s in submissions or []]
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise TransportError(f"Malformed submission history for {problem_id}: {e}") from e

    @staticmethod
    def language_code(judge0_code: int) -> str:
        """Encode a judge0 language code the way the API expects it."""
        return json.dumps(judge0_code)

    @staticmethod
    def submission_time() -> str:
        return datetime.now(timezone.utc).isoformat()
