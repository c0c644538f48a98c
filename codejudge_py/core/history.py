"""Submission history cache and read-only history tabs."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from ..client.client import JudgeClient
from ..client.models import SubmissionRecord
from ..errors import ValidationError


logger = logging.getLogger(__name__)


LIVE_TAB = "live"


@dataclass
class EditorTab:
    """A read-only view frozen on one past submission."""

    record: SubmissionRecord

    @property
    def key(self) -> str:
        return f"submission-{self.record.id}"


class EditorTabs:
    """
    The live draft plus any number of read-only history tabs.

    Only the live tab is editable, and Run/Submit are only allowed while it
    is active. The draft is stored apart from the history tabs and is never
    overwritten by opening or closing one.
    """

    def __init__(self, draft: str = ""):
        self._draft = draft
        self._tabs: Dict[str, EditorTab] = {}
        self.active = LIVE_TAB

    @property
    def draft(self) -> str:
        return self._draft

    @property
    def tabs(self) -> List[EditorTab]:
        return list(self._tabs.values())

    @property
    def read_only(self) -> bool:
        return self.active != LIVE_TAB

    @property
    def can_execute(self) -> bool:
        return not self.read_only

    @property
    def displayed_code(self) -> str:
        if self.read_only:
            return self._tabs[self.active].record.code
        return self._draft

    def edit(self, code: str) -> None:
        if self.read_only:
            raise ValidationError("Submission tabs are read-only.")
        self._draft = code

    def open(self, record: SubmissionRecord) -> EditorTab:
        tab = EditorTab(record)
        tab = self._tabs.setdefault(tab.key, tab)
        self.active = tab.key
        return tab

    def close(self, record: SubmissionRecord) -> None:
        key = EditorTab(record).key
        self._tabs.pop(key, None)
        if self.active == key:
            self.active = LIVE_TAB

    def switch_to_live(self) -> None:
        self.active = LIVE_TAB


class SubmissionHistoryCache:
    """Caches past submissions per problem, in server order."""

    def __init__(self, client: JudgeClient, editor: Optional[EditorTabs] = None):
        self.client = client
        self.editor = editor or EditorTabs()
        self._cache: Dict[str, List[SubmissionRecord]] = {}

    def fetch(self, problem_id: str, refresh: bool = False) -> List[SubmissionRecord]:
        """Return the history for a problem, fetching it on first use."""
        if refresh or problem_id not in self._cache:
            logger.debug("Fetching submission history for %s", problem_id)
            self._cache[problem_id] = self.client.get_submission_history(problem_id)
        return list(self._cache[problem_id])

    async def refresh(self, problem_id: str) -> List[SubmissionRecord]:
        """Refetch the history off the event loop thread and replace the cache."""
        records = await asyncio.to_thread(self.client.get_submission_history, problem_id)
        self._cache[problem_id] = records
        return list(records)

    def invalidate(self, problem_id: str) -> None:
        self._cache.pop(problem_id, None)

    def cached(self, problem_id: str) -> Optional[List[SubmissionRecord]]:
        records = self._cache.get(problem_id)
        return list(records) if records is not None else None

    def find(self, problem_id: str, submission_id: str) -> Optional[SubmissionRecord]:
        return next(
            (r for r in self.fetch(problem_id) if r.id == submission_id), None
        )

    def open_as_tab(self, record: SubmissionRecord) -> EditorTab:
        return self.editor.open(record)

    def close_tab(self, record: SubmissionRecord) -> None:
        self.editor.close(record)
