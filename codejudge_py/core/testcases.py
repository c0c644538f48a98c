"""Merging of predefined and custom test cases."""

import uuid
from typing import Dict, List, Optional, Sequence

from ..client.models import CustomTestCase, TestCase
from ..errors import ValidationError


class TestCaseAggregator:
    """
    Holds a problem's predefined tests alongside user-authored custom tests.
    The merged list is always predefined (catalog order) then custom
    (creation order); result positions are interpreted against that order.
    """

    __test__ = False

    def __init__(self, predefined: Optional[Sequence[TestCase]] = None):
        self._predefined: tuple = tuple(predefined or ())
        self._custom: List[CustomTestCase] = []

    @property
    def predefined(self) -> List[TestCase]:
        return list(self._predefined)

    @property
    def custom(self) -> List[CustomTestCase]:
        return list(self._custom)

    @staticmethod
    def merge(
        predefined: Sequence[TestCase], custom: Sequence[CustomTestCase]
    ) -> List[Dict[str, str]]:
        """Return the trimmed ``{input, output}`` list sent to the judge."""
        return [
            {"input": case.input.strip(), "output": case.output.strip()}
            for case in [*predefined, *custom]
        ]

    def test_list(self) -> List[Dict[str, str]]:
        return self.merge(self._predefined, self._custom)

    def add_custom(self, input: str, output: str) -> CustomTestCase:
        """Add a custom test. Both fields must be non-empty after trimming."""
        if not input.strip() or not output.strip():
            raise ValidationError("Both input and expected output are required.")

        case = CustomTestCase(id=f"custom-{uuid.uuid4().hex[:12]}", input=input, output=output)
        self._custom.append(case)
        return case

    def remove_custom(self, case_id: str) -> None:
        """Remove a custom test by id. Unknown ids are ignored."""
        self._custom = [case for case in self._custom if case.id != case_id]
