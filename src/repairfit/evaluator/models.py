from __future__ import annotations

from dataclasses import dataclass
from typing import List, Tuple

from pydantic import BaseModel, Field


class MalformedOutcomeError(AssertionError):
    """A test outcome carried no scalar where one was required."""


@dataclass(frozen=True)
class TestOutcome:
    """
    Result of running one test against a variant.

    - passed: whether the test passed (a failing test is not an error)
    - values: numeric payload; values[0] is the scalar used for scoring,
      any further entries are diagnostic
    """
    __test__ = False

    passed: bool
    values: Tuple[float, ...]

    def scalar(self) -> float:
        if not self.values:
            raise MalformedOutcomeError("test outcome has an empty value payload")
        return float(self.values[0])


class OracleOutput(BaseModel):
    """
    Typed representation of an external oracle's output.json.

    - passed: true if the test passed
    - values: numeric payload (required, non-empty), first entry is the
      scalar contribution
    - error: optional message from the oracle (diagnostic only)
    """
    passed: bool
    values: List[float] = Field(min_length=1)
    error: str | None = None

    def to_outcome(self) -> TestOutcome:
        return TestOutcome(passed=self.passed, values=tuple(self.values))
