"""Test case identifiers.

A test id is one of:
  - PositiveTest(i): a test the original program already passes (1-based)
  - NegativeTest(i): a test exposing the defect (1-based)
  - SINGLE_FITNESS: the single probe used in single-fitness mode

Ids are plain lookup keys for the test oracle. The string labels
(``p3``, ``n1``, ``single``) are what external oracles receive.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class PositiveTest:
    index: int


@dataclass(frozen=True)
class NegativeTest:
    index: int


@dataclass(frozen=True)
class SingleFitnessProbe:
    pass


SINGLE_FITNESS = SingleFitnessProbe()

TestId = Union[PositiveTest, NegativeTest, SingleFitnessProbe]


def check_test_id(test: TestId, pos_tests: int, neg_tests: int) -> TestId:
    """Return ``test`` unchanged, or raise ValueError if its index is out of range."""
    if isinstance(test, PositiveTest):
        if not 1 <= test.index <= pos_tests:
            raise ValueError(f"positive test index {test.index} outside [1, {pos_tests}]")
    elif isinstance(test, NegativeTest):
        if not 1 <= test.index <= neg_tests:
            raise ValueError(f"negative test index {test.index} outside [1, {neg_tests}]")
    elif not isinstance(test, SingleFitnessProbe):
        raise TypeError(f"Unsupported test id: {test!r}")
    return test


def format_test_label(test: TestId) -> str:
    if isinstance(test, PositiveTest):
        return f"p{test.index}"
    if isinstance(test, NegativeTest):
        return f"n{test.index}"
    if isinstance(test, SingleFitnessProbe):
        return "single"
    raise TypeError(f"Unsupported test id: {test!r}")

