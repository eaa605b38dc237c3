"""Shared fixtures: in-memory variants and a success handler per test."""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

import pytest

from repairfit.evaluator.external import OracleError
from repairfit.evaluator.models import TestOutcome
from repairfit.fitness import SearchCancellation, SuccessCounter, SuccessHandler
from repairfit.testcases import TestId
from repairfit.variant.base import Variant

TOY_ORACLE = Path(__file__).resolve().parent / "toy_oracle.py"


class FakeVariant(Variant):
    """
    Variant whose test results are fixed up front.

    Every test passes with values (1.0,) unless listed in ``failing``,
    given a payload in ``values`` or listed in ``broken`` (raises OracleError).
    """

    def __init__(
        self,
        name: str = "v1",
        *,
        failing: Iterable[TestId] = (),
        values: Optional[Dict[TestId, Tuple[float, ...]]] = None,
        broken: Iterable[TestId] = (),
        source: str = "int main(void) { return 0; }\n",
        before_test: Optional[Callable[[TestId], None]] = None,
    ) -> None:
        super().__init__()
        self._name = name
        self.failing = set(failing)
        self.values = dict(values or {})
        self.broken = set(broken)
        self.source = source
        self.before_test = before_test
        self.calls: List[TestId] = []
        self.batches: List[List[TestId]] = []
        self.cleanups = 0
        self._lock = threading.Lock()

    def name(self) -> str:
        return self._name

    def run_test(self, test: TestId) -> TestOutcome:
        if self.before_test is not None:
            self.before_test(test)
        with self._lock:
            self.calls.append(test)
        if test in self.broken:
            raise OracleError(f"cannot build {self._name}")
        return TestOutcome(passed=test not in self.failing, values=self.values.get(test, (1.0,)))

    def run_tests(self, tests: Sequence[TestId]) -> List[TestOutcome]:
        self.batches.append(list(tests))
        return super().run_tests(tests)

    def output_source(self, path: Path) -> None:
        with Path(path).open("w", encoding="utf-8", newline="") as f:
            f.write(self.source)

    def cleanup(self) -> None:
        self.cleanups += 1


@pytest.fixture
def make_variant() -> Callable[..., FakeVariant]:
    return FakeVariant


@pytest.fixture
def counter() -> SuccessCounter:
    return SuccessCounter()


@pytest.fixture
def cancellation() -> SearchCancellation:
    return SearchCancellation()


@pytest.fixture
def handler(tmp_path: Path, counter: SuccessCounter, cancellation: SearchCancellation) -> SuccessHandler:
    return SuccessHandler(tmp_path / "out", counter=counter, cancellation=cancellation)


@pytest.fixture
def toy_oracle() -> Path:
    return TOY_ORACLE
