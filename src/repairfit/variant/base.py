from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional, Sequence

from repairfit.evaluator.models import TestOutcome
from repairfit.testcases import TestId


class Variant(ABC):
    """
    Base class for candidate programs handed to the fitness strategies.

    A variant owns its fitness memo. The strategies borrow the variant for
    one evaluation and always call cleanup() once when they are done testing.
    """

    def __init__(self) -> None:
        self._fitness: Optional[float] = None

    @abstractmethod
    def name(self) -> str:
        """Stable display name used in logs and output records."""
        raise NotImplementedError

    @abstractmethod
    def run_test(self, test: TestId) -> TestOutcome:
        """Run one test. Raise only if the harness itself is broken."""
        raise NotImplementedError

    def run_tests(self, tests: Sequence[TestId]) -> List[TestOutcome]:
        """Run several tests, returning outcomes in the same order.

        Subclasses may batch or parallelize. Default: one at a time.
        """
        return [self.run_test(t) for t in tests]

    @abstractmethod
    def output_source(self, path: Path) -> None:
        """Write the variant's current source text to ``path`` unchanged."""
        raise NotImplementedError

    def cleanup(self) -> None:
        """Release resources accumulated while testing. Default: nothing."""
        return None

    def cached_fitness(self) -> Optional[float]:
        return self._fitness

    def set_fitness(self, fitness: float) -> None:
        self._fitness = float(fitness)

    def invalidate_fitness(self) -> None:
        """Forget the memoized fitness, e.g. after the variant's source changed."""
        self._fitness = None
