from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional


class EvaluationStatus(str, Enum):
    """How one evaluation ended."""

    FAILED = "failed"
    REPAIRED = "repaired"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class RepairRecord:
    number: int
    variant: str
    directory: Path
    source_path: Path

    def to_dict(self) -> Dict[str, Any]:
        return {
            "number": self.number,
            "variant": self.variant,
            "directory": str(self.directory),
            "source_path": str(self.source_path),
        }


@dataclass(frozen=True)
class EvaluationResult:
    """
    Outcome of evaluating one variant.

    - fitness: graded fitness (weighted strategy); None for first-failure,
      which only reports a diagnostic partial score
    - score: running total of test scalars (first-failure) or the fitness
    - tests_run: number of oracle calls made during this evaluation
    - cached: True when the fitness came from the variant's memo
    - repair: set when status is REPAIRED
    """
    variant: str
    status: EvaluationStatus
    fitness: Optional[float] = None
    score: float = 0.0
    tests_run: int = 0
    cached: bool = False
    repair: Optional[RepairRecord] = None

    @property
    def repaired(self) -> bool:
        return self.status is EvaluationStatus.REPAIRED

    def to_dict(self) -> Dict[str, Any]:
        return {
            "variant": self.variant,
            "status": self.status.value,
            "fitness": self.fitness,
            "score": self.score,
            "tests_run": self.tests_run,
            "cached": self.cached,
            "repair": self.repair.to_dict() if self.repair else None,
        }
