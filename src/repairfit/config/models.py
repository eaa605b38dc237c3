from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, model_validator


# -------------------------
# Fitness configuration
# -------------------------

class FitnessConfig(BaseModel):
    """
    Knobs of the fitness function.

    With the default negative_test_weight of 2.0 the negative tests are worth
    twice as much, in total, as the positive tests.
    """
    negative_test_weight: float = Field(2.0, ge=0.0, description="Negative tests fitness factor.")
    single_fitness: bool = Field(False, description="Use a single fitness value from one probe test.")
    sample: float = Field(1.0, gt=0.0, le=1.0, description="Fraction of positive tests sampled per evaluation.")
    pos_tests: int = Field(0, ge=0)
    neg_tests: int = Field(0, ge=0)
    seed: Optional[int] = None

    @model_validator(mode="after")
    def _validate_suite(self) -> "FitnessConfig":
        if not self.single_fitness and self.pos_tests == 0 and self.neg_tests == 0:
            raise ValueError("at least one positive or negative test is required unless single_fitness is set")
        return self


# -------------------------
# Source output configuration
# -------------------------

class SourceConfig(BaseModel):
    """
    How a repaired variant's source is named on disk:
      repair.<extension><suffix_extension>
    """
    extension: str = Field("c", min_length=1)
    suffix_extension: str = ""

    def repair_filename(self) -> str:
        return f"repair.{self.extension}{self.suffix_extension}"

    def source_filename(self) -> str:
        return f"source.{self.extension}{self.suffix_extension}"


# -------------------------
# Test oracle configuration
# -------------------------

class OracleConfig(BaseModel):
    """
    External test oracle command that follows the oracle contract:
    - reads input.json (variant, test label, source path, context)
    - writes output.json (passed, values)
    """
    command: List[str] = Field(
        ...,
        min_length=1,
        description="Oracle command as a list, e.g. ['{python}', 'run_test.py'] or ['./test.sh']",
    )
    timeout_s: int = Field(600, ge=1)
    extra_args: List[str] = Field(default_factory=list)
    env: Dict[str, str] = Field(default_factory=dict)
    keep_workdirs: bool = False


# -------------------------
# Search configuration
# -------------------------

Strategy = Literal["weighted", "first_failure"]


class SearchConfig(BaseModel):
    strategy: Strategy = "weighted"
    max_workers: int = Field(1, ge=1)


# -------------------------
# Top-level configuration
# -------------------------

class RepairConfig(BaseModel):
    """
    Top-level configuration for a repair run.
    """
    id: str = Field(..., description="Problem identifier, e.g. gcd-infinite-loop.")
    fitness: FitnessConfig
    oracle: OracleConfig
    source: SourceConfig = Field(default_factory=SourceConfig)
    search: SearchConfig = Field(default_factory=SearchConfig)
    context: Dict[str, Any] = Field(default_factory=dict, description="Problem-specific metadata for the oracle.")
    source_path: Optional[Path] = Field(default=None, exclude=True)

    def with_fitness_overrides(self, **overrides: Any) -> "RepairConfig":
        """
        Return a copy with the given fitness fields replaced (None values are ignored).
        The result is validated again.
        """
        updates = {k: v for k, v in overrides.items() if v is not None}
        if not updates:
            return self
        fitness = FitnessConfig.model_validate({**self.fitness.model_dump(), **updates})
        return self.model_copy(update={"fitness": fitness})
