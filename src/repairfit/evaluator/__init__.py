from .models import MalformedOutcomeError, OracleOutput, TestOutcome
from .external import OracleError, OracleRun, run_external_test

__all__ = [
    "MalformedOutcomeError",
    "OracleOutput",
    "TestOutcome",
    "OracleError",
    "OracleRun",
    "run_external_test",
]
