from .results import EvaluationResult, EvaluationStatus, RepairRecord
from .sampling import remaining_positive_tests, sample_positive_tests
from .strategies import evaluate_first_failure, evaluate_weighted, get_strategy
from .success import SearchCancellation, SuccessCounter, SuccessHandler, successes
from .weighting import max_fitness, negative_test_factor

__all__ = [
    "EvaluationResult",
    "EvaluationStatus",
    "RepairRecord",
    "remaining_positive_tests",
    "sample_positive_tests",
    "evaluate_first_failure",
    "evaluate_weighted",
    "get_strategy",
    "SearchCancellation",
    "SuccessCounter",
    "SuccessHandler",
    "successes",
    "max_fitness",
    "negative_test_factor",
]
