"""Fitness evaluation strategies.

- first-failure: give up on a variant at its first failing test
- weighted (default): run the whole suite and compute a graded fitness

Both strategies call ``variant.cleanup()`` exactly once after testing, on
every path, and only then hand a successful variant to the SuccessHandler.
Harness errors from the variant propagate unchanged.
"""

from __future__ import annotations

import logging
import random
from typing import Callable, Iterator, List, Optional, Sequence

from repairfit.config.models import FitnessConfig
from repairfit.evaluator.external import OracleError
from repairfit.evaluator.models import TestOutcome
from repairfit.testcases import SINGLE_FITNESS, NegativeTest, PositiveTest, TestId, check_test_id
from repairfit.variant.base import Variant

from .results import EvaluationResult, EvaluationStatus
from .sampling import remaining_positive_tests, sample_positive_tests
from .success import SearchCancellation, SuccessHandler
from .weighting import max_fitness, negative_test_factor

logger = logging.getLogger(__name__)

Strategy = Callable[..., EvaluationResult]


def _positives(config: FitnessConfig, indices: Sequence[int]) -> List[TestId]:
    return [check_test_id(PositiveTest(i), config.pos_tests, config.neg_tests) for i in indices]


def _negatives(config: FitnessConfig) -> List[TestId]:
    return [
        check_test_id(NegativeTest(i), config.pos_tests, config.neg_tests)
        for i in range(1, config.neg_tests + 1)
    ]


def _first_failure_order(config: FitnessConfig) -> Iterator[TestId]:
    # Small changes to the original program tend to keep passing the positive
    # tests but still fail a negative one, so negatives go first.
    yield from _negatives(config)
    yield from _positives(config, range(1, config.pos_tests + 1))


def _run_batch(variant: Variant, tests: List[TestId]) -> List[TestOutcome]:
    if not tests:
        return []
    outcomes = list(variant.run_tests(tests))
    if len(outcomes) != len(tests):
        raise OracleError(
            f"{variant.name()}: run_tests returned {len(outcomes)} outcomes for {len(tests)} tests"
        )
    return outcomes


def evaluate_first_failure(
    variant: Variant,
    config: FitnessConfig,
    handler: SuccessHandler,
    *,
    cancellation: Optional[SearchCancellation] = None,
) -> EvaluationResult:
    """
    Test ``variant`` until its first failing test.

    No fitness is computed; the running total of test scalars is kept as a
    diagnostic score. Passing every test (or the single probe) is a repair.
    """
    cancel = cancellation if cancellation is not None else handler.cancellation
    name = variant.name()
    count = 0.0
    tests_run = 0
    passed_all = False
    cancelled = False

    try:
        if config.single_fitness:
            outcome = variant.run_test(SINGLE_FITNESS)
            tests_run = 1
            count = outcome.scalar()
            passed_all = outcome.passed
        else:
            for test in _first_failure_order(config):
                if cancel.cancelled:
                    cancelled = True
                    break
                outcome = variant.run_test(test)
                tests_run += 1
                if not outcome.passed:
                    break
                count += outcome.scalar()
            else:
                passed_all = True
    finally:
        variant.cleanup()

    if cancelled:
        logger.info("Evaluation of %s cancelled after %d test(s)", name, tests_run)
        return EvaluationResult(name, EvaluationStatus.CANCELLED, score=count, tests_run=tests_run)

    if passed_all:
        repair = handler.note_success(variant)
        return EvaluationResult(name, EvaluationStatus.REPAIRED, score=count, tests_run=tests_run, repair=repair)

    logger.debug("\t%3g %s", count, name)
    return EvaluationResult(name, EvaluationStatus.FAILED, score=count, tests_run=tests_run)


def evaluate_weighted(
    variant: Variant,
    config: FitnessConfig,
    handler: SuccessHandler,
    *,
    cancellation: Optional[SearchCancellation] = None,
    rng: Optional[random.Random] = None,
) -> EvaluationResult:
    """
    Test ``variant`` on the whole suite and return a graded fitness.

    Each passing positive test is worth 1.0 and each passing negative test is
    worth ``negative_test_factor``. A memoized fitness on the variant is
    reused without running anything; only a memo equal to the maximum fitness
    can be a repair.

    With ``config.sample < 1.0`` only a random subset of the positive tests
    is scored. If the variant looks like a repair on that subset, the other
    positive tests are run as well to confirm it. The confirmation tests
    decide success but are not added to the fitness, which therefore stays a
    lower bound computed on the sample.
    """
    cancel = cancellation if cancellation is not None else handler.cancellation
    name = variant.name()
    fitness = 0.0
    failed = False
    cached = False
    cancelled = False
    tests_run = 0

    try:
        if config.single_fitness:
            outcome = variant.run_test(SINGLE_FITNESS)
            tests_run = 1
            fitness = outcome.scalar()
            failed = not outcome.passed
        else:
            best = max_fitness(config.pos_tests, config.neg_tests, config.negative_test_weight)
            memo = variant.cached_fitness()
            if memo is not None:
                fitness = memo
                cached = True
                if fitness < best:
                    failed = True
            else:
                fac = negative_test_factor(config.pos_tests, config.neg_tests, config.negative_test_weight)
                sample, sample_size = sample_positive_tests(
                    config.pos_tests, config.sample, rng if rng is not None else random.Random()
                )

                if cancel.cancelled:
                    cancelled = True
                else:
                    pos_tests = _positives(config, sample)
                    for outcome in _run_batch(variant, pos_tests):
                        if outcome.passed:
                            fitness += 1.0
                        else:
                            failed = True
                    tests_run += len(pos_tests)

                # Negative tests are never sub-sampled.
                for test in _negatives(config):
                    if cancelled or cancel.cancelled:
                        cancelled = True
                        break
                    outcome = variant.run_test(test)
                    tests_run += 1
                    if outcome.passed:
                        fitness += fac
                    else:
                        failed = True

                if not failed and not cancelled and sample_size < config.pos_tests:
                    for test in _positives(config, remaining_positive_tests(sample, config.pos_tests)):
                        if cancel.cancelled:
                            cancelled = True
                            break
                        outcome = variant.run_test(test)
                        tests_run += 1
                        if not outcome.passed:
                            failed = True

                if not cancelled:
                    variant.set_fitness(fitness)
        logger.debug("\t%3g %s", fitness, name)
    finally:
        variant.cleanup()

    if cancelled:
        logger.info("Evaluation of %s cancelled after %d test(s)", name, tests_run)
        return EvaluationResult(name, EvaluationStatus.CANCELLED, score=fitness, tests_run=tests_run)

    if not failed:
        repair = handler.note_success(variant)
        return EvaluationResult(
            name,
            EvaluationStatus.REPAIRED,
            fitness=fitness,
            score=fitness,
            tests_run=tests_run,
            cached=cached,
            repair=repair,
        )

    return EvaluationResult(
        name,
        EvaluationStatus.FAILED,
        fitness=fitness,
        score=fitness,
        tests_run=tests_run,
        cached=cached,
    )


def get_strategy(name: str) -> Strategy:
    key = name.lower().strip().replace("-", "_")
    if key in {"weighted", "all", "test_all"}:
        return evaluate_weighted
    if key in {"first_failure", "brute", "brute_force"}:
        return evaluate_first_failure
    raise ValueError(f"Unknown fitness strategy: {name}")
