from __future__ import annotations

import random
from pathlib import Path

import pytest

from repairfit.config import FitnessConfig
from repairfit.evaluator import MalformedOutcomeError, OracleError
from repairfit.fitness import EvaluationStatus, evaluate_weighted
from repairfit.testcases import SINGLE_FITNESS, NegativeTest, PositiveTest


class FixedShuffle(random.Random):
    """Random whose shuffle always yields the same permutation."""

    def __init__(self, order: list[int]) -> None:
        super().__init__(0)
        self.order = order

    def shuffle(self, x) -> None:  # type: ignore[override]
        assert sorted(x) == sorted(self.order)
        x[:] = list(self.order)


def _config(**overrides) -> FitnessConfig:
    data = {"pos_tests": 5, "neg_tests": 1, "negative_test_weight": 2.0}
    data.update(overrides)
    return FitnessConfig(**data)


def test_all_tests_pass_gives_max_fitness_and_a_repair(make_variant, handler, tmp_path: Path) -> None:
    variant = make_variant("v-good")

    res = evaluate_weighted(variant, _config(), handler)

    assert res.status is EvaluationStatus.REPAIRED
    assert res.fitness == 15.0
    assert res.repair is not None
    assert res.repair.number == 1
    assert res.repair.source_path == (tmp_path / "out" / "repair1" / "repair.c").resolve()
    assert res.repair.source_path.read_text(encoding="utf-8") == variant.source
    assert handler.cancellation.cancelled
    assert handler.cancellation.reason == "v-good"
    assert variant.cleanups == 1


def test_failing_positive_scores_without_the_test_and_is_cached(make_variant, handler) -> None:
    variant = make_variant(failing=[PositiveTest(3)])

    res = evaluate_weighted(variant, _config(), handler)

    assert res.status is EvaluationStatus.FAILED
    assert res.fitness == 14.0
    assert variant.cached_fitness() == 14.0
    assert not handler.cancellation.cancelled
    assert handler.counter.value == 0


def test_failing_negative_loses_its_weight(make_variant, handler) -> None:
    cfg = _config(pos_tests=4, neg_tests=2)
    variant = make_variant(failing=[NegativeTest(2)])

    res = evaluate_weighted(variant, cfg, handler)

    # fac = 4 * 2.0 / 2 = 4.0 -> 4 positives + 1 negative
    assert res.fitness == 8.0
    assert res.status is EvaluationStatus.FAILED


def test_every_sampled_test_runs_even_after_a_failure(make_variant, handler) -> None:
    variant = make_variant(failing=[PositiveTest(1), NegativeTest(1)])

    evaluate_weighted(variant, _config(), handler)

    assert variant.calls == [PositiveTest(i) for i in range(1, 6)] + [NegativeTest(1)]
    assert variant.batches == [[PositiveTest(i) for i in range(1, 6)]]


def test_second_evaluation_uses_the_cache(make_variant, handler) -> None:
    variant = make_variant(failing=[PositiveTest(2)])

    first = evaluate_weighted(variant, _config(), handler)
    n_calls = len(variant.calls)
    second = evaluate_weighted(variant, _config(), handler)

    assert second.fitness == first.fitness == 14.0
    assert second.cached
    assert len(variant.calls) == n_calls
    assert variant.cleanups == 2


def test_cached_fitness_below_max_is_never_a_repair(make_variant, handler) -> None:
    variant = make_variant()
    variant.set_fitness(14.999)

    res = evaluate_weighted(variant, _config(), handler)

    assert res.status is EvaluationStatus.FAILED
    assert res.fitness == 14.999
    assert variant.calls == []
    assert handler.counter.value == 0


def test_cached_max_fitness_is_a_repair(make_variant, handler) -> None:
    variant = make_variant()
    variant.set_fitness(15.0)

    res = evaluate_weighted(variant, _config(), handler)

    assert res.status is EvaluationStatus.REPAIRED
    assert res.cached
    assert variant.calls == []


def test_confirmation_failure_outside_sample_fails_the_variant(make_variant, handler) -> None:
    cfg = _config(pos_tests=10, neg_tests=1, sample=0.4)
    rng = FixedShuffle([8, 2, 6, 4, 1, 3, 5, 7, 9, 10])
    variant = make_variant(failing=[PositiveTest(7)])

    res = evaluate_weighted(variant, cfg, handler, rng=rng)

    assert variant.batches == [[PositiveTest(2), PositiveTest(4), PositiveTest(6), PositiveTest(8)]]
    confirmation = variant.calls[5:]
    assert confirmation == [PositiveTest(i) for i in (1, 3, 5, 7, 9, 10)]
    assert res.status is EvaluationStatus.FAILED
    # 4 sampled positives + fac (10 * 2.0 / 1)
    assert res.fitness == 24.0
    assert variant.cleanups == 1


def test_confirmed_sample_is_a_repair_but_keeps_the_sampled_score(make_variant, handler) -> None:
    cfg = _config(pos_tests=10, neg_tests=1, sample=0.4)
    rng = FixedShuffle([8, 2, 6, 4, 1, 3, 5, 7, 9, 10])
    variant = make_variant()

    res = evaluate_weighted(variant, cfg, handler, rng=rng)

    assert res.status is EvaluationStatus.REPAIRED
    assert res.fitness == 24.0
    assert len(variant.calls) == 11


def test_no_confirmation_when_the_sample_already_failed(make_variant, handler) -> None:
    cfg = _config(pos_tests=10, neg_tests=1, sample=0.4)
    rng = FixedShuffle([8, 2, 6, 4, 1, 3, 5, 7, 9, 10])
    variant = make_variant(failing=[PositiveTest(2)])

    evaluate_weighted(variant, cfg, handler, rng=rng)

    assert len(variant.calls) == 5


def test_sampled_positives_are_distinct_and_sized(make_variant, handler) -> None:
    cfg = _config(pos_tests=9, neg_tests=3, sample=0.5)
    variant = make_variant(failing=[NegativeTest(1)])

    evaluate_weighted(variant, cfg, handler, rng=random.Random(42))

    (batch,) = variant.batches
    indices = [t.index for t in batch]
    assert len(indices) == 4
    assert indices == sorted(set(indices))
    assert all(1 <= i <= 9 for i in indices)


def test_oracle_error_propagates_after_cleanup(make_variant, handler) -> None:
    variant = make_variant(broken=[NegativeTest(1)])

    with pytest.raises(OracleError):
        evaluate_weighted(variant, _config(), handler)

    assert variant.cleanups == 1
    assert variant.cached_fitness() is None
    assert handler.counter.value == 0


def test_single_fitness_scalar_is_the_fitness(make_variant, handler) -> None:
    cfg = _config(single_fitness=True)
    variant = make_variant(values={SINGLE_FITNESS: (42.5, 3.0)}, failing=[SINGLE_FITNESS])

    res = evaluate_weighted(variant, cfg, handler)

    assert res.fitness == 42.5
    assert res.status is EvaluationStatus.FAILED
    assert variant.calls == [SINGLE_FITNESS]
    assert variant.cached_fitness() is None


def test_single_fitness_pass_is_a_repair(make_variant, handler) -> None:
    cfg = _config(single_fitness=True)
    variant = make_variant(values={SINGLE_FITNESS: (0.5,)})

    res = evaluate_weighted(variant, cfg, handler)

    assert res.status is EvaluationStatus.REPAIRED
    assert res.fitness == 0.5


def test_single_fitness_empty_payload_fails_loudly(make_variant, handler) -> None:
    cfg = _config(single_fitness=True)
    variant = make_variant(values={SINGLE_FITNESS: ()})

    with pytest.raises(MalformedOutcomeError):
        evaluate_weighted(variant, cfg, handler)

    assert variant.cleanups == 1


def test_cancelled_search_stops_before_testing(make_variant, handler) -> None:
    handler.cancellation.request("someone else")
    variant = make_variant()

    res = evaluate_weighted(variant, _config(), handler)

    assert res.status is EvaluationStatus.CANCELLED
    assert res.fitness is None
    assert variant.calls == []
    assert variant.cleanups == 1
    assert variant.cached_fitness() is None


def test_invalidated_cache_runs_the_suite_again(make_variant, handler) -> None:
    variant = make_variant(failing=[PositiveTest(4)])
    evaluate_weighted(variant, _config(), handler)

    variant.failing.clear()
    variant.invalidate_fitness()
    res = evaluate_weighted(variant, _config(), handler)

    assert not res.cached
    assert res.fitness == 15.0
    assert res.status is EvaluationStatus.REPAIRED
