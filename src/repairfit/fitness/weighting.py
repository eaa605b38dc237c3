"""Relative weight of negative vs. positive tests.

Each positive test is worth 1 point and each negative test is worth
``fac = pos_tests * negative_test_weight / neg_tests`` points, so the negative
tests together are worth ``negative_test_weight`` times the positive tests.
With 5 positives, 1 negative and the default weight of 2.0 the negative test
is worth 10 points (10:5 == 2:1).
"""

from __future__ import annotations


def negative_test_factor(pos_tests: int, neg_tests: int, negative_test_weight: float) -> float:
    """Points awarded for each passing negative test.

    With no negative tests there is nothing to weight and the factor is 0.0.
    """
    if neg_tests == 0:
        return 0.0
    return float(pos_tests) * negative_test_weight / float(neg_tests)


def max_fitness(pos_tests: int, neg_tests: int, negative_test_weight: float) -> float:
    """Fitness of a variant passing every test of the suite."""
    fac = negative_test_factor(pos_tests, neg_tests, negative_test_weight)
    return float(pos_tests) + float(neg_tests) * fac
