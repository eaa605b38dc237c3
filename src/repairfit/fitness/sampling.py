"""Sub-sampling of positive tests.

When evaluating every positive test is too costly, a random subset of
``floor(pos_tests * fraction)`` tests is chosen by shuffling ``1..pos_tests``
and keeping the first N. The subset runs in ascending order so that logs are
reproducible for a given selection.
"""

from __future__ import annotations

import math
import random
from typing import List, Sequence, Tuple


def sample_positive_tests(pos_tests: int, fraction: float, rng: random.Random) -> Tuple[List[int], int]:
    """Return ``(sorted_sample, sample_size)`` of 1-based positive test indices."""
    if not 0.0 < fraction <= 1.0:
        raise ValueError(f"sample fraction must be in (0, 1], got {fraction}")
    everything = list(range(1, pos_tests + 1))
    if fraction >= 1.0:
        return everything, pos_tests

    sample_size = int(math.floor(pos_tests * fraction))
    rng.shuffle(everything)
    return sorted(everything[:sample_size]), sample_size


def remaining_positive_tests(sample: Sequence[int], pos_tests: int) -> List[int]:
    """Positive test indices not in ``sample``, in ascending order."""
    chosen = set(sample)
    rest = [i for i in range(1, pos_tests + 1) if i not in chosen]
    assert len(rest) + len(chosen) == pos_tests, "sample is not a subset of the positive tests"
    return rest
