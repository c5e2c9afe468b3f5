import math

import pytest

from npexact.core.errors import DomainError
from npexact.stats.common.ranks import rank


def test_rank_without_ties():
    result = rank([3.0, 1.0, 2.0])
    assert result.ranks == [3.0, 1.0, 2.0]
    assert result.tie_weight == 0.0
    assert result.tie_groups == []


def test_rank_with_pair_tie():
    result = rank([1, 1, 2])
    assert result.ranks == [1.5, 1.5, 3.0]
    assert result.tie_weight == 6.0
    assert result.tie_groups == [2]


def test_rank_all_tied():
    result = rank([5, 5, 5])
    assert result.ranks == [2.0, 2.0, 2.0]
    assert result.tie_weight == 24.0


def test_rank_preserves_input_order_and_rank_sum():
    sample = [10.0, -2.0, 7.0, 7.0, 0.5, 10.0, 10.0]
    result = rank(sample)
    assert result.ranks == [6.0, 1.0, 3.5, 3.5, 2.0, 6.0, 6.0]
    n = len(sample)
    assert sum(result.ranks) == pytest.approx(n * (n + 1) / 2)
    assert result.tie_weight == 2 * (4 - 1) + 3 * (9 - 1)


def test_rank_rejects_empty_and_nan():
    with pytest.raises(DomainError):
        rank([])
    with pytest.raises(DomainError):
        rank([1.0, math.nan])
