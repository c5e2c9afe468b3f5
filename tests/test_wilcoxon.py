import math

import pytest
from scipy.stats import norm

from npexact.core.errors import DomainError
from npexact.core.names import Tail
from npexact.core.results import NotTabulated, Saturated, Value
from npexact.stats.exact.enumeration import rank_sum_counts, signed_rank_counts


@pytest.fixture(scope="module")
def signed(registry):
    return registry.get("wilcoxon")


@pytest.fixture(scope="module")
def rank_sum(registry):
    return registry.get("wilcoxon_rank_sum")


def test_signed_rank_counts_are_symmetric():
    counts = signed_rank_counts(8)
    assert sum(counts) == 2**8
    assert counts == counts[::-1]


def test_signed_rank_exact_lower_tail(signed):
    assert signed.compute_exact_probability(5, 0) == Value(1 / 32)
    # P(T+ <= 8) for n = 10 is 25/1024, the classic two-sided 5% critical value.
    assert signed.compute_exact_probability(10, 8).probability == pytest.approx(25 / 1024)


def test_signed_rank_half_integer_averages_neighbours(signed):
    assert signed.compute_exact_probability(5, 0.5).probability == pytest.approx((1 / 32 + 2 / 32) / 2)


def test_signed_rank_outside_table(signed):
    assert signed.compute_exact_probability(5, 7) == Value(0.5)
    assert isinstance(signed.compute_exact_probability(5, 8), Saturated)
    assert isinstance(signed.compute_exact_probability(60, 10), NotTabulated)


def test_signed_rank_critical_value(signed):
    assert signed.find_critical_value(10, 0.025) == 8
    assert signed.find_critical_value(3, 0.05) is None
    with pytest.raises(DomainError):
        signed.find_critical_value(51, 0.05)


def test_signed_rank_asymptotic(signed):
    n, r = 20, 52
    sd = math.sqrt(n * (n + 1) * (2 * n + 1) / 24)
    left = norm.cdf((r + 0.5 - 105) / sd)
    result = signed.compute_asymptotic_probability(n, r, tail=Tail.LEFT)
    assert result.approximate
    assert result.probability == pytest.approx(left, abs=1e-7)
    double = signed.compute_asymptotic_probability(n, r)
    assert double.probability == pytest.approx(2 * left, abs=1e-7)


def test_signed_rank_ties_shrink_variance(signed):
    n, r, ties = 20, 52, 30.0
    sd = math.sqrt(n * (n + 1) * (2 * n + 1) / 24 - ties / 48)
    result = signed.compute_asymptotic_probability(n, r, ties=ties, tail="left")
    assert result.probability == pytest.approx(norm.cdf((r + 0.5 - 105) / sd), abs=1e-7)


def test_rank_sum_counts_total():
    counts = rank_sum_counts(4, 6)
    assert sum(counts) == math.comb(10, 4)
    assert counts[10] == 1
    assert len(counts) == 4 * (4 + 2 * 6 + 1) // 2 + 1


def test_rank_sum_tails(rank_sum):
    # n = m = 2: W in 3..7 with counts 1, 1, 2, 1, 1.
    assert rank_sum.compute_left_probability(2, 2, 3).probability == pytest.approx(1 / 6)
    assert rank_sum.compute_left_probability(2, 2, 5).probability == pytest.approx(4 / 6)
    assert isinstance(rank_sum.compute_left_probability(2, 2, 6), NotTabulated)
    assert rank_sum.compute_right_probability(2, 2, 7).probability == pytest.approx(1 / 6)
    assert isinstance(rank_sum.compute_right_probability(2, 2, 5), NotTabulated)
    assert isinstance(rank_sum.compute_left_probability(11, 2, 5), NotTabulated)


def test_rank_sum_probabilities_fill_missing_tail(rank_sum):
    p = rank_sum.compute_exact_probabilities(2, 2, 6)
    assert p[Tail.LEFT].probability == pytest.approx(5 / 6)
    assert p[Tail.RIGHT].probability == pytest.approx(2 / 6)
    assert p[Tail.DOUBLE].probability == pytest.approx(4 / 6)


def test_rank_sum_critical_values(rank_sum):
    assert rank_sum.find_critical_value(4, 4, 0.05) == 1
    assert rank_sum.inverse_find_critical_value(4, 4, 1).probability == pytest.approx(2 / 70)
    assert rank_sum.inverse_find_critical_value(4, 4, 0) == Value(0.0)


def test_rank_sum_asymptotic(rank_sum):
    sd = math.sqrt(10 * 10 * 21 / 12)
    result = rank_sum.compute_asymptotic_probability(10, 10, 80, tail=Tail.LEFT)
    assert result.probability == pytest.approx(norm.cdf((80.5 - 105) / sd), abs=1e-7)
    right = rank_sum.compute_asymptotic_probability(10, 10, 130, tail=Tail.RIGHT)
    assert right.probability == pytest.approx(result.probability, abs=1e-12)
