import math

import pytest
from scipy.stats import norm

from npexact.core.names import Tail
from npexact.core.results import NotTabulated, Saturated
from npexact.stats.exact.enumeration import runs_up_down_counts, total_runs_counts


@pytest.fixture(scope="module")
def runs(registry):
    return registry.get("runs")


@pytest.fixture(scope="module")
def up_down(registry):
    return registry.get("runs_up_down")


def test_total_runs_counts():
    assert total_runs_counts(2, 2) == {2: 2, 3: 2, 4: 2}
    assert sum(total_runs_counts(7, 11).values()) == math.comb(18, 7)


def test_runs_up_down_counts():
    assert runs_up_down_counts(4) == {1: 2, 2: 12, 3: 10}
    assert sum(runs_up_down_counts(10).values()) == math.factorial(10)


def test_total_runs_stored_tails(runs):
    assert runs.compute_left_tail_probability(2, 2, 2).probability == pytest.approx(1 / 3)
    assert runs.compute_right_tail_probability(2, 2, 4).probability == pytest.approx(1 / 3)
    assert runs.compute_left_tail_probability(10, 10, 6).probability == pytest.approx(3422 / 184756)


def test_total_runs_complement_fills_gaps(runs):
    assert runs.compute_left_tail_probability(2, 2, 3).probability == pytest.approx(2 / 3)
    assert runs.compute_right_tail_probability(2, 2, 3).probability == pytest.approx(2 / 3)


def test_total_runs_sizes_in_either_order(runs):
    assert runs.compute_left_tail_probability(12, 5, 6) == runs.compute_left_tail_probability(5, 12, 6)


@pytest.mark.parametrize("a, b", [(13, 13), (5, 16), (10, 13)])
def test_total_runs_outside_tables(runs, a, b):
    assert isinstance(runs.compute_left_tail_probability(a, b, 5), NotTabulated)
    assert isinstance(runs.compute_right_tail_probability(a, b, 5), NotTabulated)


def test_total_runs_asymptotic(runs):
    sd = math.sqrt(2 * 100 * (200 - 20) / (400 * 19))
    left = runs.compute_asymptotic_probability(10, 10, 6, tail=Tail.LEFT)
    assert left.approximate
    assert left.probability == pytest.approx(norm.cdf((6.5 - 11) / sd), abs=1e-7)
    double = runs.compute_asymptotic_probability(10, 10, 6)
    assert double.probability == pytest.approx(2 * left.probability, abs=1e-7)
    assert isinstance(runs.compute_asymptotic_probability(1, 0, 1), NotTabulated)


def test_up_down_exact(up_down):
    assert up_down.compute_exact_probability(4, 1, True).probability == pytest.approx(2 / 24)
    assert up_down.compute_exact_probability(4, 3, False).probability == pytest.approx(10 / 24)
    assert isinstance(up_down.compute_exact_probability(4, 3, True), Saturated)
    assert isinstance(up_down.compute_exact_probability(4, 1, False), Saturated)


@pytest.mark.parametrize("n, r", [(2, 1), (4, 4), (4, 0), (26, 10)])
def test_up_down_outside_table(up_down, n, r):
    assert isinstance(up_down.compute_exact_probability(n, r, True), NotTabulated)


def test_up_down_asymptotic_right_tail_is_upper(up_down):
    n, r = 20, 16
    mean = (2 * n - 1) / 3
    sd = math.sqrt((16 * n - 29) / 90)
    right = up_down.compute_asymptotic_probability(n, r, tail=Tail.RIGHT)
    assert right.probability < 0.5
    assert right.probability == pytest.approx(norm.sf((r - 0.5 - mean) / sd), abs=1e-7)
