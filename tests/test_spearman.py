import math

import pytest
from scipy.stats import norm

from npexact.core.names import Tail
from npexact.core.results import NotTabulated, Value
from npexact.stats.exact.enumeration import spearman_counts


@pytest.fixture(scope="module")
def spearman(registry):
    return registry.get("spearman")


def test_spearman_counts():
    assert spearman_counts(3) == {0: 1, 2: 2, 6: 2, 8: 1}
    assert sum(spearman_counts(6).values()) == math.factorial(6)


def test_exact_upper_tail(spearman):
    assert spearman.compute_exact_probability(3, 1.0).probability == pytest.approx(1 / 6)
    assert spearman.compute_exact_probability(3, 0.5).probability == pytest.approx(0.5)
    # Negative correlations are looked up by magnitude.
    assert spearman.compute_exact_probability(3, -1.0) == spearman.compute_exact_probability(3, 1.0)


def test_exact_keys_are_matched_within_tolerance(spearman):
    assert spearman.compute_exact_probability(3, 0.501).probability == pytest.approx(0.5)
    assert isinstance(spearman.compute_exact_probability(3, 0.3), NotTabulated)
    assert isinstance(spearman.compute_exact_probability(11, 0.5), NotTabulated)


def test_exact_tail_is_monotone(spearman):
    keys = spearman.table("exact").keys(10)
    tails = [spearman.compute_exact_probability(10, key).probability for key in keys]
    assert tails == sorted(tails)
    assert tails[0] == pytest.approx(1 / math.factorial(10))


def test_critical_table(spearman):
    assert spearman.compute_approximate_probability(20, 0.6) == Value(0.005, approximate=True)
    assert spearman.compute_approximate_probability(20, -0.8) == Value(0.001, approximate=True)
    assert isinstance(spearman.compute_approximate_probability(10, 0.9), NotTabulated)
    assert isinstance(spearman.compute_approximate_probability(31, 0.9), NotTabulated)


def test_asymptotic(spearman):
    assert spearman.standardize(50, 0.3) == pytest.approx(2.1)
    upper = spearman.compute_asymptotic_probability(50, 0.3)
    assert upper.probability == pytest.approx(norm.sf(2.1), abs=1e-7)
    lower = spearman.compute_asymptotic_probability(50, 0.3, upper=False)
    assert lower.probability == pytest.approx(norm.cdf(2.1), abs=1e-7)


def test_probability_dispatch(spearman):
    assert spearman.compute_probability(3, 1.0) == spearman.compute_exact_probability(3, 1.0)
    assert spearman.compute_probability(20, 0.6) == Value(0.005, approximate=True)
    double = spearman.compute_probability(50, -0.3, tail=Tail.DOUBLE)
    assert double.probability == pytest.approx(2 * norm.sf(2.1), abs=1e-7)
