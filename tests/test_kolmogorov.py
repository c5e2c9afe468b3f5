import math

import pytest
from scipy.stats import kstwobign

from npexact.core.results import NotTabulated, Saturated, Value
from npexact.stats.exact.enumeration import (
    kolmogorov_critical_value,
    kolmogorov_one_sided_tail,
    lattice_paths_within,
)
from npexact.stats.exact.kolmogorov import LEVELS


@pytest.fixture(scope="module")
def one_sample(registry):
    return registry.get("kolmogorov")


@pytest.fixture(scope="module")
def two_sample(registry):
    return registry.get("kolmogorov_two_sample")


def test_one_sided_tail_single_observation():
    # With one observation P(D+ >= d) = 1 - d.
    assert kolmogorov_one_sided_tail(1, 0.3) == pytest.approx(0.7)
    assert kolmogorov_one_sided_tail(5, 0.0) == 1.0
    assert kolmogorov_one_sided_tail(5, 1.0) == 0.0


def test_critical_values_single_observation(one_sample):
    row = one_sample.table("critical").row(1)
    assert row == pytest.approx([1.0 - level / 2 for level in LEVELS], abs=1e-9)


def test_critical_value_against_published_table():
    assert kolmogorov_critical_value(10, 0.05) == pytest.approx(0.409, abs=2e-3)
    assert kolmogorov_critical_value(20, 0.01) == pytest.approx(0.352, abs=2e-3)


def test_one_sample_exact_levels(one_sample):
    assert one_sample.compute_exact_probability(1, 0.98) == Value(0.05)
    assert one_sample.compute_exact_probability(1, 0.999) == Value(0.01)
    assert isinstance(one_sample.compute_exact_probability(1, 0.5), Saturated)
    assert isinstance(one_sample.compute_exact_probability(41, 0.5), NotTabulated)


def test_one_sample_asymptotic(one_sample):
    result = one_sample.compute_probability(100, 0.2)
    assert result == Value(0.01, approximate=True)
    assert one_sample.compute_asymptotic_probability(100, 0.125) == Value(0.1, approximate=True)
    assert isinstance(one_sample.compute_asymptotic_probability(100, 0.05), Saturated)


@pytest.mark.parametrize("lam", [0.5, 1.0, 1.36, 2.0])
def test_limiting_series_matches_scipy(one_sample, lam):
    n = 100
    result = one_sample.compute_limiting_probability(n, lam / math.sqrt(n))
    assert result.approximate
    assert result.probability == pytest.approx(kstwobign.sf(lam), abs=1e-8)


def test_lattice_paths():
    assert lattice_paths_within(3, 3, 6) == 8
    assert lattice_paths_within(3, 3, 100) == math.comb(6, 3)


def test_two_sample_exact(two_sample):
    assert two_sample.compute_exact_probability(3, 1.0).probability == pytest.approx(0.1)
    assert two_sample.compute_exact_probability(3, 2 / 3).probability == pytest.approx(0.6)
    assert two_sample.compute_exact_probability(3, 1.0, m=2).probability == pytest.approx(0.2)
    assert two_sample.compute_exact_probability(3, 0.0) == Value(1.0)
    assert isinstance(two_sample.compute_exact_probability(3, 1.5), Saturated)
    assert isinstance(two_sample.compute_exact_probability(9, 0.5), NotTabulated)


def test_two_sample_critical_table(two_sample):
    assert two_sample.compute_asymptotic_probability(3, 1.0) == Value(0.1)
    assert isinstance(two_sample.compute_asymptotic_probability(3, 0.5), Saturated)
    assert isinstance(two_sample.compute_asymptotic_probability(2, 1.0), NotTabulated)


def test_two_sample_limiting_constants(two_sample):
    assert two_sample.compute_asymptotic_probability(30, 0.5, m=40) == Value(0.01, approximate=True)
    assert isinstance(two_sample.compute_asymptotic_probability(30, 0.1, m=40), Saturated)
