import math

import pytest
from scipy.stats import kstest

from npexact.core.errors import DomainError
from npexact.core.names import Family
from npexact.core.results import SATURATED, Value
from npexact.stats.exact.lilliefors import (
    ASYMPTOTIC,
    dallal_wilkinson_critical,
    lilliefors_statistic,
    stephens_exponential_critical,
)

NORMAL_SAMPLE = [0.2, -1.1, 0.5, 2.3, 0.9, -0.4, 1.7, 0.1, -0.8, 1.2]
EXPONENTIAL_SAMPLE = [0.3, 1.2, 0.05, 2.4, 0.8, 0.6, 3.1, 0.15]


@pytest.fixture(scope="module")
def lilliefors(registry):
    return registry.get("lilliefors")


def _mean_sd(values):
    mean = sum(values) / len(values)
    sd = math.sqrt(sum((v - mean) ** 2 for v in values) / (len(values) - 1))
    return mean, sd


def test_statistic_matches_scipy_for_normal_fit():
    mean, sd = _mean_sd(NORMAL_SAMPLE)
    expected = kstest(NORMAL_SAMPLE, "norm", args=(mean, sd)).statistic
    assert lilliefors_statistic(NORMAL_SAMPLE, "normal") == pytest.approx(expected, abs=1e-6)


def test_statistic_matches_scipy_for_exponential_fit():
    mean = sum(EXPONENTIAL_SAMPLE) / len(EXPONENTIAL_SAMPLE)
    expected = kstest(EXPONENTIAL_SAMPLE, "expon", args=(0.0, mean)).statistic
    assert lilliefors_statistic(EXPONENTIAL_SAMPLE, Family.EXPONENTIAL) == pytest.approx(expected, abs=1e-9)


@pytest.mark.parametrize(
    "sample,family",
    [([1.0], "normal"), ([2.0, 2.0, 2.0], "normal"), ([-1.0, -2.0], "exponential"), ([1.0, 2.0], "gamma")],
)
def test_statistic_rejects_unfit_samples(sample, family):
    with pytest.raises(DomainError):
        lilliefors_statistic(sample, family)


@pytest.mark.parametrize("level", [0.1, 0.05, 0.01, 0.001])
def test_dallal_wilkinson_inverts_the_tail_formula(level):
    n = 20
    d = dallal_wilkinson_critical(n, level)
    shifted = n + 2.78019
    tail = math.exp(
        -7.01256 * d * d * shifted
        + 2.99587 * d * math.sqrt(shifted)
        - 0.122119
        + 0.974598 / math.sqrt(n)
        + 1.67997 / n
    )
    assert tail == pytest.approx(level, rel=1e-9)


def test_tables(lilliefors):
    normal = lilliefors.table("normal")
    exponential = lilliefors.table("exponential")
    assert normal.get(20, 1) == pytest.approx(0.1927, abs=1e-3)
    assert exponential.get(20, 1) == pytest.approx(0.2323, abs=1e-3)
    assert exponential.get(20, 1) == stephens_exponential_critical(20, 1.077)
    for n in (4, 20, 100):
        row = normal.row(n)
        assert row == sorted(row)
    assert normal.count_defined() == 4 * 97


def test_tabulated_levels(lilliefors):
    assert lilliefors.compute_probability(20, 0.2) == Value(0.05, approximate=True)
    assert lilliefors.compute_probability(20, 0.25, "normal") == Value(0.01, approximate=True)
    assert lilliefors.compute_probability(20, 0.1) is SATURATED
    assert lilliefors.compute_probability(20, 0.24, "exponential") == Value(0.05, approximate=True)


def test_asymptotic_levels(lilliefors):
    assert lilliefors.compute_probability(200, 0.08, "normal") == Value(0.01, approximate=True)
    assert lilliefors.compute_probability(200, 0.05, "exponential") is SATURATED
    root = math.sqrt(400)
    assert lilliefors.compute_probability(400, ASYMPTOTIC[Family.EXPONENTIAL][3] / root, "exponential") == Value(
        0.001, approximate=True
    )


def test_tiny_samples_and_unknown_family(lilliefors):
    assert lilliefors.compute_probability(3, 0.5) == Value(1.0, approximate=True)
    with pytest.raises(DomainError):
        lilliefors.compute_probability(20, 0.2, "poisson")
