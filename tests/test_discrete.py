import math

import pytest
from scipy import stats

from npexact.stats.distributions.discrete import Binomial, Geometric, Poisson, UniformDiscrete


def test_binomial_mass_and_cdf():
    b = Binomial(n=10, p=0.3)
    for k in range(11):
        assert b.density(k) == pytest.approx(stats.binom.pmf(k, 10, 0.3), rel=1e-10)
        assert b.cumulative_probability(k) == pytest.approx(stats.binom.cdf(k, 10, 0.3), abs=1e-12)
    assert b.density(-1) == 0.0
    assert b.density(11) == 0.0
    assert b.density(2.7) == b.density(2)


def test_binomial_defaults_to_fair_coin():
    b = Binomial()
    assert (b.n, b.p) == (1, 0.5)
    assert b.density(0) == 0.5


def test_binomial_large_n_uses_log_space():
    b = Binomial(n=2000, p=0.5)
    assert b.density(1000) == pytest.approx(stats.binom.pmf(1000, 2000, 0.5), rel=1e-6)


def test_binomial_cumulative_indices():
    b = Binomial(n=10, p=0.5)
    # P(X <= 1) = 11/1024 <= 0.025 < P(X <= 2) = 56/1024
    assert b.lesser_cumulative_index(0.025) == 1
    assert b.lesser_cumulative_index(0.0001) == -1
    # Removing mass from the top: P(X < 9) = 1 - 11/1024 is the first sum below 0.99.
    assert b.upper_cumulative_index(0.99) == 9


def test_binomial_rejects_invalid_parameters():
    b = Binomial(n=5, p=0.2)
    assert not b.set_n(0)
    assert not b.set_n(2.5)
    assert not b.set_p(1.5)
    assert (b.n, b.p) == (5, 0.2)


@pytest.mark.parametrize("mean", [0.5, 3.0, 12.0])
def test_poisson_matches_scipy(mean):
    p = Poisson(mean=mean)
    for k in (0, 1, 4, 10):
        assert p.density(k) == pytest.approx(stats.poisson.pmf(k, mean), rel=1e-10)
        assert p.cumulative_probability(k) == pytest.approx(stats.poisson.cdf(k, mean), abs=1e-12)
    assert p.cumulative_probability(-1) == 0.0


def test_geometric_counts_trials_until_first_success():
    g = Geometric(p=0.25)
    assert g.density(0) == 0.0
    assert g.density(1) == 0.25
    assert g.density(3) == pytest.approx(0.75**2 * 0.25)
    assert g.cumulative_probability(3) == pytest.approx(1.0 - 0.75**3)
    assert g.cumulative_probability(3) == pytest.approx(sum(g.density(k) for k in range(1, 4)))
    assert Geometric().p == 0.5


def test_uniform_discrete():
    u = UniformDiscrete(n=4)
    assert u.density(0) == 0.0
    assert u.density(2) == 0.25
    assert u.cumulative_probability(2.9) == 0.5
    assert u.cumulative_probability(7) == 1.0


def test_nan_propagates():
    assert math.isnan(Binomial(n=3).density(math.nan))
    assert math.isnan(Poisson().cumulative_probability(math.nan))
