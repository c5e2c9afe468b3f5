import doctest
import math

import pytest
from scipy import special as sp
from scipy.stats import norm

from npexact.stats.common import special
from npexact.stats.common.special import (
    ContinuedFraction,
    inverse_normal_cdf,
    inverse_regularized_beta,
    log_beta,
    log_gamma,
    normal_cdf,
    regularized_beta,
    regularized_gamma_p,
    regularized_gamma_q,
)


@pytest.mark.parametrize("x", [0.1, 0.5, 1.0, 2.5, 10.0, 50.0, 171.5])
def test_log_gamma_matches_scipy(x):
    assert log_gamma(x) == pytest.approx(sp.gammaln(x), rel=1e-10, abs=1e-12)


def test_log_gamma_integer_points():
    assert abs(log_gamma(1.0)) < 1e-12
    assert abs(log_gamma(2.0)) < 1e-12
    assert log_gamma(6.0) == pytest.approx(math.log(120.0), rel=1e-12)


@pytest.mark.parametrize("a", [0.5, 1.0, 3.0, 7.5, 20.0])
@pytest.mark.parametrize("scale", [0.0, 0.5, 1.0, 2.0, 10.0])
def test_regularized_gamma_p_plus_q_is_one(a, scale):
    x = scale * a
    assert regularized_gamma_p(a, x) + regularized_gamma_q(a, x) == pytest.approx(1.0, abs=1e-8)


@pytest.mark.parametrize("a,x", [(0.5, 0.3), (1.0, 1.0), (2.0, 5.0), (5.0, 2.0), (10.0, 12.0)])
def test_regularized_gamma_matches_scipy(a, x):
    assert regularized_gamma_p(a, x) == pytest.approx(sp.gammainc(a, x), abs=1e-8)
    assert regularized_gamma_q(a, x) == pytest.approx(sp.gammaincc(a, x), abs=1e-8)


def test_regularized_gamma_boundaries():
    assert regularized_gamma_p(2.0, 0.0) == 0.0
    assert regularized_gamma_q(2.0, 0.0) == 1.0
    assert math.isnan(regularized_gamma_p(0.0, 1.0))
    assert math.isnan(regularized_gamma_p(1.0, -1.0))


def test_normal_cdf_symmetry_and_reference():
    assert normal_cdf(0.0) == pytest.approx(0.5)
    for z in (-3.0, -1.0, 0.5, 1.96, 4.0):
        assert normal_cdf(z) == pytest.approx(norm.cdf(z), abs=1e-7)
        assert normal_cdf(z, upper=True) == pytest.approx(norm.sf(z), abs=1e-7)
        assert normal_cdf(z) + normal_cdf(z, upper=True) == pytest.approx(1.0)


def test_normal_cdf_nan():
    assert math.isnan(normal_cdf(math.nan))


@pytest.mark.parametrize("p", [0.001, 0.02, 0.1, 0.5, 0.9, 0.975, 0.999])
def test_inverse_normal_round_trip(p):
    assert inverse_normal_cdf(p) == pytest.approx(norm.ppf(p), abs=1e-6)
    assert normal_cdf(inverse_normal_cdf(p)) == pytest.approx(p, abs=1e-6)


def test_continued_fraction_golden_ratio():
    # 1 + 1/(1 + 1/(1 + ...)) converges to the golden ratio.
    cf = ContinuedFraction(lambda n, x: 1.0, lambda n, x: 1.0)
    assert cf.evaluate(0.0) == pytest.approx((1.0 + math.sqrt(5.0)) / 2.0, rel=1e-8)


@pytest.mark.parametrize("x,a,b", [(0.1, 0.5, 0.5), (0.3, 2.0, 5.0), (0.5, 3.0, 3.0), (0.8, 10.0, 2.0), (0.45, 50.0, 50.0)])
def test_regularized_beta_matches_scipy(x, a, b):
    assert regularized_beta(x, a, b) == pytest.approx(sp.betainc(a, b, x), abs=1e-8)


def test_regularized_beta_boundaries():
    assert regularized_beta(0.0, 2.0, 3.0) == 0.0
    assert regularized_beta(1.0, 2.0, 3.0) == 1.0
    assert math.isnan(regularized_beta(1.5, 2.0, 3.0))
    assert math.isnan(regularized_beta(0.5, 0.0, 3.0))
    assert log_beta(2.0, 3.0) == pytest.approx(math.log(1.0 / 12.0))


@pytest.mark.parametrize("p,a,b", [(0.005, 20.0, 20.0), (0.05, 2.0, 5.0), (0.9, 0.5, 1.5)])
def test_inverse_regularized_beta_matches_scipy(p, a, b):
    assert inverse_regularized_beta(p, a, b) == pytest.approx(sp.betaincinv(a, b, p), abs=1e-7)
    assert inverse_regularized_beta(0.0, a, b) == 0.0
    assert inverse_regularized_beta(1.0, a, b) == 1.0


def test_module_examples_run():
    failed, attempted = doctest.testmod(special)
    assert attempted > 0
    assert failed == 0
