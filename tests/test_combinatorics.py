import math

import pytest

from npexact.core.errors import DomainError
from npexact.stats.common.combinatorics import (
    binomial,
    binomial_or_zero,
    exact_binomial,
    exact_factorial,
    factorial,
)


def test_small_factorials():
    assert factorial(0) == 1.0
    assert factorial(1) == 1.0
    assert factorial(5) == 120.0
    assert factorial(20) == float(math.factorial(20))


def test_large_factorial_is_exact_before_conversion():
    assert exact_factorial(50) == math.factorial(50)
    assert factorial(100) == float(math.factorial(100))


def test_factorial_overflows_to_inf():
    assert math.isinf(factorial(200))


@pytest.mark.parametrize("bad", [-1, 2.5, True])
def test_factorial_rejects_invalid(bad):
    with pytest.raises(DomainError):
        factorial(bad)


def test_binomial_reference_values():
    assert binomial(5, 2) == 10.0
    assert binomial(10, 0) == 1.0
    assert exact_binomial(300, 150) == math.comb(300, 150)


@pytest.mark.parametrize("m", [1, 7, 30, 64])
def test_binomial_symmetry(m):
    for n in range(m + 1):
        assert exact_binomial(m, n) == exact_binomial(m, m - n)


def test_binomial_rejects_n_above_m():
    with pytest.raises(DomainError):
        binomial(3, 4)
    with pytest.raises(DomainError):
        binomial(3, -1)


def test_binomial_or_zero_outside_support():
    assert binomial_or_zero(3, 4) == 0
    assert binomial_or_zero(3, -1) == 0
    assert binomial_or_zero(4, 2) == 6
