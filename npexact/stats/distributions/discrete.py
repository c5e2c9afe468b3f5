"""
npexact.stats.distributions.discrete
====================================

Discrete distribution families. Arguments are floored to the nearest integer
below before evaluation.

- `Binomial` (n trials, success probability p)
- `Poisson` (mean)
- `Geometric` (p), support 1, 2, ... (trials up to and including the first success)
- `UniformDiscrete` (n), support 1..n

Examples
--------
>>> from npexact.stats.distributions.discrete import Binomial
>>> b = Binomial(n=4, p=0.5)
>>> b.density(2)
0.375
>>> b.cumulative_probability(4)
1.0
"""

from __future__ import annotations
import math

from npexact.core.names import Family
from npexact.stats.common.combinatorics import binomial, exact_factorial
from npexact.stats.common.special import log_gamma
from npexact.stats.distributions.base import Distribution, ParameterUpdate, is_integral


def _floor(value: float) -> int:
    return math.floor(value)


class _DiscreteDistribution(Distribution):
    def _support_point(self, value: float):
        """Floor `value`, or None when it is NaN or infinite."""
        if math.isnan(value) or math.isinf(value):
            return None
        return _floor(value)


class Binomial(_DiscreteDistribution):
    """Number of successes in `n` (>= 1) independent trials with success probability `p`.

    `p` defaults to 0.5, the fair-coin null used by the sign and McNemar
    tests, rather than 0, which would put all mass on zero successes.
    """

    family = Family.BINOMIAL
    _parameters = ("n", "p")

    def __init__(self, n: int = 1, p: float = 0.5) -> None:
        self._n = 1
        self._p = 0.5
        self.set_n(n)
        self.set_p(p)

    @property
    def n(self) -> int:
        return self._n

    @property
    def p(self) -> float:
        return self._p

    def set_n(self, value: int) -> ParameterUpdate:
        return self._update("n", value, lambda v: is_integral(v) and v > 0, cast=int)

    def set_p(self, value: float) -> ParameterUpdate:
        return self._update("p", value, lambda v: 0.0 <= v <= 1.0)

    def density(self, x: float) -> float:
        if math.isnan(x):
            return math.nan
        if math.isinf(x):
            return 0.0
        k = _floor(x)
        n, p = self._n, self._p
        if k < 0 or k > n:
            return 0.0
        coefficient = binomial(n, k)
        if not math.isinf(coefficient):
            return coefficient * p**k * (1.0 - p) ** (n - k)
        # Coefficient beyond float range: combine in log space.
        if p in (0.0, 1.0):
            return 0.0
        log_mass = (
            log_gamma(n + 1.0)
            - log_gamma(k + 1.0)
            - log_gamma(n - k + 1.0)
            + k * math.log(p)
            + (n - k) * math.log1p(-p)
        )
        return math.exp(log_mass)

    def cumulative_probability(self, x: float) -> float:
        if math.isnan(x):
            return math.nan
        if x == math.inf:
            return 1.0
        k = min(_floor(x), self._n) if x != -math.inf else -1
        total = 0.0
        i = 0
        while i <= k and total < 1.0:
            total += self.density(i)
            i += 1
        return min(total, 1.0)

    def lesser_cumulative_index(self, limit: float) -> int:
        """
        Largest x with P(X <= x) <= limit, found by accumulating from 0.

        Returns:
            -1 when P(X = 0) already exceeds `limit`; `n` when no partial sum
            below n exceeds it
        """
        if self.density(0) > limit:
            return -1
        total = 0.0
        for i in range(self._n):
            total += self.density(i)
            if total > limit:
                return i - 1
        return self._n

    def upper_cumulative_index(self, limit: float) -> int:
        """
        Largest x with P(X < x) < limit, found by removing mass from the top.

        Returns:
            The first x (scanning n, n-1, ...) for which the mass strictly
            below x drops under `limit`; `n` if none does
        """
        total = 1.0
        for i in range(self._n, -1, -1):
            total -= self.density(i)
            if total < limit:
                return i
        return self._n


class Poisson(_DiscreteDistribution):
    """Poisson distribution with `mean` (> 0)."""

    family = Family.POISSON
    _parameters = ("mean",)

    def __init__(self, mean: float = 1.0) -> None:
        self._mean = 1.0
        self.set_mean(mean)

    @property
    def mean(self) -> float:
        return self._mean

    def set_mean(self, value: float) -> ParameterUpdate:
        return self._update("mean", value, lambda v: 0.0 < v < math.inf)

    def density(self, x: float) -> float:
        k = self._support_point(x)
        if k is None:
            return math.nan if math.isnan(x) else 0.0
        if k < 0:
            return 0.0
        # math.log accepts arbitrarily large ints, so k! never overflows here.
        return math.exp(-self._mean + k * math.log(self._mean) - math.log(exact_factorial(k)))

    def cumulative_probability(self, x: float) -> float:
        if math.isnan(x):
            return math.nan
        if x == math.inf:
            return 1.0
        k = self._support_point(x)
        if k is None or k < 0:
            return 0.0
        total = 0.0
        for i in range(k + 1):
            total += self.density(i)
        return min(total, 1.0)


class Geometric(_DiscreteDistribution):
    """Number of trials up to the first success, success probability `p` in [0, 1]."""

    family = Family.GEOMETRIC
    _parameters = ("p",)

    def __init__(self, p: float = 0.5) -> None:
        self._p = 0.5
        self.set_p(p)

    @property
    def p(self) -> float:
        return self._p

    def set_p(self, value: float) -> ParameterUpdate:
        return self._update("p", value, lambda v: 0.0 <= v <= 1.0)

    def density(self, x: float) -> float:
        if math.isnan(x):
            return math.nan
        if math.isinf(x):
            return 0.0
        k = _floor(x)
        if k < 1:
            return 0.0
        return (1.0 - self._p) ** (k - 1) * self._p

    def cumulative_probability(self, x: float) -> float:
        if math.isnan(x):
            return math.nan
        if x == math.inf:
            return 1.0 if self._p > 0.0 else 0.0
        k = _floor(x) if x != -math.inf else 0
        if k < 1:
            return 0.0
        return 1.0 - (1.0 - self._p) ** k


class UniformDiscrete(_DiscreteDistribution):
    """Uniform distribution on the integers 1..n (n >= 1)."""

    family = Family.UNIFORM
    _parameters = ("n",)

    def __init__(self, n: int = 1) -> None:
        self._n = 1
        self.set_n(n)

    @property
    def n(self) -> int:
        return self._n

    def set_n(self, value: int) -> ParameterUpdate:
        return self._update("n", value, lambda v: is_integral(v) and v > 0, cast=int)

    def density(self, x: float) -> float:
        if math.isnan(x):
            return math.nan
        if math.isinf(x):
            return 0.0
        k = _floor(x)
        if 1 <= k <= self._n:
            return 1.0 / self._n
        return 0.0

    def cumulative_probability(self, x: float) -> float:
        if math.isnan(x):
            return math.nan
        if x == math.inf:
            return 1.0
        if x == -math.inf:
            return 0.0
        k = _floor(x)
        if k < 1:
            return 0.0
        if k < self._n:
            return k / self._n
        return 1.0
