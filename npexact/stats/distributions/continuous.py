"""
npexact.stats.distributions.continuous
======================================

Continuous distribution families.

- `Normal` (mean, sigma) via Algorithm AS 66
- `ChiSquare` (degree) via the regularized incomplete gamma function, with a
  Wilson-Hilferty Normal approximation for large arguments
- `Gamma` (alpha shape, beta scale)
- `Exponential` (rate)
- `Weibull` (scale, shape)
- `Laplace` (mean, scale)
- `Logistic` (mean, scale)
- `UniformContinuous` (start, end)

Examples
--------
>>> from npexact.stats.distributions.continuous import ChiSquare, Exponential
>>> chi = ChiSquare(degree=2)
>>> abs(chi.cumulative_probability(2.0) - Exponential(rate=0.5).cumulative_probability(2.0)) < 1e-6
True
"""

from __future__ import annotations
import math

from npexact.core.names import Family
from npexact.stats.common.special import (
    inverse_normal_cdf,
    log_gamma,
    normal_cdf,
    regularized_gamma_p,
    regularized_gamma_q,
)
from npexact.stats.distributions.base import Distribution, ParameterUpdate, is_integral

_SQRT_TWO_PI = math.sqrt(2.0 * math.pi)


def _exp(x: float) -> float:
    try:
        return math.exp(x)
    except OverflowError:
        return math.inf


def _reciprocal(value: float) -> float:
    try:
        return 1.0 / value
    except (TypeError, ZeroDivisionError):
        return math.nan


class Normal(Distribution):
    """Normal distribution with mean `mean` and standard deviation `sigma` (> 0)."""

    family = Family.NORMAL
    _parameters = ("mean", "sigma")

    def __init__(self, mean: float = 0.0, sigma: float = 1.0) -> None:
        self._mean = 0.0
        self._sigma = 1.0
        self.set_mean(mean)
        self.set_sigma(sigma)

    @property
    def mean(self) -> float:
        return self._mean

    @property
    def sigma(self) -> float:
        return self._sigma

    def set_mean(self, value: float) -> ParameterUpdate:
        return self._update("mean", value, lambda v: not math.isinf(v))

    def set_sigma(self, value: float) -> ParameterUpdate:
        return self._update("sigma", value, lambda v: 0.0 < v < math.inf)

    def density(self, x: float) -> float:
        z = (x - self._mean) / self._sigma
        return math.exp(-0.5 * z * z) / (_SQRT_TWO_PI * self._sigma)

    def cumulative_probability(self, x: float) -> float:
        return normal_cdf((x - self._mean) / self._sigma, upper=False)

    @staticmethod
    def standard_probability(z: float, upper: bool = False) -> float:
        """Tail probability of the standard Normal at z."""
        return normal_cdf(z, upper=upper)

    def quantile(self, p: float) -> float:
        """x with P(X <= x) = p."""
        return self._mean + self._sigma * inverse_normal_cdf(p)

    @staticmethod
    def inverse(p: float) -> float:
        """Standard Normal quantile."""
        return inverse_normal_cdf(p)


class Gamma(Distribution):
    """Gamma distribution with shape `alpha` (> 0) and scale `beta` (> 0)."""

    family = Family.GAMMA
    _parameters = ("alpha", "beta")

    def __init__(self, alpha: float = 1.0, beta: float = 1.0) -> None:
        self._alpha = 1.0
        self._beta = 1.0
        self.set_alpha(alpha)
        self.set_beta(beta)

    @property
    def alpha(self) -> float:
        return self._alpha

    @property
    def beta(self) -> float:
        return self._beta

    @property
    def rate(self) -> float:
        return 1.0 / self._beta

    def set_alpha(self, value: float) -> ParameterUpdate:
        return self._update("alpha", value, lambda v: 0.0 < v < math.inf)

    def set_beta(self, value: float) -> ParameterUpdate:
        return self._update("beta", value, lambda v: 0.0 < v < math.inf)

    def set_rate(self, value: float) -> ParameterUpdate:
        """Set beta = 1 / value; the returned update refers to beta."""
        return self.set_beta(_reciprocal(value))

    def density(self, x: float) -> float:
        alpha, beta = self._alpha, self._beta
        if math.isnan(x):
            return math.nan
        if x < 0.0:
            return 0.0
        if x == 0.0:
            if alpha < 1.0:
                return math.inf
            return 1.0 / beta if alpha == 1.0 else 0.0
        if math.isinf(x):
            return 0.0
        # Normalizing constant is beta^alpha * Gamma(alpha).
        log_density = (alpha - 1.0) * math.log(x) - x / beta - alpha * math.log(beta) - log_gamma(alpha)
        return _exp(log_density)

    def cumulative_probability(self, x: float) -> float:
        if math.isnan(x):
            return math.nan
        if x <= 0.0:
            return 0.0
        if math.isinf(x):
            return 1.0
        return regularized_gamma_p(self._alpha, x / self._beta)


class ChiSquare(Distribution):
    """
    Chi-square distribution with `degree` (positive integer) degrees of freedom.

    Equivalent to Gamma(alpha=degree/2, beta=2). The right tail switches to a
    Wilson-Hilferty Normal approximation once the argument or the degrees of
    freedom exceed `NORMAL_APPROXIMATION_THRESHOLD`.
    """

    family = Family.CHI_SQUARE
    _parameters = ("degree",)

    NORMAL_APPROXIMATION_THRESHOLD = 1000.0

    def __init__(self, degree: int = 1) -> None:
        self._degree = 1
        self._gamma = Gamma(alpha=0.5, beta=2.0)
        self.set_degree(degree)

    @property
    def degree(self) -> int:
        return self._degree

    def set_degree(self, value: int) -> ParameterUpdate:
        update = self._update("degree", value, lambda v: is_integral(v) and v > 0, cast=int)
        if update:
            self._gamma.set_alpha(self._degree / 2.0)
        return update

    def density(self, x: float) -> float:
        return self._gamma.density(x)

    def cumulative_probability(self, x: float) -> float:
        return 1.0 - self.right_tail_probability(x)

    def right_tail_probability(self, x: float) -> float:
        """P(X >= x)."""
        k = self._degree
        if math.isnan(x):
            return math.nan
        if x <= 0.0:
            return 1.0
        if math.isinf(x):
            return 0.0
        threshold = self.NORMAL_APPROXIMATION_THRESHOLD
        if k == 1 and x > threshold:
            return 0.0
        if x > threshold or k > threshold:
            return self._wilson_hilferty(x)
        return regularized_gamma_q(k / 2.0, x / 2.0)

    def _wilson_hilferty(self, x: float) -> float:
        k = float(self._degree)
        spread = 2.0 / (9.0 * k)
        z = ((x / k) ** (1.0 / 3.0) - (1.0 - spread)) / math.sqrt(spread)
        return normal_cdf(z, upper=True)


class Exponential(Distribution):
    """Exponential distribution with `rate` (> 0), mean 1/rate."""

    family = Family.EXPONENTIAL
    _parameters = ("rate",)

    def __init__(self, rate: float = 1.0) -> None:
        self._rate = 1.0
        self.set_rate(rate)

    @property
    def rate(self) -> float:
        return self._rate

    @property
    def mean(self) -> float:
        return 1.0 / self._rate

    def set_rate(self, value: float) -> ParameterUpdate:
        return self._update("rate", value, lambda v: 0.0 < v < math.inf)

    def set_mean(self, value: float) -> ParameterUpdate:
        """Set rate = 1 / value; the returned update refers to rate."""
        return self.set_rate(_reciprocal(value))

    def density(self, x: float) -> float:
        if x < 0.0:
            return 0.0
        return self._rate * math.exp(-self._rate * x)

    def cumulative_probability(self, x: float) -> float:
        if x < 0.0:
            return 0.0
        return -math.expm1(-self._rate * x)


class Weibull(Distribution):
    """Weibull distribution with `scale` lambda (> 0) and `shape` k (> 0)."""

    family = Family.WEIBULL
    _parameters = ("scale", "shape")

    def __init__(self, scale: float = 1.0, shape: float = 1.0) -> None:
        self._scale = 1.0
        self._shape = 1.0
        self.set_scale(scale)
        self.set_shape(shape)

    @property
    def scale(self) -> float:
        return self._scale

    @property
    def shape(self) -> float:
        return self._shape

    def set_scale(self, value: float) -> ParameterUpdate:
        return self._update("scale", value, lambda v: 0.0 < v < math.inf)

    def set_shape(self, value: float) -> ParameterUpdate:
        return self._update("shape", value, lambda v: 0.0 < v < math.inf)

    def density(self, x: float) -> float:
        lam, k = self._scale, self._shape
        if x < 0.0:
            return 0.0
        if x == 0.0:
            if k < 1.0:
                return math.inf
            return 1.0 / lam if k == 1.0 else 0.0
        log_ratio = math.log(x / lam)
        return _exp(math.log(k / lam) + (k - 1.0) * log_ratio - _exp(k * log_ratio))

    def cumulative_probability(self, x: float) -> float:
        if x < 0.0:
            return 0.0
        if x == 0.0:
            return 0.0
        return -math.expm1(-_exp(self._shape * math.log(x / self._scale)))


class Laplace(Distribution):
    """Laplace (double exponential) distribution with location `mean` and `scale` (> 0)."""

    family = Family.LAPLACE
    _parameters = ("mean", "scale")

    def __init__(self, mean: float = 0.0, scale: float = 1.0) -> None:
        self._mean = 0.0
        self._scale = 1.0
        self.set_mean(mean)
        self.set_scale(scale)

    @property
    def mean(self) -> float:
        return self._mean

    @property
    def scale(self) -> float:
        return self._scale

    def set_mean(self, value: float) -> ParameterUpdate:
        return self._update("mean", value, lambda v: not math.isinf(v))

    def set_scale(self, value: float) -> ParameterUpdate:
        return self._update("scale", value, lambda v: 0.0 < v < math.inf)

    def density(self, x: float) -> float:
        return math.exp(-abs(x - self._mean) / self._scale) / (2.0 * self._scale)

    def cumulative_probability(self, x: float) -> float:
        if x < self._mean:
            return 0.5 * math.exp((x - self._mean) / self._scale)
        return 1.0 - 0.5 * math.exp((self._mean - x) / self._scale)


class Logistic(Distribution):
    """Logistic distribution with location `mean` and `scale` s (> 0)."""

    family = Family.LOGISTIC
    _parameters = ("mean", "scale")

    def __init__(self, mean: float = 0.0, scale: float = 1.0) -> None:
        self._mean = 0.0
        self._scale = 1.0
        self.set_mean(mean)
        self.set_scale(scale)

    @property
    def mean(self) -> float:
        return self._mean

    @property
    def scale(self) -> float:
        return self._scale

    def set_mean(self, value: float) -> ParameterUpdate:
        return self._update("mean", value, lambda v: not math.isinf(v))

    def set_scale(self, value: float) -> ParameterUpdate:
        return self._update("scale", value, lambda v: 0.0 < v < math.inf)

    def density(self, x: float) -> float:
        # Symmetric in x - mean; the negative branch never overflows.
        e = math.exp(-abs(x - self._mean) / self._scale)
        return e / (self._scale * (1.0 + e) ** 2)

    def cumulative_probability(self, x: float) -> float:
        return 1.0 / (1.0 + _exp(-(x - self._mean) / self._scale))


class UniformContinuous(Distribution):
    """Continuous uniform distribution on [start, end], start < end."""

    family = Family.UNIFORM_CONTINUOUS
    _parameters = ("start", "end")

    def __init__(self, start: float = 0.0, end: float = 1.0) -> None:
        self._start = 0.0
        self._end = 1.0
        # Widen first so that the order of the two updates cannot reject a valid pair.
        if isinstance(start, (int, float)) and start >= self._end:
            self.set_end(end)
            self.set_start(start)
        else:
            self.set_start(start)
            self.set_end(end)

    @property
    def start(self) -> float:
        return self._start

    @property
    def end(self) -> float:
        return self._end

    def set_start(self, value: float) -> ParameterUpdate:
        return self._update("start", value, lambda v: not math.isinf(v) and v < self._end)

    def set_end(self, value: float) -> ParameterUpdate:
        return self._update("end", value, lambda v: not math.isinf(v) and v > self._start)

    def density(self, x: float) -> float:
        if self._start <= x <= self._end:
            return 1.0 / (self._end - self._start)
        return 0.0

    def cumulative_probability(self, x: float) -> float:
        value = (x - self._start) / (self._end - self._start)
        return max(min(value, 1.0), 0.0)
