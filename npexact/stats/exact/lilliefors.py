"""
npexact.stats.exact.lilliefors
==============================

Lilliefors tests: the Kolmogorov-Smirnov distance between a sample and the
Normal or exponential law fitted to it,

    D_n = max_i max(i / n - F(x_(i)), F(x_(i)) - (i - 1) / n)

Fitting the parameters shrinks D_n, so the plain Kolmogorov critical values
are far too conservative. Critical values at 0.1 / 0.05 / 0.01 / 0.001:

- "normal", 4 <= n <= 100: Dallal & Wilkinson's (1986) fit of the tail,
  p = exp(-A D² + B D + c_n), solved for D at each level.
- "exponential", 4 <= n <= 100: Stephens' modification,
  D = c / (sqrt(n) + 0.26 + 0.5 / sqrt(n)) + 0.2 / n.
- n > 100: c / sqrt(n) with Lilliefors' limiting constants.

Every result is a table-level approximation and carries `approximate=True`.

Examples
--------
>>> from npexact.stats.exact.lilliefors import LillieforsDistribution
>>> d = LillieforsDistribution()
>>> d.compute_probability(20, 0.25, "normal")
Value(probability=0.01, approximate=True)
"""

from __future__ import annotations
import math
from typing import Dict, Sequence, Tuple, Union

from npexact.core.errors import DomainError
from npexact.core.names import Family
from npexact.core.results import Probability, Value
from npexact.core.tables import SparseKeyedTable
from npexact.stats.distributions.continuous import Exponential, Normal
from npexact.stats.exact.base import ExactDistribution, Table

LEVELS: Tuple[float, ...] = (0.1, 0.05, 0.01, 0.001)

# Limiting values of sqrt(n) D_n at each level.
ASYMPTOTIC: Dict[Family, Tuple[float, ...]] = {
    Family.NORMAL: (0.816, 0.888, 1.038, 1.212),
    Family.EXPONENTIAL: (0.980, 1.077, 1.274, 1.501),
}


def _fitted_family(family: Union[Family, str]) -> Family:
    family = Family(family)
    if family not in ASYMPTOTIC:
        raise DomainError(f"Lilliefors tests fit 'normal' or 'exponential', got {family.value!r}")
    return family


def lilliefors_statistic(sample: Sequence[float], family: Union[Family, str] = Family.NORMAL) -> float:
    """
    D_n against the fitted law.

    The Normal fit uses the sample mean and the (n - 1) standard deviation;
    the exponential fit uses rate 1 / mean.

    Raises:
        DomainError: If the sample has fewer than two values, has no spread
            (Normal) or a non-positive mean (exponential)
    """
    family = _fitted_family(family)
    values = sorted(float(v) for v in sample)
    n = len(values)
    if n < 2:
        raise DomainError(f"need at least two observations, got {n}")
    mean = sum(values) / n
    if family == Family.NORMAL:
        sigma = math.sqrt(sum((v - mean) ** 2 for v in values) / (n - 1.0))
        if sigma == 0.0:
            raise DomainError("cannot fit a Normal law to a constant sample")
        fitted = Normal(mean=mean, sigma=sigma)
    else:
        if mean <= 0.0:
            raise DomainError(f"cannot fit an exponential law to a sample with mean {mean}")
        fitted = Exponential(rate=1.0 / mean)
    distance = 0.0
    for i, value in enumerate(values, start=1):
        f = fitted.cumulative_probability(value)
        distance = max(distance, i / n - f, f - (i - 1) / n)
    return distance


def dallal_wilkinson_critical(n: int, level: float) -> float:
    """D with exp(-A D² + B D + c_n) = level for the Normal fit."""
    shifted = n + 2.78019
    a = 7.01256 * shifted
    b = 2.99587 * math.sqrt(shifted)
    c = -0.122119 + 0.974598 / math.sqrt(n) + 1.67997 / n - math.log(level)
    return (b + math.sqrt(b * b + 4.0 * a * c)) / (2.0 * a)


def stephens_exponential_critical(n: int, constant: float) -> float:
    root = math.sqrt(n)
    return constant / (root + 0.26 + 0.5 / root) + 0.2 / n


class LillieforsDistribution(ExactDistribution):
    """Critical values of D_n for Normal and exponential fits with estimated parameters."""

    name = "lilliefors"

    MIN_N, MAX_N = 4, 100

    def declare_tables(self) -> Dict[str, Table]:
        return {
            family.value: SparseKeyedTable(self.MAX_N + 1, header=LEVELS, name=f"lilliefors.{family.value}")
            for family in ASYMPTOTIC
        }

    def populate(self, name: str, table: Table) -> None:
        family = Family(name)
        for n in range(self.MIN_N, self.MAX_N + 1):
            if family == Family.NORMAL:
                row = [dallal_wilkinson_critical(n, level) for level in LEVELS]
            else:
                row = [stephens_exponential_critical(n, c) for c in ASYMPTOTIC[family]]
            table.add_row(n, row)

    def compute_probability(self, n: int, dn: float, family: Union[Family, str] = Family.NORMAL) -> Probability:
        """
        Smallest tabulated level reached by D_n.

        Returns:
            Value(level, approximate=True); Value(1.0, approximate=True) for
            n <= 3, where no test is possible; Saturated when D_n is below
            every critical value

        Raises:
            DomainError: If `family` is neither Normal nor exponential
        """
        family = _fitted_family(family)
        if n < self.MIN_N:
            return Value(1.0, approximate=True)
        if n <= self.MAX_N:
            level = self.table(family.value).critical_level(n, statistic=dn)
        else:
            level = None
            root = math.sqrt(n)
            for threshold, constant in sorted(zip(LEVELS, ASYMPTOTIC[family])):
                if dn >= constant / root:
                    level = threshold
                    break
        return self._critical_result(level, approximate=True)
