"""
npexact.stats.exact.kolmogorov
==============================

Kolmogorov-Smirnov statistics.

One-sample ("kolmogorov"): a critical table of D for n <= 40 at the two-sided
levels 0.2, 0.1, 0.05, 0.02 and 0.01; larger samples compare D with c / sqrt(n)
using the limiting constants. The limiting series of Kolmogorov is available
as a continuous p-value.

Two-sample ("kolmogorov_two_sample"): exact tail probabilities P(D >= c/(nm))
for n, m <= 8 by lattice-path counting, and a critical table of n²D for equal
sizes n <= 20.

Critical lookups report the smallest tabulated level reached, or `Saturated`
when D stays below every critical value.

Examples
--------
>>> from npexact.stats.exact.kolmogorov import KolmogorovTwoSampleDistribution
>>> d = KolmogorovTwoSampleDistribution()
>>> d.compute_exact_probability(3, 1.0)
Value(probability=0.1, approximate=False)
"""

from __future__ import annotations
import math
from typing import Dict, Optional, Tuple

from npexact.core.results import (
    SATURATED,
    UNDEFINED,
    NotTabulated,
    Probability,
    Value,
)
from npexact.core.tables import SparseKeyedTable
from npexact.stats.exact.base import ExactDistribution, Table, approximate
from npexact.stats.exact.enumeration import kolmogorov_critical_value, two_sample_exceedance

LEVELS: Tuple[float, ...] = (0.2, 0.1, 0.05, 0.02, 0.01)

# Limiting critical constants c with P(sqrt(n) D >= c) ~ level, aligned with LEVELS.
LIMITING_CONSTANTS: Tuple[float, ...] = (1.07, 1.22, 1.36, 1.52, 1.63)


def _asymptotic_level(d: float, scale: float) -> Optional[float]:
    for level, constant in zip(reversed(LEVELS), reversed(LIMITING_CONSTANTS)):
        if d >= constant * scale:
            return level
    return None


class KolmogorovDistribution(ExactDistribution):
    """One-sample Kolmogorov-Smirnov statistic D_n."""

    name = "kolmogorov"

    MAX_N = 40

    def declare_tables(self) -> Dict[str, Table]:
        return {"critical": SparseKeyedTable(self.MAX_N + 1, header=LEVELS, name="kolmogorov.critical")}

    def populate(self, name: str, table: Table) -> None:
        for n in range(1, self.MAX_N + 1):
            table.add_row(n, [kolmogorov_critical_value(n, level) for level in LEVELS])

    def compute_exact_probability(self, n: int, d: float) -> Probability:
        """
        Smallest tabulated level whose critical value D reaches, for n <= 40.

        Returns:
            Value(level), Saturated when D is below every critical value, or
            NotTabulated when n has no table row
        """
        table = self.table("critical")
        if not table.contains(n, 0) or table.get(n, 0) == UNDEFINED:
            return NotTabulated(f"one-sample table covers 1 <= n <= {self.MAX_N}, got {n}")
        return self._critical_result(table.critical_level(n, statistic=d))

    def compute_asymptotic_probability(self, n: int, d: float) -> Probability:
        """Level reached by D against the limiting critical values c / sqrt(n)."""
        if n < 1:
            return NotTabulated(f"sample size must be positive, got {n}")
        level = _asymptotic_level(d, 1.0 / math.sqrt(n))
        if level is None:
            return SATURATED
        return Value(level, approximate=True)

    def compute_probability(self, n: int, d: float) -> Probability:
        """Table lookup for n <= 40, limiting critical values beyond."""
        if n <= self.MAX_N:
            return self.compute_exact_probability(n, d)
        return self.compute_asymptotic_probability(n, d)

    def compute_limiting_probability(self, n: int, d: float) -> Probability:
        """
        Kolmogorov's limiting p-value P(D_n >= d) ~ 2 Σ (-1)^(k-1) exp(-2 k² λ²), λ = sqrt(n) d.
        """
        if n < 1:
            return NotTabulated(f"sample size must be positive, got {n}")
        lam = math.sqrt(n) * d
        if lam <= 0.0:
            return Value(1.0, approximate=True)
        total = 0.0
        for k in range(1, self.numeric.max_iterations + 1):
            term = math.exp(-2.0 * k * k * lam * lam)
            total += term if k % 2 == 1 else -term
            if term <= self.numeric.epsilon * max(abs(total), self.numeric.epsilon):
                break
        return approximate(min(max(2.0 * total, 0.0), 1.0))


class KolmogorovTwoSampleDistribution(ExactDistribution):
    """Two-sample Kolmogorov-Smirnov statistic D_{n,m} = sup |F_n - G_m|."""

    name = "kolmogorov_two_sample"

    MAX_EXACT = 8
    MAX_CRITICAL = 20

    def declare_tables(self) -> Dict[str, Table]:
        side = self.MAX_EXACT + 1
        return {
            "exact": SparseKeyedTable(side, side, self.MAX_EXACT**2 + 1, name="kolmogorov_two_sample.exact"),
            "critical": SparseKeyedTable(
                self.MAX_CRITICAL + 1, header=LEVELS, name="kolmogorov_two_sample.critical"
            ),
        }

    def populate(self, name: str, table: Table) -> None:
        if name == "exact":
            self._populate_exact(table)
        else:
            self._populate_critical(table)

    def _populate_exact(self, table: Table) -> None:
        for n in range(1, self.MAX_EXACT + 1):
            for m in range(1, self.MAX_EXACT + 1):
                for c in range(n * m + 1):
                    table.set(n, m, c, two_sample_exceedance(n, m, c))

    def _populate_critical(self, table: Table) -> None:
        for n in range(1, self.MAX_CRITICAL + 1):
            # P(D >= k/n) for k = 1..n; D only takes multiples of 1/n when sizes are equal.
            tails = [(n * k, two_sample_exceedance(n, n, n * k)) for k in range(1, n + 1)]
            for column, level in enumerate(LEVELS):
                for critical, tail in tails:
                    if tail <= level:
                        table.set(n, column, critical)
                        break

    def compute_exact_probability(self, n: int, d: float, m: Optional[int] = None) -> Probability:
        """
        P(D >= d) for sample sizes n and m (m defaults to n), both at most 8.

        Returns:
            Value, Saturated when d is beyond the support, or NotTabulated for
            larger samples
        """
        m = n if m is None else m
        if not (1 <= n <= self.MAX_EXACT and 1 <= m <= self.MAX_EXACT):
            return NotTabulated(f"exact two-sample table covers n, m <= {self.MAX_EXACT}")
        c = math.floor(n * m * d + self.numeric.integer_tolerance)
        table = self.table("exact")
        if c < 0:
            return Value(1.0)
        if not table.contains(n, m, c) or table.get(n, m, c) == UNDEFINED:
            return SATURATED
        return Value(table.get(n, m, c))

    def compute_asymptotic_probability(self, n: int, d: float, m: Optional[int] = None) -> Probability:
        """
        Smallest level reached by D.

        Equal sizes n <= 20 use the critical table of n²D; otherwise D is
        compared with c sqrt((n + m) / (nm)).
        """
        m = n if m is None else m
        if n < 1 or m < 1:
            return NotTabulated(f"sample sizes must be positive, got n={n}, m={m}")
        if n == m and n <= self.MAX_CRITICAL:
            table = self.table("critical")
            if table.get(n, 0) == UNDEFINED:
                return NotTabulated(f"no critical values for n={n}")
            return self._critical_result(table.critical_level(n, statistic=n * n * d))
        level = _asymptotic_level(d, math.sqrt((n + m) / (n * m)))
        if level is None:
            return SATURATED
        return Value(level, approximate=True)
