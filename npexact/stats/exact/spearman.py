"""
npexact.stats.exact.spearman
============================

Spearman's rank correlation ρ = 1 - 6D / (n³ - n), with D = Σ d² the sum of
squared rank differences.

- "exact": approximate-key table; row n (2..10) maps every attainable ρ >= 0
  to its upper tail P(ρ' >= ρ), matched within `approximate_key_epsilon`.
- "critical": header 0.1 / 0.05 / 0.025 / 0.01 / 0.005 / 0.001, critical ρ
  for 11 <= n <= 30 from the Normal approximation z_(1-α) / sqrt(n - 1).
  Levels read from it are flagged approximate.

Examples
--------
>>> from npexact.stats.exact.spearman import SpearmanDistribution
>>> d = SpearmanDistribution()
>>> d.compute_exact_probability(3, 1.0).probability == 1 / 6
True
"""

from __future__ import annotations
import math
from typing import Dict, Tuple

from npexact.core.names import Tail
from npexact.core.results import NotTabulated, Probability
from npexact.core.tables import ApproximateKeyTable, SparseKeyedTable
from npexact.stats.exact.base import ExactDistribution, Table, approximate
from npexact.stats.exact.enumeration import spearman_counts

LEVELS: Tuple[float, ...] = (0.1, 0.05, 0.025, 0.01, 0.005, 0.001)


class SpearmanDistribution(ExactDistribution):
    """Null distribution of Spearman's ρ for n paired observations."""

    name = "spearman"

    MAX_EXACT = 10
    MAX_CRITICAL = 30
    WIDTH = 85

    def declare_tables(self) -> Dict[str, Table]:
        return {
            "exact": ApproximateKeyTable(
                self.MAX_EXACT + 1,
                self.WIDTH,
                epsilon=self.numeric.approximate_key_epsilon,
                name="spearman.exact",
            ),
            "critical": SparseKeyedTable(self.MAX_CRITICAL + 1, header=LEVELS, name="spearman.critical"),
        }

    def populate(self, name: str, table: Table) -> None:
        if name == "exact":
            self._populate_exact(table)
        else:
            self._populate_critical(table)

    def _populate_exact(self, table: Table) -> None:
        for n in range(2, self.MAX_EXACT + 1):
            counts = spearman_counts(n)
            total = math.factorial(n)
            scale = n**3 - n
            keys, values = [], []
            running = 0
            # Ascending D is descending ρ, so the running count is the upper tail of ρ.
            for d in sorted(counts):
                running += counts[d]
                rho = 1.0 - 6.0 * d / scale
                if rho < 0.0:
                    break
                keys.append(rho)
                values.append(running / total)
            table.add_row(n, keys, values)

    def _populate_critical(self, table: Table) -> None:
        for n in range(self.MAX_EXACT + 1, self.MAX_CRITICAL + 1):
            root = math.sqrt(n - 1.0)
            table.add_row(n, [self.normal.inverse(1.0 - level) / root for level in LEVELS])

    def compute_exact_probability(self, n: int, rho: float) -> Probability:
        """
        P(ρ' >= |ρ|) for n <= 10.

        Returns:
            Value, or NotTabulated when n has no row or |ρ| is not attainable
        """
        table = self.table("exact")
        if not table.contains(n):
            return NotTabulated(f"exact Spearman table covers 2 <= n <= {self.MAX_EXACT}, got {n}")
        return table.lookup(n, abs(rho))

    def compute_approximate_probability(self, n: int, rho: float) -> Probability:
        """
        Smallest tabulated level reached by |ρ| for 10 < n <= 30.

        The critical values are Normal quantiles, so levels come back with
        `approximate=True`.
        """
        if not (self.MAX_EXACT < n <= self.MAX_CRITICAL):
            return NotTabulated(
                f"Spearman critical table covers {self.MAX_EXACT} < n <= {self.MAX_CRITICAL}, got {n}"
            )
        level = self.table("critical").critical_level(n, statistic=abs(rho))
        return self._critical_result(level, approximate=True)

    def standardize(self, n: int, rho: float) -> float:
        """Z = ρ sqrt(n - 1)."""
        return rho * math.sqrt(n - 1.0)

    def compute_asymptotic_probability(self, n: int, rho: float, upper: bool = True) -> Probability:
        """Normal tail of the standardized statistic Z = ρ sqrt(n - 1)."""
        if n < 2:
            return NotTabulated(f"need at least two pairs, got {n}")
        return approximate(self.normal.standard_probability(self.standardize(n, rho), upper=upper))

    def compute_probability(self, n: int, rho: float, tail: Tail = Tail.RIGHT) -> Probability:
        """Exact for n <= 10, critical table up to 30, Normal beyond."""
        if n <= self.MAX_EXACT:
            return self.compute_exact_probability(n, rho)
        if n <= self.MAX_CRITICAL:
            return self.compute_approximate_probability(n, rho)
        tail = Tail(tail)
        if tail == Tail.DOUBLE:
            z = abs(self.standardize(n, rho))
            return approximate(min(2.0 * self.normal.standard_probability(z, upper=True), 1.0))
        return self.compute_asymptotic_probability(n, rho, upper=tail == Tail.RIGHT)
