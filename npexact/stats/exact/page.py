"""
npexact.stats.exact.page
========================

Page's L statistic for ordered alternatives in a k x n two-way layout
(k blocks, n treatments ranked within each block).

Critical table ("critical", keyed (k, n), header 0.001 / 0.01 / 0.05): the
smallest L whose upper tail P(L' >= L) does not exceed the level, for
3 <= n <= 8 treatments and 2 <= k <= 12 blocks. Cells where even the largest
attainable L exceeds the level stay undefined.

Examples
--------
>>> from npexact.stats.exact.page import PageDistribution
>>> d = PageDistribution()
>>> d.compute_exact_probability(3, 2, 28)
Value(probability=0.05, approximate=False)
"""

from __future__ import annotations
import math
from typing import Dict, Optional, Tuple

from npexact.core.results import NotTabulated, Probability
from npexact.core.tables import SparseKeyedTable
from npexact.stats.exact.base import ExactDistribution, Table, approximate
from npexact.stats.exact.enumeration import page_series

LEVELS: Tuple[float, ...] = (0.001, 0.01, 0.05)


def upper_critical_value(counts: Dict[int, int], total: int, level: float) -> Optional[int]:
    """Smallest L with P(L' >= L) <= level, or None when no L qualifies."""
    tail = 0
    critical = None
    for value in sorted(counts, reverse=True):
        tail += counts[value]
        if tail / total > level:
            break
        critical = value
    return critical


class PageDistribution(ExactDistribution):
    """Page's L = Σ_j j R_j under the null of exchangeable treatments."""

    name = "page"

    MIN_N, MAX_N = 3, 8
    MIN_K, MAX_K = 2, 12

    def declare_tables(self) -> Dict[str, Table]:
        return {
            "critical": SparseKeyedTable(
                self.MAX_K + 1, self.MAX_N + 1, header=LEVELS, name="page.critical"
            )
        }

    def populate(self, name: str, table: Table) -> None:
        for n in range(self.MIN_N, self.MAX_N + 1):
            block = math.factorial(n)
            for k, counts in enumerate(page_series(n, self.MAX_K), start=1):
                if k < self.MIN_K:
                    continue
                total = block**k
                for column, level in enumerate(LEVELS):
                    critical = upper_critical_value(counts, total, level)
                    if critical is not None:
                        table.set(k, n, column, critical)

    def compute_exact_probability(self, n: int, k: int, l: float) -> Probability:
        """
        Smallest tabulated level at which L is significant.

        Args:
            n: Number of treatments (3..8)
            k: Number of blocks (2..12)
            l: Observed statistic

        Returns:
            Value(level), Saturated when L is below every critical value, or
            NotTabulated outside the tabulated sizes
        """
        if not (self.MIN_N <= n <= self.MAX_N and self.MIN_K <= k <= self.MAX_K):
            return NotTabulated(
                f"Page table covers {self.MIN_N} <= n <= {self.MAX_N}, {self.MIN_K} <= k <= {self.MAX_K}"
            )
        return self._critical_result(self.table("critical").critical_level(k, n, statistic=l))

    def compute_asymptotic_probability(self, n: int, k: int, l: float) -> Probability:
        """Upper Normal tail of the continuity-corrected standardized L."""
        numerator = 12.0 * (l - 0.5) - 3.0 * k * n * (n + 1.0) ** 2
        denominator = n * (n + 1.0) * math.sqrt(k * (n - 1.0))
        if denominator <= 0.0:
            return NotTabulated(f"degenerate layout n={n}, k={k}")
        return approximate(self.normal.standard_probability(numerator / denominator, upper=True))
