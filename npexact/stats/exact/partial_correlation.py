"""
npexact.stats.exact.partial_correlation
=======================================

Kendall's partial rank correlation of x and y with z held constant,

    τ_xy.z = (τ_xy - τ_xz τ_yz) / sqrt((1 - τ_xz²)(1 - τ_yz²))

"critical" is keyed by the number of triples m and headed by the levels
0.005 / 0.01 / 0.025 / 0.05; a cell holds the smallest |τ_xy.z| significant
at its level in the upper tail. Rows exist for m = 3..20, 25 and 30.

- m <= 6: exact, from every pair of x and y orderings. Pairs where x or y is
  perfectly (anti-)correlated with z leave τ_xy.z undefined and are dropped,
  so the tail is conditional on a defined statistic.
- larger m: τ_xy.z shares the limiting law of τ_xy, so cells are Normal
  quantiles with Var = 2(2m + 5) / (9m(m - 1)) and lookups report
  approximate values.

Examples
--------
>>> from npexact.stats.exact.partial_correlation import partial_tau
>>> partial_tau(0.5, 0.0, 0.0)
0.5
"""

from __future__ import annotations
import math
from typing import Dict, FrozenSet, Tuple

from npexact.core.errors import DomainError
from npexact.core.results import NotTabulated, Probability
from npexact.core.tables import SparseKeyedTable
from npexact.stats.exact.base import ExactDistribution, Table
from npexact.stats.exact.enumeration import kendall_partial_counts

LEVELS: Tuple[float, ...] = (0.005, 0.01, 0.025, 0.05)

SIZES: FrozenSet[int] = frozenset(list(range(3, 21)) + [25, 30])


def partial_tau(tau_xy: float, tau_xz: float, tau_yz: float) -> float:
    """
    Kendall's partial τ_xy.z from the three pairwise coefficients.

    Raises:
        DomainError: If x or y is perfectly correlated with z
    """
    denominator = (1.0 - tau_xz * tau_xz) * (1.0 - tau_yz * tau_yz)
    if denominator <= 0.0:
        raise DomainError("partial τ is undefined when |τ_xz| or |τ_yz| is 1")
    return (tau_xy - tau_xz * tau_yz) / math.sqrt(denominator)


def tau_variance(m: int) -> float:
    """Null variance of Kendall's τ for m pairs, 2(2m + 5) / (9m(m - 1))."""
    return 2.0 * (2.0 * m + 5.0) / (9.0 * m * (m - 1.0))


def partial_tau_upper_tails(m: int) -> Dict[float, float]:
    """P(T >= t) for every attainable τ_xy.z = t, over orderings where it is defined."""
    total_pairs = m * (m - 1) // 2
    masses: Dict[float, int] = {}
    for (s_xz, s_yz, s_xy), count in kendall_partial_counts(m).items():
        if abs(s_xz) == total_pairs or abs(s_yz) == total_pairs:
            continue
        t = partial_tau(s_xy / total_pairs, s_xz / total_pairs, s_yz / total_pairs)
        # Equal values reached through different score triples differ in the last bits.
        key = round(t, 12)
        masses[key] = masses.get(key, 0) + count
    defined = sum(masses.values())
    tails: Dict[float, float] = {}
    running = 0
    for t in sorted(masses, reverse=True):
        running += masses[t]
        tails[t] = running / defined
    return tails


class PartialCorrelationDistribution(ExactDistribution):
    """Upper critical values of Kendall's partial τ_xy.z."""

    name = "partial_correlation"

    MAX_EXACT = 6
    MAX_M = 30

    def declare_tables(self) -> Dict[str, Table]:
        return {"critical": SparseKeyedTable(self.MAX_M + 1, header=LEVELS, name="partial_correlation.critical")}

    def populate(self, name: str, table: Table) -> None:
        for m in sorted(SIZES):
            if m <= self.MAX_EXACT:
                tails = partial_tau_upper_tails(m)
                for column, level in enumerate(LEVELS):
                    reached = [t for t, p in tails.items() if p <= level]
                    if reached:
                        table.set(m, column, min(reached))
            else:
                sd = math.sqrt(tau_variance(m))
                table.add_row(m, [self.normal.inverse(1.0 - level) * sd for level in LEVELS])

    def compute_probability(self, m: int, tau: float) -> Probability:
        """
        Smallest tabulated level reached by |τ_xy.z|.

        Returns:
            Value(level) (approximate for m > 6), Saturated when |τ| is below
            every critical value, or NotTabulated for untabulated m
        """
        if m not in SIZES:
            return NotTabulated(f"partial correlation table covers m = 3..20, 25 and 30, got {m}")
        level = self.table("critical").critical_level(m, statistic=abs(tau) + self.numeric.epsilon)
        return self._critical_result(level, approximate=m > self.MAX_EXACT)
