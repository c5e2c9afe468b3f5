"""
npexact.stats.exact.runs
========================

Runs tests for randomness.

Total number of runs ("runs"): R counts the runs in an arrangement of n1
symbols of one kind and n2 of another (keys are always ordered so that
n1 <= n2). "left" holds P(R' <= R) and "right" holds P(R' >= R), each only
where the tail does not exceed 0.5; the opposite tail fills the gaps.

Runs up and down ("runs_up_down"): V counts the monotone runs in a
permutation of n values. "exact" is keyed (n, R) and stores the left tail for
R <= LEFT_LIMITS[n] and the right tail above it.

Examples
--------
>>> from npexact.stats.exact.runs import TotalNumberOfRunsDistribution
>>> d = TotalNumberOfRunsDistribution()
>>> d.compute_left_tail_probability(2, 2, 2).probability == 1 / 3
True
"""

from __future__ import annotations
import math
from typing import Dict, Tuple

from npexact.core.logging import get_logger
from npexact.core.names import Tail
from npexact.core.results import (
    SATURATED,
    UNDEFINED,
    NotTabulated,
    Probability,
    Value,
)
from npexact.core.tables import SparseKeyedTable
from npexact.stats.common.combinatorics import exact_binomial
from npexact.stats.exact.base import ExactDistribution, Table
from npexact.stats.exact.enumeration import (
    runs_up_down_counts,
    tail_probabilities,
    total_runs_counts,
)

logger = get_logger("exact.runs")

# Largest R whose runs-up-and-down cell holds the left tail, indexed by n.
LEFT_LIMITS: Tuple[int, ...] = (
    0, 0, 0, 1, 1, 2, 3, 3, 4, 5, 5, 6, 7, 7, 8, 9, 9, 10, 11, 11, 12, 13, 13, 14, 15, 15,
)


def _defined(table: Table, *keys: int) -> float:
    if not table.contains(*keys):
        return UNDEFINED
    return table.get(*keys)


class TotalNumberOfRunsDistribution(ExactDistribution):
    """Total number of runs R in a sequence of two kinds of symbols."""

    name = "runs"

    def declare_tables(self) -> Dict[str, Table]:
        return {
            "left": SparseKeyedTable(13, 19, 13, name="runs.left"),
            "right": SparseKeyedTable(13, 18, 25, name="runs.right"),
        }

    def populate(self, name: str, table: Table) -> None:
        rows, columns, width = table.shape
        for n1 in range(1, rows):
            for n2 in range(n1, columns):
                left, right = tail_probabilities(total_runs_counts(n1, n2), exact_binomial(n1 + n2, n1))
                tail = left if name == "left" else right
                for r, p in tail.items():
                    if r < width and p <= 0.5:
                        table.set(n1, n2, r, p)

    def _resolve(self, n1: int, n2: int, own: str, r_own: int, other: str, r_other: int) -> Probability:
        value = _defined(self.table(own), n1, n2, r_own)
        complement = _defined(self.table(other), n1, n2, r_other)
        if value == UNDEFINED and complement == UNDEFINED:
            return NotTabulated(f"no runs table entry for n1={n1}, n2={n2}")
        if value == UNDEFINED:
            logger.debug("%s tail missing for n1=%d, n2=%d; using 1 - %s tail", own, n1, n2, other)
            value = 1.0 - complement
        return Value(value)

    def compute_left_tail_probability(self, a: int, b: int, r: int) -> Probability:
        """P(R' <= r) for sample sizes a and b, in either order."""
        n1, n2 = min(a, b), max(a, b)
        if n1 > 12 or (n1 < 9 and n1 + n2 > 20) or (n1 > 8 and n2 > 12):
            return NotTabulated(f"runs tables do not cover n1={n1}, n2={n2}")
        return self._resolve(n1, n2, "left", r, "right", r + 1)

    def compute_right_tail_probability(self, a: int, b: int, r: int) -> Probability:
        """P(R' >= r) for sample sizes a and b, in either order."""
        n1, n2 = min(a, b), max(a, b)
        if n1 > 12 or (n1 < 10 and n1 + n2 > 20) or (n1 > 9 and n2 > 12):
            return NotTabulated(f"runs tables do not cover n1={n1}, n2={n2}")
        return self._resolve(n1, n2, "right", r, "left", r - 1)

    def compute_asymptotic_probability(
        self, a: int, b: int, r: float, tail: Tail = Tail.DOUBLE
    ) -> Probability:
        """
        Normal approximation with continuity correction.

        E[R] = 1 + 2 n1 n2 / n, Var[R] = 2 n1 n2 (2 n1 n2 - n) / (n² (n - 1)).
        """
        n1, n2 = float(a), float(b)
        n = n1 + n2
        if n < 2:
            return NotTabulated(f"need at least two observations, got {n:g}")
        variance = 2.0 * n1 * n2 * (2.0 * n1 * n2 - n) / (n * n * (n - 1.0))
        if variance <= 0.0:
            return NotTabulated(f"degenerate runs distribution for n1={a}, n2={b}")
        mean = 1.0 + 2.0 * n1 * n2 / n
        return self.continuity_corrected(r, mean, math.sqrt(variance), tail)


class RunsUpDownDistribution(ExactDistribution):
    """Number of runs up and down V in a permutation of n distinct values."""

    name = "runs_up_down"

    MIN_N, MAX_N = 3, 25

    def declare_tables(self) -> Dict[str, Table]:
        return {"exact": SparseKeyedTable(self.MAX_N + 1, self.MAX_N, name="runs_up_down.exact")}

    def populate(self, name: str, table: Table) -> None:
        for n in range(self.MIN_N, self.MAX_N + 1):
            left, right = tail_probabilities(runs_up_down_counts(n), math.factorial(n))
            for r in range(1, n):
                table.set(n, r, left[r] if r <= LEFT_LIMITS[n] else right[r])

    def compute_exact_probability(self, n: int, r: int, left_tail: bool) -> Probability:
        """
        Exact tail of V for 3 <= n <= 25.

        The table stores one tail per cell; asking for the other tail
        (left tail above LEFT_LIMITS[n], right tail at or below it) reports
        Saturated.
        """
        if n < self.MIN_N or n > self.MAX_N or r >= n or r < 1:
            return NotTabulated(f"runs up and down table covers 1 <= R < n <= {self.MAX_N}")
        if left_tail and r > LEFT_LIMITS[n]:
            return SATURATED
        if not left_tail and r <= LEFT_LIMITS[n]:
            return SATURATED
        return self.table("exact").lookup(n, r)

    def compute_asymptotic_probability(self, n: int, r: float, tail: Tail = Tail.DOUBLE) -> Probability:
        """Normal approximation: E[V] = (2n - 1) / 3, Var[V] = (16n - 29) / 90."""
        variance = (16.0 * n - 29.0) / 90.0
        if variance <= 0.0:
            return NotTabulated(f"need at least two observations, got {n}")
        mean = (2.0 * n - 1.0) / 3.0
        return self.continuity_corrected(r, mean, math.sqrt(variance), tail)
