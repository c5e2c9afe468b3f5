"""
npexact.stats.exact.von_neumann
===============================

Von Neumann rank test for randomness (Bartels' rank version).

With R_1..R_n the ranks of a series in observation order,

    NM  = Σ (R_i - R_(i+1))²
    RVN = NM / Σ (R_i - (n + 1) / 2)²

Small NM values point to trend, large ones to oscillation.

- `VonNeumannDistribution` ("von_neumann"): NM for 3 <= n <= 10. "left"
  holds P(NM' <= x) and "right" holds P(NM' >= x) at every attainable x whose
  tail does not exceed 0.5. A statistic that falls on an empty cell is
  resolved by scanning towards the body of the distribution; the first
  stored tail is reported as approximate and an exhausted scan as Saturated.
- `RatioVonNeumannDistribution` ("von_neumann_rvn"): left critical RVN at
  0.005 / 0.01 / 0.025 / 0.05 / 0.1 for 4 <= n <= 100. Rows up to n = 10 are
  exact; larger rows use Bartels' approximation RVN / 4 ~ Beta(p, p) with p
  matched to the exact variance. The right tail is read through the
  reflection 4 - RVN.

Examples
--------
>>> from npexact.stats.exact.von_neumann import VonNeumannDistribution
>>> d = VonNeumannDistribution()
>>> d.compute_left_probability(4, 6)
Value(probability=0.25, approximate=False)
>>> d.compute_left_probability(4, 4)
Value(probability=0.25, approximate=True)
"""

from __future__ import annotations
import math
from dataclasses import dataclass
from typing import Dict, Tuple

from npexact.core.errors import DomainError
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
from npexact.stats.common.ranks import rank
from npexact.stats.common.special import inverse_regularized_beta
from npexact.stats.exact.base import ExactDistribution, Table, approximate, two_sided
from npexact.stats.exact.enumeration import tail_probabilities, von_neumann_counts

logger = get_logger("exact.von_neumann")

LEVELS: Tuple[float, ...] = (0.005, 0.01, 0.025, 0.05, 0.1)


@dataclass(frozen=True)
class VonNeumannStatistics:
    """
    NM and RVN of a series.

    Attributes:
        n: Series length
        nm: Sum of squared successive rank differences
        rvn: NM over the sum of squared rank deviations
    """

    n: int
    nm: float
    rvn: float


def von_neumann_statistics(sample) -> VonNeumannStatistics:
    """
    Rank a series (midranks for ties) and compute NM and RVN.

    Raises:
        DomainError: If the series has fewer than two values or all of them tie
    """
    ranks = rank(sample).ranks
    n = len(ranks)
    if n < 2:
        raise DomainError(f"need at least two observations, got {n}")
    nm = sum((a - b) ** 2 for a, b in zip(ranks, ranks[1:]))
    centre = (n + 1) / 2.0
    spread = sum((r - centre) ** 2 for r in ranks)
    if spread == 0.0:
        raise DomainError("every observation is tied; RVN is undefined")
    return VonNeumannStatistics(n=n, nm=nm, rvn=nm / spread)


def rank_variance_scale(n: int) -> float:
    """Σ (R_i - (n + 1) / 2)² for untied ranks, n (n² - 1) / 12."""
    return n * (n * n - 1.0) / 12.0


def rvn_variance(n: int) -> float:
    """Var[RVN] = 4 (n - 2)(5n² - 2n - 9) / (5n (n + 1)(n - 1)²)."""
    return 4.0 * (n - 2.0) * (5.0 * n * n - 2.0 * n - 9.0) / (5.0 * n * (n + 1.0) * (n - 1.0) ** 2)


def beta_shape(n: int) -> float:
    """Shape p of the Beta(p, p) law whose 4x rescaling matches Var[RVN]."""
    return 2.0 / rvn_variance(n) - 0.5


def _combine(left: Probability, right: Probability) -> Probability:
    for side in (left, right):
        if isinstance(side, NotTabulated):
            return side
    p = two_sided(left.probability, right.probability)
    if p >= 1.0:
        return SATURATED
    flagged = any(isinstance(side, Value) and side.approximate for side in (left, right))
    return Value(p, approximate=flagged)


class VonNeumannDistribution(ExactDistribution):
    """Null distribution of NM over the n! equally likely rank orders."""

    name = "von_neumann"

    MIN_N, MAX_N = 3, 10
    # NM never exceeds (n - 1) steps of at most (n - 1)² each.
    WIDTH = (MAX_N - 1) ** 3 + 1

    def declare_tables(self) -> Dict[str, Table]:
        return {
            side: SparseKeyedTable(self.MAX_N + 1, self.WIDTH, name=f"von_neumann.{side}")
            for side in ("left", "right")
        }

    def populate(self, name: str, table: Table) -> None:
        for n in range(self.MIN_N, self.MAX_N + 1):
            left, right = tail_probabilities(von_neumann_counts(n), math.factorial(n))
            tail = left if name == "left" else right
            for nm, p in tail.items():
                if p <= 0.5:
                    table.set(n, nm, p)

    def _not_covered(self, n: int) -> NotTabulated:
        return NotTabulated(f"NM tables cover {self.MIN_N} <= n <= {self.MAX_N}, got {n}")

    def _snap(self, nm: float) -> float:
        if self.is_integral(nm):
            return float(round(nm))
        return nm

    def _resolve(self, table: SparseKeyedTable, n: int, start: int, step: int) -> Probability:
        if table.is_defined(n, start):
            return Value(table.get(n, start))
        hit = table.scan(n, start, step=step)
        if hit is None:
            return SATURATED
        (_, found), value = hit
        logger.debug("NM=%d not stored for n=%d; using the tail at NM=%d", start, n, found)
        return Value(value, approximate=True)

    def compute_left_probability(self, n: int, nm: float) -> Probability:
        """
        P(NM' <= NM), with non-integral NM rounded up.

        Returns:
            Value (approximate when the cell was found by scanning upward),
            Saturated when no stored tail lies at or above NM, or NotTabulated
            outside 3 <= n <= 10
        """
        if not (self.MIN_N <= n <= self.MAX_N):
            return self._not_covered(n)
        start = max(math.ceil(self._snap(nm)), 0)
        if start >= self.WIDTH:
            return SATURATED
        return self._resolve(self.table("left"), n, start, step=1)

    def compute_right_probability(self, n: int, nm: float) -> Probability:
        """
        P(NM' >= NM), with non-integral NM rounded down.

        Returns:
            Value (approximate when the cell was found by scanning downward),
            Saturated when no stored tail lies at or below NM, or NotTabulated
            outside 3 <= n <= 10
        """
        if not (self.MIN_N <= n <= self.MAX_N):
            return self._not_covered(n)
        start = math.floor(self._snap(nm))
        if start < 0:
            return SATURATED
        return self._resolve(self.table("right"), n, min(start, self.WIDTH - 1), step=-1)

    def compute_probability(self, n: int, nm: float, tail: Tail = Tail.DOUBLE) -> Probability:
        """One tail of NM, or twice the smaller tail capped at 1."""
        tail = Tail(tail)
        if tail == Tail.LEFT:
            return self.compute_left_probability(n, nm)
        if tail == Tail.RIGHT:
            return self.compute_right_probability(n, nm)
        return _combine(self.compute_left_probability(n, nm), self.compute_right_probability(n, nm))


class RatioVonNeumannDistribution(ExactDistribution):
    """Critical values of RVN = NM / Σ (R_i - (n + 1) / 2)²."""

    name = "von_neumann_rvn"

    MIN_N, MAX_EXACT, MAX_N = 4, 10, 100

    def declare_tables(self) -> Dict[str, Table]:
        return {"critical": SparseKeyedTable(self.MAX_N + 1, header=LEVELS, name="von_neumann_rvn.critical")}

    def populate(self, name: str, table: Table) -> None:
        for n in range(self.MIN_N, self.MAX_EXACT + 1):
            left, _ = tail_probabilities(von_neumann_counts(n), math.factorial(n))
            scale = rank_variance_scale(n)
            for column, level in enumerate(LEVELS):
                reached = [nm for nm, p in left.items() if p <= level]
                if reached:
                    table.set(n, column, max(reached) / scale)
        for n in range(self.MAX_EXACT + 1, self.MAX_N + 1):
            p = beta_shape(n)
            table.add_row(
                n, [4.0 * inverse_regularized_beta(level, p, p, self.numeric) for level in LEVELS]
            )

    def _critical(self, n: int, reached) -> Probability:
        if not (self.MIN_N <= n <= self.MAX_N):
            return NotTabulated(f"RVN table covers {self.MIN_N} <= n <= {self.MAX_N}, got {n}")
        row = self.table("critical").row(n)
        level = None
        for threshold, cell in zip(LEVELS, row):
            if cell != UNDEFINED and reached(cell):
                level = threshold
                break
        return self._critical_result(level, approximate=n > self.MAX_EXACT)

    def compute_left_probability(self, n: int, rvn: float) -> Probability:
        """Smallest tabulated level whose left critical value RVN does not exceed."""
        tolerance = self.numeric.epsilon
        return self._critical(n, lambda cell: rvn <= cell + tolerance)

    def compute_right_probability(self, n: int, rvn: float) -> Probability:
        """Smallest tabulated level at which RVN reaches the reflected critical value 4 - c."""
        tolerance = self.numeric.epsilon
        return self._critical(n, lambda cell: rvn >= 4.0 - cell - tolerance)

    def standardize(self, n: int, rvn: float) -> float:
        """Z = (RVN - 2) / sqrt(Var[RVN])."""
        return (rvn - 2.0) / math.sqrt(rvn_variance(n))

    def compute_asymptotic_probability(self, n: int, rvn: float, tail: Tail = Tail.DOUBLE) -> Probability:
        """Normal tail of the standardized RVN."""
        if n < 3:
            return NotTabulated(f"need at least three observations, got {n}")
        z = self.standardize(n, rvn)
        left = self.normal.standard_probability(z, upper=False)
        right = self.normal.standard_probability(z, upper=True)
        tail = Tail(tail)
        if tail == Tail.LEFT:
            return approximate(left)
        if tail == Tail.RIGHT:
            return approximate(right)
        return approximate(two_sided(left, right))
