"""
npexact.stats.exact.wilcoxon
============================

Null distributions of the Wilcoxon signed-rank statistic T+ and the Wilcoxon
rank-sum statistic W.

Signed-rank table ("exact", 505 x 51, keyed (R, N)): P(T+ <= R) for N <= 50,
stored only where it does not exceed 0.5. Rank-sum table ("exact",
11 x 11 x 106, keyed (n, m, R)): P(W <= R) for n, m <= 10 and R up to the
centre n(n+m+1)/2 of the distribution; the upper tail follows from the
symmetry P(W >= R) = P(W <= n(n+m+1) - R).

Large samples use the Normal approximation with continuity correction and a
tie-corrected variance.

Examples
--------
>>> from npexact.stats.exact.wilcoxon import WilcoxonSignedRankDistribution
>>> d = WilcoxonSignedRankDistribution()
>>> d.compute_exact_probability(5, 0)
Value(probability=0.03125, approximate=False)
"""

from __future__ import annotations
import math
from typing import Dict, Iterable, Iterator, Optional

from npexact.core.errors import DomainError
from npexact.core.logging import get_logger
from npexact.core.names import Tail
from npexact.core.results import (
    ALL,
    SATURATED,
    UNDEFINED,
    NotTabulated,
    Probability,
    Value,
)
from npexact.core.tables import SparseKeyedTable
from npexact.stats.common.combinatorics import exact_binomial
from npexact.stats.exact.base import ExactDistribution, Table, two_sided
from npexact.stats.exact.enumeration import rank_sum_counts, signed_rank_counts

logger = get_logger("exact.wilcoxon")


def _cumulative(counts: Iterable[int], total: int) -> Iterator[float]:
    running = 0
    for count in counts:
        running += count
        yield running / total


class WilcoxonSignedRankDistribution(ExactDistribution):
    """Wilcoxon signed-rank statistic T+ for N non-zero differences."""

    name = "wilcoxon"

    MAX_N = 50
    MAX_R = 504

    def declare_tables(self) -> Dict[str, Table]:
        return {"exact": SparseKeyedTable(self.MAX_R + 1, self.MAX_N + 1, name="wilcoxon.exact")}

    def populate(self, name: str, table: Table) -> None:
        for n in range(1, self.MAX_N + 1):
            counts = signed_rank_counts(n)
            for r, p in enumerate(_cumulative(counts, 2**n)):
                if r > self.MAX_R or p > 0.5:
                    break
                table.set(r, n, p)

    def _cell(self, r: int, n: int) -> float:
        table = self.table("exact")
        if not table.contains(r, n):
            return ALL
        value = table.get(r, n)
        return ALL if value == UNDEFINED else value

    def compute_exact_probability(self, n: int, r: float) -> Probability:
        """
        P(T+ <= r) for n non-zero differences.

        Args:
            n: Number of non-zero differences
            r: Observed statistic; a half-integer (from midranks) averages
               the two neighbouring cells

        Returns:
            Value, NotTabulated for n outside 1..50, or Saturated when r lies
            beyond the tabulated lower tail (P > 0.5)
        """
        if n > self.MAX_N or n < 1:
            return NotTabulated(f"signed-rank table covers 1 <= n <= {self.MAX_N}, got {n}")
        if self.is_integral(r):
            value = self._cell(int(round(r)), n)
        else:
            value = (self._cell(math.ceil(r), n) + self._cell(math.floor(r), n)) / 2.0
        if value == ALL:
            return SATURATED
        return Value(value)

    def compute_asymptotic_probability(
        self, n: int, r: float, ties: float = 0.0, tail: Tail = Tail.DOUBLE
    ) -> Probability:
        """
        Normal approximation to the distribution of T+.

        Args:
            n: Number of non-zero differences
            r: Observed statistic
            ties: Tie weight Σ t(t² - 1) over tie groups of absolute differences
            tail: Which tail to report
        """
        mean = n * (n + 1.0) / 4.0
        variance = n * (n + 1.0) * (2.0 * n + 1.0) / 24.0 - ties / 48.0
        if variance <= 0.0:
            return NotTabulated(f"non-positive variance for n={n}, ties={ties}")
        return self.continuity_corrected(r, mean, math.sqrt(variance), tail)

    def find_critical_value(self, n: int, alpha: float) -> Optional[int]:
        """Largest R with P(T+ <= R) <= alpha, or None when even R = 0 exceeds alpha."""
        if n > self.MAX_N or n < 1:
            raise DomainError(f"signed-rank table covers 1 <= n <= {self.MAX_N}, got {n}")
        table = self.table("exact")
        critical = None
        for r in range(self.MAX_R + 1):
            value = table.get(r, n)
            if value == UNDEFINED or value > alpha:
                break
            critical = r
        return critical


class WilcoxonRankSumDistribution(ExactDistribution):
    """Wilcoxon rank-sum statistic W: sum of the ranks of a sample of size n among n + m."""

    name = "wilcoxon_rank_sum"

    MAX_SIZE = 10
    MAX_R = 105

    def declare_tables(self) -> Dict[str, Table]:
        side = self.MAX_SIZE + 1
        return {"exact": SparseKeyedTable(side, side, self.MAX_R + 1, name="wilcoxon_rank_sum.exact")}

    def populate(self, name: str, table: Table) -> None:
        for n in range(1, self.MAX_SIZE + 1):
            for m in range(1, self.MAX_SIZE + 1):
                total = exact_binomial(n + m, n)
                centre = self.centre(n, m)
                for r, p in enumerate(_cumulative(rank_sum_counts(n, m), total)):
                    if r > centre:
                        break
                    table.set(n, m, r, p)

    @staticmethod
    def centre(n: int, m: int) -> int:
        """floor(n(n+m+1)/2), the last tabulated R for sizes (n, m)."""
        return n * (n + m + 1) // 2

    def _in_range(self, n: int, m: int) -> bool:
        return 1 <= n <= self.MAX_SIZE and 1 <= m <= self.MAX_SIZE

    def compute_left_probability(self, n: int, m: int, r: int) -> Probability:
        """P(W <= r); NotTabulated outside the table or above the centre."""
        if not self._in_range(n, m) or r > self.MAX_R:
            return NotTabulated(f"rank-sum table covers n, m <= {self.MAX_SIZE}")
        if r < 0:
            return Value(0.0)
        return self.table("exact").lookup(n, m, r)

    def compute_right_probability(self, n: int, m: int, r: int) -> Probability:
        """P(W >= r) via the symmetry of W; NotTabulated at or below the centre."""
        if not self._in_range(n, m) or r > self.MAX_R:
            return NotTabulated(f"rank-sum table covers n, m <= {self.MAX_SIZE}")
        if r <= self.centre(n, m):
            return NotTabulated("upper tail is tabulated only above the centre")
        mirrored = n * (n + m + 1) - r
        if mirrored < 0:
            return Value(0.0)
        return self.table("exact").lookup(n, m, mirrored)

    def compute_exact_probabilities(self, n: int, m: int, r: int) -> Dict[Tail, Probability]:
        """
        Left, right and double-tailed exact p-values for W = r.

        A tail missing from the table is recovered as 1 minus the opposite
        tail at the neighbouring value.
        """
        left = self.compute_left_probability(n, m, r)
        right = self.compute_right_probability(n, m, r)
        if not isinstance(left, Value):
            beyond = self.compute_right_probability(n, m, r + 1)
            if isinstance(beyond, Value):
                logger.debug("left tail recovered from the right tail at W=%s", r + 1)
                left = Value(1.0 - beyond.probability)
        if not isinstance(right, Value):
            below = self.compute_left_probability(n, m, r - 1)
            if isinstance(below, Value):
                logger.debug("right tail recovered from the left tail at W=%s", r - 1)
                right = Value(1.0 - below.probability)
        if isinstance(left, Value) and isinstance(right, Value):
            double: Probability = Value(two_sided(left.probability, right.probability))
        else:
            double = NotTabulated(f"rank-sum table covers n, m <= {self.MAX_SIZE}")
        return {Tail.LEFT: left, Tail.RIGHT: right, Tail.DOUBLE: double}

    def compute_asymptotic_probability(
        self, n: int, m: int, w: float, ties: float = 0.0, tail: Tail = Tail.DOUBLE
    ) -> Probability:
        """
        Normal approximation to W with continuity correction.

        Args:
            n: Size of the sample whose ranks are summed
            m: Size of the other sample
            w: Observed rank sum
            ties: Tie weight Σ t(t² - 1) over tie groups in the pooled sample
            tail: Which tail to report
        """
        size = n + m
        mean = n * (size + 1.0) / 2.0
        variance = n * m * (size + 1.0) / 12.0
        if size > 1:
            variance -= n * m * ties / (12.0 * size * (size - 1.0))
        if variance <= 0.0:
            return NotTabulated(f"non-positive variance for n={n}, m={m}, ties={ties}")
        return self.continuity_corrected(w, mean, math.sqrt(variance), tail)

    def find_critical_value(self, n: int, m: int, alpha: float) -> int:
        """
        Two-sided critical value of U = W - m(m+1)/2 for the sample of size m.

        Returns the smallest u with P(U <= u) >= alpha / 2.
        """
        if not self._in_range(n, m):
            raise DomainError(f"rank-sum table covers n, m <= {self.MAX_SIZE}, got n={n}, m={m}")
        table = self.table("exact")
        minimum = m * (m + 1) // 2
        target = alpha / 2.0
        u = 0
        while minimum + u <= self.centre(m, n):
            if table.get(m, n, minimum + u) >= target:
                return u
            u += 1
        return u

    def inverse_find_critical_value(self, n: int, m: int, u: int) -> Probability:
        """Two-sided p-value 2 P(U <= u - 1) for the sample of size m, capped at 1."""
        if not self._in_range(n, m):
            raise DomainError(f"rank-sum table covers n, m <= {self.MAX_SIZE}, got n={n}, m={m}")
        if u < 1:
            return Value(0.0)
        r = m * (m + 1) // 2 + u - 1
        if r > self.centre(m, n):
            return SATURATED
        return Value(min(2.0 * self.table("exact").get(m, n, r), 1.0))
