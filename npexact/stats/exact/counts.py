"""
npexact.stats.exact.counts
==========================

Null distributions for count-data and placement tests. None of them needs a
table: exact values come straight from binomial coefficients.

- `McNemarDistribution`: binomial, Normal and Chi-square adjustments for the
  discordant-pair count
- `FisherDistribution`: hypergeometric tails of a 2 x 2 table with fixed
  margins, and the Chi-square approximation
- `ControlMedianDistribution`: control-median (CD) test, number W of
  treatment observations below the control median

Examples
--------
>>> from npexact.stats.exact.counts import FisherDistribution
>>> d = FisherDistribution()
>>> d.compute_upper_exact_probability(8, 4, 4, 4, 4).probability == 1 / 70
True
"""

from __future__ import annotations
import math

from npexact.core.results import NotTabulated, Probability, Value
from npexact.stats.common.combinatorics import binomial_or_zero
from npexact.stats.distributions.continuous import ChiSquare
from npexact.stats.distributions.discrete import Binomial
from npexact.stats.exact.base import ExactDistribution, approximate


class McNemarDistribution(ExactDistribution):
    """Discordant pairs in a paired 2 x 2 table; the null is Binomial(S, 1/2)."""

    name = "mcnemar"

    def binomial_adjustment(self, s: float, x: float) -> Probability:
        """P(X <= x) for X ~ Binomial(S, 1/2), S the number of discordant pairs."""
        trials = int(s)
        if trials < 1:
            return NotTabulated(f"need at least one discordant pair, got {s}")
        return Value(Binomial(n=trials, p=0.5).cumulative_probability(int(x)))

    def normal_adjustment(self, z: float) -> Probability:
        """Lower Normal tail of the standardized statistic."""
        return approximate(self.normal.standard_probability(z, upper=False))

    def chi_adjustment(self, t: float) -> Probability:
        """Chi-square(1) distribution function at T."""
        return approximate(ChiSquare(degree=1).cumulative_probability(t))


class FisherDistribution(ExactDistribution):
    """
    Fisher's exact test on a 2 x 2 table.

    With N observations, row totals n1 and n2, first-column total Y and
    top-left cell n00, the cell follows a hypergeometric law:
    P(n00 = i) = C(n1, i) C(n2, Y - i) / C(N, Y).
    """

    name = "fisher"

    def _tail(self, total: int, n1: int, n2: int, y: int, cells: range) -> Probability:
        denominator = binomial_or_zero(total, y)
        if denominator == 0:
            return NotTabulated(f"inconsistent margins N={total}, Y={y}")
        numerator = sum(binomial_or_zero(n1, i) * binomial_or_zero(n2, y - i) for i in cells)
        return Value(numerator / denominator)

    def compute_upper_exact_probability(self, total: int, n1: int, n2: int, y: int, n00: int) -> Probability:
        """P(cell >= n00): the observed table and every more extreme one above it."""
        return self._tail(total, n1, n2, y, range(n00, n1 + 1))

    def compute_lower_exact_probability(self, total: int, n1: int, n2: int, y: int, n00: int) -> Probability:
        """P(cell <= n00)."""
        return self._tail(total, n1, n2, y, range(n00, -1, -1))

    def compute_asymptotic_probability(self, q: float, freedom: int = 1) -> Probability:
        """Upper Chi-square tail P(X >= Q) with `freedom` degrees of freedom."""
        chi = ChiSquare(degree=freedom)
        if chi.degree != freedom:
            return NotTabulated(f"degrees of freedom must be a positive integer, got {freedom}")
        return approximate(chi.right_tail_probability(q))


class ControlMedianDistribution(ExactDistribution):
    """
    Control-median test: W treatment observations fall below the median of
    the control sample.

    Args (of the compute methods):
        w: Observed count
        total: Combined sample size N
        populations: Rank of the control median within the control sample
        length: Size of the control sample
    """

    name = "control_median"

    def compute_exact_probability(self, w: float, total: int, populations: int, length: int) -> Probability:
        """(length / N) C(N - length, W) C(length - 1, pop - 1) / C(N - 1, W + pop - 1)."""
        count = int(w)
        denominator = total * binomial_or_zero(total - 1, count + populations - 1)
        if denominator == 0:
            return NotTabulated(f"W={w} is outside the support for N={total}")
        numerator = (
            length
            * binomial_or_zero(total - length, count)
            * binomial_or_zero(length - 1, populations - 1)
        )
        return Value(numerator / denominator)

    def compute_asymptotic_probability(
        self, w: float, total: int, populations: int, length: int
    ) -> Probability:
        """Lower Normal tail with continuity correction."""
        mean = (total - length) * populations / (length + 1.0)
        variance = (
            populations
            * (length - populations + 1.0)
            * (total + 1.0)
            * (total - length)
            / ((length + 1.0) ** 2 * (length + 2.0))
        )
        if variance <= 0.0:
            return NotTabulated(f"degenerate control-median layout N={total}, length={length}")
        z = (w - mean + 0.5) / math.sqrt(variance)
        return approximate(self.normal.standard_probability(z, upper=False))
