"""
npexact.stats.common.ranks
==========================

Midrank transform.

`rank` assigns ranks 1..N to a sample; tied values share the mean of the
ranks they would occupy if untied. The accompanying tie weight
Σ t(t² - 1) over tie groups of size t feeds the variance corrections of
rank-based tests.

Examples
--------
>>> from npexact.stats.common.ranks import rank
>>> rank([1, 1, 2])
RankResult(ranks=[1.5, 1.5, 3.0], tie_weight=6.0)
"""

from __future__ import annotations
import math
from dataclasses import dataclass, field
from typing import List, Sequence

from npexact.core.errors import DomainError


@dataclass(frozen=True)
class RankResult:
    """
    Output of the midrank transform.

    Attributes:
        ranks: One rank per input element, in input order
        tie_weight: Sum of t(t² - 1) over tie groups
    """

    ranks: List[float] = field(default_factory=list)
    tie_weight: float = 0.0

    @property
    def tie_groups(self) -> List[int]:
        """Sizes of the tie groups (groups of size 1 excluded), smallest rank first."""
        counts: dict = {}
        for r in self.ranks:
            counts[r] = counts.get(r, 0) + 1
        return [counts[r] for r in sorted(counts) if counts[r] > 1]


def rank(sample: Sequence[float]) -> RankResult:
    """
    Rank a sample with midranks for ties.

    Sort-based equivalent of repeatedly ranking the smallest unranked value:
    a tie group of size k starting at rank r receives r + (k - 1) / 2.

    Args:
        sample: Numeric values (at least one, no NaN)

    Returns:
        RankResult with ranks in input order and the tie-correction weight

    Raises:
        DomainError: If the sample is empty or contains NaN
    """
    values = [float(v) for v in sample]
    if not values:
        raise DomainError("cannot rank an empty sample")
    if any(math.isnan(v) for v in values):
        raise DomainError("cannot rank a sample containing NaN")

    order = sorted(range(len(values)), key=lambda i: values[i])
    ranks = [0.0] * len(values)
    tie_weight = 0
    start = 0
    while start < len(order):
        stop = start
        while stop + 1 < len(order) and values[order[stop + 1]] == values[order[start]]:
            stop += 1
        k = stop - start + 1
        midrank = (start + 1) + (k - 1) / 2.0
        for i in order[start : stop + 1]:
            ranks[i] = midrank
        tie_weight += k * (k * k - 1)
        start = stop + 1
    return RankResult(ranks=ranks, tie_weight=float(tie_weight))
