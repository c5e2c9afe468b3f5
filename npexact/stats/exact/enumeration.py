"""
npexact.stats.exact.enumeration
===============================

Exact null distributions by combinatorial enumeration.

Each generator returns integer counts (or exact probabilities) computed with
Python integers, so the tables built from them carry no accumulated rounding
beyond the final division.

- `signed_rank_counts`: subsets of {1..n} by their sum (Wilcoxon signed-rank)
- `rank_sum_counts`: n-subsets of {1..n+m} by their sum (Wilcoxon rank-sum)
- `kolmogorov_one_sided_tail` / `kolmogorov_critical_value`: Birnbaum-Tingey
  formula for P(D+ >= d) and its inverse
- `lattice_paths_within`: two-sample Kolmogorov-Smirnov path counting
- `page_counts`: Page's L over k blocks of n treatments
- `spearman_counts`: sum of squared rank differences over permutations
- `von_neumann_counts`: sum of squared successive differences over permutations
- `kendall_partial_counts`: Kendall scores of two orderings against a third
- `total_runs_counts`: number of runs in a two-symbol sequence
- `runs_up_down_counts`: number of runs up and down in a permutation
- `tail_probabilities`: left and right tails of a count distribution

Examples
--------
>>> from npexact.stats.exact.enumeration import signed_rank_counts, runs_up_down_counts
>>> signed_rank_counts(3)
[1, 1, 1, 2, 1, 1, 1]
>>> runs_up_down_counts(4)
{1: 2, 2: 12, 3: 10}
"""

from __future__ import annotations
import itertools
import math
from functools import lru_cache
from types import MappingProxyType
from typing import Callable, Dict, List, Mapping, Tuple

from npexact.core.errors import DomainError
from npexact.stats.common.combinatorics import binomial_or_zero, exact_binomial


def _check_size(value: int, name: str, minimum: int = 1) -> None:
    if value < minimum:
        raise DomainError(f"{name} must be at least {minimum}, got {value}")


# --- Wilcoxon ---


def signed_rank_counts(n: int) -> List[int]:
    """Number of subsets of {1..n} with each sum s = 0..n(n+1)/2."""
    _check_size(n, "n", 0)
    total = n * (n + 1) // 2
    counts = [0] * (total + 1)
    counts[0] = 1
    reach = 0
    for value in range(1, n + 1):
        reach += value
        for s in range(reach, value - 1, -1):
            counts[s] += counts[s - value]
    return counts


def rank_sum_counts(n: int, m: int) -> List[int]:
    """Number of n-subsets of {1..n+m} with each sum s = 0..n(n+2m+1)/2.

    Entries below the minimum sum n(n+1)/2 are zero.
    """
    _check_size(n, "n")
    _check_size(m, "m")
    size = n + m
    top = n * (n + 2 * m + 1) // 2
    # ways[k][s]: k-subsets of the values seen so far with sum s
    ways = [[0] * (top + 1) for _ in range(n + 1)]
    ways[0][0] = 1
    for value in range(1, size + 1):
        for k in range(min(value, n), 0, -1):
            row, prev = ways[k], ways[k - 1]
            for s in range(top, value - 1, -1):
                if prev[s - value]:
                    row[s] += prev[s - value]
    return ways[n]


# --- Kolmogorov-Smirnov ---


def kolmogorov_one_sided_tail(n: int, d: float) -> float:
    """
    P(D+ >= d) for the one-sample statistic with sample size n (Birnbaum-Tingey).

    P = d * Σ_{j=0}^{⌊n(1-d)⌋} C(n, j) (1 - d - j/n)^(n-j) (d + j/n)^(j-1)
    """
    _check_size(n, "n")
    if d <= 0.0:
        return 1.0
    if d >= 1.0:
        return 0.0
    j_max = math.floor(n * (1.0 - d) + 1e-12)
    total = 0.0
    for j in range(0, min(j_max, n) + 1):
        low = max(1.0 - d - j / n, 0.0)
        total += exact_binomial(n, j) * low ** (n - j) * (d + j / n) ** (j - 1)
    return min(max(d * total, 0.0), 1.0)


def kolmogorov_critical_value(n: int, alpha: float, iterations: int = 60) -> float:
    """
    Critical D for a two-sided level `alpha`, taken as the d with P(D+ >= d) = alpha / 2.
    """
    if not (0.0 < alpha < 1.0):
        raise DomainError(f"alpha must be in (0, 1), got {alpha}")
    target = alpha / 2.0
    low, high = 0.0, 1.0
    for _ in range(iterations):
        mid = 0.5 * (low + high)
        if kolmogorov_one_sided_tail(n, mid) > target:
            low = mid
        else:
            high = mid
    return high


def lattice_paths_within(n: int, m: int, c: int) -> int:
    """
    Number of monotone lattice paths from (0, 0) to (n, m) with |i*m - j*n| < c at every point.

    Dividing by C(n+m, n) gives P(nm * D < c) for the two-sample statistic D.
    """
    _check_size(n, "n")
    _check_size(m, "m")
    paths = [[0] * (m + 1) for _ in range(n + 1)]
    for i in range(n + 1):
        for j in range(m + 1):
            if abs(i * m - j * n) >= c:
                continue
            if i == 0 and j == 0:
                paths[i][j] = 1
                continue
            paths[i][j] = (paths[i - 1][j] if i > 0 else 0) + (paths[i][j - 1] if j > 0 else 0)
    return paths[n][m]


def two_sample_exceedance(n: int, m: int, c: int) -> float:
    """P(nm * D >= c) for the two-sample Kolmogorov-Smirnov statistic."""
    total = exact_binomial(n + m, n)
    return (total - lattice_paths_within(n, m, c)) / total


# --- Permutation statistics: Page, Spearman, von Neumann, Kendall ---


def _permutation_sums(n: int, weight: Callable[[int, int], int]) -> Dict[int, int]:
    # layers[mask] counts partial sums of weight(position, value) once the values
    # in `mask` fill positions 1..popcount(mask).
    layers: List[Dict[int, int]] = [dict() for _ in range(1 << n)]
    layers[0][0] = 1
    for mask in range(1 << n):
        current = layers[mask]
        if not current:
            continue
        position = bin(mask).count("1") + 1
        for value in range(1, n + 1):
            bit = 1 << (value - 1)
            if mask & bit:
                continue
            target = layers[mask | bit]
            step = weight(position, value)
            for s, count in current.items():
                target[s + step] = target.get(s + step, 0) + count
    return layers[(1 << n) - 1]


@lru_cache(maxsize=None)
def _page_block_counts(n: int) -> Dict[int, int]:
    return _permutation_sums(n, lambda position, value: position * value)


def _convolve(left: Dict[int, int], right: Dict[int, int]) -> Dict[int, int]:
    out: Dict[int, int] = {}
    for a, ca in left.items():
        for b, cb in right.items():
            out[a + b] = out.get(a + b, 0) + ca * cb
    return out


def page_counts(n: int, k: int) -> Dict[int, int]:
    """Counts of Page's L = Σ_j j R_j over the (n!)^k equally likely rankings."""
    _check_size(n, "n", 2)
    _check_size(k, "k")
    block = _page_block_counts(n)
    counts = dict(block)
    for _ in range(k - 1):
        counts = _convolve(counts, block)
    return counts


def page_series(n: int, k_max: int) -> List[Dict[int, int]]:
    """`page_counts(n, k)` for k = 1..k_max, reusing each convolution."""
    block = _page_block_counts(n)
    series = [dict(block)]
    for _ in range(k_max - 1):
        series.append(_convolve(series[-1], block))
    return series


def spearman_counts(n: int) -> Dict[int, int]:
    """Counts of D = Σ (i - π(i))² over the n! permutations π of 1..n."""
    _check_size(n, "n")
    return _permutation_sums(n, lambda position, value: (position - value) ** 2)


def von_neumann_counts(n: int) -> Dict[int, int]:
    """Counts of NM = Σ (π(i) - π(i+1))² over the n! permutations π of 1..n."""
    _check_size(n, "n", 2)
    return dict(_von_neumann_counts(n))


@lru_cache(maxsize=None)
def _von_neumann_counts(n: int) -> Mapping[int, int]:
    # paths[(mask, last)] counts partial NM sums over arrangements of the values
    # in `mask` ending with `last`. Replacing every value v by n + 1 - v keeps
    # NM, so only first values up to the middle are enumerated.
    paths: Dict[Tuple[int, int], Dict[int, int]] = {}
    for first in range(1, (n + 1) // 2 + 1):
        paths[(1 << (first - 1), first)] = {0: 1 if 2 * first == n + 1 else 2}
    full = (1 << n) - 1
    totals: Dict[int, int] = {}
    # Successors are supersets, so increasing masks see every state complete.
    for mask in range(1, full + 1):
        for last in range(1, n + 1):
            current = paths.pop((mask, last), None)
            if not current:
                continue
            if mask == full:
                for s, count in current.items():
                    totals[s] = totals.get(s, 0) + count
                continue
            for value in range(1, n + 1):
                bit = 1 << (value - 1)
                if mask & bit:
                    continue
                step = (last - value) ** 2
                target = paths.setdefault((mask | bit, value), {})
                for s, count in current.items():
                    target[s + step] = target.get(s + step, 0) + count
    return MappingProxyType(totals)


def kendall_partial_counts(m: int) -> Dict[Tuple[int, int, int], int]:
    """
    Counts of Kendall scores (S_xz, S_yz, S_xy) over the (m!)² orderings of x
    and y against a fixed ordering of z.

    S = concordant - discordant pairs. Each ordering is encoded by the set of
    index pairs it keeps ascending, so the discordant pairs of x and y are the
    bits where their encodings differ.
    """
    _check_size(m, "m", 2)
    pairs = list(itertools.combinations(range(m), 2))
    total = len(pairs)
    masks = []
    for order in itertools.permutations(range(m)):
        mask = 0
        for bit, (i, j) in enumerate(pairs):
            if order[i] < order[j]:
                mask |= 1 << bit
        masks.append(mask)
    scores = [2 * bin(mask).count("1") - total for mask in masks]
    counts: Dict[Tuple[int, int, int], int] = {}
    for mask_x, score_x in zip(masks, scores):
        for mask_y, score_y in zip(masks, scores):
            key = (score_x, score_y, total - 2 * bin(mask_x ^ mask_y).count("1"))
            counts[key] = counts.get(key, 0) + 1
    return counts


# --- Runs ---


def total_runs_counts(n1: int, n2: int) -> Dict[int, int]:
    """
    Counts of the total number of runs R over the C(n1+n2, n1) arrangements.

    R = 2k:   2 C(n1-1, k-1) C(n2-1, k-1)
    R = 2k+1: C(n1-1, k) C(n2-1, k-1) + C(n1-1, k-1) C(n2-1, k)
    """
    _check_size(n1, "n1")
    _check_size(n2, "n2")
    counts: Dict[int, int] = {}
    for r in range(2, n1 + n2 + 1):
        k = r // 2
        if r % 2 == 0:
            ways = 2 * binomial_or_zero(n1 - 1, k - 1) * binomial_or_zero(n2 - 1, k - 1)
        else:
            ways = binomial_or_zero(n1 - 1, k) * binomial_or_zero(n2 - 1, k - 1) + binomial_or_zero(
                n1 - 1, k - 1
            ) * binomial_or_zero(n2 - 1, k)
        if ways:
            counts[r] = ways
    return counts


def runs_up_down_counts(n: int) -> Dict[int, int]:
    """
    Counts of permutations of 1..n by their number of runs up and down.

    f(n, r) = r f(n-1, r) + 2 f(n-1, r-1) + (n-r) f(n-1, r-2), with f(2, 1) = 2.
    """
    _check_size(n, "n", 2)
    return dict(_runs_up_down_counts(n))


@lru_cache(maxsize=None)
def _runs_up_down_counts(n: int) -> Mapping[int, int]:
    if n == 2:
        return MappingProxyType({1: 2})
    previous = _runs_up_down_counts(n - 1)
    counts: Dict[int, int] = {}
    for r in range(1, n):
        ways = (
            r * previous.get(r, 0)
            + 2 * previous.get(r - 1, 0)
            + (n - r) * previous.get(r - 2, 0)
        )
        if ways:
            counts[r] = ways
    return MappingProxyType(counts)


# --- Tails ---


def tail_probabilities(counts: Mapping[int, int], total: int) -> Tuple[Dict[int, float], Dict[int, float]]:
    """Left tails P(X <= x) and right tails P(X >= x) over the support of `counts`."""
    support = sorted(counts)
    left, right = {}, {}
    running = 0
    for value in support:
        running += counts[value]
        left[value] = running / total
    running = 0
    for value in reversed(support):
        running += counts[value]
        right[value] = running / total
    return left, right
