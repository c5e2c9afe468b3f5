import itertools
import math

import pytest
from scipy.stats import norm

from npexact.core.errors import DomainError
from npexact.core.results import SATURATED, UNDEFINED, NotTabulated, Value
from npexact.stats.exact.enumeration import kendall_partial_counts
from npexact.stats.exact.partial_correlation import LEVELS, partial_tau, tau_variance


@pytest.fixture(scope="module")
def partial(registry):
    return registry.get("partial_correlation")


def _tau(a, b):
    score = 0
    for i, j in itertools.combinations(range(len(a)), 2):
        score += 1 if (a[i] - a[j]) * (b[i] - b[j]) > 0 else -1
    return score / math.comb(len(a), 2)


def _direct_critical_values(m):
    z = list(range(m))
    orders = list(itertools.permutations(range(m)))
    against_z = {order: _tau(order, z) for order in orders}
    values = []
    for x in orders:
        for y in orders:
            if abs(against_z[x]) == 1.0 or abs(against_z[y]) == 1.0:
                continue
            values.append(partial_tau(_tau(x, y), against_z[x], against_z[y]))
    tails = {t: sum(v >= t - 1e-9 for v in values) / len(values) for t in set(round(v, 9) for v in values)}
    critical = []
    for level in LEVELS:
        reached = [t for t, p in tails.items() if p <= level]
        critical.append(min(reached) if reached else None)
    return critical


def test_kendall_partial_counts_cover_every_pair():
    assert sum(kendall_partial_counts(3).values()) == 36
    assert sum(kendall_partial_counts(4).values()) == 24**2
    # x = y puts every pair on the diagonal: S_xy is maximal.
    assert kendall_partial_counts(3)[(3, 3, 3)] == 1


def test_partial_tau():
    assert partial_tau(0.5, 0.0, 0.0) == 0.5
    assert partial_tau(0.6, 0.5, 0.5) == pytest.approx((0.6 - 0.25) / 0.75)
    with pytest.raises(DomainError):
        partial_tau(0.2, 1.0, 0.1)


def test_exact_cells_match_direct_enumeration(partial):
    table = partial.table("critical")
    for column, expected in enumerate(_direct_critical_values(5)):
        if expected is None:
            assert table.get(5, column) == UNDEFINED
        else:
            assert table.get(5, column) == pytest.approx(expected, abs=1e-9)


def test_three_triples_never_reach_a_level(partial):
    # τ_xy.z = 1 already has probability 1/4 when m = 3.
    assert all(cell == UNDEFINED for cell in partial.table("critical").row(3))
    assert partial.compute_probability(3, 1.0) is SATURATED


def test_normal_rows(partial):
    sd = math.sqrt(tau_variance(20))
    row = partial.table("critical").row(20)
    for cell, level in zip(row, LEVELS):
        assert cell == pytest.approx(norm.ppf(1.0 - level) * sd, abs=1e-6)


def test_lookups(partial):
    assert partial.compute_probability(20, -0.5) == Value(0.005, approximate=True)
    assert partial.compute_probability(20, 0.1) is SATURATED
    assert partial.compute_probability(25, 0.9) == Value(0.005, approximate=True)
    exact = partial.compute_probability(6, 1.0)
    assert isinstance(exact, Value) and not exact.approximate
    for m in (2, 21, 31):
        assert isinstance(partial.compute_probability(m, 0.5), NotTabulated)
