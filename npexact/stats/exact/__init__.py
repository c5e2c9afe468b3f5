"""
npexact.stats.exact
===================

Null distributions of specific nonparametric test statistics.

Each distribution owns its precomputed tables (filled once by enumeration or
from a snapshot) and blends table lookups with asymptotic laws.
"""
