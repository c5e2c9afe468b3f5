"""
npexact.stats.common
====================

Numerical building blocks shared by every distribution: special functions,
exact combinatorics and the midrank transform.
"""
