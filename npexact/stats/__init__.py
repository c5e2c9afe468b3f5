"""
Probability engine for nonparametric tests.

1. **Common** (npexact.stats.common):
   Special functions, exact combinatorics and the midrank transform. Pure,
   stateless building blocks with no knowledge of any particular test.

2. **Distributions** (npexact.stats.distributions):
   Continuous and discrete families (Normal, Chi-square, Binomial, ...) used
   as asymptotic approximations.

3. **Exact** (npexact.stats.exact):
   Test-specific null distributions that own precomputed tables and fall back
   on the families above for large samples.

Example:
--------
>>> from npexact.stats.common.special import normal_cdf
>>> normal_cdf(0.0)
0.5
"""
