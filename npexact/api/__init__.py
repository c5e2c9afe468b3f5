"""
npexact.api - Facade
====================

Entry points for callers that only need probabilities, organized by what the
caller wants to compute rather than by the package's internal layout.

Examples
--------
>>> from npexact.api.facade import density, cumulative_probability, open_registry
>>> cumulative_probability("normal", 0.0)
0.5
>>> density("binomial", 2, n=4, p=0.5)
0.375
>>> registry = open_registry()
>>> registry.get("wilcoxon").compute_exact_probability(5, 0).probability
0.03125

Architecture
------------
- npexact.stats.distributions: parametric families behind `density` /
  `cumulative_probability`
- npexact.runtime: the registry of test-specific exact distributions
- npexact.backends: table snapshots
"""
