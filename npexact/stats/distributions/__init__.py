"""
npexact.stats.distributions
===========================

Continuous and discrete distribution families used as asymptotic
approximations by the exact test distributions.
"""
