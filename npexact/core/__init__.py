"""
npexact.core
============

Infrastructure shared by every distribution: typed names, the tagged result
type, error classes, configuration, logging and the sparse keyed tables that
hold precomputed exact distributions.
"""
