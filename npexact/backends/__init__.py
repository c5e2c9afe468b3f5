"""
npexact.backends
================

Storage backends for precomputed tables.
"""
