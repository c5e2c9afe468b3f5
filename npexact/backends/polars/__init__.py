"""
npexact.backends.polars
=======================

Polars-backed table snapshots: DataFrame conversion (`frames`) and file
sinks/sources (`io`).
"""
