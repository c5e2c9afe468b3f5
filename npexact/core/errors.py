"""
npexact.core.errors
===================

Exception types raised for illegal input.

Numerical routines never raise for arithmetic trouble (they return NaN), and
table lookups report gaps through `npexact.core.results`; the classes below
cover the remaining cases where the caller asked for something undefined.
"""

from __future__ import annotations


class DomainError(ValueError):
    """An argument lies outside the mathematical domain of an operation."""


class TableKeyError(DomainError, IndexError):
    """A table was addressed with the wrong number of keys or an out-of-range key."""


class TableFrozenError(RuntimeError):
    """A table was mutated after its owning distribution finished loading it."""
