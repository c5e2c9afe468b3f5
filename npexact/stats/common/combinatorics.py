"""
npexact.stats.common.combinatorics
==================================

Exact factorials and binomial coefficients.

Small factorials come from an immutable cache; larger ones are built with
Python's arbitrary-precision integers (seeded from 11!) and only converted to
float at the very end, so binomial coefficients are exact before rounding.

Examples
--------
>>> from npexact.stats.common.combinatorics import factorial, binomial
>>> factorial(5)
120.0
>>> binomial(5, 2)
10.0
"""

from __future__ import annotations
import math
from typing import Tuple

from npexact.core.errors import DomainError

FAST_PATH_LIMIT = 20
_SEED = 11

_FACTORIALS: Tuple[int, ...] = tuple(math.prod(range(1, n + 1)) for n in range(FAST_PATH_LIMIT + 1))


def _integral(value: object, what: str) -> int:
    if isinstance(value, bool):
        raise DomainError(f"{what} must be an integer, got {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    raise DomainError(f"{what} must be an integer, got {value!r}")


def exact_factorial(n: int) -> int:
    """
    n! as an exact integer.

    Raises:
        DomainError: If n is negative or not integral
    """
    n = _integral(n, "n")
    if n < 0:
        raise DomainError(f"factorial is undefined for negative n, got {n}")
    if n <= FAST_PATH_LIMIT:
        return _FACTORIALS[n]
    value = _FACTORIALS[_SEED]
    for i in range(_SEED + 1, n + 1):
        value *= i
    return value


def _to_float(value: int) -> float:
    try:
        return float(value)
    except OverflowError:
        return math.inf


def factorial(n: int) -> float:
    """
    n! as a float.

    Exact up to 20!; beyond, exact until the final conversion. Values above
    the float range (n > 170) come back as inf.

    Raises:
        DomainError: If n is negative or not integral
    """
    return _to_float(exact_factorial(n))


def exact_binomial(m: int, n: int) -> int:
    """
    The binomial coefficient C(m, n) as an exact integer.

    Raises:
        DomainError: If n < 0 or n > m
    """
    m = _integral(m, "m")
    n = _integral(n, "n")
    if n < 0 or n > m:
        raise DomainError(f"binomial coefficient needs 0 <= n <= m, got m={m}, n={n}")
    return exact_factorial(m) // (exact_factorial(n) * exact_factorial(m - n))


def binomial(m: int, n: int) -> float:
    """
    The binomial coefficient C(m, n) as a float.

    Computed with exact integer division before the single float conversion.

    Raises:
        DomainError: If n < 0 or n > m
    """
    return _to_float(exact_binomial(m, n))


def binomial_or_zero(m: int, n: int) -> int:
    """C(m, n) with the combinatorial convention C(m, n) = 0 outside 0 <= n <= m."""
    if n < 0 or m < 0 or n > m:
        return 0
    return exact_binomial(m, n)
