"""
npexact.core.results
====================

Tagged result type for exact and asymptotic probability lookups.

A lookup into a finite table can end three ways, and each gets its own
variant:

- `Value`: a probability (or critical level) in [0, 1].
- `NotTabulated`: the parameterization lies outside what the table covers
  (legacy sentinel `UNDEFINED = -1.0`).
- `Saturated`: the statistic is not significant at any tabulated level, i.e.
  the p-value is indistinguishable from 1 (legacy sentinel `ALL = 1.0`).

`as_float()` and `from_sentinel()` convert to and from the legacy sentinel
encoding for callers that store results in plain float arrays.

Examples
--------
>>> from npexact.core.results import Value, NOT_TABULATED, SATURATED, as_float
>>> as_float(Value(0.025))
0.025
>>> as_float(NOT_TABULATED)
-1.0
>>> SATURATED.probability
1.0
"""

from __future__ import annotations
import math
from dataclasses import dataclass
from typing import Union

UNDEFINED = -1.0
ALL = 1.0


@dataclass(frozen=True)
class Value:
    """A computed probability.

    Attributes:
        probability: The probability or tabulated significance level
        approximate: True when the value comes from an asymptotic law
    """

    probability: float
    approximate: bool = False

    def __float__(self) -> float:
        return self.probability


@dataclass(frozen=True)
class NotTabulated:
    """No exact value is available for this parameterization."""

    reason: str = ""

    @property
    def probability(self) -> float:
        return math.nan


@dataclass(frozen=True)
class Saturated:
    """The p-value is at or above 1 for every tabulated level."""

    @property
    def probability(self) -> float:
        return ALL


Probability = Union[Value, NotTabulated, Saturated]

NOT_TABULATED = NotTabulated()
SATURATED = Saturated()


def as_float(result: Probability) -> float:
    """Encode a result with the legacy sentinels (`UNDEFINED`, `ALL`)."""
    if isinstance(result, Value):
        return result.probability
    if isinstance(result, NotTabulated):
        return UNDEFINED
    return ALL


def from_sentinel(value: float, approximate: bool = False) -> Probability:
    """Decode a float that may carry a legacy sentinel.

    Only the exact sentinel `UNDEFINED` maps to `NotTabulated`; a stored 1.0 is
    a legitimate probability and stays a `Value`.
    """
    if value == UNDEFINED:
        return NOT_TABULATED
    return Value(value, approximate=approximate)


def is_defined(result: Probability) -> bool:
    return isinstance(result, Value)
