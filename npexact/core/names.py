"""
npexact.core.names
==================

Typed names shared across the package.

- `Family`: the closed set of continuous and discrete distribution families.
- `Tail`: which tail of a null distribution a p-value is taken from.

Examples
--------
>>> from npexact.core.names import Family, Tail
>>> Family.CHI_SQUARE.value
'chi_square'
>>> Family.POISSON.is_discrete
True
>>> Tail.DOUBLE.value
'double'
"""

from __future__ import annotations
from enum import Enum


class Family(str, Enum):
    """Distribution families available through the facade.

    Discrete families take integer-valued arguments (non-integers are floored);
    continuous families take any real argument.
    """

    UNIFORM = "uniform"
    BINOMIAL = "binomial"
    POISSON = "poisson"
    GEOMETRIC = "geometric"
    NORMAL = "normal"
    UNIFORM_CONTINUOUS = "uniform_continuous"
    CHI_SQUARE = "chi_square"
    EXPONENTIAL = "exponential"
    GAMMA = "gamma"
    LAPLACE = "laplace"
    LOGISTIC = "logistic"
    WEIBULL = "weibull"

    @property
    def is_discrete(self) -> bool:
        return self in _DISCRETE


_DISCRETE = frozenset({Family.UNIFORM, Family.BINOMIAL, Family.POISSON, Family.GEOMETRIC})


class Tail(str, Enum):
    """Tail of the null distribution used for a p-value.

    - LEFT: small values of the statistic are extreme
    - RIGHT: large values of the statistic are extreme
    - DOUBLE: twice the smaller one-sided tail, capped at 1
    """

    LEFT = "left"
    RIGHT = "right"
    DOUBLE = "double"
