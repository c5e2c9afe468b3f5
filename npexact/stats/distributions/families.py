"""
npexact.stats.distributions.families
====================================

Dispatch from the closed `Family` enum to the distribution classes.

Examples
--------
>>> from npexact.stats.distributions.families import create
>>> create("normal", mean=1.0, sigma=2.0)
Normal(mean=1.0, sigma=2.0)
>>> create("poisson").mean
1.0
"""

from __future__ import annotations
from typing import Any, Dict, Type, Union

from npexact.core.errors import DomainError
from npexact.core.names import Family
from npexact.stats.distributions.base import Distribution
from npexact.stats.distributions.continuous import (
    ChiSquare,
    Exponential,
    Gamma,
    Laplace,
    Logistic,
    Normal,
    UniformContinuous,
    Weibull,
)
from npexact.stats.distributions.discrete import Binomial, Geometric, Poisson, UniformDiscrete

FAMILY_TYPES: Dict[Family, Type[Distribution]] = {
    Family.UNIFORM: UniformDiscrete,
    Family.BINOMIAL: Binomial,
    Family.POISSON: Poisson,
    Family.GEOMETRIC: Geometric,
    Family.NORMAL: Normal,
    Family.UNIFORM_CONTINUOUS: UniformContinuous,
    Family.CHI_SQUARE: ChiSquare,
    Family.EXPONENTIAL: Exponential,
    Family.GAMMA: Gamma,
    Family.LAPLACE: Laplace,
    Family.LOGISTIC: Logistic,
    Family.WEIBULL: Weibull,
}


def resolve(family: Union[Family, str]) -> Family:
    """Accept a `Family` or its string value."""
    try:
        return Family(family)
    except ValueError:
        raise DomainError(f"Unknown distribution family: {family!r}") from None


def create(family: Union[Family, str], **parameters: Any) -> Distribution:
    """
    Instantiate a distribution of the given family.

    Parameters follow the permissive policy of the setters: invalid values are
    ignored and the family default is kept. Unknown parameter names raise.

    Raises:
        DomainError: If the family or a parameter name is unknown
    """
    cls = FAMILY_TYPES[resolve(family)]
    unknown = set(parameters) - set(cls._parameters)
    if unknown:
        raise DomainError(
            f"{cls.__name__} does not take parameter(s) {sorted(unknown)}; expected {list(cls._parameters)}"
        )
    return cls(**parameters)
