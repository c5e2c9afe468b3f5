"""
npexact.stats.distributions.base
================================

Base class for the continuous and discrete distribution families.

Parameters are mutated through `set_*` methods that validate the new value
against the family's domain. An invalid value is not an error: it is
discarded, the previous value is kept, and the returned `ParameterUpdate`
reports the rejection. Constructors start from the family defaults and apply
every argument through the same setters.

Examples
--------
>>> from npexact.stats.distributions.continuous import Normal
>>> d = Normal(mean=0.0, sigma=1.0)
>>> update = d.set_sigma(-2.0)
>>> bool(update), d.sigma
(False, 1.0)
"""

from __future__ import annotations
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, ClassVar, Dict, Optional

from npexact.core.logging import get_logger
from npexact.core.names import Family

logger = get_logger("distributions")


@dataclass(frozen=True)
class ParameterUpdate:
    """
    Outcome of a parameter assignment.

    Attributes:
        name: Parameter name
        requested: Value the caller asked for
        current: Value in force after the call
        accepted: Whether the requested value was applied
    """

    name: str
    requested: Any
    current: Any
    accepted: bool

    def __bool__(self) -> bool:
        return self.accepted


class Distribution(ABC):
    """
    A probability distribution with a density (or mass) and a cumulative function.

    Subclasses set `family`, store parameters as `_<name>` attributes and list
    them in `_parameters`, in constructor order.
    """

    family: ClassVar[Family]
    _parameters: ClassVar[tuple] = ()

    @abstractmethod
    def density(self, x: float) -> float:
        """Density (continuous) or probability mass (discrete) at x."""

    @abstractmethod
    def cumulative_probability(self, x: float) -> float:
        """P(X <= x)."""

    def probability(self, x: float) -> float:
        return self.density(x)

    def parameters(self) -> Dict[str, Any]:
        return {name: getattr(self, f"_{name}") for name in self._parameters}

    def copy(self) -> "Distribution":
        return type(self)(**self.parameters())

    def _update(
        self, name: str, value: Any, valid: Callable[[Any], bool], cast: Optional[Callable[[Any], Any]] = None
    ) -> ParameterUpdate:
        attr = f"_{name}"
        accepted = _is_number(value) and valid(value)
        if accepted:
            setattr(self, attr, cast(value) if cast is not None else float(value))
        else:
            logger.debug(
                "%s: rejected %s=%r, keeping %r", type(self).__name__, name, value, getattr(self, attr)
            )
        return ParameterUpdate(name=name, requested=value, current=getattr(self, attr), accepted=accepted)

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self.parameters() == other.parameters()  # type: ignore[attr-defined]

    def __hash__(self) -> int:
        return hash((type(self).__name__, tuple(self.parameters().items())))

    def __repr__(self) -> str:
        args = ", ".join(f"{k}={v!r}" for k, v in self.parameters().items())
        return f"{type(self).__name__}({args})"


def _is_number(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    try:
        number = float(value)
    except (TypeError, ValueError):
        return False
    return not math.isnan(number)


def is_integral(value: Any) -> bool:
    """True for ints and integral floats (bools excluded)."""
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return isinstance(value, float) and value.is_integer()
