"""
npexact.api.facade
==================

Probability facade with caller-oriented entry points.

Examples
--------
>>> from npexact.api.facade import make_distribution, cumulative_probability
>>> make_distribution("exponential", rate=2.0).cumulative_probability(0.0)
0.0
>>> round(cumulative_probability("chi_square", 3.841458820694124, degree=1), 4)
0.95
"""

from __future__ import annotations
from pathlib import Path
from typing import Any, Iterable, Optional, Union

from npexact.core.config import RegistryConfig, TableFormat
from npexact.core.names import Family
from npexact.runtime.registry import DistributionRegistry, create_registry
from npexact.stats.distributions.base import Distribution
from npexact.stats.distributions.families import create


def make_distribution(family: Union[Family, str], **parameters: Any) -> Distribution:
    """
    Create a parametric distribution.

    Parameters
    ----------
    family : Family or str
        One of the closed set of families ("normal", "binomial", ...)
    **parameters
        Family parameters by name (e.g. ``mean``, ``sigma``). Invalid values
        are ignored and the family default is kept.

    Returns
    -------
    Distribution
        A distribution exposing ``density`` and ``cumulative_probability``

    Raises
    ------
    DomainError
        If the family or a parameter name is unknown

    Examples
    --------
    >>> make_distribution("normal", mean=1.0, sigma=2.0)
    Normal(mean=1.0, sigma=2.0)
    """
    return create(family, **parameters)


def density(family: Union[Family, str], x: float, **parameters: Any) -> float:
    """
    Probability density (continuous) or mass (discrete) at ``x``.

    Parameters
    ----------
    family : Family or str
        Distribution family
    x : float
        Evaluation point; discrete families floor it
    **parameters
        Family parameters

    Returns
    -------
    float
        The density, or NaN when it is undefined at ``x``
    """
    return create(family, **parameters).density(x)


def cumulative_probability(family: Union[Family, str], x: float, **parameters: Any) -> float:
    """
    Distribution function P(X <= x).

    Parameters
    ----------
    family : Family or str
        Distribution family
    x : float
        Evaluation point
    **parameters
        Family parameters

    Returns
    -------
    float
        Probability in [0, 1], or NaN for NaN input
    """
    return create(family, **parameters).cumulative_probability(x)


def open_registry(
    table_dir: Optional[Union[str, Path]] = None,
    table_format: TableFormat = "parquet",
    preload: Iterable[str] = (),
    config: Optional[RegistryConfig] = None,
) -> DistributionRegistry:
    """
    Open a registry of test-specific distributions.

    Parameters
    ----------
    table_dir : str or Path, optional
        Directory of table snapshots; tables without a snapshot are enumerated
    table_format : {"parquet", "csv"}, default="parquet"
        Snapshot file format
    preload : iterable of str, default=()
        Distribution names to initialize immediately
    config : RegistryConfig, optional
        Full configuration; when given, the other arguments are ignored

    Returns
    -------
    DistributionRegistry
        Registry whose ``get(name)`` returns initialized distributions

    Examples
    --------
    >>> registry = open_registry()
    >>> registry.get("page").compute_exact_probability(3, 2, 28).probability
    0.05
    """
    if config is None:
        config = RegistryConfig(
            table_dir=Path(table_dir) if table_dir is not None else None,
            table_format=table_format,
            preload=tuple(preload),
        )
    return create_registry(config)
