"""
npexact.runtime.registry
========================

An explicit registry of test-specific distributions.

Each registered name maps to a factory; `get(name)` builds the distribution
on first use, initializes its tables once and hands back the same instance
afterwards. The registry is passed around by reference: there are no
module-level singletons.

Examples
--------
>>> from npexact.core.config import RegistryConfig
>>> from npexact.runtime.registry import DistributionRegistry
>>> registry = DistributionRegistry(RegistryConfig())
>>> "wilcoxon" in registry.names()
True
>>> registry.get("runs_up_down") is registry.get("runs_up_down")
True
"""

from __future__ import annotations
import threading
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Type

from npexact.core.config import NumericConfig, RegistryConfig
from npexact.core.errors import DomainError
from npexact.core.logging import get_logger
from npexact.stats.exact.base import ExactDistribution, TableSource
from npexact.stats.exact.counts import (
    ControlMedianDistribution,
    FisherDistribution,
    McNemarDistribution,
)
from npexact.stats.exact.kolmogorov import (
    KolmogorovDistribution,
    KolmogorovTwoSampleDistribution,
)
from npexact.stats.exact.lilliefors import LillieforsDistribution
from npexact.stats.exact.page import PageDistribution
from npexact.stats.exact.partial_correlation import PartialCorrelationDistribution
from npexact.stats.exact.runs import RunsUpDownDistribution, TotalNumberOfRunsDistribution
from npexact.stats.exact.spearman import SpearmanDistribution
from npexact.stats.exact.von_neumann import RatioVonNeumannDistribution, VonNeumannDistribution
from npexact.stats.exact.wilcoxon import (
    WilcoxonRankSumDistribution,
    WilcoxonSignedRankDistribution,
)

logger = get_logger("registry")

Factory = Callable[..., ExactDistribution]

BUILTIN_DISTRIBUTIONS: Dict[str, Type[ExactDistribution]] = {
    cls.name: cls
    for cls in (
        WilcoxonSignedRankDistribution,
        WilcoxonRankSumDistribution,
        KolmogorovDistribution,
        KolmogorovTwoSampleDistribution,
        PageDistribution,
        SpearmanDistribution,
        TotalNumberOfRunsDistribution,
        RunsUpDownDistribution,
        McNemarDistribution,
        FisherDistribution,
        ControlMedianDistribution,
        VonNeumannDistribution,
        RatioVonNeumannDistribution,
        LillieforsDistribution,
        PartialCorrelationDistribution,
    )
}


def _snapshot_source(config: RegistryConfig) -> Optional[TableSource]:
    if config.table_dir is None:
        return None
    # Imported lazily so that registries without snapshots never touch polars.
    from npexact.backends.polars.io import SnapshotDirectory

    return SnapshotDirectory(config.table_dir, config.table_format)


class DistributionRegistry:
    """
    Lazily constructed, initialize-once distributions keyed by name.

    Args:
        config: Registry settings (validated on construction)
        source: Table source overriding the snapshot directory in `config`
    """

    def __init__(
        self,
        config: Optional[RegistryConfig] = None,
        source: Optional[TableSource] = None,
    ) -> None:
        self.config = config or RegistryConfig()
        self.config.validate()
        self.source = source if source is not None else _snapshot_source(self.config)
        self._factories: Dict[str, Factory] = dict(BUILTIN_DISTRIBUTIONS)
        self._instances: Dict[str, ExactDistribution] = {}
        self._lock = threading.Lock()

    @property
    def numeric(self) -> NumericConfig:
        return self.config.numeric

    def register(self, name: str, factory: Factory, replace: bool = False) -> None:
        """
        Add a distribution factory.

        The factory is called as `factory(numeric=..., source=...)`.

        Raises:
            RuntimeError: If `name` is taken and `replace` is False
        """
        with self._lock:
            if name in self._factories and not replace:
                raise RuntimeError(f"distribution {name!r} is already registered")
            self._factories[name] = factory
            self._instances.pop(name, None)

    def names(self) -> List[str]:
        return sorted(self._factories)

    def __contains__(self, name: object) -> bool:
        return name in self._factories

    def get(self, name: str) -> ExactDistribution:
        """The initialized distribution registered under `name`."""
        with self._lock:
            instance = self._instances.get(name)
            if instance is None:
                try:
                    factory = self._factories[name]
                except KeyError:
                    raise DomainError(
                        f"unknown distribution {name!r}; expected one of {sorted(self._factories)}"
                    ) from None
                instance = factory(numeric=self.numeric, source=self.source)
                self._instances[name] = instance
                logger.debug("created %s for %r", type(instance).__name__, name)
        return instance.initialize()

    def preload(self, names: Optional[Iterable[str]] = None) -> List[str]:
        """Initialize the given distributions (all registered ones by default)."""
        selected = list(self.names() if names is None else names)
        for name in selected:
            self.get(name)
        return selected

    def export_tables(self, directory: Optional[Path] = None, fmt: Optional[str] = None) -> Dict[str, Path]:
        """
        Write a snapshot of every table of every registered distribution.

        Args:
            directory: Target directory; defaults to the configured `table_dir`
            fmt: "parquet" or "csv"; defaults to the configured format

        Returns:
            Mapping "<distribution>/<table>" -> written file
        """
        from npexact.backends.polars.io import SnapshotDirectory

        target = directory if directory is not None else self.config.table_dir
        if target is None:
            raise RuntimeError("no export directory: pass one or set RegistryConfig.table_dir")
        snapshots = SnapshotDirectory(target, fmt or self.config.table_format)
        written: Dict[str, Path] = {}
        for name in self.names():
            for table_name, path in snapshots.save_all(name, self.get(name).tables()).items():
                written[f"{name}/{table_name}"] = path
        logger.info("exported %d tables to %s", len(written), snapshots.path)
        return written

    def __repr__(self) -> str:
        return f"DistributionRegistry(names={self.names()}, loaded={sorted(self._instances)})"


def create_registry(config: Optional[RegistryConfig] = None) -> DistributionRegistry:
    """Registry for `config` (environment settings by default) with its preload list initialized."""
    config = config or RegistryConfig.from_env()
    registry = DistributionRegistry(config)
    if config.preload:
        registry.preload(config.preload)
    return registry
