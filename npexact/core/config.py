"""
npexact.core.config
===================

Configuration objects for numerical routines and table loading.

- `NumericConfig`: convergence tolerances and iteration caps shared by the
  special functions and the approximate-key tables.
- `RegistryConfig`: where table snapshots live, which format they use, and
  which distributions to build eagerly.

Both expose `validate()`, which raises `DomainError` on inconsistent values.

Examples
--------
>>> from npexact.core.config import NumericConfig, RegistryConfig
>>> NumericConfig().max_iterations
1000
>>> cfg = RegistryConfig(preload=("wilcoxon",))
>>> cfg.validate()
"""

from __future__ import annotations
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal, Mapping, Optional, Tuple

from npexact.core.errors import DomainError

TableFormat = Literal["parquet", "csv"]

ENV_TABLE_DIR = "NPEXACT_TABLE_DIR"
ENV_TABLE_FORMAT = "NPEXACT_TABLE_FORMAT"
ENV_PRELOAD = "NPEXACT_PRELOAD"


@dataclass(frozen=True)
class NumericConfig:
    """
    Tolerances for iterative numerical routines.

    Attributes:
        epsilon: Relative convergence tolerance for series and continued fractions
        max_iterations: Hard cap on series terms / continued-fraction convergents
        approximate_key_epsilon: Matching tolerance for real-valued table keys
        integer_tolerance: Distance from an integer below which a float counts as integral
    """

    epsilon: float = 1e-9
    max_iterations: int = 1000
    approximate_key_epsilon: float = 0.002
    integer_tolerance: float = 1e-9

    def validate(self) -> None:
        if not (0 < self.epsilon < 1):
            raise DomainError(f"epsilon must be in (0, 1), got {self.epsilon}")
        if self.max_iterations < 1:
            raise DomainError(
                f"max_iterations must be positive, got {self.max_iterations}"
            )
        if self.approximate_key_epsilon < 0:
            raise DomainError(
                f"approximate_key_epsilon must be non-negative, got {self.approximate_key_epsilon}"
            )
        if self.integer_tolerance < 0:
            raise DomainError(
                f"integer_tolerance must be non-negative, got {self.integer_tolerance}"
            )


DEFAULT_NUMERIC = NumericConfig()


@dataclass
class RegistryConfig:
    """
    Settings for the distribution registry.

    Attributes:
        table_dir: Directory holding table snapshots; None means always enumerate
        table_format: Snapshot file format ("parquet" or "csv")
        preload: Distribution names to initialize when the registry is created
        numeric: Numerical tolerances handed to every distribution
    """

    table_dir: Optional[Path] = None
    table_format: TableFormat = "parquet"
    preload: Tuple[str, ...] = ()
    numeric: NumericConfig = field(default_factory=NumericConfig)

    def validate(self) -> None:
        if self.table_format not in ("parquet", "csv"):
            raise DomainError(
                f"table_format must be 'parquet' or 'csv', got {self.table_format!r}"
            )
        if self.table_dir is not None and self.table_dir.exists() and not self.table_dir.is_dir():
            raise DomainError(f"table_dir is not a directory: {self.table_dir}")
        self.numeric.validate()

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "RegistryConfig":
        """Build a config from `NPEXACT_*` environment variables."""
        env = os.environ if environ is None else environ
        table_dir = env.get(ENV_TABLE_DIR)
        preload = env.get(ENV_PRELOAD, "")
        cfg = cls(
            table_dir=Path(table_dir) if table_dir else None,
            table_format=env.get(ENV_TABLE_FORMAT, "parquet"),  # type: ignore[arg-type]
            preload=tuple(name.strip() for name in preload.split(",") if name.strip()),
        )
        cfg.validate()
        return cfg
