"""
npexact.stats.exact.base
========================

Base class for test-specific null distributions.

An `ExactDistribution` declares the tables it owns, fills each one exactly
once (from a snapshot when a `TableSource` provides one, by enumeration
otherwise) and freezes them. Initialization is guarded by a lock, so
concurrent first use cannot load a table twice or expose a half-filled one.

Subclasses that own tables implement:
- `declare_tables()`: name -> empty table
- `populate(name, table)`: fill one declared table by enumeration

Examples
--------
>>> from npexact.stats.exact.runs import RunsUpDownDistribution
>>> d = RunsUpDownDistribution()
>>> d.initialized
False
>>> _ = d.initialize()
>>> d.table("exact").frozen
True
"""

from __future__ import annotations
import math
import threading
import time
from abc import ABC
from typing import ClassVar, Dict, Optional, Protocol, Union

from npexact.core.config import DEFAULT_NUMERIC, NumericConfig
from npexact.core.errors import DomainError
from npexact.core.logging import get_logger
from npexact.core.names import Tail
from npexact.core.results import NOT_TABULATED, SATURATED, Probability, Value
from npexact.core.tables import ApproximateKeyTable, SparseKeyedTable
from npexact.stats.distributions.continuous import Normal

logger = get_logger("exact")

Table = Union[SparseKeyedTable, ApproximateKeyTable]


class TableSource(Protocol):
    """A read-only provider of precomputed tables."""

    def load(self, distribution: str, table_name: str, table: Table) -> bool:
        """Fill `table` and return True, or return False when no data is available."""
        ...


class ExactDistribution(ABC):
    """
    A test statistic's null distribution backed by precomputed tables.

    Args:
        numeric: Tolerances for integrality checks and approximate keys
        source: Optional snapshot provider consulted before enumeration
    """

    name: ClassVar[str] = "exact"

    def __init__(
        self,
        numeric: Optional[NumericConfig] = None,
        source: Optional[TableSource] = None,
    ) -> None:
        self.numeric = numeric or DEFAULT_NUMERIC
        self.source = source
        self.normal = Normal()
        self._tables: Dict[str, Table] = {}
        self._lock = threading.Lock()
        self._initialized = False

    # --- table lifecycle ---

    def declare_tables(self) -> Dict[str, Table]:
        """Empty tables owned by this distribution, keyed by name."""
        return {}

    def populate(self, name: str, table: Table) -> None:
        """Fill the declared table `name` by enumeration.

        Distributions without tables never reach this; the default leaves the
        table empty.
        """

    @property
    def initialized(self) -> bool:
        return self._initialized

    def initialize(self) -> "ExactDistribution":
        """Build every declared table once; later calls return immediately."""
        if self._initialized:
            return self
        with self._lock:
            if self._initialized:
                return self
            tables = self.declare_tables()
            for table_name, table in tables.items():
                started = time.perf_counter()
                origin = "enumeration"
                if self.source is not None and self.source.load(self.name, table_name, table):
                    origin = "snapshot"
                else:
                    self.populate(table_name, table)
                table.freeze()
                logger.info(
                    "%s/%s: %d cells from %s in %.3fs",
                    self.name,
                    table_name,
                    table.count_defined(),
                    origin,
                    time.perf_counter() - started,
                )
            self._tables = tables
            self._initialized = True
        return self

    def table(self, name: str) -> Table:
        self.initialize()
        try:
            return self._tables[name]
        except KeyError:
            raise DomainError(f"{self.name} has no table named {name!r}") from None

    def tables(self) -> Dict[str, Table]:
        self.initialize()
        return dict(self._tables)

    # --- helpers shared by subclasses ---

    def is_integral(self, value: float) -> bool:
        return abs(value - round(value)) <= self.numeric.integer_tolerance

    def continuity_corrected(self, statistic: float, mean: float, sd: float, tail: Tail) -> Probability:
        """Normal tail of a discrete statistic with a half-unit continuity correction."""
        left = self.normal.standard_probability((statistic + 0.5 - mean) / sd, upper=False)
        right = self.normal.standard_probability((statistic - 0.5 - mean) / sd, upper=True)
        tail = Tail(tail)
        if tail == Tail.LEFT:
            return approximate(left)
        if tail == Tail.RIGHT:
            return approximate(right)
        return approximate(two_sided(left, right))

    def _critical_result(self, level: Optional[float], approximate: bool = False) -> Probability:
        if level is None:
            return SATURATED
        return Value(level, approximate=approximate)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(initialized={self._initialized})"


def two_sided(left: float, right: float) -> float:
    """Twice the smaller tail, capped at 1."""
    return min(min(left, right) * 2.0, 1.0)


def approximate(value: float) -> Probability:
    """Wrap an asymptotic p-value; NaN becomes `NotTabulated`."""
    if math.isnan(value):
        return NOT_TABULATED
    return Value(value, approximate=True)
