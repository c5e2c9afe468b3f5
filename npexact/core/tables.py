"""
npexact.core.tables
===================

Sparse keyed tables for precomputed exact distributions.

- `SparseKeyedTable`: a dense store addressed by 1 to 3 integer keys. When a
  header of threshold values (e.g. significance levels) is given, it labels
  the last dimension. Cells start out as the `UNDEFINED` sentinel.
- `ApproximateKeyTable`: rows of (real key, value) pairs matched within a
  tolerance, for statistics such as Spearman's rho whose attainable values are
  not integers.

Tables are filled once by a loader through `set` / `add_row`, then frozen;
every later mutation raises `TableFrozenError`. Reading a key outside the
declared range raises `TableKeyError` instead of clamping or wrapping.

Examples
--------
>>> from npexact.core.tables import SparseKeyedTable
>>> t = SparseKeyedTable(41, header=(0.2, 0.1, 0.05, 0.02, 0.01), name="ks")
>>> t.add_row(1, [0.9, 0.95, 0.975, 0.99, 0.995])
>>> t.get(1, 2)
0.975
>>> t.get(2, 0)
-1.0
>>> t.critical_level(1, statistic=0.98)
0.05
"""

from __future__ import annotations
import math
import operator
from typing import Iterator, List, Optional, Sequence, Tuple

from npexact.core.errors import DomainError, TableFrozenError, TableKeyError
from npexact.core.results import UNDEFINED, NOT_TABULATED, Probability, Value

Keys = Tuple[int, ...]

MAX_DIMENSIONS = 3


def _as_key(raw: object) -> int:
    if isinstance(raw, bool):
        raise TableKeyError(f"table keys must be integers, got {raw!r}")
    try:
        return operator.index(raw)  # type: ignore[arg-type]
    except TypeError:
        pass
    if isinstance(raw, float) and raw.is_integer():
        return int(raw)
    raise TableKeyError(f"table keys must be integers, got {raw!r}")


def _check_header(header: Sequence[float]) -> Tuple[float, ...]:
    values = tuple(float(h) for h in header)
    if not values:
        raise DomainError("header must contain at least one threshold")
    pairs = list(zip(values, values[1:]))
    ascending = all(a < b for a, b in pairs)
    descending = all(a > b for a, b in pairs)
    if not (ascending or descending):
        raise DomainError(f"header must be strictly monotonic, got {values}")
    return values


class SparseKeyedTable:
    """Dense-backed table of probabilities or critical values.

    Args:
        *dims: Sizes of the leading key ranges (keys run from 0 to size - 1)
        header: Optional thresholds labelling an extra, final dimension
        name: Label used in error messages and logs

    Raises:
        DomainError: If the total number of dimensions is not 1 to 3, a size is
            not positive, or the header is not strictly monotonic
    """

    def __init__(
        self,
        *dims: int,
        header: Optional[Sequence[float]] = None,
        name: str = "table",
    ) -> None:
        self.name = name
        self._header: Optional[Tuple[float, ...]] = (
            _check_header(header) if header is not None else None
        )
        shape = [int(d) for d in dims]
        if self._header is not None:
            shape.append(len(self._header))
        if not (1 <= len(shape) <= MAX_DIMENSIONS):
            raise DomainError(
                f"{name}: tables have 1 to {MAX_DIMENSIONS} dimensions, got {len(shape)}"
            )
        if any(d <= 0 for d in shape):
            raise DomainError(f"{name}: dimension sizes must be positive, got {shape}")
        self._shape: Tuple[int, ...] = tuple(shape)
        strides = [1] * len(shape)
        for i in range(len(shape) - 2, -1, -1):
            strides[i] = strides[i + 1] * shape[i + 1]
        self._strides: Tuple[int, ...] = tuple(strides)
        self._cells: List[float] = [UNDEFINED] * math.prod(shape)
        self._frozen = False

    # --- shape & header ---

    @property
    def shape(self) -> Tuple[int, ...]:
        return self._shape

    @property
    def ndim(self) -> int:
        return len(self._shape)

    @property
    def header(self) -> Optional[Tuple[float, ...]]:
        return self._header

    @property
    def frozen(self) -> bool:
        return self._frozen

    def get_header(self, index: int) -> float:
        """Return the threshold labelling column `index` of the last dimension."""
        if self._header is None:
            raise TableKeyError(f"{self.name}: table has no header")
        if not (0 <= index < len(self._header)):
            raise TableKeyError(
                f"{self.name}: header index {index} outside [0, {len(self._header)})"
            )
        return self._header[index]

    # --- addressing ---

    def _offset(self, keys: Sequence[object]) -> int:
        if len(keys) != self.ndim:
            raise TableKeyError(
                f"{self.name}: expected {self.ndim} keys, got {len(keys)}"
            )
        offset = 0
        for axis, raw in enumerate(keys):
            key = _as_key(raw)
            if not (0 <= key < self._shape[axis]):
                raise TableKeyError(
                    f"{self.name}: key {key} outside [0, {self._shape[axis]}) on axis {axis}"
                )
            offset += key * self._strides[axis]
        return offset

    def contains(self, *keys: object) -> bool:
        """True when `keys` has the right arity and lies inside the declared ranges."""
        if len(keys) != self.ndim:
            return False
        for axis, raw in enumerate(keys):
            try:
                key = _as_key(raw)
            except TableKeyError:
                return False
            if not (0 <= key < self._shape[axis]):
                return False
        return True

    # --- reads ---

    def get(self, *keys: object) -> float:
        """Return the stored cell, or `UNDEFINED` if it was never written."""
        return self._cells[self._offset(keys)]

    def is_defined(self, *keys: object) -> bool:
        return self.get(*keys) != UNDEFINED

    def lookup(self, *keys: object) -> Probability:
        """Tagged variant of `get`: unset cells become `NotTabulated`."""
        value = self.get(*keys)
        if value == UNDEFINED:
            return NOT_TABULATED
        return Value(value)

    def row(self, *leading: object) -> List[float]:
        """Return every cell of the last dimension for a fixed leading key."""
        start = self._offset(tuple(leading) + (0,))
        return self._cells[start : start + self._shape[-1]]

    def cells(self) -> Iterator[Tuple[Keys, float]]:
        """Iterate over every defined cell as (keys, value)."""
        for offset, value in enumerate(self._cells):
            if value == UNDEFINED:
                continue
            keys = []
            rest = offset
            for stride in self._strides:
                keys.append(rest // stride)
                rest %= stride
            yield tuple(keys), value

    def count_defined(self) -> int:
        return sum(1 for v in self._cells if v != UNDEFINED)

    # --- writes ---

    def _check_mutable(self) -> None:
        if self._frozen:
            raise TableFrozenError(f"{self.name}: table is read-only after loading")

    def set(self, *args: float) -> None:
        """`set(k1, [k2, [k3,]] value)`: write a single cell."""
        if not args:
            raise TableKeyError(f"{self.name}: set() needs keys and a value")
        self._check_mutable()
        *keys, value = args
        self._cells[self._offset(keys)] = float(value)

    add = set

    def add_row(self, *args: object) -> None:
        """`add_row(k1, [k2,] values)`: write a run of the last dimension from column 0.

        With a header, `values` must supply every header column.
        """
        if not args:
            raise TableKeyError(f"{self.name}: add_row() needs keys and values")
        self._check_mutable()
        *leading, values = args
        row = [float(v) for v in values]  # type: ignore[union-attr]
        width = self._shape[-1]
        if self._header is not None and len(row) != width:
            raise DomainError(
                f"{self.name}: row must supply {width} header columns, got {len(row)}"
            )
        if len(row) > width:
            raise TableKeyError(
                f"{self.name}: row of length {len(row)} exceeds width {width}"
            )
        start = self._offset(tuple(leading) + (0,))
        self._cells[start : start + len(row)] = row

    def erase(self, *keys: object) -> None:
        """Reset one cell (full keys) or one row (leading keys) to `UNDEFINED`."""
        self._check_mutable()
        if len(keys) == self.ndim:
            self._cells[self._offset(keys)] = UNDEFINED
            return
        start = self._offset(tuple(keys) + (0,))
        width = self._shape[-1]
        self._cells[start : start + width] = [UNDEFINED] * width

    def clear(self) -> None:
        self._check_mutable()
        self._cells = [UNDEFINED] * len(self._cells)

    def freeze(self) -> None:
        self._frozen = True

    # --- fallback policies ---

    def scan(
        self, *keys: object, axis: int = -1, step: int = 1
    ) -> Optional[Tuple[Keys, float]]:
        """Walk from `keys` along `axis` in direction `step` to the first defined cell.

        Returns:
            (keys, value) of the first defined cell, or None when the scan
            leaves the table without finding one.
        """
        if step == 0:
            raise DomainError(f"{self.name}: scan step must be non-zero")
        current = [_as_key(k) for k in keys]
        self._offset(current)
        axis = axis % self.ndim
        while 0 <= current[axis] < self._shape[axis]:
            value = self._cells[self._offset(current)]
            if value != UNDEFINED:
                return tuple(current), value
            current[axis] += step
        return None

    def critical_level(self, *leading: object, statistic: float) -> Optional[float]:
        """Smallest tabulated level at which `statistic` reaches the critical value.

        Columns are visited from the smallest header threshold (most
        significant) upward; the first defined cell with `statistic >= cell`
        yields its header value. Undefined columns are skipped.

        Returns:
            The header threshold, or None when no column is reached.
        """
        if self._header is None:
            raise TableKeyError(f"{self.name}: critical lookups need a header")
        width = len(self._header)
        order = range(width)
        if self._header[0] > self._header[-1]:
            order = range(width - 1, -1, -1)
        start = self._offset(tuple(leading) + (0,))
        for column in order:
            cell = self._cells[start + column]
            if cell == UNDEFINED:
                continue
            if statistic >= cell:
                return self._header[column]
        return None

    def __repr__(self) -> str:
        return (
            f"SparseKeyedTable(name={self.name!r}, shape={self._shape}, "
            f"header={self._header}, defined={self.count_defined()})"
        )


class ApproximateKeyTable:
    """Rows of real-valued keys with values, matched within a tolerance.

    Args:
        rows: Number of rows (row index runs from 0 to rows - 1)
        width: Maximum number of (key, value) pairs per row
        epsilon: Largest accepted distance between a query and a stored key
        name: Label used in error messages and logs
    """

    def __init__(self, rows: int, width: int, epsilon: float = 0.002, name: str = "table") -> None:
        if rows <= 0 or width <= 0:
            raise DomainError(f"{name}: rows and width must be positive, got {rows}x{width}")
        self.name = name
        self.epsilon = epsilon
        self._width = width
        self._keys: List[List[float]] = [[] for _ in range(rows)]
        self._values: List[List[float]] = [[] for _ in range(rows)]
        self._frozen = False

    @property
    def shape(self) -> Tuple[int, int]:
        return len(self._keys), self._width

    @property
    def frozen(self) -> bool:
        return self._frozen

    def _row(self, index: object) -> int:
        row = _as_key(index)
        if not (0 <= row < len(self._keys)):
            raise TableKeyError(f"{self.name}: row {row} outside [0, {len(self._keys)})")
        return row

    def contains(self, index: object) -> bool:
        try:
            self._row(index)
        except TableKeyError:
            return False
        return True

    def _check_mutable(self) -> None:
        if self._frozen:
            raise TableFrozenError(f"{self.name}: table is read-only after loading")

    def add_row(self, index: int, keys: Sequence[float], values: Sequence[float]) -> None:
        self._check_mutable()
        row = self._row(index)
        if len(keys) != len(values):
            raise DomainError(
                f"{self.name}: {len(keys)} keys but {len(values)} values for row {row}"
            )
        if len(keys) > self._width:
            raise TableKeyError(
                f"{self.name}: row of length {len(keys)} exceeds width {self._width}"
            )
        self._keys[row] = [float(k) for k in keys]
        self._values[row] = [float(v) for v in values]

    def erase(self, index: int) -> None:
        self._check_mutable()
        row = self._row(index)
        self._keys[row] = []
        self._values[row] = []

    def clear(self) -> None:
        self._check_mutable()
        self._keys = [[] for _ in self._keys]
        self._values = [[] for _ in self._values]

    def freeze(self) -> None:
        self._frozen = True

    def get(self, index: object, approximate: float) -> float:
        """Value stored under the first key within `epsilon` of `approximate`, else `UNDEFINED`."""
        row = self._row(index)
        for key, value in zip(self._keys[row], self._values[row]):
            if abs(key - approximate) <= self.epsilon:
                return value
        return UNDEFINED

    def lookup(self, index: object, approximate: float) -> Probability:
        value = self.get(index, approximate)
        if value == UNDEFINED:
            return NOT_TABULATED
        return Value(value)

    def keys(self, index: object) -> List[float]:
        return list(self._keys[self._row(index)])

    def cells(self) -> Iterator[Tuple[Tuple[int, float], float]]:
        """Iterate over every stored pair as ((row, key), value)."""
        for row, (keys, values) in enumerate(zip(self._keys, self._values)):
            for key, value in zip(keys, values):
                yield (row, key), value

    def count_defined(self) -> int:
        return sum(len(v) for v in self._values)

    def __repr__(self) -> str:
        return (
            f"ApproximateKeyTable(name={self.name!r}, shape={self.shape}, "
            f"epsilon={self.epsilon}, defined={self.count_defined()})"
        )
