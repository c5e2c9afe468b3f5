"""
npexact.backends.polars.frames
==============================

Conversion between lookup tables and long-format Polars DataFrames.

- `SparseKeyedTable`: one row per defined cell, columns `key_0..key_{d-1}`
  (Int64) and `value` (Float64). Header columns are addressed by index.
- `ApproximateKeyTable`: columns `row` (Int64), `key` (Float64), `value`
  (Float64), in insertion order.

Undefined cells are never written, so a round trip reproduces the table's
defined cells exactly.

Examples
--------
>>> from npexact.core.tables import SparseKeyedTable
>>> from npexact.backends.polars.frames import table_to_frame, fill_table_from_frame
>>> t = SparseKeyedTable(3, 4)
>>> t.set(1, 2, 0.25)
>>> df = table_to_frame(t)
>>> df.columns
['key_0', 'key_1', 'value']
>>> u = SparseKeyedTable(3, 4)
>>> fill_table_from_frame(u, df)
1
>>> u.get(1, 2)
0.25
"""

from __future__ import annotations
from typing import Any, Dict, List, Union, cast

import polars as pl

from npexact.core.errors import DomainError
from npexact.core.tables import ApproximateKeyTable, SparseKeyedTable

Table = Union[SparseKeyedTable, ApproximateKeyTable]

_APPROXIMATE_SCHEMA = {
    "row": pl.Int64,
    "key": pl.Float64,
    "value": pl.Float64,
}


def key_columns(ndim: int) -> List[str]:
    return [f"key_{axis}" for axis in range(ndim)]


def frame_schema(table: Table) -> Dict[str, Any]:
    """Column names and dtypes of the snapshot frame for `table`."""
    if isinstance(table, ApproximateKeyTable):
        return dict(_APPROXIMATE_SCHEMA)
    schema: Dict[str, Any] = {name: pl.Int64 for name in key_columns(table.ndim)}
    schema["value"] = pl.Float64
    return schema


def table_to_frame(table: Table) -> pl.DataFrame:
    """Long-format frame of every defined cell of `table`."""
    schema = frame_schema(table)
    columns: Dict[str, List[Any]] = {name: [] for name in schema}
    if isinstance(table, ApproximateKeyTable):
        for (row, key), value in table.cells():
            columns["row"].append(row)
            columns["key"].append(key)
            columns["value"].append(value)
    else:
        names = key_columns(table.ndim)
        for keys, value in table.cells():
            for name, key in zip(names, keys):
                columns[name].append(key)
            columns["value"].append(value)
    return pl.DataFrame(columns, schema=cast(Any, schema))


def fill_table_from_frame(table: Table, df: pl.DataFrame) -> int:
    """
    Write every row of `df` into `table`.

    Returns:
        Number of cells written

    Raises:
        DomainError: If `df` lacks a column the table layout needs
        TableKeyError: If a key falls outside the table
    """
    schema = frame_schema(table)
    missing = [name for name in schema if name not in df.columns]
    if missing:
        raise DomainError(f"{table.name}: snapshot is missing columns {missing}")
    df = df.select([pl.col(name).cast(dtype) for name, dtype in schema.items()])
    if isinstance(table, ApproximateKeyTable):
        return _fill_approximate(table, df)
    written = 0
    for record in df.iter_rows():
        *keys, value = record
        table.set(*keys, value)
        written += 1
    return written


def _fill_approximate(table: ApproximateKeyTable, df: pl.DataFrame) -> int:
    rows: Dict[int, List[List[float]]] = {}
    for row, key, value in df.iter_rows():
        keys, values = rows.setdefault(row, [[], []])
        keys.append(key)
        values.append(value)
    for row, (keys, values) in rows.items():
        table.add_row(row, keys, values)
    return df.height
