"""
npexact.backends.polars.io
==========================

Pluggable persistence for table snapshots via **sinks/sources**.

- Parquet file, CSV file sinks and sources (DataFrame <-> storage)
- `SnapshotDirectory`: one file per (distribution, table) named
  `<distribution>__<table>.<format>`; acts as the `TableSource` consulted by
  exact distributions before they fall back to enumeration

This module contains no distribution semantics, just I/O.

Doctest (smoke):
>>> import polars as pl
>>> from npexact.backends.polars.io import ParquetFileSink, ParquetFileSource
>>> df = pl.DataFrame({"key_0": [1, 2], "value": [0.5, 0.25]})
>>> ParquetFileSink("_tmp.parquet").write(df)  # doctest: +SKIP
>>> _ = ParquetFileSource("_tmp.parquet").read()  # doctest: +SKIP
"""

from __future__ import annotations
import os
from pathlib import Path
from typing import Dict, Protocol, Union

import polars as pl

from npexact.backends.polars.frames import Table, fill_table_from_frame, table_to_frame
from npexact.core.errors import DomainError
from npexact.core.logging import get_logger

logger = get_logger("backends.polars")

PathLike = Union[str, "os.PathLike[str]"]


class FrameSink(Protocol):
    """A write-only sink: DataFrame -> storage."""
    def write(self, df: pl.DataFrame) -> None: ...


class FrameSource(Protocol):
    """A read-only source: storage -> DataFrame."""
    def read(self) -> pl.DataFrame: ...


class ParquetFileSink:
    def __init__(self, path: PathLike) -> None:
        self.path = path
    def write(self, df: pl.DataFrame) -> None:
        df.write_parquet(self.path)


class CsvFileSink:
    def __init__(self, path: PathLike) -> None:
        self.path = path
    def write(self, df: pl.DataFrame) -> None:
        df.write_csv(self.path)


class ParquetFileSource:
    def __init__(self, path: PathLike) -> None:
        self.path = path
    def read(self) -> pl.DataFrame:
        return pl.read_parquet(self.path)


class CsvFileSource:
    def __init__(self, path: PathLike) -> None:
        self.path = path
    def read(self) -> pl.DataFrame:
        return pl.read_csv(self.path)


_SINKS = {"parquet": ParquetFileSink, "csv": CsvFileSink}
_SOURCES = {"parquet": ParquetFileSource, "csv": CsvFileSource}


class SnapshotDirectory:
    """
    A directory of table snapshots.

    Args:
        path: Directory holding (or receiving) the snapshot files
        fmt: "parquet" or "csv"
    """

    def __init__(self, path: PathLike, fmt: str = "parquet") -> None:
        if fmt not in _SINKS:
            raise DomainError(f"unsupported snapshot format {fmt!r}; expected one of {sorted(_SINKS)}")
        self.path = Path(path)
        self.fmt = fmt

    def path_for(self, distribution: str, table_name: str) -> Path:
        return self.path / f"{distribution}__{table_name}.{self.fmt}"

    def exists(self, distribution: str, table_name: str) -> bool:
        return self.path_for(distribution, table_name).is_file()

    def load(self, distribution: str, table_name: str, table: Table) -> bool:
        """Fill `table` from its snapshot; False when there is no snapshot file."""
        target = self.path_for(distribution, table_name)
        if not target.is_file():
            logger.warning("no snapshot for %s/%s at %s; enumerating", distribution, table_name, target)
            return False
        written = fill_table_from_frame(table, _SOURCES[self.fmt](target).read())
        logger.debug("loaded %d cells for %s/%s from %s", written, distribution, table_name, target)
        return True

    def save(self, distribution: str, table_name: str, table: Table) -> Path:
        """Write the defined cells of `table` and return the file path."""
        os.makedirs(self.path, exist_ok=True)
        target = self.path_for(distribution, table_name)
        _SINKS[self.fmt](target).write(table_to_frame(table))
        return target

    def save_all(self, distribution: str, tables: Dict[str, Table]) -> Dict[str, Path]:
        return {name: self.save(distribution, name, table) for name, table in tables.items()}

    def __repr__(self) -> str:
        return f"SnapshotDirectory(path={str(self.path)!r}, fmt={self.fmt!r})"
