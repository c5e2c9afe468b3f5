import logging

import polars as pl
import pytest

from npexact.backends.polars.frames import fill_table_from_frame, frame_schema, table_to_frame
from npexact.backends.polars.io import CsvFileSink, CsvFileSource, SnapshotDirectory
from npexact.core.config import RegistryConfig
from npexact.core.errors import DomainError
from npexact.core.tables import ApproximateKeyTable, SparseKeyedTable
from npexact.runtime.registry import DistributionRegistry


def _critical_table():
    table = SparseKeyedTable(4, header=(0.1, 0.05), name="demo.critical")
    table.add_row(2, [1.5, 2.5])
    table.set(3, 0, 4.0)
    return table


def test_sparse_frame_layout():
    df = table_to_frame(_critical_table())
    assert df.columns == ["key_0", "key_1", "value"]
    assert df.schema["key_0"] == pl.Int64
    assert df.height == 3
    assert df.filter(pl.col("key_0") == 2)["value"].to_list() == [1.5, 2.5]


def test_approximate_frame_layout():
    table = ApproximateKeyTable(3, 4, epsilon=0.01)
    table.add_row(2, [1.0, 0.5], [0.1, 0.4])
    df = table_to_frame(table)
    assert list(frame_schema(table)) == ["row", "key", "value"]
    assert df.rows() == [(2, 1.0, 0.1), (2, 0.5, 0.4)]
    copy = ApproximateKeyTable(3, 4, epsilon=0.01)
    assert fill_table_from_frame(copy, df) == 2
    assert copy.get(2, 0.501) == 0.4


def test_missing_columns_are_rejected():
    with pytest.raises(DomainError, match="missing columns"):
        fill_table_from_frame(SparseKeyedTable(3, 3), pl.DataFrame({"key_0": [1], "value": [0.5]}))


def test_csv_sink_and_source(tmp_path):
    target = tmp_path / "frame.csv"
    CsvFileSink(target).write(pl.DataFrame({"key_0": [1, 2], "value": [0.5, 0.25]}))
    assert CsvFileSource(target).read()["value"].to_list() == [0.5, 0.25]


@pytest.mark.parametrize("fmt", ["parquet", "csv"])
def test_snapshot_round_trip(tmp_path, fmt):
    snapshots = SnapshotDirectory(tmp_path / "tables", fmt)
    path = snapshots.save("demo", "critical", _critical_table())
    assert path.name == f"demo__critical.{fmt}"
    assert snapshots.exists("demo", "critical")
    restored = SnapshotDirectory(tmp_path / "tables", fmt)
    table = SparseKeyedTable(4, header=(0.1, 0.05))
    assert restored.load("demo", "critical", table)
    assert list(table.cells()) == list(_critical_table().cells())


def test_missing_snapshot_falls_back(tmp_path, caplog):
    caplog.set_level(logging.WARNING, logger="npexact")
    snapshots = SnapshotDirectory(tmp_path)
    assert not snapshots.load("demo", "critical", SparseKeyedTable(4, 2))
    assert "no snapshot for demo/critical" in caplog.text


def test_unsupported_format(tmp_path):
    with pytest.raises(DomainError):
        SnapshotDirectory(tmp_path, "json")


def test_registry_reads_exported_tables(registry, tmp_path, caplog):
    written = registry.export_tables(tmp_path, "parquet")
    assert "wilcoxon/exact" in written
    assert written["spearman/exact"].exists()

    caplog.set_level(logging.INFO, logger="npexact")
    loaded = DistributionRegistry(RegistryConfig(table_dir=tmp_path))
    page = loaded.get("page")
    assert "page/critical" in caplog.text and "from snapshot" in caplog.text
    assert list(page.table("critical").cells()) == list(registry.get("page").table("critical").cells())
    assert page.compute_exact_probability(3, 2, 28) == registry.get("page").compute_exact_probability(3, 2, 28)
    spearman = loaded.get("spearman")
    assert spearman.compute_exact_probability(5, 0.9) == registry.get("spearman").compute_exact_probability(5, 0.9)
