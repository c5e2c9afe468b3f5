import logging
import threading

import pytest

from npexact.core.config import RegistryConfig
from npexact.core.errors import DomainError, TableFrozenError
from npexact.core.tables import SparseKeyedTable
from npexact.runtime.registry import BUILTIN_DISTRIBUTIONS, DistributionRegistry, create_registry
from npexact.stats.exact.base import ExactDistribution


class CountingDistribution(ExactDistribution):
    name = "counting"
    populated = 0

    def declare_tables(self):
        return {"cells": SparseKeyedTable(4, 4, name="counting.cells")}

    def populate(self, name, table):
        type(self).populated += 1
        table.set(1, 1, 0.5)


def test_builtin_names(registry):
    assert registry.names() == sorted(BUILTIN_DISTRIBUTIONS)
    assert len(registry.names()) == 15
    assert "page" in registry
    assert "page_l" not in registry


def test_get_returns_one_initialized_instance(registry):
    first = registry.get("runs_up_down")
    assert first.initialized
    assert registry.get("runs_up_down") is first


def test_tables_are_frozen(registry):
    table = registry.get("wilcoxon").table("exact")
    with pytest.raises(TableFrozenError):
        table.set(1, 1, 0.5)


def test_unknown_distribution():
    with pytest.raises(DomainError, match="unknown distribution"):
        DistributionRegistry().get("no_such_test")


def test_unknown_table(registry):
    with pytest.raises(DomainError):
        registry.get("page").table("exact")


def test_register_custom_factory():
    reg = DistributionRegistry()
    reg.register("counting", CountingDistribution)
    with pytest.raises(RuntimeError):
        reg.register("counting", CountingDistribution)
    reg.register("counting", CountingDistribution, replace=True)
    assert reg.get("counting").table("cells").get(1, 1) == 0.5


def test_concurrent_first_use_populates_once():
    CountingDistribution.populated = 0
    reg = DistributionRegistry()
    reg.register("counting", CountingDistribution)
    results = []
    threads = [threading.Thread(target=lambda: results.append(reg.get("counting"))) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    assert CountingDistribution.populated == 1
    assert all(instance is results[0] for instance in results)


def test_initialize_logs_origin(caplog):
    caplog.set_level(logging.INFO, logger="npexact")
    CountingDistribution().initialize()
    assert "counting/cells: 1 cells from enumeration" in caplog.text


def test_preload_subset():
    reg = DistributionRegistry()
    assert reg.preload(["mcnemar", "fisher"]) == ["mcnemar", "fisher"]
    assert "loaded=['fisher', 'mcnemar']" in repr(reg)


def test_create_registry_preloads():
    reg = create_registry(RegistryConfig(preload=("runs_up_down",)))
    assert "loaded=['runs_up_down']" in repr(reg)


def test_export_needs_a_directory():
    with pytest.raises(RuntimeError):
        DistributionRegistry().export_tables()


def test_tableless_distributions_initialize_without_tables(registry):
    assert registry.get("fisher").tables() == {}

    class EmptyDistribution(ExactDistribution):
        name = "empty"

        def declare_tables(self):
            return {"cells": SparseKeyedTable(2, name="empty.cells")}

    table = EmptyDistribution().initialize().table("cells")
    assert table.frozen
    assert table.count_defined() == 0
