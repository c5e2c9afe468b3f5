"""
npexact.runtime
===============

Runtime wiring for test-specific distributions.

Key Components
--------------
- `DistributionRegistry`: one lazily initialized instance per distribution name
- `create_registry()`: registry built from `RegistryConfig` (environment by default)

Examples
--------
>>> from npexact.runtime.registry import create_registry
>>> from npexact.core.config import RegistryConfig
>>> registry = create_registry(RegistryConfig())
>>> registry.get("fisher").name
'fisher'
"""
