import pytest

from npexact.core.config import RegistryConfig
from npexact.runtime.registry import DistributionRegistry


@pytest.fixture(scope="session")
def registry():
    # Tables are enumerated once per test session.
    return DistributionRegistry(RegistryConfig())
