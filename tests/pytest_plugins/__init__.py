"""Pytest plugins for tunnelroute testing."""

from tests.pytest_plugins.markers import (
    pytest_addoption,
    pytest_collection_modifyitems,
    pytest_configure,
)
from tests.pytest_plugins.mock_services import (
    EchoService,
    RecordingInspector,
    StallingSocksServer,
)

__all__ = [
    "EchoService",
    "RecordingInspector",
    "StallingSocksServer",
    "pytest_addoption",
    "pytest_collection_modifyitems",
    "pytest_configure",
]
