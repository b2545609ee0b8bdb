"""Fixtures for API E2E tests."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from fastapi.testclient import TestClient

if TYPE_CHECKING:
    from tests.pytest_plugins.mock_services import EchoService, RecordingInspector
    from tunnelroute.core.config.store import MemoryConfigStore
    from tunnelroute.core.models.config import Settings

OPERATOR_HEADERS = {"X-Operator-Token": "operator-secret"}

# ============================================================================
# API CLIENT FIXTURES
# ============================================================================


@pytest.fixture
def status_service(
    whitelist_store: MemoryConfigStore,
    echo_service: EchoService,
    inspector: RecordingInspector,
):
    """Status service answering tunnel checks locally."""
    from tunnelroute.core.status import TunnelStatusService
    from tunnelroute.plugins.tunnel import TunnelHealthChecker

    checker = TunnelHealthChecker("https://echo.test/", client_factory=echo_service.factory)
    return TunnelStatusService(whitelist_store, checker=checker, inspector=inspector)


@pytest.fixture
def api_test_client(
    whitelist_store: MemoryConfigStore,
    settings: Settings,
    status_service,
) -> TestClient:
    """Create synchronous test client for API tests."""
    from tunnelroute.api.app import create_app

    app = create_app(store=whitelist_store, settings=settings, status_service=status_service)
    return TestClient(app)


@pytest.fixture
def operator_headers() -> dict[str, str]:
    return dict(OPERATOR_HEADERS)
