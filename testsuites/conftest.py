"""
================================================================================
Root Pytest Configuration
================================================================================

Registers project-wide markers and wires the runtime layer into pytest:

    - runtime_container: session root container with the default services
    - container: per-test child scope (override services freely)
    - api_client / authenticated_api_client: opened HTTP clients
    - test_data: entity lifecycle manager, cleaned up after the test
    - orchestrator: strategy dispatcher bound to the test's container
    - api_handles / ui_handles: provisioned handles for the orchestrator

================================================================================
"""

from typing import AsyncGenerator

import pytest
from loguru import logger

from autotest_runtime.common import init_logger
from autotest_runtime.container import API_CLIENT, BROWSER_MANAGER, REPORTER, ServiceContainer
from autotest_runtime.orchestration import ProvisionedHandles, TestOrchestrator
from autotest_runtime.test_data import EntityLifecycleManager, TestDataContext

from testsuites.api_testing.framework import ConfigLoader, HttpClient
from testsuites.providers import DefaultServiceProvider, authenticated_client


def pytest_configure(config):
    """Configure pytest with project-wide custom markers."""

    # Priority markers
    config.addinivalue_line(
        "markers", "P0: Critical priority tests - must pass for deployment"
    )
    config.addinivalue_line(
        "markers", "P1: High priority tests - important functionality"
    )
    config.addinivalue_line(
        "markers", "P2: Medium priority tests - edge cases and minor features"
    )

    # Test type markers
    config.addinivalue_line(
        "markers", "unit: Runtime layer tests without external services"
    )
    config.addinivalue_line(
        "markers", "smoke: Quick verification tests"
    )
    config.addinivalue_line(
        "markers", "e2e: End-to-end tests simulating user flows"
    )

    # Domain markers
    config.addinivalue_line(
        "markers", "api: API-specific tests"
    )
    config.addinivalue_line(
        "markers", "ui: UI-specific tests"
    )

    init_logger()


def pytest_collection_modifyitems(config, items):
    """Auto-mark tests by directory."""
    for item in items:
        path = str(item.fspath)
        if "unit" in path:
            item.add_marker(pytest.mark.unit)
        if "api_testing" in path:
            item.add_marker(pytest.mark.api)
        if "ui_testing" in path:
            item.add_marker(pytest.mark.ui)


# =============================================================================
# Container Fixtures
# =============================================================================

@pytest.fixture(scope="session")
def runtime_container() -> ServiceContainer:
    """
    Session root container.

    Lives for the whole worker process; tests never register into it
    directly but into their own ``container`` scope.
    """
    return ServiceContainer().add_provider(DefaultServiceProvider(ConfigLoader()))


@pytest.fixture
def container(runtime_container: ServiceContainer) -> ServiceContainer:
    """Per-test child scope of the root container."""
    return runtime_container.create_scope()


@pytest.fixture
def reporter(container: ServiceContainer):
    return container.resolve(REPORTER)


# =============================================================================
# API Fixtures
# =============================================================================

@pytest.fixture
async def api_client(container: ServiceContainer) -> AsyncGenerator[HttpClient, None]:
    """
    Opened HTTP client, also registered in the test's container scope.

    Usage:
        async def test_example(api_client):
            response = await api_client.get("/api/users")
            assert response.ok
    """
    client = container.resolve(API_CLIENT)
    async with client:
        container.register(API_CLIENT, client)
        yield client


@pytest.fixture
async def authenticated_api_client(container: ServiceContainer) -> AsyncGenerator[HttpClient, None]:
    """HTTP client sending the configured API token."""
    async with authenticated_client(container) as client:
        yield client


@pytest.fixture
async def test_data(api_client: HttpClient, request) -> AsyncGenerator[EntityLifecycleManager, None]:
    """
    Entity lifecycle manager for the current test.

    Everything created through it is deleted after the test in reverse
    creation order, whether the test passed or not.
    """
    builder = EntityLifecycleManager(api_client, TestDataContext(test_id=request.node.name))
    yield builder

    report = await builder.cleanup()
    if not report.succeeded:
        logger.warning(
            f"{len(report.failures)} of {len(report.attempted)} cleanups failed "
            f"for {request.node.name}"
        )


# =============================================================================
# Orchestration Fixtures
# =============================================================================

@pytest.fixture
def orchestrator(container: ServiceContainer) -> TestOrchestrator:
    return TestOrchestrator(container)


@pytest.fixture
def api_handles(api_client: HttpClient, authenticated_api_client: HttpClient) -> ProvisionedHandles:
    """Handles for API and AUTHENTICATED_API strategies."""
    return ProvisionedHandles(
        request=api_client,
        authenticated_request=authenticated_api_client,
    )


@pytest.fixture
async def ui_handles(
    container: ServiceContainer,
    api_handles: ProvisionedHandles,
) -> AsyncGenerator[ProvisionedHandles, None]:
    """Handles for every strategy; launches a browser."""
    async with container.resolve(BROWSER_MANAGER) as manager:
        api_handles.page = await manager.new_page()
        api_handles.authenticated_page = await manager.new_page(authenticated=True)
        yield api_handles
