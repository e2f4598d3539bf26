"""
================================================================================
Autotest Runtime
================================================================================

Runtime support layer for the automation framework.

Modules:
    - common: Shared configuration and logging utilities
    - container: Hierarchical service container
    - retry: Bounded, constant-delay retry executor
    - test_data: Entity lifecycle manager (creation, tracking, cleanup)
    - orchestration: Strategy-based test dispatch
    - report_tools: Reporter capability backed by Allure

Example:
    from autotest_runtime.container import ServiceContainer, API_CLIENT
    from autotest_runtime.test_data import EntityLifecycleManager, TestDataContext
    from autotest_runtime.retry import retry

    container = ServiceContainer()
    container.register(API_CLIENT, api_client)

    builder = EntityLifecycleManager(
        container.resolve(API_CLIENT), TestDataContext(test_id="smoke_01")
    )
    user = await retry(builder.create_user, scenario="entity_creation")
    ...
    await builder.cleanup()

================================================================================
"""

__version__ = "1.0.0"

__all__ = [
    "common",
    "container",
    "exceptions",
    "orchestration",
    "report_tools",
    "retry",
    "test_data",
]
