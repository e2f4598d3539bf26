"""
================================================================================
Default Service Provider
================================================================================

Binds the framework adapters to the well-known service tokens.

Registrations:
    - IConfig: the ConfigLoader instance
    - IReporter: one AllureReporter cached on the registering container
      (the session root, so one per session) and shared by its scopes
    - IApiClient: a fresh, unopened HttpClient per resolve
    - IBrowserManager: a fresh BrowserManager per resolve

Clients and browsers are bound to an event loop, so they are created per
test and opened by the fixtures that own them.

================================================================================
"""

from __future__ import annotations

from autotest_runtime.container import (
    API_CLIENT,
    BROWSER_MANAGER,
    CONFIG,
    REPORTER,
    ServiceContainer,
    ServiceProvider,
)
from autotest_runtime.report_tools import AllureReporter

from testsuites.api_testing.framework import ConfigLoader, HttpClient


class DefaultServiceProvider(ServiceProvider):
    """Registers config, reporter, API client and browser manager."""

    def __init__(self, config: ConfigLoader):
        self.config = config

    def register(self, container: ServiceContainer) -> None:
        container.register(CONFIG, self.config)
        container.register_singleton_factory(REPORTER, lambda c: AllureReporter())
        container.register_factory(API_CLIENT, lambda c: HttpClient(c.resolve(CONFIG)))
        container.register_factory(BROWSER_MANAGER, _browser_manager_factory)


def _browser_manager_factory(container: ServiceContainer):
    # Playwright is only imported when a UI test actually asks for a browser
    from testsuites.ui_testing.framework import BrowserManager

    return BrowserManager(container.resolve(CONFIG))


def authenticated_client(container: ServiceContainer) -> HttpClient:
    """Unopened HttpClient carrying the configured API token, if any."""
    config = container.resolve(CONFIG)
    client = container.resolve(API_CLIENT).clone()
    token = config.get("auth.api_token", "")
    if token:
        client.set_auth_token(token)
    return client


__all__ = [
    "DefaultServiceProvider",
    "authenticated_client",
]
