"""Hierarchical service container."""

from .service_container import (
    API_CLIENT,
    BROWSER_MANAGER,
    CONFIG,
    REPORTER,
    Factory,
    ServiceContainer,
    ServiceProvider,
)

__all__ = [
    "API_CLIENT",
    "BROWSER_MANAGER",
    "CONFIG",
    "REPORTER",
    "Factory",
    "ServiceContainer",
    "ServiceProvider",
]
