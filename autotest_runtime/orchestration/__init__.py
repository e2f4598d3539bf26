"""Strategy-based test dispatch."""

from .strategy import (
    ProvisionedHandles,
    TestBody,
    TestContext,
    TestOrchestrator,
    TestStrategy,
    select_context,
)

__all__ = [
    "ProvisionedHandles",
    "TestBody",
    "TestContext",
    "TestOrchestrator",
    "TestStrategy",
    "select_context",
]
