"""
Test data lifecycle: creation through factories, tracking and cleanup.
"""

from .lifecycle import (
    CleanupReport,
    Entity,
    EntityFactory,
    EntityLifecycleManager,
    TestDataContext,
)
from .payloads import OrderPayloadFactory, ProductPayloadFactory, UserPayloadFactory

__all__ = [
    "CleanupReport",
    "Entity",
    "EntityFactory",
    "EntityLifecycleManager",
    "TestDataContext",
    "OrderPayloadFactory",
    "ProductPayloadFactory",
    "UserPayloadFactory",
]
