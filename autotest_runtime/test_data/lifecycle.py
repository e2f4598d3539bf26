"""
================================================================================
Entity Lifecycle Manager
================================================================================

Creates test data through registered factories, tracks every created entity
per test and tears it down again in reverse creation order.

Features:
- Pluggable entity factories (last registration wins)
- Built-in user/product/order factories backed by the API client
- Sequential bulk creation for index-dependent data (e.g. SKUs)
- Relationship-aware scenarios (order -> products -> user)
- Reverse-order cleanup that keeps going past individual failures

Usage:
    context = TestDataContext(test_id="checkout_01")
    builder = EntityLifecycleManager(api_client, context)

    scenario = await builder.create_order_scenario(product_count=2)
    ...
    report = await builder.cleanup()   # order, products, then user

================================================================================
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple

import allure
from loguru import logger

from autotest_runtime.exceptions import (
    EntityCreationFailed,
    RuntimeSupportError,
    UnknownEntityType,
)
from autotest_runtime.test_data.payloads import (
    OrderPayloadFactory,
    ProductPayloadFactory,
    UserPayloadFactory,
)


# Endpoints of the built-in entity types
USERS_ENDPOINT = "/api/users"
PRODUCTS_ENDPOINT = "/api/products"
ORDERS_ENDPOINT = "/api/orders"


# ================================================================================
# Data Models
# ================================================================================

@dataclass
class Entity:
    """A created, externally persisted test-data object plus its reversal."""
    id: Any
    type: str
    data: Any
    cleanup: Callable[[], Awaitable[Any]]


@dataclass
class TestDataContext:
    """Per-test record of all created entities, in creation order."""
    __test__ = False  # not a pytest test class

    test_id: str
    timestamp: datetime = field(default_factory=datetime.now)
    created_entities: List[Entity] = field(default_factory=list)


@dataclass
class CleanupReport:
    """Outcome of one cleanup pass."""
    attempted: List[Entity] = field(default_factory=list)
    failures: List[Tuple[Entity, Exception]] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return not self.failures


EntityFactory = Callable[[Any, Dict[str, Any], TestDataContext], Awaitable[Entity]]


# ================================================================================
# Lifecycle Manager
# ================================================================================

class EntityLifecycleManager:
    """
    Test-data builder owning the entities of one test.

    The API client only needs ``post``/``delete`` coroutines returning
    responses with ``ok``, ``status``, ``status_text`` and ``json()``.
    """

    def __init__(
        self,
        api_client: Any,
        context: TestDataContext,
        seed: Optional[int] = None,
        register_defaults: bool = True,
    ):
        """
        Args:
            api_client: Client used by the built-in factories
            context: Context receiving created entities
            seed: Optional random seed for payload generation
            register_defaults: Register the user/product/order factories
        """
        self.api_client = api_client
        self.context = context
        self._factories: Dict[str, EntityFactory] = {}

        self.users = UserPayloadFactory(context.test_id, seed)
        self.products = ProductPayloadFactory(context.test_id, seed)
        self.orders = OrderPayloadFactory(context.test_id, seed)

        if register_defaults:
            self.initialize()

    def initialize(self) -> None:
        """Register the built-in factories for users, products and orders."""
        self.register_factory("user", self._user_factory)
        self.register_factory("product", self._product_factory)
        self.register_factory("order", self._order_factory)

    def register_factory(self, entity_type: str, factory: EntityFactory) -> None:
        """Register ``factory`` for ``entity_type``, replacing any previous one."""
        self._factories[entity_type] = factory

    def has_factory(self, entity_type: str) -> bool:
        return entity_type in self._factories

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    async def create_entity(
        self,
        entity_type: str,
        custom_data: Optional[Dict[str, Any]] = None
    ) -> Entity:
        """
        Create one entity and track it for cleanup.

        Raises:
            UnknownEntityType: If no factory is registered for the type
        """
        factory = self._factories.get(entity_type)
        if factory is None:
            raise UnknownEntityType(entity_type)

        custom_data = custom_data if custom_data is not None else {}
        with allure.step(f"Create test data: {entity_type}"):
            entity = await factory(self.api_client, custom_data, self.context)

        self.context.created_entities.append(entity)
        logger.debug(
            f"Created {entity.type} {entity.id} for test {self.context.test_id}"
        )
        return entity

    async def create_entities(
        self,
        entity_type: str,
        count: int,
        custom_data_fn: Optional[Callable[[int], Dict[str, Any]]] = None
    ) -> List[Entity]:
        """
        Create ``count`` entities one after another.

        Each creation finishes before the next begins, so data derived from
        the index (SKUs, sequence numbers) never races.
        """
        entities = []
        for index in range(count):
            custom_data = custom_data_fn(index) if custom_data_fn else {}
            entities.append(await self.create_entity(entity_type, custom_data))
        return entities

    async def create_user(self, overrides: Optional[Dict[str, Any]] = None) -> Entity:
        """Create a user through ``POST /api/users``."""
        return await self.create_entity("user", overrides)

    async def create_product(self, overrides: Optional[Dict[str, Any]] = None) -> Entity:
        """Create a product through ``POST /api/products``."""
        return await self.create_entity("product", overrides)

    async def create_order(
        self,
        user_id: Any,
        product_ids: List[Any],
        overrides: Optional[Dict[str, Any]] = None
    ) -> Entity:
        """Create an order for ``user_id`` containing ``product_ids``."""
        custom_data = dict(overrides or {})
        custom_data["userId"] = user_id
        custom_data["productIds"] = list(product_ids)
        return await self.create_entity("order", custom_data)

    async def create_order_scenario(
        self,
        product_count: int,
        user_overrides: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """
        Create a user, ``product_count`` products and one order over them.

        Creation order is user, products, order, so cleanup removes the
        order first and the user last.

        Returns:
            ``{"user": Entity, "products": [Entity], "order": Entity}``
        """
        user = await self.create_user(user_overrides)
        products = await self.create_entities(
            "product",
            product_count,
            lambda index: {"sku": f"SKU-{self.context.test_id}-{index}"},
        )
        order = await self.create_order(user.id, [product.id for product in products])
        return {"user": user, "products": products, "order": order}

    # ------------------------------------------------------------------
    # Cleanup
    # ------------------------------------------------------------------

    async def cleanup(self) -> CleanupReport:
        """
        Run every entity's cleanup in reverse creation order.

        A failing cleanup is logged and recorded; the remaining entities are
        still cleaned up. The context is emptied afterwards.
        """
        report = CleanupReport()
        entities = self.context.created_entities

        with allure.step(f"Clean up {len(entities)} test data entities"):
            for entity in reversed(entities):
                report.attempted.append(entity)
                try:
                    await entity.cleanup()
                    logger.debug(f"Cleaned up {entity.type}: {entity.id}")
                except Exception as e:
                    report.failures.append((entity, e))
                    logger.warning(f"Failed to cleanup {entity.type} {entity.id}: {e}")

        entities.clear()
        return report

    # ------------------------------------------------------------------
    # Built-in factories
    # ------------------------------------------------------------------

    async def _user_factory(self, api_client, custom_data, context) -> Entity:
        payload = self.users.create_valid(custom_data)
        return await self._create_via_api(api_client, "user", USERS_ENDPOINT, payload)

    async def _product_factory(self, api_client, custom_data, context) -> Entity:
        payload = self.products.create_valid(custom_data)
        return await self._create_via_api(api_client, "product", PRODUCTS_ENDPOINT, payload)

    async def _order_factory(self, api_client, custom_data, context) -> Entity:
        overrides = dict(custom_data)
        user_id = overrides.pop("userId", None)
        product_ids = overrides.pop("productIds", None)

        # Missing relations are created first so they outlive the order
        if user_id is None:
            user_id = (await self.create_user()).id
        if not product_ids:
            product_ids = [(await self.create_product()).id]

        payload = self.orders.create_valid(user_id, product_ids, overrides)
        return await self._create_via_api(api_client, "order", ORDERS_ENDPOINT, payload)

    @staticmethod
    async def _create_via_api(
        api_client,
        entity_type: str,
        endpoint: str,
        payload: Dict[str, Any]
    ) -> Entity:
        response = await api_client.post(endpoint, data=payload)
        if not response.ok:
            raise EntityCreationFailed(entity_type, response.status_text, response.status)

        record = response.json()
        entity_id = record["id"]

        async def cleanup() -> None:
            deleted = await api_client.delete(f"{endpoint}/{entity_id}")
            if not deleted.ok:
                raise RuntimeSupportError(
                    f"Failed to delete {entity_type} {entity_id}: {deleted.status_text}"
                )

        return Entity(id=entity_id, type=entity_type, data=record, cleanup=cleanup)


__all__ = [
    "CleanupReport",
    "Entity",
    "EntityFactory",
    "EntityLifecycleManager",
    "TestDataContext",
    "USERS_ENDPOINT",
    "PRODUCTS_ENDPOINT",
    "ORDERS_ENDPOINT",
]
