"""
================================================================================
Service Container
================================================================================

Hierarchical registry resolving service tokens to instances, factories or
singletons.

Features:
    - Direct instance, factory and singleton registrations
    - Singleton factories cached per container for its lifetime
    - Scoped child containers falling back to their parent
    - Child overrides that never mutate the parent

Resolution order (per container level, before falling back to the parent):
    1. Cached singleton
    2. Factory (cached when registered as singleton)
    3. Direct instance
    4. Parent container

Usage:
    root = ServiceContainer()
    root.register_singleton_factory(API_CLIENT, lambda c: HttpClient(c.resolve(CONFIG)))

    scope = root.create_child({REPORTER: AllureReporter()})
    reporter = scope.resolve(REPORTER)

================================================================================
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Mapping, Optional, Set

from loguru import logger

from autotest_runtime.exceptions import ServiceNotRegistered


# Well-known service tokens
API_CLIENT = "IApiClient"
REPORTER = "IReporter"
CONFIG = "IConfig"
BROWSER_MANAGER = "IBrowserManager"

Factory = Callable[["ServiceContainer"], Any]


class ServiceContainer:
    """
    Dependency container with optional parent for hierarchical resolution.

    A container only ever looks upward: the parent holds no reference to
    its children, and nothing a child registers is visible to the parent.
    """

    def __init__(self, parent: Optional["ServiceContainer"] = None) -> None:
        self._parent = parent
        self._services: Dict[str, Any] = {}
        self._factories: Dict[str, Factory] = {}
        self._singletons: Dict[str, Any] = {}
        self._singleton_factories: Set[str] = set()

    @property
    def parent(self) -> Optional["ServiceContainer"]:
        """Parent container, fixed at construction."""
        return self._parent

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(self, token: str, instance: Any) -> None:
        """Bind ``token`` to a concrete value at this level."""
        self._services[token] = instance

    def register_factory(
        self,
        token: str,
        factory: Factory,
        singleton: bool = False
    ) -> None:
        """
        Bind ``token`` to a factory invoked with the container on resolve.

        Args:
            token: Service token
            factory: Callable receiving this container
            singleton: Cache the first result for the container's lifetime

        A non-singleton registration drops any cached singleton value for
        the token. A singleton registration keeps an existing cached value.
        """
        self._factories[token] = factory
        if singleton:
            self._singleton_factories.add(token)
        else:
            self._singleton_factories.discard(token)
            self._singletons.pop(token, None)

    def register_singleton(self, token: str, instance: Any) -> None:
        """Store ``instance`` directly as the cached singleton for ``token``."""
        self._singletons[token] = instance

    def register_singleton_factory(self, token: str, factory: Factory) -> None:
        """Shorthand for ``register_factory(token, factory, singleton=True)``."""
        self.register_factory(token, factory, True)

    def add_provider(self, provider: "ServiceProvider") -> "ServiceContainer":
        """Let ``provider`` register its services here; returns self for chaining."""
        provider.register(self)
        return self

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def resolve(self, token: str) -> Any:
        """
        Resolve ``token`` at this level, then along the parent chain.

        Raises:
            ServiceNotRegistered: If no level can satisfy the token
        """
        container: Optional[ServiceContainer] = self
        while container is not None:
            found, value = container._resolve_local(token)
            if found:
                return value
            container = container._parent

        raise ServiceNotRegistered(token)

    def _resolve_local(self, token: str) -> tuple:
        """Return ``(found, value)`` using only this level's registrations."""
        if token in self._singletons:
            return True, self._singletons[token]

        if token in self._factories:
            instance = self._factories[token](self)
            if token in self._singleton_factories:
                self._singletons[token] = instance
                logger.debug(f"Cached singleton instance for: {token}")
            return True, instance

        if token in self._services:
            return True, self._services[token]

        return False, None

    def has_registration(self, token: str) -> bool:
        """True if this level or any ancestor can resolve ``token``."""
        container: Optional[ServiceContainer] = self
        while container is not None:
            if container._has_local(token):
                return True
            container = container._parent
        return False

    def _has_local(self, token: str) -> bool:
        return (
            token in self._services
            or token in self._factories
            or token in self._singletons
        )

    def __contains__(self, token: str) -> bool:
        return self.has_registration(token)

    def resolve_all(self, predicate: Callable[[str], bool]) -> List[Any]:
        """
        Resolve every distinct token accepted by ``predicate``.

        Tokens are gathered from instances, then factories, then singletons
        at this level; each token contributes a single value, taken from the
        first mapping it appears in. A token with both an instance and a
        factory therefore yields the instance. Ancestors are visited
        afterwards and only add tokens not already collected.
        """
        results: List[Any] = []
        seen: Set[str] = set()

        container: Optional[ServiceContainer] = self
        while container is not None:
            for token in list(container._services):
                if token not in seen and predicate(token):
                    seen.add(token)
                    results.append(container._services[token])

            for token in list(container._factories):
                if token not in seen and predicate(token):
                    seen.add(token)
                    results.append(container._resolve_local(token)[1])

            for token in list(container._singletons):
                if token not in seen and predicate(token):
                    seen.add(token)
                    results.append(container._singletons[token])

            container = container._parent

        return results

    # ------------------------------------------------------------------
    # Removal
    # ------------------------------------------------------------------

    def unregister(self, token: str) -> None:
        """Remove ``token`` from this level only."""
        self._services.pop(token, None)
        self._factories.pop(token, None)
        self._singletons.pop(token, None)
        self._singleton_factories.discard(token)

    def clear(self) -> None:
        """Remove all registrations at this level only."""
        self._services.clear()
        self._factories.clear()
        self._singletons.clear()
        self._singleton_factories.clear()

    # ------------------------------------------------------------------
    # Scoping
    # ------------------------------------------------------------------

    def create_scope(self) -> "ServiceContainer":
        """Create an empty container whose parent is this one."""
        return ServiceContainer(self)

    def create_child(
        self,
        overrides: Optional[Mapping[str, Any]] = None
    ) -> "ServiceContainer":
        """
        Create a scope with ``overrides`` registered as direct instances.

        Lets a test replace specific services without touching the parent.
        """
        child = self.create_scope()
        for token, instance in (overrides or {}).items():
            child.register(token, instance)
        return child


class ServiceProvider:
    """
    Groups related registrations.

    Subclasses implement ``register`` and are applied with
    ``container.add_provider(provider)``.
    """

    def register(self, container: ServiceContainer) -> None:
        raise NotImplementedError


__all__ = [
    "API_CLIENT",
    "BROWSER_MANAGER",
    "CONFIG",
    "REPORTER",
    "Factory",
    "ServiceContainer",
    "ServiceProvider",
]
