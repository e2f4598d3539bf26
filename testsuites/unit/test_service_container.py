import pytest

from autotest_runtime.container import (
    API_CLIENT,
    CONFIG,
    REPORTER,
    ServiceContainer,
    ServiceProvider,
)
from autotest_runtime.exceptions import ServiceNotRegistered


class CountingFactory:
    def __init__(self):
        self.calls = 0

    def __call__(self, container):
        self.calls += 1
        return {"instance": self.calls}


def test_resolve_registered_instance():
    container = ServiceContainer()
    client = object()
    container.register(API_CLIENT, client)

    assert container.resolve(API_CLIENT) is client
    assert container.has_registration(API_CLIENT)
    assert API_CLIENT in container


def test_unregistered_token_raises_with_token_in_message():
    container = ServiceContainer(ServiceContainer())

    with pytest.raises(ServiceNotRegistered) as exc_info:
        container.resolve("IMissing")

    assert exc_info.value.token == "IMissing"
    assert str(exc_info.value) == "Service not registered: IMissing"
    assert not container.has_registration("IMissing")


def test_factory_called_on_every_resolve():
    container = ServiceContainer()
    factory = CountingFactory()
    container.register_factory(REPORTER, factory)

    first = container.resolve(REPORTER)
    second = container.resolve(REPORTER)

    assert first is not second
    assert factory.calls == 2


def test_factory_receives_container():
    container = ServiceContainer()
    container.register(CONFIG, {"api.base_url": "http://api"})
    container.register_factory(API_CLIENT, lambda c: ("client", c.resolve(CONFIG)["api.base_url"]))

    assert container.resolve(API_CLIENT) == ("client", "http://api")


def test_singleton_factory_invoked_once():
    container = ServiceContainer()
    factory = CountingFactory()
    container.register_singleton_factory(REPORTER, factory)

    results = [container.resolve(REPORTER) for _ in range(3)]

    assert factory.calls == 1
    assert all(result is results[0] for result in results)


def test_register_singleton_returns_stored_instance():
    container = ServiceContainer()
    reporter = object()
    container.register_singleton(REPORTER, reporter)

    assert container.resolve(REPORTER) is reporter


def test_factory_takes_precedence_over_instance():
    container = ServiceContainer()
    container.register(API_CLIENT, "instance")
    container.register_factory(API_CLIENT, lambda c: "factory")

    assert container.resolve(API_CLIENT) == "factory"


def test_cached_singleton_takes_precedence_over_factory():
    container = ServiceContainer()
    container.register_singleton(API_CLIENT, "singleton")
    container.register_factory(API_CLIENT, lambda c: "factory", singleton=True)

    assert container.resolve(API_CLIENT) == "singleton"


def test_non_singleton_factory_drops_cached_singleton():
    container = ServiceContainer()
    container.register_singleton(API_CLIENT, "singleton")
    container.register_factory(API_CLIENT, lambda c: "factory")

    assert container.resolve(API_CLIENT) == "factory"


def test_child_falls_back_to_parent():
    root = ServiceContainer()
    root.register(CONFIG, "root-config")
    child = root.create_scope()

    assert child.parent is root
    assert child.resolve(CONFIG) == "root-config"
    assert child.has_registration(CONFIG)


def test_child_registration_shadows_parent_without_mutating_it():
    root = ServiceContainer()
    root.register(API_CLIENT, "root-client")
    child = root.create_scope()
    child.register(API_CLIENT, "child-client")

    assert child.resolve(API_CLIENT) == "child-client"
    assert root.resolve(API_CLIENT) == "root-client"


def test_parent_does_not_see_child_registrations():
    root = ServiceContainer()
    child = root.create_scope()
    child.register(REPORTER, "child-reporter")

    assert not root.has_registration(REPORTER)
    with pytest.raises(ServiceNotRegistered):
        root.resolve(REPORTER)


def test_parent_singleton_shared_with_children():
    root = ServiceContainer()
    factory = CountingFactory()
    root.register_singleton_factory(REPORTER, factory)

    first = root.create_scope().resolve(REPORTER)
    second = root.create_scope().resolve(REPORTER)

    assert first is second
    assert factory.calls == 1


def test_parent_factory_is_called_with_parent_container():
    root = ServiceContainer()
    root.register(CONFIG, "root-config")
    root.register_factory(API_CLIENT, lambda c: c.resolve(CONFIG))

    child = root.create_child({CONFIG: "child-config"})

    assert child.resolve(API_CLIENT) == "root-config"


def test_create_child_applies_overrides():
    root = ServiceContainer()
    root.register(API_CLIENT, "real-client")
    root.register(CONFIG, "config")

    child = root.create_child({API_CLIENT: "mock-client"})

    assert child.resolve(API_CLIENT) == "mock-client"
    assert child.resolve(CONFIG) == "config"
    assert root.resolve(API_CLIENT) == "real-client"


def test_resolve_all_collects_matching_tokens_once():
    root = ServiceContainer()
    root.register("handler.root", "root")
    root.register("handler.shared", "root-shared")
    root.register("other", "ignored")

    child = root.create_scope()
    child.register("handler.local", "local")
    child.register("handler.shared", "child-shared")
    child.register_factory("handler.local", lambda c: "local-factory")

    values = child.resolve_all(lambda token: token.startswith("handler."))

    assert values == ["local", "child-shared", "root"]


def test_resolve_all_prefers_instance_over_factory():
    container = ServiceContainer()
    container.register("handler", "instance")
    container.register_factory("handler", lambda c: "factory")
    factory = CountingFactory()
    container.register_factory("handler.lazy", factory)
    container.register_singleton("handler.cached", "cached")

    values = container.resolve_all(lambda token: token.startswith("handler"))

    assert values == ["instance", {"instance": 1}, "cached"]
    assert factory.calls == 1


def test_resolve_all_order_follows_levels():
    root = ServiceContainer()
    root.register("plugin.a", "root-a")
    child = root.create_scope()
    child.register("plugin.b", "child-b")

    assert child.resolve_all(lambda token: token.startswith("plugin.")) == ["child-b", "root-a"]


def test_unregister_removes_local_registrations_only():
    root = ServiceContainer()
    root.register(API_CLIENT, "root-client")
    child = root.create_scope()
    child.register(API_CLIENT, "child-client")
    child.register_singleton_factory(API_CLIENT, lambda c: "child-factory")

    child.unregister(API_CLIENT)

    assert child.resolve(API_CLIENT) == "root-client"


def test_clear_keeps_parent():
    root = ServiceContainer()
    root.register(CONFIG, "config")
    child = root.create_scope()
    child.register(REPORTER, "reporter")

    child.clear()

    assert not child.has_registration(REPORTER)
    assert child.resolve(CONFIG) == "config"


def test_add_provider_registers_and_chains():
    class ReportingProvider(ServiceProvider):
        def register(self, container):
            container.register(REPORTER, "reporter")
            container.register_factory(API_CLIENT, lambda c: "client")

    container = ServiceContainer().add_provider(ReportingProvider())

    assert container.resolve(REPORTER) == "reporter"
    assert container.resolve(API_CLIENT) == "client"


def test_base_provider_must_be_subclassed():
    with pytest.raises(NotImplementedError):
        ServiceContainer().add_provider(ServiceProvider())
