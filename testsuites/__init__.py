"""
Test suites package.

Holds the adapters the runtime layer consumes (HTTP client, browser manager,
configuration), the default service provider and the pytest wiring. Kept
importable so fixtures and providers can be reused from other projects.
"""
