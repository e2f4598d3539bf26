"""
================================================================================
Runtime Support Exceptions
================================================================================

Error taxonomy for the runtime support layer. Every error carries a
human-readable message embedding the failing token, entity type, status or
attempt count, plus the same values as attributes for programmatic checks.

================================================================================
"""

from typing import Any, Optional


class RuntimeSupportError(Exception):
    """Base exception for all runtime support errors."""
    pass


class ServiceNotRegistered(RuntimeSupportError):
    """Raised when a token cannot be resolved in a container or its parents."""

    def __init__(self, token: str):
        self.token = token
        super().__init__(f"Service not registered: {token}")


class UnknownEntityType(RuntimeSupportError):
    """Raised when no factory is registered for a requested entity type."""

    def __init__(self, entity_type: str):
        self.entity_type = entity_type
        super().__init__(f"No factory registered for entity type: {entity_type}")


class EntityCreationFailed(RuntimeSupportError):
    """Raised when the downstream create call returns a non-ok response."""

    def __init__(
        self,
        entity_type: str,
        status_text: str,
        status: Optional[int] = None
    ):
        self.entity_type = entity_type
        self.status_text = status_text
        self.status = status
        super().__init__(f"Failed to create {entity_type}: {status_text}")


class RetryExhausted(RuntimeSupportError):
    """
    Raised when a bounded retry runs out of attempts or time.

    Only the message of the last underlying error is kept.
    """

    def __init__(self, attempts: int, last_error_message: Optional[str]):
        self.attempts = attempts
        self.last_error_message = last_error_message
        super().__init__(
            f"Operation failed after {attempts} attempts: {last_error_message}"
        )


class UnknownTestStrategy(RuntimeSupportError):
    """Raised when the orchestrator is asked to dispatch an unknown strategy."""

    def __init__(self, strategy: Any):
        self.strategy = strategy
        super().__init__(f"Unknown test strategy: {strategy}")


__all__ = [
    "RuntimeSupportError",
    "ServiceNotRegistered",
    "UnknownEntityType",
    "EntityCreationFailed",
    "RetryExhausted",
    "UnknownTestStrategy",
]
