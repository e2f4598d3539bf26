"""Bounded, constant-delay retry for fallible operations."""

from .executor import (
    RETRY_SCENARIOS,
    RetryExecutor,
    RetryOptions,
    get_retry_options,
    retry,
)

__all__ = [
    "RETRY_SCENARIOS",
    "RetryExecutor",
    "RetryOptions",
    "get_retry_options",
    "retry",
]
