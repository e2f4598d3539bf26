# ================================================================================
# Retry Executor Module
# ================================================================================
#
# Bounded retry for fallible operations (API calls, entity creation, UI
# assertions) that may fail transiently.
#
# Key Features:
#   - Fixed attempt budget and overall timeout
#   - Constant delay between attempts (no jitter, no exponential growth)
#   - The deadline is checked before each sleep, so a retry is never
#     started if the delay alone would overrun the timeout
#   - Sync or async operations
#   - Named presets for common scenarios
#
# Usage:
#   user = await retry(lambda: builder.create_user(), max_attempts=5)
#   result = await RetryExecutor(get_retry_options("api")).run(fetch_orders)
#
# ================================================================================

import asyncio
import inspect
import time
from dataclasses import dataclass, replace
from typing import Any, Awaitable, Callable, Dict, Optional, TypeVar, Union

from loguru import logger

from autotest_runtime.common import get_config
from autotest_runtime.exceptions import RetryExhausted


T = TypeVar('T')

Operation = Callable[[], Union[T, Awaitable[T]]]


@dataclass(frozen=True)
class RetryOptions:
    """
    Configuration for retry operations.

    Attributes:
        max_attempts: Maximum number of times the operation is invoked
        timeout: Overall time budget in seconds
        delay: Constant pause between attempts in seconds
    """
    max_attempts: int = 3
    timeout: float = 30.0
    delay: float = 1.0


# Pre-configured retry options for common scenarios
RETRY_SCENARIOS: Dict[str, RetryOptions] = {
    "default": RetryOptions(),

    # Transient API errors (5xx, connection resets)
    "api": RetryOptions(max_attempts=3, timeout=15.0, delay=0.5),

    # Eventually consistent UI state
    "ui_assertion": RetryOptions(max_attempts=5, timeout=10.0, delay=0.5),

    # Seeding test data through the backend
    "entity_creation": RetryOptions(max_attempts=3, timeout=30.0, delay=1.0),
}


def get_retry_options(scenario: str) -> RetryOptions:
    """
    Get retry options for a named scenario.

    Args:
        scenario: Scenario name (e.g., "api", "ui_assertion")

    Values under ``retry.<scenario>`` in the runtime configuration replace
    the preset's fields.

    Returns:
        RetryOptions for the scenario, or the defaults if not found
    """
    options = RETRY_SCENARIOS.get(scenario, RETRY_SCENARIOS["default"])

    configured = get_config(f"retry.{scenario}") or {}
    if not isinstance(configured, dict):
        return options

    overrides = {}
    for name, cast in (("max_attempts", int), ("timeout", float), ("delay", float)):
        if configured.get(name) is not None:
            overrides[name] = cast(configured[name])
    return replace(options, **overrides) if overrides else options


class RetryExecutor:
    """
    Runs an operation until it succeeds, attempts run out or time runs out.

    The clock and sleep function are injectable so elapsed-time accounting
    can be driven deterministically in tests.
    """

    def __init__(
        self,
        options: Optional[RetryOptions] = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self.options = options or RetryOptions()
        self._clock = clock
        self._sleep = sleep

    async def run(
        self,
        operation: Operation,
        description: str = "operation"
    ) -> T:
        """
        Invoke ``operation`` with bounded retry.

        Args:
            operation: Zero-argument callable, sync or async
            description: Human-readable name used in log messages

        Returns:
            The first successful result

        Raises:
            RetryExhausted: When attempts or time ran out
        """
        max_attempts = self.options.max_attempts
        timeout = self.options.timeout
        delay = self.options.delay

        start_time = self._clock()
        attempts = 0
        last_error: Optional[BaseException] = None

        while attempts < max_attempts and self._clock() - start_time < timeout:
            try:
                result = operation()
                if inspect.isawaitable(result):
                    result = await result
                if attempts:
                    logger.debug(
                        f"{description} succeeded after {attempts + 1} attempts"
                    )
                return result
            except Exception as e:
                last_error = e
                attempts += 1

                if attempts >= max_attempts or self._clock() + delay > start_time + timeout:
                    break

                logger.warning(
                    f"{description} failed (attempt {attempts}/{max_attempts}): {e}. "
                    f"Retrying in {delay}s..."
                )
                await self._sleep(delay)

        last_message = str(last_error) if last_error is not None else None
        logger.error(
            f"{description} failed after {attempts} attempts. Last error: {last_message}"
        )
        raise RetryExhausted(attempts, last_message)


async def retry(
    operation: Operation,
    max_attempts: Optional[int] = None,
    timeout: Optional[float] = None,
    delay: Optional[float] = None,
    scenario: str = "default",
    description: str = "operation",
) -> Any:
    """
    Retry ``operation`` with constant delay.

    Explicit arguments override the values of the named scenario.

    Example:
        async def fetch_profile():
            response = await api_client.get(f"/api/users/{user_id}")
            assert response.ok, response.status_text
            return response.json()

        profile = await retry(fetch_profile, max_attempts=5, delay=0.2)
    """
    options = get_retry_options(scenario)
    overrides = {
        key: value
        for key, value in (
            ("max_attempts", max_attempts),
            ("timeout", timeout),
            ("delay", delay),
        )
        if value is not None
    }
    if overrides:
        options = replace(options, **overrides)

    return await RetryExecutor(options).run(operation, description=description)


__all__ = [
    "RetryOptions",
    "RetryExecutor",
    "RETRY_SCENARIOS",
    "get_retry_options",
    "retry",
]
