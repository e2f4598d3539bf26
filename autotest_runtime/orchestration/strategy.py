"""
================================================================================
Test Orchestrator
================================================================================

Dispatches a test body under one of six execution strategies. The strategy
decides which pre-provisioned handles (plain or pre-authenticated page and
request) reach the test; the reporter and API client are resolved from the
service container.

Usage:
    orchestrator = TestOrchestrator(container)

    async def checkout(ctx: TestContext):
        await ctx.page.goto("/checkout")

    await orchestrator.run("checkout works", checkout,
                           TestStrategy.AUTHENTICATED_UI, handles)

================================================================================
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Awaitable, Callable, Optional, TypeVar, Union
from uuid import uuid4

from loguru import logger

from autotest_runtime.container import API_CLIENT, REPORTER, ServiceContainer
from autotest_runtime.exceptions import UnknownTestStrategy
from autotest_runtime.report_tools.reporter import (
    Reporter,
    StepInfo,
    StepResult,
    TestInfo,
    TestResult,
    TestStatus,
)
from autotest_runtime.retry import RetryExecutor, RetryOptions


T = TypeVar("T")


class TestStrategy(str, Enum):
    """Closed set of execution strategies."""
    __test__ = False

    UI = "ui"
    API = "api"
    AUTHENTICATED_UI = "authenticated-ui"
    AUTHENTICATED_API = "authenticated-api"
    HYBRID = "hybrid"
    AUTHENTICATED_HYBRID = "authenticated-hybrid"


@dataclass
class ProvisionedHandles:
    """Page and request handles prepared before the test body runs."""
    page: Any = None
    request: Any = None
    authenticated_page: Any = None
    authenticated_request: Any = None


@dataclass
class TestContext:
    """Input handed to a test body."""
    __test__ = False

    reporter: Optional[Reporter] = None
    api_client: Any = None
    page: Any = None
    request: Any = None
    authenticated_page: Any = None
    authenticated_request: Any = None
    container: Optional[ServiceContainer] = None


TestBody = Callable[[TestContext], Awaitable[Any]]


def _coerce_strategy(strategy: Union[TestStrategy, str]) -> TestStrategy:
    try:
        return TestStrategy(strategy)
    except ValueError:
        raise UnknownTestStrategy(strategy) from None


def select_context(
    strategy: Union[TestStrategy, str],
    handles: ProvisionedHandles,
    reporter: Optional[Reporter] = None,
    api_client: Any = None,
) -> TestContext:
    """
    Build the test input for ``strategy``.

    Raises:
        UnknownTestStrategy: If ``strategy`` is outside the closed set
    """
    strategy = _coerce_strategy(strategy)
    context = TestContext(reporter=reporter, api_client=api_client)

    if strategy is TestStrategy.UI:
        context.page = handles.page
        context.authenticated_page = handles.page
    elif strategy is TestStrategy.API:
        context.request = handles.request
        context.authenticated_request = handles.request
    elif strategy is TestStrategy.AUTHENTICATED_UI:
        context.page = handles.authenticated_page
        context.authenticated_page = handles.authenticated_page
    elif strategy is TestStrategy.AUTHENTICATED_API:
        context.request = handles.authenticated_request
        context.authenticated_request = handles.authenticated_request
    elif strategy is TestStrategy.HYBRID:
        context.page = handles.page
        context.request = handles.request
    elif strategy is TestStrategy.AUTHENTICATED_HYBRID:
        context.page = handles.authenticated_page
        context.request = handles.authenticated_request
        context.authenticated_page = handles.authenticated_page
        context.authenticated_request = handles.authenticated_request

    return context


class TestOrchestrator:
    """
    Runs test bodies with container-resolved services.

    Holds no per-test state; each ``run`` is independent.
    """
    __test__ = False

    def __init__(
        self,
        container: ServiceContainer,
        retry_options: Optional[RetryOptions] = None
    ):
        self.container = container
        self.retry_options = retry_options or RetryOptions()

    def _resolve_optional(self, token: str) -> Any:
        if self.container.has_registration(token):
            return self.container.resolve(token)
        logger.debug(f"No registration for {token}; passing None to the test")
        return None

    async def run(
        self,
        title: str,
        test_fn: TestBody,
        strategy: Union[TestStrategy, str],
        handles: Optional[ProvisionedHandles] = None,
        test_id: Optional[str] = None,
    ) -> Any:
        """
        Execute ``test_fn`` under ``strategy``.

        The strategy is validated before any reporter hook fires. Failures
        of the test body are reported and re-raised.
        """
        strategy = _coerce_strategy(strategy)
        reporter = self._resolve_optional(REPORTER)
        api_client = self._resolve_optional(API_CLIENT)

        context = select_context(strategy, handles or ProvisionedHandles(), reporter, api_client)
        context.container = self.container

        test_id = test_id or f"test-{uuid4().hex[:8]}"
        if reporter:
            reporter.on_test_start(TestInfo(id=test_id, title=title, strategy=strategy.value))

        start_time = datetime.now()
        started = time.monotonic()
        status = TestStatus.PASSED
        error_message = None
        try:
            return await test_fn(context)
        except AssertionError as e:
            status = TestStatus.FAILED
            error_message = str(e)
            raise
        except Exception as e:
            status = TestStatus.BROKEN
            error_message = f"{type(e).__name__}: {e}"
            raise
        finally:
            if reporter:
                reporter.on_test_end(TestResult(
                    id=test_id,
                    title=title,
                    status=status,
                    start_time=start_time,
                    end_time=datetime.now(),
                    duration_ms=(time.monotonic() - started) * 1000,
                    error_message=error_message,
                ))

    async def step(
        self,
        title: str,
        action: Callable[[], Awaitable[T]],
        reporter: Optional[Reporter] = None,
        test_id: Optional[str] = None,
    ) -> T:
        """Run ``action`` as a reported step; errors are reported then re-raised."""
        reporter = reporter or self._resolve_optional(REPORTER)
        step_info = StepInfo(id=f"step-{uuid4().hex[:8]}", title=title, test_id=test_id)
        if reporter:
            reporter.on_step_start(step_info)

        start_time = datetime.now()
        started = time.monotonic()
        status = TestStatus.PASSED
        error_message = None
        try:
            return await action()
        except Exception as e:
            status = TestStatus.FAILED
            error_message = str(e)
            raise
        finally:
            if reporter:
                reporter.on_step_end(StepResult(
                    id=step_info.id,
                    title=title,
                    status=status,
                    start_time=start_time,
                    end_time=datetime.now(),
                    duration_ms=(time.monotonic() - started) * 1000,
                    test_id=test_id,
                    error_message=error_message,
                ))

    async def retry(
        self,
        operation: Callable[[], Any],
        options: Optional[RetryOptions] = None,
        description: str = "operation",
    ) -> Any:
        """Retry ``operation`` with the orchestrator's (or the given) options."""
        executor = RetryExecutor(options or self.retry_options)
        return await executor.run(operation, description=description)


__all__ = [
    "ProvisionedHandles",
    "TestBody",
    "TestContext",
    "TestOrchestrator",
    "TestStrategy",
    "select_context",
]
