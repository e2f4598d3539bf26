"""
================================================================================
Reporter Capability
================================================================================

Lifecycle hooks and artifact collection consumed by the test orchestrator.
Concrete reporters (see ``allure_reporter``) subclass ``Reporter``.

================================================================================
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional


class TestStatus(str, Enum):
    """Final status of a test or step."""
    __test__ = False

    PASSED = "passed"
    FAILED = "failed"
    SKIPPED = "skipped"
    BROKEN = "broken"


class LogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


@dataclass
class TestInfo:
    """Information about a starting test."""
    __test__ = False

    id: str
    title: str
    strategy: Optional[str] = None
    tags: List[str] = field(default_factory=list)


@dataclass
class TestResult:
    """Result of a finished test."""
    __test__ = False

    id: str
    title: str
    status: TestStatus
    start_time: datetime
    end_time: datetime
    duration_ms: float
    error_message: Optional[str] = None


@dataclass
class StepInfo:
    """Information about a starting step."""
    id: str
    title: str
    test_id: Optional[str] = None
    category: str = "step"


@dataclass
class StepResult:
    """Result of a finished step."""
    id: str
    title: str
    status: TestStatus
    start_time: datetime
    end_time: datetime
    duration_ms: float
    test_id: Optional[str] = None
    error_message: Optional[str] = None


class Reporter:
    """
    Base reporter.

    Every hook is a no-op so that subclasses override only what they need.
    """

    def on_test_start(self, test_info: TestInfo) -> None:
        pass

    def on_test_end(self, test_result: TestResult) -> None:
        pass

    def on_step_start(self, step_info: StepInfo) -> None:
        pass

    def on_step_end(self, step_result: StepResult) -> None:
        pass

    def add_screenshot(self, screenshot: bytes, name: Optional[str] = None,
                       description: Optional[str] = None) -> None:
        pass

    def add_trace(self, trace: Any, name: Optional[str] = None) -> None:
        pass

    def add_video(self, video: Any, name: Optional[str] = None) -> None:
        pass

    def add_attachment(self, content: Any, name: str,
                       content_type: Optional[str] = None) -> None:
        pass

    def log(self, message: str, level: LogLevel = LogLevel.INFO) -> None:
        pass

    def set_tag(self, name: str, value: Any) -> None:
        pass


__all__ = [
    "LogLevel",
    "Reporter",
    "StepInfo",
    "StepResult",
    "TestInfo",
    "TestResult",
    "TestStatus",
]
