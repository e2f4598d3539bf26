"""Reporter capability and its Allure implementation."""

from .allure_reporter import AllureReporter, TestResultSummary
from .reporter import (
    LogLevel,
    Reporter,
    StepInfo,
    StepResult,
    TestInfo,
    TestResult,
    TestStatus,
)

__all__ = [
    "AllureReporter",
    "LogLevel",
    "Reporter",
    "StepInfo",
    "StepResult",
    "TestInfo",
    "TestResult",
    "TestResultSummary",
    "TestStatus",
]
