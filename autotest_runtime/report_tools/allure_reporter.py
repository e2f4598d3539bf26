"""
================================================================================
Allure Reporter
================================================================================

Reporter implementation that forwards lifecycle events and artifacts to the
Allure report and the log, and keeps an in-memory run summary.

Features:
- Screenshot/trace/video/attachment helpers
- Run summary with pass rate
- Step and test status logging

================================================================================
"""

import json
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

import allure
from loguru import logger

from autotest_runtime.report_tools.reporter import (
    LogLevel,
    Reporter,
    StepInfo,
    StepResult,
    TestInfo,
    TestResult,
    TestStatus,
)


# ================================================================================
# Attachment Helpers
# ================================================================================

def attach_json(data: Any, name: str = "Data"):
    """
    Attach JSON data to Allure report.

    Args:
        data: Data to attach (will be JSON serialized)
        name: Attachment name
    """
    json_str = json.dumps(data, indent=2, default=str)
    allure.attach(
        json_str,
        name=name,
        attachment_type=allure.attachment_type.JSON
    )


def attach_text(text: str, name: str = "Text"):
    allure.attach(
        text,
        name=name,
        attachment_type=allure.attachment_type.TEXT
    )


def attach_artifact(
    artifact: Any,
    name: str,
    attachment_type=None,
    extension: Optional[str] = None
):
    """
    Attach raw bytes or a file on disk.

    Strings and paths pointing at an existing file are attached as files;
    bytes are attached as-is; anything else is attached as text.
    """
    if isinstance(artifact, (str, Path)) and Path(artifact).exists():
        allure.attach.file(
            str(artifact),
            name=name,
            attachment_type=attachment_type,
            extension=extension,
        )
    elif isinstance(artifact, (bytes, bytearray)):
        allure.attach(
            bytes(artifact),
            name=name,
            attachment_type=attachment_type,
            extension=extension,
        )
    else:
        attach_text(str(artifact), name=name)


# ================================================================================
# Run Summary
# ================================================================================

@dataclass
class TestResultSummary:
    """Summary of test execution results."""
    __test__ = False

    total: int = 0
    passed: int = 0
    failed: int = 0
    broken: int = 0
    skipped: int = 0
    duration_ms: float = 0
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())

    @property
    def pass_rate(self) -> float:
        """Calculate pass rate percentage."""
        if self.total == 0:
            return 0.0
        return (self.passed / self.total) * 100

    def record(self, result: TestResult) -> None:
        self.total += 1
        self.duration_ms += result.duration_ms
        if result.status == TestStatus.PASSED:
            self.passed += 1
        elif result.status == TestStatus.FAILED:
            self.failed += 1
        elif result.status == TestStatus.SKIPPED:
            self.skipped += 1
        else:
            self.broken += 1

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "total": self.total,
            "passed": self.passed,
            "failed": self.failed,
            "broken": self.broken,
            "skipped": self.skipped,
            "pass_rate": f"{self.pass_rate:.2f}%",
            "duration_ms": self.duration_ms,
            "timestamp": self.timestamp,
        }


# ================================================================================
# Reporter
# ================================================================================

class AllureReporter(Reporter):
    """
    Reporter writing to Allure and loguru.

    Usage:
        reporter = AllureReporter()
        container.register(REPORTER, reporter)
    """

    def __init__(self):
        self.current_test: Optional[TestInfo] = None
        self.test_results: List[TestResult] = []
        self.step_results: List[StepResult] = []
        self.tags: Dict[str, Any] = {}
        self.summary = TestResultSummary()

    def on_test_start(self, test_info: TestInfo) -> None:
        self.current_test = test_info
        self.log(f"Test started: {test_info.title}", LogLevel.INFO)

    def on_test_end(self, test_result: TestResult) -> None:
        self.current_test = None
        self.test_results.append(test_result)
        self.summary.record(test_result)

        level = LogLevel.INFO if test_result.status == TestStatus.PASSED else LogLevel.ERROR
        self.log(
            f"Test {test_result.status.value}: {test_result.title} "
            f"({test_result.duration_ms:.0f}ms)",
            level,
        )
        if test_result.error_message:
            attach_text(test_result.error_message, name="Error Details")

    def on_step_start(self, step_info: StepInfo) -> None:
        self.log(f"Step started: {step_info.title}", LogLevel.DEBUG)

    def on_step_end(self, step_result: StepResult) -> None:
        self.step_results.append(step_result)

        if step_result.status == TestStatus.PASSED:
            self.log(
                f"Step passed: {step_result.title} ({step_result.duration_ms:.0f}ms)",
                LogLevel.DEBUG,
            )
        else:
            self.log(
                f"Step {step_result.status.value}: {step_result.title} - "
                f"{step_result.error_message}",
                LogLevel.ERROR,
            )

    def add_screenshot(self, screenshot: bytes, name: Optional[str] = None,
                       description: Optional[str] = None) -> None:
        name = name or f"screenshot-{datetime.now():%Y%m%d%H%M%S}"
        attach_artifact(screenshot, name=name, attachment_type=allure.attachment_type.PNG)
        if description:
            attach_text(description, name=f"{name} (description)")

    def add_trace(self, trace: Any, name: Optional[str] = None) -> None:
        attach_artifact(trace, name=name or "trace", extension="zip")

    def add_video(self, video: Any, name: Optional[str] = None) -> None:
        attach_artifact(video, name=name or "video", attachment_type=allure.attachment_type.WEBM)

    def add_attachment(self, content: Any, name: str,
                       content_type: Optional[str] = None) -> None:
        if isinstance(content, (dict, list)):
            attach_json(content, name=name)
        else:
            attach_artifact(content, name=name)

    def log(self, message: str, level: LogLevel = LogLevel.INFO) -> None:
        logger.log(LogLevel(level).value, message)

    def set_tag(self, name: str, value: Any) -> None:
        self.tags[name] = value
        allure.dynamic.label(name, str(value))


__all__ = [
    "AllureReporter",
    "TestResultSummary",
    "attach_artifact",
    "attach_json",
    "attach_text",
]
