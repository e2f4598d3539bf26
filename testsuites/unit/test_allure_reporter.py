from datetime import datetime

from loguru import logger

from autotest_runtime.report_tools import (
    AllureReporter,
    LogLevel,
    StepInfo,
    StepResult,
    TestInfo,
    TestResult,
    TestResultSummary,
    TestStatus,
)
from autotest_runtime.report_tools.allure_reporter import attach_artifact


def make_result(status, error_message=None, duration_ms=10.0):
    now = datetime.now()
    return TestResult(
        id="T-1",
        title="checkout",
        status=status,
        start_time=now,
        end_time=now,
        duration_ms=duration_ms,
        error_message=error_message,
    )


def test_summary_counts_statuses():
    summary = TestResultSummary()
    for status in (TestStatus.PASSED, TestStatus.PASSED, TestStatus.FAILED, TestStatus.BROKEN):
        summary.record(make_result(status))

    assert (summary.total, summary.passed, summary.failed, summary.broken) == (4, 2, 1, 1)
    assert summary.pass_rate == 50.0
    assert summary.to_dict()["pass_rate"] == "50.00%"
    assert summary.duration_ms == 40.0


def test_empty_summary_pass_rate():
    assert TestResultSummary().pass_rate == 0.0


def test_reporter_tracks_current_test_and_results():
    reporter = AllureReporter()

    reporter.on_test_start(TestInfo(id="T-1", title="checkout", strategy="api"))
    assert reporter.current_test.title == "checkout"

    reporter.on_test_end(make_result(TestStatus.FAILED, error_message="boom"))

    assert reporter.current_test is None
    assert reporter.summary.failed == 1
    assert reporter.test_results[0].error_message == "boom"


def test_reporter_records_steps():
    reporter = AllureReporter()
    now = datetime.now()

    reporter.on_step_start(StepInfo(id="S-1", title="login"))
    reporter.on_step_end(StepResult(
        id="S-1", title="login", status=TestStatus.PASSED,
        start_time=now, end_time=now, duration_ms=1.0,
    ))

    assert [step.title for step in reporter.step_results] == ["login"]


def test_log_forwards_to_loguru():
    messages = []
    handler_id = logger.add(lambda message: messages.append(message.record), level="DEBUG")
    try:
        AllureReporter().log("hello", LogLevel.WARNING)
    finally:
        logger.remove(handler_id)

    assert [(r["level"].name, r["message"]) for r in messages] == [("WARNING", "hello")]


def test_set_tag_is_kept():
    reporter = AllureReporter()
    reporter.set_tag("feature", "checkout")

    assert reporter.tags == {"feature": "checkout"}


def test_attachments_accept_paths_bytes_and_text(tmp_path):
    trace = tmp_path / "trace.zip"
    trace.write_bytes(b"PK")
    reporter = AllureReporter()

    reporter.add_trace(trace)
    reporter.add_screenshot(b"\x89PNG", description="after login")
    reporter.add_attachment({"id": 1}, name="payload")
    attach_artifact("not a file", name="note")
