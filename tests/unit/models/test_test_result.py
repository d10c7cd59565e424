"""Tests for test result models."""

import pytest
from pydantic import ValidationError

from boostsec.classtest.models.test_result import (
    ClassResult,
    ExecutionReport,
    HookFailureRecord,
    MethodResult,
)


def _class_result() -> ClassResult:
    return ClassResult(
        name="test_mod.Sample",
        status="failed",
        methods=(
            MethodResult(name="test_a", status="passed"),
            MethodResult(name="test_b", status="failed", message="boom"),
            MethodResult(name="test_c", status="skipped", skip_reason="later"),
            MethodResult(name="test_d", status="passed"),
        ),
    )


def test_method_result_minimal() -> None:
    """MethodResult accepts minimal required fields."""
    result = MethodResult(name="test_a", status="passed")
    assert result.assertions == 0
    assert result.planned is None
    assert result.shortfall is None
    assert result.failure_phase is None
    assert result.duration == 0.0


def test_method_result_invalid_status() -> None:
    """MethodResult rejects unknown status values."""
    with pytest.raises(ValidationError) as exc_info:
        MethodResult(name="test_a", status="error")  # type: ignore[arg-type]
    assert "status" in str(exc_info.value)


def test_method_result_invalid_phase() -> None:
    """MethodResult rejects unknown phases."""
    with pytest.raises(ValidationError):
        MethodResult(
            name="test_a",
            status="failed",
            failure_phase="cleanup",  # type: ignore[arg-type]
        )


def test_class_result_counts() -> None:
    """ClassResult counts methods by status."""
    result = _class_result()
    assert result.passed == 2
    assert result.failed == 1
    assert result.skipped == 1
    method = result.get_method("test_b")
    assert method is not None
    assert method.message == "boom"
    assert result.get_method("test_missing") is None


def test_execution_report_totals() -> None:
    """ExecutionReport totals include failed hooks."""
    report = ExecutionReport(
        classes=(
            _class_result(),
            ClassResult(
                name="test_mod.Broken",
                status="failed",
                hook_failures=(HookFailureRecord(phase="startup", message="x"),),
            ),
            ClassResult(name="test_mod.Empty", status="skipped", skip_reason="none"),
        )
    )
    assert report.total_classes == 3
    assert report.total_methods == 4
    assert report.total_failures == 2
    assert report.passed == 2
    assert report.skipped == 1
    assert report.has_failures is True


def test_execution_report_get_class_by_short_name() -> None:
    """ExecutionReport.get_class accepts the short class name."""
    report = ExecutionReport(classes=(_class_result(),))
    assert report.get_class("Sample") is report.classes[0]
    assert report.get_class("test_mod.Sample") is report.classes[0]
    assert report.get_class("Other") is None


def test_execution_report_dump_includes_totals() -> None:
    """Dumping a report includes computed totals."""
    data = ExecutionReport(classes=(_class_result(),)).model_dump(mode="json")
    assert data["total_classes"] == 1
    assert data["total_failures"] == 1
    assert data["classes"][0]["failed"] == 1


def test_execution_report_is_frozen() -> None:
    """ExecutionReport is immutable."""
    report = ExecutionReport()
    with pytest.raises(ValidationError):
        report.classes = ()  # type: ignore[misc]
    assert report.has_failures is False
