"""Accumulate method and class results into an execution report."""

import logging
import time

from boostsec.classtest.models.test_result import (
    ClassResult,
    ExecutionReport,
    HookFailureRecord,
    MethodResult,
    Phase,
    Status,
)

logger = logging.getLogger(__name__)


class _ClassEntry:
    def __init__(self, name: str) -> None:
        self.name = name
        self.methods: list[MethodResult] = []
        self.hook_failures: list[HookFailureRecord] = []
        self.skip_reason: str | None = None
        self.started = time.perf_counter()

    def status(self) -> Status:
        if self.hook_failures or any(m.status == "failed" for m in self.methods):
            return "failed"
        if self.skip_reason is not None:
            return "skipped"
        return "passed"


class ReportBuilder:
    """Owns the report tree while a run is in progress.

    Results are added incrementally by the executor; ``build`` freezes them
    into an :class:`ExecutionReport` and no further changes are accepted.
    """

    def __init__(self) -> None:
        """Initialize an empty report."""
        self._classes: list[ClassResult] = []
        self._current: _ClassEntry | None = None
        self._started = time.perf_counter()
        self._report: ExecutionReport | None = None

    def start_class(self, name: str) -> None:
        """Begin collecting results for class ``name``."""
        self._ensure_open()
        if self._current is not None:
            raise RuntimeError(f"Class {self._current.name} is still in progress")
        self._current = _ClassEntry(name)

    def add_method(self, result: MethodResult) -> None:
        """Record the result of a test method of the current class."""
        self._entry().methods.append(result)

    def add_hook_failure(self, phase: Phase, message: str) -> None:
        """Record a failed startup or finish hook of the current class."""
        self._entry().hook_failures.append(
            HookFailureRecord(phase=phase, message=message)
        )

    def skip_class(self, reason: str) -> None:
        """Mark the current class as skipped."""
        self._entry().skip_reason = reason

    def finish_class(self) -> ClassResult:
        """Close the current class and return its result."""
        entry = self._entry()
        result = ClassResult(
            name=entry.name,
            status=entry.status(),
            methods=tuple(entry.methods),
            hook_failures=tuple(entry.hook_failures),
            skip_reason=entry.skip_reason,
            duration=time.perf_counter() - entry.started,
        )
        self._classes.append(result)
        self._current = None
        logger.debug(f"Class result: {result.name} = {result.status}")
        return result

    def build(self) -> ExecutionReport:
        """Freeze and return the report."""
        if self._report is None:
            if self._current is not None:
                raise RuntimeError(f"Class {self._current.name} is still in progress")
            self._report = ExecutionReport(
                classes=tuple(self._classes),
                duration=time.perf_counter() - self._started,
            )
        return self._report

    def _entry(self) -> _ClassEntry:
        self._ensure_open()
        if self._current is None:
            raise RuntimeError("No class in progress")
        return self._current

    def _ensure_open(self) -> None:
        if self._report is not None:
            raise RuntimeError("Report is already complete")
