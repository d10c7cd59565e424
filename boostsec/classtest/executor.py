"""Run selected test classes through their lifecycle and record the results."""

import asyncio
import inspect
import logging
import time
from collections.abc import Awaitable, Callable
from enum import Enum
from typing import Any, NamedTuple

from boostsec.classtest.composition import method_function
from boostsec.classtest.errors import HookFailure, PlanMismatch, SkipSignal
from boostsec.classtest.models.run_spec import RunSpec, SelectedClass
from boostsec.classtest.models.test_definition import TestMethodDefinition
from boostsec.classtest.models.test_result import (
    ClassResult,
    ExecutionReport,
    FailureKind,
    MethodResult,
    Phase,
)
from boostsec.classtest.report import ReportBuilder
from boostsec.classtest.testclass import TestClass

logger = logging.getLogger(__name__)

NO_METHODS_REASON = "no test methods selected"
SKIP_NOT_ALLOWED = "skip() is only allowed in startup or setup"
PROPAGATED = (KeyboardInterrupt, GeneratorExit)


class ClassState(Enum):
    """Lifecycle states of a test class during a run."""

    NOT_STARTED = "not_started"
    STARTING = "starting"
    RUNNING = "running"
    FINISHING = "finishing"
    DONE = "done"
    SKIPPED_CLASS = "skipped_class"


class PhaseOutcome(NamedTuple):
    """What happened when a hook or method body was called."""

    skip_reason: str | None = None
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        """True if the phase completed normally."""
        return self.skip_reason is None and self.error is None


class _Failure(NamedTuple):
    phase: Phase
    kind: FailureKind
    message: str
    shortfall: int | None = None


async def _wait(awaitable: Awaitable[Any]) -> Any:
    return await awaitable


def invoke(
    func: Callable[[], Any], loop: asyncio.AbstractEventLoop | None = None
) -> PhaseOutcome:
    """Call a hook or method body, running it to completion if it is async.

    Awaitables run on ``loop`` when given, otherwise on a fresh loop.
    Everything raised becomes the outcome except ``KeyboardInterrupt`` and
    ``GeneratorExit``, which abort the run.
    """
    try:
        result = func()
        if inspect.isawaitable(result):
            if loop is None:
                asyncio.run(_wait(result))
            else:
                loop.run_until_complete(_wait(result))
    except SkipSignal as signal:
        return PhaseOutcome(skip_reason=signal.reason)
    except PROPAGATED:
        raise
    except BaseException as e:
        logger.debug("Phase raised", exc_info=e)
        return PhaseOutcome(error=e)
    return PhaseOutcome()


def _close_loop(loop: asyncio.AbstractEventLoop) -> None:
    """Cancel tasks still pending on ``loop`` and close it."""
    pending = asyncio.all_tasks(loop)
    for task in pending:
        task.cancel()
    if pending:
        loop.run_until_complete(asyncio.gather(*pending, return_exceptions=True))
    loop.run_until_complete(loop.shutdown_asyncgens())
    loop.close()


def describe_error(error: BaseException) -> str:
    """Return a one line description of ``error``."""
    return f"{type(error).__name__}: {error}"


class LifecycleExecutor:
    """Runs test classes one at a time, methods one at a time."""

    def __init__(self, report: ReportBuilder | None = None) -> None:
        """Initialize executor writing into ``report``."""
        self.report = report or ReportBuilder()
        self._loop: asyncio.AbstractEventLoop | None = None

    def run(self, spec: RunSpec) -> ExecutionReport:
        """Run every class in ``spec`` and return the finished report."""
        for selected in spec.classes:
            self.run_class(selected)
        return self.report.build()

    def run_class(self, selected: SelectedClass) -> ClassResult:
        """Run one class: startup, each method, finish."""
        definition = selected.definition
        name = definition.qualified_name
        self.report.start_class(name)
        state = ClassState.NOT_STARTED

        if not selected.methods:
            logger.info(f"{name}: {NO_METHODS_REASON}, skipping class")
            self.report.skip_class(NO_METHODS_REASON)
            return self._done(name, state)

        state = self._transition(name, state, ClassState.STARTING)
        try:
            instance = definition.python_class()
        except PROPAGATED:
            raise
        except BaseException as e:
            logger.error(f"{name}: could not instantiate class: {e}")
            self.report.add_hook_failure("startup", str(HookFailure("startup", e)))
            return self._done(name, state)

        # async hooks and bodies of one instance share this loop
        self._loop = asyncio.new_event_loop()
        try:
            return self._run_lifecycle(name, state, instance, selected)
        finally:
            _close_loop(self._loop)
            self._loop = None

    def _run_lifecycle(
        self,
        name: str,
        state: ClassState,
        instance: TestClass,
        selected: SelectedClass,
    ) -> ClassResult:
        startup = invoke(instance.startup, self._loop)
        if startup.skip_reason is not None:
            state = self._transition(name, state, ClassState.SKIPPED_CLASS)
            logger.info(f"{name}: skipped ({startup.skip_reason})")
            self.report.skip_class(startup.skip_reason)
            return self._done(name, state)
        if startup.error is not None:
            logger.error(f"{name}: startup failed: {startup.error}")
            self.report.add_hook_failure(
                "startup", str(HookFailure("startup", startup.error))
            )
            return self._done(name, state)

        state = self._transition(name, state, ClassState.RUNNING)
        for method in selected.methods:
            self.report.add_method(self.run_method(instance, method))

        state = self._transition(name, state, ClassState.FINISHING)
        finish = invoke(instance.finish, self._loop)
        if finish.skip_reason is not None:
            logger.error(f"{name}: finish failed: {SKIP_NOT_ALLOWED}")
            self.report.add_hook_failure("finish", SKIP_NOT_ALLOWED)
        elif finish.error is not None:
            logger.error(f"{name}: finish failed: {finish.error}")
            self.report.add_hook_failure(
                "finish", str(HookFailure("finish", finish.error))
            )

        return self._done(name, state)

    def run_method(
        self, instance: TestClass, method: TestMethodDefinition
    ) -> MethodResult:
        """Run setup, the method body and teardown as one unit."""
        started = time.perf_counter()
        instance.current_method = method.name
        instance.reset_assertions()
        counted: list[int] = []

        def result(**fields: Any) -> MethodResult:
            outcome = MethodResult(
                name=method.name,
                tags=method.tags,
                planned=method.plan,
                assertions=counted[0] if counted else instance.assertion_count,
                duration=time.perf_counter() - started,
                **fields,
            )
            log = logger.error if outcome.status == "failed" else logger.info
            log(f"{method.owner}.{method.name}: {outcome.status}")
            return outcome

        setup = invoke(instance.setup, self._loop)
        if setup.skip_reason is not None:
            return result(status="skipped", skip_reason=setup.skip_reason)
        if setup.error is not None:
            return result(
                status="failed",
                failure_phase="setup",
                failure_kind="error",
                message=describe_error(setup.error),
            )

        def call_body() -> Any:
            body_func = method_function(type(instance), method)
            return body_func.__get__(instance, type(instance))()

        body = invoke(call_body, self._loop)
        # setup and body assertions count towards the plan, teardown's do not
        counted.append(instance.assertion_count)
        failure = self._judge_body(method, body, counted[0])

        teardown = invoke(instance.teardown, self._loop)
        if not teardown.ok:
            detail = (
                SKIP_NOT_ALLOWED
                if teardown.error is None
                else describe_error(teardown.error)
            )
            if failure is None:
                failure = _Failure("teardown", "error", detail)
            else:
                failure = failure._replace(
                    message=f"{failure.message}; teardown failed: {detail}"
                )

        if failure is None:
            return result(status="passed")
        return result(
            status="failed",
            failure_phase=failure.phase,
            failure_kind=failure.kind,
            message=failure.message,
            shortfall=failure.shortfall,
        )

    def _judge_body(
        self, method: TestMethodDefinition, body: PhaseOutcome, count: int
    ) -> _Failure | None:
        if body.skip_reason is not None:
            return _Failure("test", "error", SKIP_NOT_ALLOWED)

        if method.plan is not None and count < method.plan:
            mismatch = PlanMismatch(method.plan, count)
            message = str(mismatch)
            if body.error is not None:
                message = f"{message}; {describe_error(body.error)}"
            return _Failure("test", "incomplete_plan", message, mismatch.shortfall)

        if body.error is not None:
            kind: FailureKind = (
                "assertion" if isinstance(body.error, AssertionError) else "error"
            )
            return _Failure("test", kind, describe_error(body.error))

        if method.plan is not None and count > method.plan:
            return _Failure(
                "test", "plan_mismatch", str(PlanMismatch(method.plan, count))
            )

        return None

    def _transition(
        self, name: str, current: ClassState, new: ClassState
    ) -> ClassState:
        logger.debug(f"{name}: {current.value} -> {new.value}")
        return new

    def _done(self, name: str, state: ClassState) -> ClassResult:
        self._transition(name, state, ClassState.DONE)
        return self.report.finish_class()
