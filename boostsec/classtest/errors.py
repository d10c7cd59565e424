"""Exceptions raised while discovering, composing, selecting and running tests."""


class ClassTestError(Exception):
    """Base class for all framework errors."""


class DiscoveryError(ClassTestError):
    """A candidate test file could not be loaded as test class definitions."""

    def __init__(self, path: object, reason: str) -> None:
        """Initialize with the offending path and a reason."""
        super().__init__(f"Cannot load test classes from {path}: {reason}")
        self.path = path
        self.reason = reason


class CompositionConflict(ClassTestError):
    """Two roles contribute the same method with different tag sets."""

    def __init__(self, class_name: str, method_name: str, roles: list[str]) -> None:
        """Initialize with the composing class, the method and the roles."""
        super().__init__(
            f"{class_name}: roles {', '.join(roles)} all contribute "
            f"'{method_name}' with different tags and the class does not "
            "override it"
        )
        self.class_name = class_name
        self.method_name = method_name
        self.roles = roles


class UnknownClassError(ClassTestError):
    """An explicit class filter names a class that was not discovered."""

    def __init__(self, names: list[str]) -> None:
        """Initialize with the unknown names."""
        super().__init__(f"Unknown test class(es): {', '.join(names)}")
        self.names = names


class AssertionFailure(ClassTestError, AssertionError):
    """A counted assertion failed inside a test method."""


class PlanMismatch(ClassTestError):
    """The number of assertions run differs from the declared plan."""

    def __init__(self, planned: int, actual: int) -> None:
        """Initialize with planned and actual assertion counts."""
        if actual < planned:
            message = (
                f"Incomplete plan: planned {planned} assertions but ran {actual}"
            )
        else:
            message = f"Planned {planned} assertions but ran {actual}"
        super().__init__(message)
        self.planned = planned
        self.actual = actual

    @property
    def shortfall(self) -> int:
        """Number of planned assertions that never ran."""
        return max(self.planned - self.actual, 0)


class HookFailure(ClassTestError):
    """A lifecycle hook raised."""

    def __init__(self, phase: str, error: BaseException) -> None:
        """Initialize with the hook phase and the original error."""
        super().__init__(f"{phase} failed: {type(error).__name__}: {error}")
        self.phase = phase
        self.error = error


class SkipSignal(BaseException):  # noqa: N818
    """Voluntary early exit raised by ``TestClass.skip``.

    Derives from ``BaseException`` so that ``except Exception`` blocks in
    test code do not swallow it.
    """

    def __init__(self, reason: str) -> None:
        """Initialize with the skip reason."""
        super().__init__(reason)
        self.reason = reason
