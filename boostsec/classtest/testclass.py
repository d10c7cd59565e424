"""Base classes and decorators for writing test classes."""

import inspect
from collections.abc import Callable, Iterable, Iterator, Mapping
from contextlib import contextmanager
from typing import Any, ClassVar, NoReturn, TypeVar

from boostsec.classtest.errors import AssertionFailure, SkipSignal
from boostsec.classtest.models.test_definition import (
    TEST_METHOD_PREFIX,
    LayerMetadata,
    MethodMetadata,
)

F = TypeVar("F", bound=Callable[..., Any])

LAYER_ATTR = "__classtest_layer__"
TAGS_ATTR = "__classtest_tags__"
PLAN_ATTR = "__classtest_plan__"


def tags(*names: str) -> Callable[[F], F]:
    """Attach tags to a test method."""

    def decorator(func: F) -> F:
        existing: frozenset[str] = getattr(func, TAGS_ATTR, frozenset())
        setattr(func, TAGS_ATTR, existing | frozenset(names))
        return func

    return decorator


def plan(count: int) -> Callable[[F], F]:
    """Declare how many assertions a test method is expected to run."""
    if count < 0:
        raise ValueError(f"Plan must be a non-negative integer, got {count}")

    def decorator(func: F) -> F:
        setattr(func, PLAN_ATTR, count)
        return func

    return decorator


def _as_tag_set(value: str | Iterable[str]) -> frozenset[str]:
    if isinstance(value, str):
        return frozenset({value})
    return frozenset(value)


def build_layer(cls: type) -> LayerMetadata:
    """Record test methods, tags and plans declared directly on ``cls``."""
    declared: Mapping[str, str | Iterable[str]] = vars(cls).get("method_tags", {})
    extra = {name: _as_tag_set(value) for name, value in declared.items()}

    methods: dict[str, MethodMetadata] = {}
    for name, value in vars(cls).items():
        if not name.startswith(TEST_METHOD_PREFIX) or not inspect.isfunction(value):
            continue
        method_tags = frozenset(getattr(value, TAGS_ATTR, frozenset()))
        methods[name] = MethodMetadata(
            tags=method_tags | extra.pop(name, frozenset()),
            plan=getattr(value, PLAN_ATTR, None),
        )

    return LayerMetadata(methods=methods, touched=extra)


def layer_of(cls: type) -> LayerMetadata:
    """Return the metadata recorded for ``cls`` itself, not its bases."""
    layer = vars(cls).get(LAYER_ATTR)
    if layer is None:
        return LayerMetadata()
    return layer


class Role:
    """Bundle of test methods that test classes compose through ``roles``."""

    __test__ = False

    method_tags: ClassVar[Mapping[str, str | Iterable[str]]] = {}

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        setattr(cls, LAYER_ATTR, build_layer(cls))


class TestClass:
    """Base class for test classes.

    Methods whose names start with ``test_`` are test methods. Override
    ``startup``/``finish`` to run code once per class and ``setup``/``teardown``
    to run code around every test method. Call ``self.skip(reason)`` from
    ``startup`` to skip the whole class or from ``setup`` to skip one method.
    """

    __test__ = False

    roles: ClassVar[tuple[type[Role], ...]] = ()
    method_tags: ClassVar[Mapping[str, str | Iterable[str]]] = {}
    abstract: ClassVar[bool] = False

    #: Name of the test method being run, set before ``setup`` is called.
    current_method: str | None = None
    _assertion_count = 0

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        for role in vars(cls).get("roles", ()):
            if not (isinstance(role, type) and issubclass(role, Role)):
                raise TypeError(f"{cls.__qualname__}.roles: {role!r} is not a Role")
        setattr(cls, LAYER_ATTR, build_layer(cls))

    def startup(self) -> Any:
        """Run once before any test method of the class."""

    def setup(self) -> Any:
        """Run before each test method."""

    def teardown(self) -> Any:
        """Run after each test method."""

    def finish(self) -> Any:
        """Run once after all test methods of the class."""

    def skip(self, reason: str) -> NoReturn:
        """Skip the class (from startup) or the current method (from setup)."""
        raise SkipSignal(reason)

    @property
    def assertion_count(self) -> int:
        """Number of assertions run by the current test method."""
        return self._assertion_count

    def reset_assertions(self) -> None:
        """Reset the assertion counter before a test method runs."""
        self._assertion_count = 0

    def ok(self, condition: object, message: str = "") -> None:
        """Assert that ``condition`` is truthy."""
        self._assertion_count += 1
        if not condition:
            raise AssertionFailure(message or "condition is not true")

    def equal(self, got: object, expected: object, message: str = "") -> None:
        """Assert that ``got == expected``."""
        self._assertion_count += 1
        if got != expected:
            raise AssertionFailure(message or f"got {got!r}, expected {expected!r}")

    def not_equal(self, got: object, unexpected: object, message: str = "") -> None:
        """Assert that ``got != unexpected``."""
        self._assertion_count += 1
        if got == unexpected:
            raise AssertionFailure(message or f"got unexpected value {got!r}")

    def contains(self, container: Any, item: object, message: str = "") -> None:
        """Assert that ``item in container``."""
        self._assertion_count += 1
        if item not in container:
            raise AssertionFailure(message or f"{item!r} not found in {container!r}")

    @contextmanager
    def raises(
        self, expected: type[BaseException], message: str = ""
    ) -> Iterator[None]:
        """Assert that the block raises ``expected``."""
        self._assertion_count += 1
        try:
            yield
        except expected:
            return
        raise AssertionFailure(message or f"{expected.__name__} was not raised")
