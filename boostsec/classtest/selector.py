"""Select the classes and methods to run from discovered test classes."""

import logging
import re
from collections.abc import Iterable, Sequence

from boostsec.classtest.errors import UnknownClassError
from boostsec.classtest.models.run_spec import RunSpec, SelectedClass
from boostsec.classtest.models.test_definition import (
    TestClassDefinition,
    TestMethodDefinition,
)

logger = logging.getLogger(__name__)


def method_selected(
    method: TestMethodDefinition,
    include_tags: frozenset[str],
    exclude_tags: frozenset[str],
    include_methods: re.Pattern[str] | None = None,
    exclude_methods: re.Pattern[str] | None = None,
) -> bool:
    """Return True if ``method`` passes the tag and name filters."""
    if method.tags & exclude_tags:
        return False
    if include_tags and not method.tags & include_tags:
        return False
    if include_methods and not include_methods.search(method.name):
        return False
    return not (exclude_methods and exclude_methods.search(method.name))


def select_classes(
    classes: Sequence[TestClassDefinition], class_names: Sequence[str]
) -> list[TestClassDefinition]:
    """Return the runnable candidate classes.

    With an empty ``class_names`` every runnable class is a candidate.

    Raises:
        UnknownClassError: If a name matches no discovered class

    """
    if not class_names:
        return [cls for cls in classes if cls.runnable]

    unknown = [
        name for name in class_names if not any(cls.matches(name) for cls in classes)
    ]
    if unknown:
        raise UnknownClassError(unknown)

    selected: list[TestClassDefinition] = []
    for cls in classes:
        if not any(cls.matches(name) for name in class_names):
            continue
        if not cls.runnable:
            logger.warning(f"{cls.qualified_name} is a base class only, not running it")
            continue
        selected.append(cls)
    return selected


def build_run_spec(
    classes: Sequence[TestClassDefinition],
    class_names: Sequence[str] = (),
    include_tags: Iterable[str] = (),
    exclude_tags: Iterable[str] = (),
    include_methods: str | None = None,
    exclude_methods: str | None = None,
) -> RunSpec:
    """Resolve which classes and methods run.

    Args:
        classes: Composed test class definitions
        class_names: Explicit classes to run, empty for all
        include_tags: Run only methods carrying one of these tags, empty for all
        exclude_tags: Never run methods carrying one of these tags
        include_methods: Regex a method name must match
        exclude_methods: Regex a method name must not match

    Returns:
        The resolved run request; classes left with no methods are kept so
        they can be reported as skipped

    Raises:
        UnknownClassError: If an explicit class name is unknown
        ValueError: If a method name regex is invalid

    """
    include = frozenset(include_tags)
    exclude = frozenset(exclude_tags)
    include_re = _compile(include_methods)
    exclude_re = _compile(exclude_methods)

    selected = [
        SelectedClass(
            definition=cls,
            methods=tuple(
                method
                for method in cls.methods
                if method_selected(method, include, exclude, include_re, exclude_re)
            ),
        )
        for cls in select_classes(classes, class_names)
    ]

    spec = RunSpec(
        classes=tuple(selected),
        include_tags=include,
        exclude_tags=exclude,
        include_methods=include_methods,
        exclude_methods=exclude_methods,
    )
    logger.info(
        f"Selected {spec.total_methods} methods in {len(spec.classes)} classes"
    )
    return spec


def _compile(pattern: str | None) -> re.Pattern[str] | None:
    if pattern is None:
        return None
    try:
        return re.compile(pattern)
    except re.error as e:
        raise ValueError(f"Invalid method name pattern '{pattern}': {e}") from e
