"""Compute the effective test method set of a class from roles and ancestors."""

import logging
from collections.abc import Callable
from typing import Any

from boostsec.classtest.errors import CompositionConflict
from boostsec.classtest.models.test_definition import (
    TestClassDefinition,
    TestMethodDefinition,
)
from boostsec.classtest.test_loader import qualified_name
from boostsec.classtest.testclass import Role, TestClass, layer_of

logger = logging.getLogger(__name__)


def ancestor_chain(cls: type[TestClass]) -> list[type[TestClass]]:
    """Return the test class ancestors of ``cls``, furthest first."""
    return [
        base
        for base in reversed(cls.__mro__[1:])
        if issubclass(base, TestClass) and base is not TestClass
    ]


def role_chain(cls: type[TestClass]) -> list[type[Role]]:
    """Return roles composed by ``cls`` or its ancestors, furthest first."""
    roles: list[type[Role]] = []
    for layer in [*ancestor_chain(cls), cls]:
        for role in vars(layer).get("roles", ()):
            if role not in roles:
                roles.append(role)
    return roles


def resolve_methods(cls: type[TestClass]) -> tuple[TestMethodDefinition, ...]:
    """Merge roles, ancestors and the class itself into one method set.

    Layers are applied in order roles, ancestors (furthest first), class.
    A later definition of a name replaces the earlier one in place, and the
    tags of every layer that defined or touched the name are unioned.

    Raises:
        CompositionConflict: If roles disagree on the tags of a method that
            no ancestor and not the class itself redefines

    """
    owner = qualified_name(cls)
    roles = role_chain(cls)
    classes = [*ancestor_chain(cls), cls]
    _check_role_conflicts(owner, roles, classes)

    bodies: dict[str, tuple[type, int | None]] = {}
    tags: dict[str, frozenset[str]] = {}
    for layer_cls in [*roles, *classes]:
        layer = layer_of(layer_cls)
        for name, metadata in layer.methods.items():
            bodies[name] = (layer_cls, metadata.plan)
            tags[name] = tags.get(name, frozenset()) | metadata.tags
        for name, extra in layer.touched.items():
            tags[name] = tags.get(name, frozenset()) | extra

    return tuple(
        TestMethodDefinition(
            name=name,
            owner=owner,
            origin=qualified_name(layer_cls),
            tags=tags[name],
            plan=method_plan,
            function=vars(layer_cls)[name],
        )
        for name, (layer_cls, method_plan) in bodies.items()
    )


def compose(definition: TestClassDefinition) -> TestClassDefinition:
    """Return ``definition`` with its effective method set filled in."""
    methods = resolve_methods(definition.python_class)
    logger.debug(
        f"{definition.qualified_name}: {len(methods)} effective methods "
        f"({len(definition.own_methods)} own)"
    )
    return definition.model_copy(update={"methods": methods})


def method_function(
    cls: type[TestClass], method: TestMethodDefinition
) -> Callable[..., Any]:
    """Return the function that implements ``method`` for ``cls``.

    Definitions built by discovery or composition carry their function.
    Otherwise the first layer named ``method.origin`` that defines the
    method is used. Layers made by one factory share a qualified name.

    Raises:
        LookupError: If no such layer defines the method

    """
    if method.function is not None:
        return method.function
    for layer_cls in [*role_chain(cls), *cls.__mro__]:
        if qualified_name(layer_cls) == method.origin and method.name in vars(
            layer_cls
        ):
            return vars(layer_cls)[method.name]
    raise LookupError(f"{method.origin} does not define {method.name}")


def _check_role_conflicts(
    owner: str, roles: list[type[Role]], classes: list[type[TestClass]]
) -> None:
    overridden = {name for cls in classes for name in layer_of(cls).methods}

    contributors: dict[str, list[type[Role]]] = {}
    for role in roles:
        for name in layer_of(role).methods:
            contributors.setdefault(name, []).append(role)

    for name, providers in contributors.items():
        if len(providers) < 2 or name in overridden:
            continue
        tag_sets = {layer_of(role).methods[name].tags for role in providers}
        if len(tag_sets) > 1:
            raise CompositionConflict(
                owner, name, [qualified_name(role) for role in providers]
            )
