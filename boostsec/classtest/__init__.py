"""Class based test discovery and execution."""

from boostsec.classtest.errors import (
    AssertionFailure,
    ClassTestError,
    CompositionConflict,
    DiscoveryError,
    HookFailure,
    PlanMismatch,
    SkipSignal,
    UnknownClassError,
)
from boostsec.classtest.testclass import Role, TestClass, plan, tags

__all__ = [
    "AssertionFailure",
    "ClassTestError",
    "CompositionConflict",
    "DiscoveryError",
    "HookFailure",
    "PlanMismatch",
    "Role",
    "SkipSignal",
    "TestClass",
    "UnknownClassError",
    "plan",
    "tags",
]
