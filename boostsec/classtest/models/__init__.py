"""Data models for test definitions, run configuration, and results."""

from boostsec.classtest.models.run_spec import RunSpec, SelectedClass
from boostsec.classtest.models.runner_config import RunnerConfig
from boostsec.classtest.models.test_definition import (
    LayerMetadata,
    MethodMetadata,
    TestClassDefinition,
    TestMethodDefinition,
)
from boostsec.classtest.models.test_result import (
    ClassResult,
    ExecutionReport,
    HookFailureRecord,
    MethodResult,
)

__all__ = [
    "ClassResult",
    "ExecutionReport",
    "HookFailureRecord",
    "LayerMetadata",
    "MethodMetadata",
    "MethodResult",
    "RunSpec",
    "RunnerConfig",
    "SelectedClass",
    "TestClassDefinition",
    "TestMethodDefinition",
]
