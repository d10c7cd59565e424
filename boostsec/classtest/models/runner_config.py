"""Configuration model for a test run."""

from pathlib import Path

from pydantic import BaseModel, Field, field_validator

DEFAULT_PATTERN = "test_*.py"


class RunnerConfig(BaseModel):
    """Options controlling discovery and selection."""

    root: Path = Field(default=Path("tests"), description="Directory to discover")
    pattern: str = Field(
        default=DEFAULT_PATTERN, description="Glob for candidate test files"
    )
    classes: list[str] = Field(
        default_factory=list, description="Class names to run (empty = all)"
    )
    include_tags: list[str] = Field(
        default_factory=list, description="Run only methods with one of these tags"
    )
    exclude_tags: list[str] = Field(
        default_factory=list, description="Never run methods with these tags"
    )
    include_methods: str | None = Field(
        default=None, description="Regex method names must match"
    )
    exclude_methods: str | None = Field(
        default=None, description="Regex method names must not match"
    )

    @field_validator("classes", "include_tags", "exclude_tags", mode="before")
    @classmethod
    def _single_value_as_list(cls, value: object) -> object:
        if isinstance(value, str):
            return [value]
        return value
