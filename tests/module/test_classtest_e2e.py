"""End-to-end test running the CLI in a subprocess against a test tree."""
# ruff: noqa: S603

import json
import subprocess
import sys
import tempfile
import textwrap
from collections.abc import Generator
from pathlib import Path
from typing import Any

import pytest

SHARED = """
from boostsec.classtest import Role, TestClass, tags


class Searchable(Role):
    @tags("search")
    def test_search(self):
        self.ok(self.service == "catalog")


class ServiceBase(TestClass):
    roles = (Searchable,)

    def startup(self):
        self.service = "catalog"

    @tags("slow")
    def test_health(self):
        self.ok(False, "base health check is replaced in subclasses")
"""

CATALOG = """
from boostsec.classtest import TestClass, plan, tags

from e2e_shared import ServiceBase


class Catalog(ServiceBase):
    @tags("fast")
    def test_health(self):
        self.ok(True)

    @tags("online")
    def test_remote(self):
        self.ok(True)

    @tags("database")
    @plan(3)
    def test_partial(self):
        self.ok(True)


class Maintenance(TestClass):
    def startup(self):
        self.skip("maintenance window")

    def test_anything(self):
        self.ok(False)


class Flaky(TestClass):
    def setup(self):
        if self.current_method == "test_unstable":
            self.skip("known flaky")

    def test_unstable(self):
        self.ok(False)

    def test_stable(self):
        self.ok(True)
"""


@pytest.fixture(scope="module")
def test_tree() -> Generator[Path, None, None]:
    """Create a test tree with a config file."""
    with tempfile.TemporaryDirectory() as tmpdir:
        root = Path(tmpdir) / "t"
        root.mkdir()
        (root / "e2e_shared.py").write_text(textwrap.dedent(SHARED))
        (root / "test_catalog.py").write_text(textwrap.dedent(CATALOG))
        (Path(tmpdir) / "classtest.yaml").write_text(
            "root: t\nexclude_tags: [online]\n"
        )
        yield Path(tmpdir)


def _run(tree: Path, *args: str) -> tuple[int, dict[str, Any]]:
    process = subprocess.run(
        [sys.executable, "-m", "boostsec.classtest.cli", *args],
        cwd=tree,
        capture_output=True,
        text=True,
        check=False,
    )
    print(process.stderr)  # noqa: T201
    return process.returncode, json.loads(process.stdout)


def test_full_run(test_tree: Path) -> None:
    """A config driven run reports every class with the expected statuses."""
    code, output = _run(test_tree, "--config", "classtest.yaml")

    assert code == 1
    classes = {c["name"]: c for c in output["classes"]}
    assert set(classes) == {
        "test_catalog.Catalog",
        "test_catalog.Maintenance",
        "test_catalog.Flaky",
    }

    catalog = classes["test_catalog.Catalog"]
    methods = {m["name"]: m for m in catalog["methods"]}
    assert list(methods) == ["test_search", "test_health", "test_partial"]
    assert methods["test_health"]["status"] == "passed"
    assert sorted(methods["test_health"]["tags"]) == ["fast", "slow"]
    assert methods["test_search"]["status"] == "passed"
    assert methods["test_partial"]["status"] == "failed"
    assert methods["test_partial"]["failure_kind"] == "incomplete_plan"
    assert methods["test_partial"]["shortfall"] == 2

    assert classes["test_catalog.Maintenance"]["status"] == "skipped"
    assert classes["test_catalog.Maintenance"]["methods"] == []

    flaky = {m["name"]: m["status"] for m in classes["test_catalog.Flaky"]["methods"]}
    assert flaky == {"test_unstable": "skipped", "test_stable": "passed"}

    assert output["total_failures"] == 1


def test_explicit_class_and_tag_override(test_tree: Path) -> None:
    """Command line options narrow the configured run."""
    code, output = _run(
        test_tree,
        "--config",
        "classtest.yaml",
        "--class",
        "Catalog",
        "--exclude-tag",
        "database",
    )

    assert code == 0
    assert [c["name"] for c in output["classes"]] == ["test_catalog.Catalog"]
    methods = [m["name"] for m in output["classes"][0]["methods"]]
    assert methods == ["test_search", "test_health", "test_remote"]


def test_repeat_run_has_same_shape(test_tree: Path) -> None:
    """Running twice gives the same classes, methods and statuses."""

    def shape(output: dict[str, Any]) -> list[Any]:
        return [
            (c["name"], c["status"], [(m["name"], m["status"]) for m in c["methods"]])
            for c in output["classes"]
        ]

    _, first = _run(test_tree, "--config", "classtest.yaml")
    _, second = _run(test_tree, "--config", "classtest.yaml")

    assert shape(first) == shape(second)
