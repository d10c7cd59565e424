"""CLI entry point for running test classes."""

import json
import logging
import sys
from pathlib import Path
from typing import Optional

import typer

from boostsec.classtest.config import load_runner_config, merge_overrides
from boostsec.classtest.errors import ClassTestError
from boostsec.classtest.models.runner_config import RunnerConfig
from boostsec.classtest.models.test_result import ExecutionReport
from boostsec.classtest.orchestrator import TestOrchestrator

# Configure logging - force reconfiguration
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    stream=sys.stderr,
    force=True,  # Force reconfiguration even if already set up
)
logger = logging.getLogger(__name__)

EXIT_FAILURES = 1
EXIT_USAGE = 2

app = typer.Typer()


@app.command()
def main(  # noqa: PLR0913
    root: Optional[Path] = typer.Option(  # noqa: B008, UP007
        None, help="Directory containing test class files (default: tests)"
    ),
    classes: list[str] = typer.Option(  # noqa: B008
        [], "--class", "-c", help="Run only this test class (repeatable)"
    ),
    include_tags: list[str] = typer.Option(  # noqa: B008
        [], "--include-tag", help="Run only methods with this tag (repeatable)"
    ),
    exclude_tags: list[str] = typer.Option(  # noqa: B008
        [], "--exclude-tag", help="Skip methods with this tag (repeatable)"
    ),
    include_methods: Optional[str] = typer.Option(  # noqa: UP007
        None, help="Regex test method names must match"
    ),
    exclude_methods: Optional[str] = typer.Option(  # noqa: UP007
        None, help="Regex test method names must not match"
    ),
    pattern: Optional[str] = typer.Option(  # noqa: UP007
        None, help="Glob for test files (default: test_*.py)"
    ),
    config: Optional[Path] = typer.Option(  # noqa: B008, UP007
        None, help="YAML file with runner configuration"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Discover and run test classes."""
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    try:
        runner_config = load_runner_config(config) if config else RunnerConfig()
        runner_config = merge_overrides(
            runner_config,
            root=root,
            pattern=pattern,
            classes=classes,
            include_tags=include_tags,
            exclude_tags=exclude_tags,
            include_methods=include_methods,
            exclude_methods=exclude_methods,
        )
    except (FileNotFoundError, ValueError) as e:
        logger.error(f"Invalid configuration: {e}")
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=EXIT_USAGE)

    logger.info("=" * 80)
    logger.info("Class Test Runner - Starting")
    logger.info("=" * 80)
    logger.info(f"Test root: {runner_config.root}")
    logger.info(f"Classes: {runner_config.classes or 'all'}")
    logger.info(f"Include tags: {runner_config.include_tags}")
    logger.info(f"Exclude tags: {runner_config.exclude_tags}")

    try:
        report = TestOrchestrator(runner_config).run()
    except (ClassTestError, ValueError) as e:
        logger.error(f"Cannot start test run: {e}")
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=EXIT_USAGE)

    _log_summary(report)
    typer.echo(json.dumps(report.model_dump(mode="json"), indent=2))

    if report.has_failures:
        logger.error(
            f"Tests failed: {report.total_failures} failures "
            f"in {report.total_classes} classes"
        )
        raise typer.Exit(code=EXIT_FAILURES)


def _log_summary(report: ExecutionReport) -> None:
    logger.info("=" * 80)
    logger.info("Test Results Summary:")
    logger.info("=" * 80)
    for result in report.classes:
        if result.status == "failed":
            logger.error(f"✗ {result.name}: {result.failed} failed")
            for hook in result.hook_failures:
                logger.error(f"  {hook.phase}: {hook.message}")
            for method in result.methods:
                if method.status == "failed":
                    logger.error(
                        f"  {method.name} ({method.failure_phase}): {method.message}"
                    )
        elif result.status == "skipped":
            logger.info(f"- {result.name}: skipped ({result.skip_reason})")
        else:
            logger.info(
                f"✓ {result.name}: {result.passed} passed, {result.skipped} skipped "
                f"({result.duration:.2f}s)"
            )
    logger.info(
        f"Total: {report.total_classes} classes, {report.total_methods} methods, "
        f"{report.passed} passed, {report.skipped} skipped, "
        f"{report.total_failures} failures"
    )


if __name__ == "__main__":  # pragma: no cover
    app()
