"""Test orchestrator coordinating discovery, selection and execution."""

import logging

from boostsec.classtest.composition import compose
from boostsec.classtest.executor import LifecycleExecutor
from boostsec.classtest.models.run_spec import RunSpec
from boostsec.classtest.models.runner_config import RunnerConfig
from boostsec.classtest.models.test_result import ExecutionReport
from boostsec.classtest.selector import build_run_spec
from boostsec.classtest.test_loader import FileFinder, discover_test_classes

logger = logging.getLogger(__name__)


class TestOrchestrator:
    """Orchestrates a complete run for one configuration."""

    __test__ = False

    def __init__(
        self, config: RunnerConfig, file_finder: FileFinder | None = None
    ) -> None:
        """Initialize orchestrator with a run configuration."""
        self.config = config
        self.file_finder = file_finder

    def plan_run(self) -> RunSpec:
        """Discover, compose and select without running anything.

        Raises:
            DiscoveryError: If a test file cannot be loaded
            CompositionConflict: If roles conflict in a class
            UnknownClassError: If an explicit class name is unknown

        """
        logger.info(f"Orchestrator: Discovering test classes under {self.config.root}")
        definitions = discover_test_classes(
            self.config.root, self.config.pattern, self.file_finder
        )

        logger.info("Orchestrator: Composing effective method sets...")
        composed = [compose(definition) for definition in definitions]

        logger.info("Orchestrator: Selecting classes and methods...")
        return build_run_spec(
            composed,
            class_names=self.config.classes,
            include_tags=self.config.include_tags,
            exclude_tags=self.config.exclude_tags,
            include_methods=self.config.include_methods,
            exclude_methods=self.config.exclude_methods,
        )

    def run(self) -> ExecutionReport:
        """Run the configured tests and return the report."""
        spec = self.plan_run()

        logger.info(f"Executing {len(spec.classes)} test classes...")
        report = LifecycleExecutor().run(spec)
        logger.info(
            f"Test execution completed: {report.total_methods} methods, "
            f"{report.total_failures} failures"
        )
        return report
