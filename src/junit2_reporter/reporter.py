"""Event-driven JUnit reporter for multi-browser test runs."""

import time
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.table import Table

from .aggregator import Aggregator
from .config import JUnitReporterConfig
from .junit_reporter import serialize, utc_timestamp
from .logging import get_logger
from .models import Agent, SpecResult
from .writer import write_report


class JUnit2Reporter:
    """Collects spec results per browser and writes a JUnit XML report.

    The host calls the ``on_*`` handlers as events arrive. State is reset by
    ``on_run_start`` and the report is written once, by ``on_run_complete``.
    """

    def __init__(
        self,
        config: JUnitReporterConfig | Mapping[str, Any] | None = None,
        console: Console | None = None,
        clock: Callable[[], float] = time.time,
        timestamp: Callable[[], str] = utc_timestamp,
    ) -> None:
        """Initialize the reporter.

        Args:
            config: Reporter options, as a model or a raw mapping.
            console: Rich console for the run summary (creates new if None).
            clock: Wall-clock source in seconds.
            timestamp: Provider of the suite timestamp.
        """
        if config is None:
            config = JUnitReporterConfig()
        elif not isinstance(config, JUnitReporterConfig):
            config = JUnitReporterConfig.model_validate(dict(config))
        self.config = config
        self.console = console or Console()
        self.aggregator = Aggregator(clock=clock)
        self.adapters: list[Any] = []
        self.last_report_path: Path | None = None
        self._timestamp = timestamp
        self._log = get_logger("report")

    def on_run_start(self, browsers: Any = None) -> None:
        self.aggregator.reset_run()
        self.last_report_path = None

    def on_browser_start(self, browser: Agent) -> None:
        pass

    def on_browser_log(self, browser: Agent, message: str, level: str) -> None:
        self.aggregator.record_agent_log(browser, message, level)

    def on_browser_error(self, browser: Agent, error: object) -> None:
        self.aggregator.record_agent_error(browser, error)

    def on_spec_complete(self, browser: Agent, result: SpecResult | Mapping[str, Any]) -> None:
        """Record one finished spec.

        Args:
            browser: Browser that ran the spec.
            result: Spec result, or the host's mapping of the same fields.
        """
        if not isinstance(result, SpecResult):
            result = SpecResult.from_dict(result)
        self.aggregator.record_case_result(browser, result)

    def on_run_complete(self, browsers: Any = None, results: Any = None) -> Path | None:
        """Serialize the run and write the report.

        Returns:
            Path of the written report, or None if writing failed.
        """
        document = self.generate_report()
        self.aggregator.finalize()

        if self.config.console_summary:
            self.print_summary()

        self.last_report_path = write_report(document, self.config, self._log)
        return self.last_report_path

    def generate_report(self) -> str:
        """Serialize the current run as JUnit XML text."""
        return serialize(
            self.aggregator.agents,
            self.aggregator.root,
            self.aggregator.elapsed_seconds,
            class_name_format=self.config.class_name_format,
            timestamp=self._timestamp,
        )

    def get_summary(self) -> dict[str, dict[str, Any]]:
        """Get per-browser counters keyed by browser name.

        Returns:
            Dictionary with one entry per browser seen in the run.
        """
        return {
            summary.name: {**summary.to_dict(), "log_entries": len(summary.log)}
            for summary in self.aggregator.agents.values()
        }

    def print_summary(self) -> None:
        """Print per-browser results in a formatted table."""
        table = Table(title="JUnit Report Summary", show_header=True, header_style="bold cyan")
        table.add_column("Browser", style="bold")
        table.add_column("Passed", justify="right", style="green")
        table.add_column("Failed", justify="right", style="red")
        table.add_column("Skipped", justify="right", style="yellow")
        table.add_column("Total", justify="right")

        for summary in self.aggregator.agents.values():
            table.add_row(
                summary.name,
                str(summary.successes),
                str(summary.failures),
                str(summary.skipped),
                str(summary.total),
            )

        self.console.print(table)
