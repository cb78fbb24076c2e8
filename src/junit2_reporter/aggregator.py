"""Incremental aggregation of case-complete events into a suite tree."""

import time
from collections.abc import Callable, Hashable
from enum import Enum

from .logging import get_logger
from .models import Agent, AgentSummary, LogEntry, Outcome, SpecResult, SuiteNode


class RunState(str, Enum):
    """Lifecycle of a single reporting run."""

    IDLE = "idle"
    ACTIVE = "active"
    FINALIZED = "finalized"


class Aggregator:
    """Owns the per-agent summaries and the shared suite tree for one run.

    Results are merged by (suite path, description) regardless of which agent
    reported them, so counts from several agents accumulate on one case.
    """

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        """Initialize an idle aggregator.

        Args:
            clock: Wall-clock source in seconds, used for run elapsed time.
        """
        self._clock = clock
        self._start_time: float | None = None
        self.state = RunState.IDLE
        self.agents: dict[Hashable, AgentSummary] = {}
        self.root = SuiteNode()

    def reset_run(self) -> None:
        """Discard all state and start a new run."""
        self.agents = {}
        self.root = SuiteNode()
        self._start_time = self._clock()
        self.state = RunState.ACTIVE

    def finalize(self) -> None:
        """Mark the run as serialized.

        Late events are still recorded and a later serialization includes them.
        """
        self._require_started()
        self.state = RunState.FINALIZED

    def record_agent_log(self, agent: Agent, message: str, level: str) -> None:
        """Append a console message to the agent's summary."""
        self._require_started()
        if level == "log":
            level = "info"
        self._summary_for(agent).log.append(LogEntry(level=level, message=message))

    def record_agent_error(self, agent: Agent, error: object) -> None:
        """Report an agent error on the agent's own logger.

        The error is not kept in any summary and never reaches the report.
        """
        get_logger(f"browser.{agent.name}").error("%s", error)

    def record_case_result(self, agent: Agent, result: SpecResult) -> None:
        """Fold one case-complete event into the agent summary and the suite tree."""
        self._require_started()
        outcome = result.outcome
        self._summary_for(agent).record(outcome)

        node = self.root
        for segment in result.suite:
            node = node.child(segment)

        case = node.result(result.description)
        case.record(outcome)
        if outcome is Outcome.FAILURE:
            case.log = list(result.log) if result.log is not None else None
        case.time = result.time

    def elapsed_seconds(self) -> float:
        """Wall-clock seconds since ``reset_run()``, to the millisecond."""
        if self._start_time is None:
            return 0.0
        return round(self._clock() - self._start_time, 3)

    def _summary_for(self, agent: Agent) -> AgentSummary:
        summary = self.agents.get(agent.id)
        if summary is None:
            summary = self.agents[agent.id] = AgentSummary(name=agent.name)
        return summary

    def _require_started(self) -> None:
        if self.state is RunState.IDLE:
            raise RuntimeError("No run in progress; call reset_run() to start a run")
