"""Data model for aggregated test results."""

from collections.abc import Hashable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol


class Agent(Protocol):
    """An execution agent (browser) reporting results."""

    id: Hashable
    name: str


@dataclass(frozen=True)
class Browser:
    """Concrete agent identity for hosts that do not bring their own."""

    id: Hashable
    name: str


class Outcome(str, Enum):
    """Classification of a single case-complete event."""

    SKIPPED = "skipped"
    SUCCESS = "success"
    FAILURE = "failure"

    @classmethod
    def classify(cls, skipped: bool, success: bool) -> "Outcome":
        """Classify an event; skipped wins over success, anything else failed."""
        if skipped:
            return cls.SKIPPED
        if success:
            return cls.SUCCESS
        return cls.FAILURE


@dataclass
class SpecResult:
    """Payload of a case-complete event."""

    suite: list[str]
    description: str
    skipped: bool = False
    success: bool = False
    time: float | None = None
    log: list[str] | None = None

    @property
    def outcome(self) -> Outcome:
        return Outcome.classify(self.skipped, self.success)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SpecResult":
        """Build a result from the host's event mapping.

        Args:
            data: Mapping with ``suite``, ``description``, ``skipped``,
                ``success``, ``time`` and ``log`` keys.

        Returns:
            SpecResult with the same values.
        """
        return cls(
            suite=list(data["suite"]),
            description=data["description"],
            skipped=bool(data.get("skipped", False)),
            success=bool(data.get("success", False)),
            time=data.get("time"),
            log=list(data["log"]) if data.get("log") is not None else None,
        )


@dataclass
class ResultCounts:
    """Pass/fail/skip counters where total is always the sum of the other three."""

    successes: int = 0
    failures: int = 0
    skipped: int = 0
    total: int = 0

    def record(self, outcome: Outcome) -> None:
        """Count one event under exactly one outcome."""
        self.total += 1
        if outcome is Outcome.SKIPPED:
            self.skipped += 1
        elif outcome is Outcome.SUCCESS:
            self.successes += 1
        else:
            self.failures += 1

    def to_dict(self) -> dict[str, int]:
        """Convert to dictionary for serialization."""
        return {
            "successes": self.successes,
            "failures": self.failures,
            "skipped": self.skipped,
            "total": self.total,
        }


@dataclass
class LogEntry:
    """A console message captured from an agent."""

    level: str
    message: str


@dataclass
class AgentSummary(ResultCounts):
    """Run-wide counters and captured log for one agent."""

    name: str = ""
    log: list[LogEntry] = field(default_factory=list)


@dataclass
class CaseResult(ResultCounts):
    """Accumulated results for one (suite path, description) identity.

    ``log`` holds the lines of the most recent failure. ``time`` is the
    elapsed milliseconds reported by the most recent event.
    """

    log: list[str] | None = None
    time: float | None = None


@dataclass
class SuiteNode:
    """A node of the suite tree, addressed by path segment from its parent."""

    children: dict[str, "SuiteNode"] = field(default_factory=dict)
    results: dict[str, CaseResult] = field(default_factory=dict)

    def child(self, name: str) -> "SuiteNode":
        """Return the named child, creating it if needed."""
        node = self.children.get(name)
        if node is None:
            node = self.children[name] = SuiteNode()
        return node

    def result(self, description: str) -> CaseResult:
        """Return the case result for ``description``, creating a zeroed one if needed."""
        case = self.results.get(description)
        if case is None:
            case = self.results[description] = CaseResult()
        return case
