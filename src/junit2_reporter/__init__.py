"""Reporter registry and factory for junit2_reporter."""

from typing import Any

from .aggregator import Aggregator, RunState
from .config import ConfigError, JUnitReporterConfig, load_config
from .junit_reporter import escape_xml, serialize
from .models import AgentSummary, Browser, CaseResult, Outcome, SpecResult, SuiteNode
from .reporter import JUnit2Reporter

__all__ = [
    "Aggregator",
    "AgentSummary",
    "Browser",
    "CaseResult",
    "ConfigError",
    "JUnit2Reporter",
    "JUnitReporterConfig",
    "Outcome",
    "REPORTER_REGISTRY",
    "RunState",
    "SpecResult",
    "SuiteNode",
    "create_reporter",
    "escape_xml",
    "list_reporters",
    "load_config",
    "serialize",
]


REPORTER_REGISTRY: dict[str, type[JUnit2Reporter]] = {
    "junit2": JUnit2Reporter,
}


def create_reporter(name: str, **kwargs: Any) -> JUnit2Reporter:
    """Create a reporter instance from the registry.

    Args:
        name: Reporter name (e.g., 'junit2').
        **kwargs: Arguments to pass to the reporter constructor.

    Returns:
        Reporter instance.

    Raises:
        ValueError: If reporter name is not recognized.
    """
    if name not in REPORTER_REGISTRY:
        available = ", ".join(REPORTER_REGISTRY.keys())
        raise ValueError(f"Unknown reporter: {name}. Available: {available}")

    return REPORTER_REGISTRY[name](**kwargs)


def list_reporters() -> list[str]:
    """List available reporter names.

    Returns:
        List of reporter names.
    """
    return list(REPORTER_REGISTRY.keys())
