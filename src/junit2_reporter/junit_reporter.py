"""JUnit XML report generation for CI/CD integration."""

import re
import xml.etree.ElementTree as ET
from collections.abc import Callable, Mapping
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any
from xml.sax.saxutils import escape

from .models import AgentSummary, CaseResult, SuiteNode

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8" ?>'
DEFAULT_CLASS_NAME_FORMAT = "{browser}.{suite}"

_QUOTE_ENTITIES = {'"': "&quot;", "'": "&apos;"}
_WHITESPACE = re.compile(r"\s+")


def escape_xml(text: str) -> str:
    """Escape the five reserved XML characters with named entities."""
    return escape(text, _QUOTE_ENTITIES)


def format_class_name(template: str, browser_name: str, suite_path: list[str]) -> str:
    """Fill the ``{browser}`` and ``{suite}`` placeholders of a classname template.

    Args:
        template: Classname format, e.g. ``"{browser}.{suite}"``.
        browser_name: Agent display name; whitespace runs become underscores.
        suite_path: Suite path segments, joined with dots.

    Returns:
        The formatted classname.
    """
    class_name = template.replace("{browser}", _WHITESPACE.sub("_", browser_name))
    return class_name.replace("{suite}", ".".join(suite_path))


def format_seconds(value: float) -> str:
    """Render seconds the way the report has always printed them.

    Whole numbers have no fractional part and everything else uses the
    shortest round-tripping digits in plain decimal notation (``0.12``,
    ``1.5``, ``3``, ``0.00005``), never an exponent.
    """
    if float(value).is_integer():
        return str(int(value))
    return format(Decimal(repr(float(value))), "f")


def utc_timestamp() -> str:
    """Current UTC time as ISO 8601 with milliseconds and a ``Z`` suffix."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def build_junit_tree(
    agents: Mapping[Any, AgentSummary],
    root: SuiteNode,
    elapsed_seconds: float,
    timestamp: str,
    class_name_format: str = DEFAULT_CLASS_NAME_FORMAT,
) -> ET.Element:
    """Build the ``testsuites`` element for every agent.

    Each agent walks the whole suite tree. Only nodes holding case results
    become ``testsuite`` elements; pure grouping nodes are descended into.

    Args:
        agents: Agent summaries in registration order.
        root: Root of the shared suite tree.
        elapsed_seconds: Run time reported on every suite.
        timestamp: Timestamp reported on every suite.
        class_name_format: Template for the testcase ``classname``.

    Returns:
        ElementTree Element representing the test suites.
    """
    testsuites = ET.Element("testsuites")
    suite_attributes = {"timestamp": timestamp, "time": format_seconds(elapsed_seconds)}

    for agent in agents.values():
        _append_suites(testsuites, agent, [], root, class_name_format, suite_attributes)

    return testsuites


def _append_suites(
    testsuites: ET.Element,
    agent: AgentSummary,
    path: list[str],
    node: SuiteNode,
    class_name_format: str,
    suite_attributes: dict[str, str],
) -> None:
    for name, child in node.children.items():
        child_path = [*path, name]
        if child.results:
            class_name = format_class_name(class_name_format, agent.name, child_path)
            testsuites.append(_create_test_suite(name, class_name, child, suite_attributes))
        # Suites with results can still contain nested suites
        _append_suites(testsuites, agent, child_path, child, class_name_format, suite_attributes)


def _create_test_suite(
    name: str,
    class_name: str,
    node: SuiteNode,
    suite_attributes: dict[str, str],
) -> ET.Element:
    """Create a test suite element from the case results directly under a node.

    Counts are not rolled up from nested suites.
    """
    testsuite = ET.Element("testsuite")
    testsuite.set("name", name)
    testsuite.set("tests", str(sum(case.total for case in node.results.values())))
    testsuite.set("failures", str(sum(case.failures for case in node.results.values())))
    testsuite.set("skipped", str(sum(case.skipped for case in node.results.values())))
    testsuite.set("timestamp", suite_attributes["timestamp"])
    testsuite.set("time", suite_attributes["time"])

    for description, case in node.results.items():
        testsuite.append(_create_test_case(class_name, description, case))

    return testsuite


def _create_test_case(class_name: str, description: str, case: CaseResult) -> ET.Element:
    testcase = ET.Element("testcase")
    testcase.set("classname", class_name)
    testcase.set("name", description)
    if case.time:
        testcase.set("time", format_seconds(case.time / 1000))

    if case.failures > 0:
        failure = ET.SubElement(testcase, "failure")
        failure.text = "\n".join(case.log) if case.log else "Test failed"
    elif case.skipped == case.total:
        ET.SubElement(testcase, "skipped")

    return testcase


def render_document(testsuites: ET.Element) -> str:
    """Render a ``testsuites`` tree as report text.

    The layout is fixed: one line per fragment, tab indentation and every
    attribute value and text body escaped.

    Args:
        testsuites: Element built by ``build_junit_tree``.

    Returns:
        The complete XML document.
    """
    lines = [XML_DECLARATION, f"<{testsuites.tag}>"]

    for testsuite in testsuites:
        lines.append(f"\t<{testsuite.tag}{_render_attributes(testsuite)}>\n")
        lines.append("\n".join(_render_test_case(testcase) for testcase in testsuite))
        lines.append(f"\t</{testsuite.tag}>")

    lines.append(f"</{testsuites.tag}>")
    return "\n".join(lines)


def _render_test_case(testcase: ET.Element) -> str:
    text = f"\t\t<{testcase.tag}{_render_attributes(testcase)}>"
    for child in testcase:
        if child.text is None:
            text += f"\n\t\t\t<{child.tag} />\n\t\t"
        else:
            text += f"\n\t\t\t<{child.tag}>{escape_xml(child.text)}</{child.tag}>\n\t\t"
    return text + f"</{testcase.tag}>"


def _render_attributes(element: ET.Element) -> str:
    return "".join(f' {key}="{escape_xml(value)}"' for key, value in element.attrib.items())


def serialize(
    agents: Mapping[Any, AgentSummary],
    root: SuiteNode,
    elapsed_seconds: Callable[[], float],
    class_name_format: str = DEFAULT_CLASS_NAME_FORMAT,
    timestamp: Callable[[], str] = utc_timestamp,
) -> str:
    """Serialize aggregated results as a JUnit XML document.

    Elapsed time and timestamp are sampled once, so every suite reports the
    same whole-run values.

    Args:
        agents: Agent summaries in registration order.
        root: Root of the shared suite tree.
        elapsed_seconds: Provider of the run's elapsed seconds.
        class_name_format: Template for the testcase ``classname``.
        timestamp: Provider of the suite timestamp.

    Returns:
        The complete XML document.

    JUnit XML Structure:
        - testsuites: Root element containing all test suites
        - testsuite: One per agent and suite node holding case results
        - testcase: One per test description under that node
        - failure: Case with at least one failing run, body is the failure log
        - skipped: Case whose every run was skipped
    """
    testsuites = build_junit_tree(
        agents,
        root,
        elapsed_seconds(),
        timestamp(),
        class_name_format,
    )
    return render_document(testsuites)
