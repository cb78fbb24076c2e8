"""Tests for JUnit XML report generation."""

import xml.etree.ElementTree as ET
from html import unescape

import pytest

from junit2_reporter.aggregator import Aggregator
from junit2_reporter.junit_reporter import (
    escape_xml,
    format_class_name,
    format_seconds,
    serialize,
    utc_timestamp,
)
from junit2_reporter.models import Browser, SpecResult

AGENT_A = Browser(id=1, name="AgentA")
TIMESTAMP = "2026-01-20T10:00:00.000Z"


@pytest.fixture
def aggregator() -> Aggregator:
    """Create an aggregator with a started run."""
    aggregator = Aggregator()
    aggregator.reset_run()
    return aggregator


def render(aggregator: Aggregator, class_name_format: str = "{browser}.{suite}") -> str:
    """Serialize with fixed timing values."""
    return serialize(
        aggregator.agents,
        aggregator.root,
        lambda: 1.5,
        class_name_format=class_name_format,
        timestamp=lambda: TIMESTAMP,
    )


class TestHelpers:
    """Tests for formatting helpers."""

    def test_escape_all_reserved_characters(self) -> None:
        """Test that all five reserved characters become named entities."""
        assert escape_xml("a & b < c > d \" e ' f") == (
            "a &amp; b &lt; c &gt; d &quot; e &apos; f"
        )

    def test_escape_does_not_double_escape_input(self) -> None:
        """Test that existing entity text is escaped as literal text."""
        assert escape_xml("&amp;") == "&amp;amp;"

    def test_class_name_replaces_whitespace_in_browser(self) -> None:
        """Test that whitespace runs in the browser name become underscores."""
        assert (
            format_class_name("{browser}.{suite}", "Chrome  Headless 120", ["A", "B"])
            == "Chrome_Headless_120.A.B"
        )

    def test_class_name_custom_template(self) -> None:
        """Test a template that reorders and decorates placeholders."""
        assert format_class_name("karma/{suite}@{browser}", "Firefox", ["S"]) == "karma/S@Firefox"

    def test_class_name_without_placeholders(self) -> None:
        """Test that a literal template is used unchanged."""
        assert format_class_name("static", "Firefox", ["S"]) == "static"

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (0.12, "0.12"),
            (1.0, "1"),
            (2, "2"),
            (0.005, "0.005"),
            (61.25, "61.25"),
            (0.00005, "0.00005"),
            (0.0001234, "0.0001234"),
        ],
    )
    def test_format_seconds(self, value: float, expected: str) -> None:
        """Test that seconds print without trailing zeros or exponents."""
        assert format_seconds(value) == expected

    def test_utc_timestamp_format(self) -> None:
        """Test the ISO 8601 millisecond UTC timestamp format."""
        stamp = utc_timestamp()
        assert stamp.endswith("Z")
        assert len(stamp) == len("2026-01-20T10:00:00.000Z")


class TestSerialization:
    """Tests for serializing the suite tree."""

    def test_empty_run(self, aggregator: Aggregator) -> None:
        """Test that a run without results yields an empty testsuites element."""
        assert render(aggregator) == (
            '<?xml version="1.0" encoding="UTF-8" ?>\n<testsuites>\n</testsuites>'
        )

    def test_single_passing_case(self, aggregator: Aggregator) -> None:
        """Test the exact document for one passing case."""
        aggregator.record_case_result(
            AGENT_A, SpecResult(suite=["Suite1"], description="test1", success=True, time=120)
        )

        assert render(aggregator) == "\n".join(
            [
                '<?xml version="1.0" encoding="UTF-8" ?>',
                "<testsuites>",
                '\t<testsuite name="Suite1" tests="1" failures="0" skipped="0" '
                f'timestamp="{TIMESTAMP}" time="1.5">\n',
                '\t\t<testcase classname="AgentA.Suite1" name="test1" time="0.12"></testcase>',
                "\t</testsuite>",
                "</testsuites>",
            ]
        )

    def test_failing_case(self, aggregator: Aggregator) -> None:
        """Test suite counts and failure body once a case fails."""
        aggregator.record_case_result(
            AGENT_A, SpecResult(suite=["Suite1"], description="test1", success=True, time=120)
        )
        aggregator.record_case_result(
            AGENT_A, SpecResult(suite=["Suite1"], description="test2", log=["boom"])
        )

        xml = render(aggregator)
        assert 'tests="2" failures="1" skipped="0"' in xml
        assert (
            '\t\t<testcase classname="AgentA.Suite1" name="test2">'
            "\n\t\t\t<failure>boom</failure>\n\t\t</testcase>"
        ) in xml

    def test_failure_without_log(self, aggregator: Aggregator) -> None:
        """Test the placeholder failure text when no log was captured."""
        aggregator.record_case_result(AGENT_A, SpecResult(suite=["S"], description="t"))

        assert "<failure>Test failed</failure>" in render(aggregator)

    def test_failure_log_lines_joined(self, aggregator: Aggregator) -> None:
        """Test that multi-line logs are newline-joined."""
        aggregator.record_case_result(
            AGENT_A, SpecResult(suite=["S"], description="t", log=["line 1", "line 2"])
        )

        assert "<failure>line 1\nline 2</failure>" in render(aggregator)

    def test_skipped_case(self, aggregator: Aggregator) -> None:
        """Test the skipped marker and suite skipped count."""
        aggregator.record_case_result(
            AGENT_A, SpecResult(suite=["S"], description="t", skipped=True)
        )

        xml = render(aggregator)
        assert 'tests="1" failures="0" skipped="1"' in xml
        assert '<testcase classname="AgentA.S" name="t">\n\t\t\t<skipped />\n\t\t</testcase>' in xml

    def test_partially_skipped_case_has_no_marker(self, aggregator: Aggregator) -> None:
        """Test that a case both passed and skipped gets no skipped marker."""
        aggregator.record_case_result(
            AGENT_A, SpecResult(suite=["S"], description="t", skipped=True)
        )
        aggregator.record_case_result(
            AGENT_A, SpecResult(suite=["S"], description="t", success=True)
        )

        xml = render(aggregator)
        assert "<skipped />" not in xml
        assert 'tests="2" failures="0" skipped="1"' in xml

    def test_failure_takes_precedence_over_skip(self, aggregator: Aggregator) -> None:
        """Test that a case that failed once reports the failure."""
        aggregator.record_case_result(
            AGENT_A, SpecResult(suite=["S"], description="t", skipped=True)
        )
        aggregator.record_case_result(
            AGENT_A, SpecResult(suite=["S"], description="t", log=["bad"])
        )

        xml = render(aggregator)
        assert "<failure>bad</failure>" in xml
        assert "<skipped />" not in xml

    def test_zero_time_is_omitted(self, aggregator: Aggregator) -> None:
        """Test that unset or zero case time leaves out the attribute."""
        aggregator.record_case_result(
            AGENT_A, SpecResult(suite=["S"], description="a", success=True, time=0)
        )
        aggregator.record_case_result(
            AGENT_A, SpecResult(suite=["S"], description="b", success=True)
        )

        xml = render(aggregator)
        assert '<testcase classname="AgentA.S" name="a"></testcase>' in xml
        assert '<testcase classname="AgentA.S" name="b"></testcase>' in xml

    def test_sub_millisecond_time_in_plain_decimal(self, aggregator: Aggregator) -> None:
        """Test that very short case times are not written with an exponent."""
        aggregator.record_case_result(
            AGENT_A, SpecResult(suite=["S"], description="fast", success=True, time=0.0625)
        )

        assert 'name="fast" time="0.0000625"></testcase>' in render(aggregator)

    def test_grouping_nodes_are_not_suites(self, aggregator: Aggregator) -> None:
        """Test that a path without direct results produces no testsuite."""
        aggregator.record_case_result(
            Browser(id=2, name="Agent"),
            SpecResult(suite=["Parent", "Child"], description="t", success=True),
        )

        root = ET.fromstring(render(aggregator))
        suites = root.findall("testsuite")
        assert [suite.get("name") for suite in suites] == ["Child"]
        assert suites[0].find("testcase").get("classname") == "Agent.Parent.Child"

    def test_suite_with_cases_and_children(self, aggregator: Aggregator) -> None:
        """Test that nested suites follow their parent and are not rolled up."""
        aggregator.record_case_result(
            AGENT_A, SpecResult(suite=["Outer"], description="o1", success=True)
        )
        aggregator.record_case_result(
            AGENT_A, SpecResult(suite=["Outer", "Inner"], description="i1", log=["x"])
        )
        aggregator.record_case_result(
            AGENT_A, SpecResult(suite=["Outer", "Inner"], description="i2", success=True)
        )

        root = ET.fromstring(render(aggregator))
        outer, inner = root.findall("testsuite")
        assert (outer.get("name"), outer.get("tests"), outer.get("failures")) == ("Outer", "1", "0")
        assert (inner.get("name"), inner.get("tests"), inner.get("failures")) == ("Inner", "2", "1")
        assert inner.find("testcase").get("classname") == "AgentA.Outer.Inner"

    def test_every_browser_walks_the_tree(self, aggregator: Aggregator) -> None:
        """Test that each browser emits the shared suites with its own classname."""
        chrome = Browser(id="c", name="Chrome 120")
        firefox = Browser(id="f", name="Firefox")
        aggregator.record_case_result(
            chrome, SpecResult(suite=["S"], description="t", success=True)
        )
        aggregator.record_case_result(
            firefox, SpecResult(suite=["S"], description="t", success=True)
        )

        root = ET.fromstring(render(aggregator))
        suites = root.findall("testsuite")
        assert [suite.find("testcase").get("classname") for suite in suites] == [
            "Chrome_120.S",
            "Firefox.S",
        ]
        # Results from both browsers are merged into one case
        assert all(suite.get("tests") == "2" for suite in suites)

    def test_timing_shared_by_all_suites(self, aggregator: Aggregator) -> None:
        """Test that every suite reports the same run time and timestamp."""
        for name in ("A", "B", "C"):
            aggregator.record_case_result(
                AGENT_A, SpecResult(suite=[name], description="t", success=True)
            )
        calls = iter([2.0, 3.0, 4.0])

        xml = serialize(
            aggregator.agents,
            aggregator.root,
            lambda: next(calls),
            timestamp=lambda: TIMESTAMP,
        )

        suites = ET.fromstring(xml).findall("testsuite")
        assert {suite.get("time") for suite in suites} == {"2"}
        assert {suite.get("timestamp") for suite in suites} == {TIMESTAMP}

    def test_custom_class_name_format(self, aggregator: Aggregator) -> None:
        """Test the configured classname template."""
        aggregator.record_case_result(
            AGENT_A, SpecResult(suite=["A", "B"], description="t", success=True)
        )

        xml = render(aggregator, class_name_format="{suite} [{browser}]")
        assert 'classname="A.B [AgentA]"' in xml

    def test_reserved_characters_escaped_everywhere(self, aggregator: Aggregator) -> None:
        """Test that names, descriptions and logs are escaped and decode back."""
        nasty = "<a href=\"x\">Tom & Jerry's</a>"
        aggregator.record_case_result(
            Browser(id=3, name="Agent"),
            SpecResult(suite=[nasty], description=nasty, log=[nasty]),
        )

        xml = render(aggregator)
        body = xml.split("\n", 1)[1]
        for raw in ('"x"', "Jerry's", "<a ", "& J"):
            assert raw not in body

        testsuite = ET.fromstring(xml).find("testsuite")
        testcase = testsuite.find("testcase")
        assert testsuite.get("name") == nasty
        assert testcase.get("name") == nasty
        assert testcase.find("failure").text == nasty
        assert unescape(escape_xml(nasty)) == nasty
