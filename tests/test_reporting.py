import xml.etree.ElementTree as ET
from pathlib import Path

import pytest

from browser_world.config import ReportsConfig
from browser_world.errors import ReportGenerationError
from browser_world.models import RunReport, ScenarioRecord, ScenarioStatus
from browser_world.reporting import (
    HTML_FILE,
    JUNIT_FILE,
    RESULTS_FILE,
    ReportSink,
    generate_reports,
    status_class,
    write_results,
)


def build_report() -> RunReport:
    return RunReport(
        browser="chrome",
        scenarios=[
            ScenarioRecord(name="adds item", feature="Cart", duration=1.5),
            ScenarioRecord(
                name="pays",
                feature="Checkout",
                status=ScenarioStatus.FAILED,
                error_message="Card <declined>",
            ),
            ScenarioRecord(name="refunds", feature="Checkout", status=ScenarioStatus.SKIPPED),
        ],
    )


def test_summary_counts_each_status():
    summary = build_report().summary

    assert summary["total"] == 3
    assert summary["passed"] == 1
    assert summary["failed"] == 1
    assert summary["skipped"] == 1
    assert summary["undefined"] == 0


def test_sink_renders_html_and_junit(tmp_path):
    results = write_results(build_report(), tmp_path)
    sink = ReportSink(ReportsConfig(path=tmp_path, junit_path=tmp_path / "junit"))

    html_path, junit_path = sink.generate(results)

    assert html_path == tmp_path / HTML_FILE
    html = html_path.read_text()
    assert "Card &lt;declined&gt;" in html
    assert "status-failed" in html

    assert junit_path == tmp_path / "junit" / JUNIT_FILE
    root = ET.parse(junit_path).getroot()
    assert root.get("tests") == "3"
    assert root.get("failures") == "1"
    suites = {suite.get("name"): suite for suite in root.findall("testsuite")}
    assert set(suites) == {"Cart", "Checkout"}
    checkout = suites["Checkout"].findall("testcase")
    assert checkout[0].find("failure").get("message") == "Card <declined>"
    assert checkout[1].find("skipped") is not None


def test_malformed_results_raise(tmp_path):
    results = tmp_path / RESULTS_FILE
    results.write_text("{not json")

    with pytest.raises(ReportGenerationError):
        ReportSink(ReportsConfig(path=tmp_path)).generate(results)


def test_generate_reports_skips_missing_directory(tmp_path):
    config = ReportsConfig(path=tmp_path / "missing")

    assert generate_reports(build_report(), config) is None
    assert not (tmp_path / "missing").exists()


def test_generate_reports_logs_sink_failures(tmp_path, caplog):
    class BrokenSink:
        def generate(self, results_path: Path):
            raise ReportGenerationError("template missing")

    results = generate_reports(build_report(), ReportsConfig(path=tmp_path), BrokenSink())

    assert results == tmp_path / RESULTS_FILE
    assert RunReport.model_validate_json(results.read_text()).summary["total"] == 3
    assert "template missing" in caplog.text


def test_status_class_mapping():
    assert status_class("PASSED") == "status-success"
    assert status_class("undefined") == "status-unknown"
