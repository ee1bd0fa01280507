"""End-of-run reports: JSON results, HTML and JUnit XML."""

from __future__ import annotations

import logging
import webbrowser
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Optional

from jinja2 import Environment, PackageLoader, select_autoescape
from pydantic import ValidationError

from .config import ReportsConfig
from .errors import ReportGenerationError
from .models import RunReport, ScenarioStatus

LOGGER = logging.getLogger(__name__)

RESULTS_FILE = "run-report.json"
HTML_FILE = "run-report.html"
JUNIT_FILE = "junit-report.xml"
XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>\n'


def status_class(status: str) -> str:
    mapping = {
        "passed": "status-success",
        "failed": "status-failed",
        "skipped": "status-skipped",
    }
    return mapping.get(str(status).lower(), "status-unknown")


def write_results(report: RunReport, reports_dir: Path) -> Path:
    """Serialize ``report`` as the JSON results file in ``reports_dir``."""

    path = reports_dir / RESULTS_FILE
    path.write_text(report.model_dump_json(indent=2), encoding="utf-8")
    LOGGER.info("Wrote run results to %s", path)
    return path


class ReportSink:
    """Render the HTML and JUnit reports from a JSON results file."""

    def __init__(self, config: ReportsConfig) -> None:
        self._config = config
        self._env = Environment(
            loader=PackageLoader("browser_world", "templates"),
            autoescape=select_autoescape(["html", "j2"]),
        )
        self._env.globals.update({"status_class": status_class})

    def generate(self, results_path: Path) -> tuple[Path, Path]:
        report = self.read_results(results_path)
        html_path = self.write_html(report, self._config.path or results_path.parent)
        junit_path = self.write_junit(report, self._config.junit_dir or results_path.parent)
        if self._config.launch_report:
            webbrowser.open(html_path.resolve().as_uri())
        return html_path, junit_path

    @staticmethod
    def read_results(results_path: Path) -> RunReport:
        try:
            raw = results_path.read_text(encoding="utf-8").strip()
        except OSError as exc:
            raise ReportGenerationError(f"Cannot read results file {results_path}: {exc}") from exc
        try:
            return RunReport.model_validate_json(raw)
        except ValidationError as exc:
            raise ReportGenerationError(f"Malformed results file {results_path}") from exc

    def write_html(self, report: RunReport, output_dir: Path) -> Path:
        template = self._env.get_template("report.html.j2")
        html = template.render(
            report=report,
            summary=report.summary,
            features=report.features(),
        )
        path = self._write(output_dir / HTML_FILE, html)
        LOGGER.info("Wrote HTML report to %s", path)
        return path

    def write_junit(self, report: RunReport, output_dir: Path) -> Path:
        testsuites = ET.Element("testsuites")
        testsuites.set("name", report.browser)
        testsuites.set("tests", str(report.summary["total"]))
        testsuites.set("failures", str(report.summary[ScenarioStatus.FAILED.value]))
        for feature, records in report.features().items():
            testsuite = ET.SubElement(testsuites, "testsuite")
            testsuite.set("name", feature or "features")
            testsuite.set("tests", str(len(records)))
            testsuite.set(
                "failures",
                str(sum(1 for record in records if record.status == ScenarioStatus.FAILED)),
            )
            testsuite.set("time", f"{sum(record.duration for record in records):.3f}")
            for record in records:
                testcase = ET.SubElement(testsuite, "testcase")
                testcase.set("name", record.name)
                testcase.set("classname", feature or "features")
                testcase.set("time", f"{record.duration:.3f}")
                if record.status == ScenarioStatus.FAILED:
                    failure = ET.SubElement(testcase, "failure")
                    failure.set("message", record.error_message or "Scenario failed")
                    failure.text = record.error_message
                elif record.status in (ScenarioStatus.SKIPPED, ScenarioStatus.UNDEFINED):
                    ET.SubElement(testcase, "skipped")
        tree = ET.ElementTree(testsuites)
        ET.indent(tree)
        xml = XML_DECLARATION + ET.tostring(testsuites, encoding="unicode")
        path = self._write(output_dir / JUNIT_FILE, xml)
        LOGGER.info("Wrote JUnit report to %s", path)
        return path

    @staticmethod
    def _write(path: Path, content: str) -> Path:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        except OSError as exc:
            raise ReportGenerationError(f"Cannot write {path}: {exc}") from exc
        return path


def generate_reports(
    report: RunReport,
    config: ReportsConfig,
    sink: Optional[ReportSink] = None,
) -> Optional[Path]:
    """Write the results file and derived reports if a reports directory exists.

    Returns the results path, or ``None`` when reporting was skipped. Report
    failures are logged and never raised.
    """

    if config.path is None or not config.path.is_dir():
        LOGGER.debug("No reports directory configured; skipping reports")
        return None
    try:
        results_path = write_results(report, config.path)
    except OSError:
        LOGGER.exception("Failed to write run results")
        return None
    try:
        (sink or ReportSink(config)).generate(results_path)
    except ReportGenerationError as exc:
        LOGGER.warning("Report generation failed: %s", exc)
    return results_path
