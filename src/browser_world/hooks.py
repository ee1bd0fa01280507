"""Bind the session lifecycle into behave's environment hooks.

Typical ``features/environment.py``::

    from browser_world.hooks import install

    install(globals())
"""

from __future__ import annotations

import logging
import re
from collections.abc import MutableMapping
from typing import Any, Optional

from playwright.sync_api import expect

from . import waits as until
from .config import RunnerConfig, TeardownPolicy, load_config_from_env
from .errors import TeardownError
from .lifecycle import SessionFactory
from .models import ScenarioOutcome, ScenarioStatus
from .reporting import ReportSink, generate_reports
from .world import RunContext

LOGGER = logging.getLogger(__name__)

SCREENSHOT_DIR = "screenshots"


class ScenarioOrchestrator:
    """Run-level hooks: before_all, before_scenario, after_scenario, after_all."""

    def __init__(self, world: RunContext, report_sink: Optional[ReportSink] = None) -> None:
        self.world = world
        self._report_sink = report_sink

    def before_all(self, context: Any) -> None:
        self.world.load_support_objects()
        self._publish(context)

    def before_scenario(self, context: Any, scenario: Any) -> None:
        try:
            session = self.world.sessions.ensure_session()
        except Exception as exc:
            # no scenario can run without a session
            LOGGER.error("Cannot start browser session: %s", exc)
            abort = getattr(context, "abort", None)
            if callable(abort):
                abort(reason=str(exc))
            raise
        context.driver = session
        context.page = session.page

    def after_scenario(self, context: Any, scenario: Any) -> ScenarioOutcome:
        outcome = outcome_from_scenario(scenario)
        try:
            self.world.sessions.finish_scenario(outcome)
            if outcome.screenshot:
                self._publish_screenshot(context, outcome)
        except Exception:
            LOGGER.exception("After-scenario handling failed for %r", outcome.name)
        self.world.record(outcome)
        return outcome

    def after_all(self, context: Any = None) -> None:
        report = self.world.build_report()
        try:
            generate_reports(report, self.world.config.reports, self._report_sink)
        except Exception:
            LOGGER.exception("Unexpected error while generating reports")
        if self.world.config.teardown != TeardownPolicy.ALWAYS:
            try:
                self.world.sessions.teardown()
            except TeardownError:
                LOGGER.exception("Browser teardown failed")
        summary = report.summary
        LOGGER.info(
            "Run complete: %d scenarios, %d passed, %d failed",
            summary["total"],
            summary[ScenarioStatus.PASSED.value],
            summary[ScenarioStatus.FAILED.value],
        )

    def _publish(self, context: Any) -> None:
        context.world = self.world
        context.helpers = self.world.helpers
        context.waits = self.world.waits
        context.until = until
        context.expect = expect
        context.trace = self.world.tracer
        context.shared = self.world.shared
        context.page_objects = self.world.page_objects

    def _publish_screenshot(self, context: Any, outcome: ScenarioOutcome) -> None:
        attach = getattr(context, "attach", None)
        if callable(attach):
            attach("image/png", outcome.screenshot)
        reports_dir = self.world.config.reports.path
        if reports_dir is None or not reports_dir.is_dir():
            return
        target = reports_dir / SCREENSHOT_DIR / f"{_slugify(outcome.feature)}--{_slugify(outcome.name)}.png"
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(outcome.screenshot)
            outcome.screenshot_path = target
        except OSError:
            LOGGER.exception("Failed to write screenshot %s", target)


def outcome_from_scenario(scenario: Any) -> ScenarioOutcome:
    """Build a :class:`ScenarioOutcome` from a behave scenario."""

    feature = getattr(scenario, "feature", None)
    error_message = None
    for step in getattr(scenario, "steps", None) or []:
        if getattr(step, "error_message", None):
            error_message = step.error_message
            break
    return ScenarioOutcome(
        name=getattr(scenario, "name", "") or "",
        feature=getattr(feature, "name", "") or "",
        status=ScenarioStatus.parse(getattr(scenario, "status", "undefined")),
        duration=float(getattr(scenario, "duration", 0.0) or 0.0),
        error_message=error_message,
    )


def install(
    namespace: MutableMapping[str, Any],
    config: Optional[RunnerConfig] = None,
    *,
    session_factory: Optional[SessionFactory] = None,
    report_sink: Optional[ReportSink] = None,
) -> ScenarioOrchestrator:
    """Define behave's hook functions inside ``namespace`` (an environment module)."""

    config = config or load_config_from_env()
    world = RunContext.build(config, session_factory=session_factory)
    orchestrator = ScenarioOrchestrator(world, report_sink)
    namespace["before_all"] = orchestrator.before_all
    namespace["before_scenario"] = orchestrator.before_scenario
    namespace["after_scenario"] = orchestrator.after_scenario
    namespace["after_all"] = orchestrator.after_all
    return orchestrator


def _slugify(value: str) -> str:
    slug = re.sub(r"[^A-Za-z0-9._-]+", "_", value).strip("_")
    return slug or "scenario"
