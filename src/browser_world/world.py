"""The run context shared by every hook, step and helper."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from .config import RunnerConfig
from .console import ConsoleTracer
from .helpers import Helpers
from .lifecycle import SessionFactory, SessionManager
from .loader import ObjectNamespace, load_page_objects, load_shared_objects
from .models import RunReport, ScenarioOutcome, ScenarioRecord
from .waits import WaitEngine

LOGGER = logging.getLogger(__name__)


@dataclass
class RunContext:
    """Everything one test-run process shares between scenarios."""

    config: RunnerConfig
    sessions: SessionManager
    waits: WaitEngine
    helpers: Helpers
    tracer: ConsoleTracer = field(default_factory=ConsoleTracer)
    shared: ObjectNamespace = field(default_factory=ObjectNamespace)
    page_objects: ObjectNamespace = field(default_factory=ObjectNamespace)
    outcomes: list[ScenarioOutcome] = field(default_factory=list)
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def build(
        cls,
        config: RunnerConfig,
        *,
        session_factory: Optional[SessionFactory] = None,
        tracer: Optional[ConsoleTracer] = None,
    ) -> "RunContext":
        sessions = (
            SessionManager(config, session_factory)
            if session_factory
            else SessionManager(config)
        )
        waits = WaitEngine(
            sessions.require_session,
            default_timeout=config.default_timeout,
            poll_interval=config.poll_interval,
        )
        return cls(
            config=config,
            sessions=sessions,
            waits=waits,
            helpers=Helpers(sessions.require_session, waits),
            tracer=tracer or ConsoleTracer(),
        )

    def load_support_objects(self) -> None:
        """Import shared and page objects from the configured directories."""

        self.shared = load_shared_objects(self.config.shared_object_paths)
        self.page_objects = load_page_objects(self.config.page_object_path)
        LOGGER.debug(
            "Loaded %d shared and %d page object modules",
            len(self.shared),
            len(self.page_objects),
        )

    def record(self, outcome: ScenarioOutcome) -> None:
        self.outcomes.append(outcome)

    def build_report(self) -> RunReport:
        return RunReport(
            browser=self.config.browser.name,
            scenarios=[ScenarioRecord.from_outcome(outcome) for outcome in self.outcomes],
            started_at=self.started_at,
        )
