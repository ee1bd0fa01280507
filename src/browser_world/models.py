"""Shared models used across browser world."""

from __future__ import annotations

import enum
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field


class ScenarioStatus(str, enum.Enum):
    """Result of a single scenario as reported by the runner."""

    PASSED = "passed"
    FAILED = "failed"
    SKIPPED = "skipped"
    UNDEFINED = "undefined"

    @classmethod
    def parse(cls, value: object) -> "ScenarioStatus":
        name = getattr(value, "name", value)
        try:
            return cls(str(name).lower())
        except ValueError:
            return cls.UNDEFINED


@dataclass
class ScenarioOutcome:
    """Pass/fail result of one scenario plus its diagnostics."""

    name: str
    feature: str = ""
    status: ScenarioStatus = ScenarioStatus.PASSED
    duration: float = 0.0
    error_message: Optional[str] = None
    screenshot: Optional[bytes] = None
    screenshot_path: Optional[Path] = None
    finished_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def failed(self) -> bool:
        return self.status == ScenarioStatus.FAILED


class ScenarioRecord(BaseModel):
    """Serialized view of a scenario outcome inside the run report."""

    name: str
    feature: str = ""
    status: ScenarioStatus = ScenarioStatus.PASSED
    duration: float = 0.0
    error_message: Optional[str] = None
    screenshot_path: Optional[str] = None

    @classmethod
    def from_outcome(cls, outcome: ScenarioOutcome) -> "ScenarioRecord":
        return cls(
            name=outcome.name,
            feature=outcome.feature,
            status=outcome.status,
            duration=outcome.duration,
            error_message=outcome.error_message,
            screenshot_path=str(outcome.screenshot_path) if outcome.screenshot_path else None,
        )


class RunReport(BaseModel):
    """Aggregated outcome of every scenario in the run."""

    browser: str
    scenarios: list[ScenarioRecord] = Field(default_factory=list)
    started_at: Optional[datetime] = None
    finished_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def summary(self) -> dict[str, int]:
        counts = Counter(record.status.value for record in self.scenarios)
        return {
            "total": len(self.scenarios),
            **{status.value: counts.get(status.value, 0) for status in ScenarioStatus},
        }

    def features(self) -> dict[str, list[ScenarioRecord]]:
        """Group scenario records by feature, keeping run order."""

        grouped: dict[str, list[ScenarioRecord]] = {}
        for record in self.scenarios:
            grouped.setdefault(record.feature, []).append(record)
        return grouped
