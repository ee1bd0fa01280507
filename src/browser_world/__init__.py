"""Browser session lifecycle and wait helpers for behave test suites."""

from .config import RunnerConfig, TeardownPolicy, load_config
from .errors import (
    DriverLoadError,
    ReportGenerationError,
    TeardownError,
    UnknownDriverError,
    WaitTimeoutError,
)
from .factory import create_session, register_provider
from .hooks import ScenarioOrchestrator, install
from .world import RunContext

__all__ = [
    "DriverLoadError",
    "ReportGenerationError",
    "RunContext",
    "RunnerConfig",
    "ScenarioOrchestrator",
    "TeardownError",
    "TeardownPolicy",
    "UnknownDriverError",
    "WaitTimeoutError",
    "create_session",
    "install",
    "load_config",
    "register_provider",
]
