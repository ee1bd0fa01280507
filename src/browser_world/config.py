"""Configuration models for browser world."""

from __future__ import annotations

import enum
import json
import os
from collections.abc import Mapping, MutableMapping
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field, PositiveInt
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_PREFIX = "BROWSER_WORLD_"
CONFIG_FILE_ENV = f"{ENV_PREFIX}CONFIG_FILE"
NESTED_DELIMITER = "__"


class TeardownPolicy(str, enum.Enum):
    """How the shared browser session is handled at the end of the run.

    ``always`` hands responsibility for closing the browser to the caller.
    ``clear`` and ``none`` keep one session for the whole run and close it
    after the last scenario; ``none`` also skips clearing cookies and storage
    between scenarios.
    """

    ALWAYS = "always"
    CLEAR = "clear"
    NONE = "none"


class BrowserConfig(BaseModel):
    """Settings for the browser backend."""

    name: str = Field(
        default="chrome",
        description="Named provider (chrome, firefox, webkit, headless) or a path to a driver module.",
    )
    headless: bool = False
    executable_path: Optional[Path] = None
    profile_path: Optional[Path] = None
    viewport_width: int = 1920
    viewport_height: int = 1080


class ReportsConfig(BaseModel):
    """Where end-of-run reports are written."""

    path: Optional[Path] = None
    junit_path: Optional[Path] = None
    launch_report: bool = False

    @property
    def junit_dir(self) -> Optional[Path]:
        return self.junit_path or self.path


class RunnerConfig(BaseSettings):
    """Top-level configuration for a test run."""

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        env_file=(".env",),
        env_file_encoding="utf-8",
        env_nested_delimiter=NESTED_DELIMITER,
        extra="ignore",
    )

    browser: BrowserConfig = Field(default_factory=BrowserConfig)
    default_timeout: PositiveInt = Field(
        default=10_000,
        description="Default wait timeout in milliseconds.",
    )
    poll_interval: PositiveInt = Field(
        default=100,
        description="Delay between two predicate polls in milliseconds.",
    )
    teardown: TeardownPolicy = TeardownPolicy.CLEAR
    reports: ReportsConfig = Field(default_factory=ReportsConfig)
    no_screenshot: bool = False
    eyes_key: Optional[str] = Field(
        default=None,
        description="API key handed to an optional visual-diff checker.",
    )
    shared_object_paths: list[Path] = Field(default_factory=list)
    page_object_path: Optional[Path] = None


def load_config(
    path: Path | None = None,
    *,
    env_file: Path | None = None,
    **overrides: object,
) -> RunnerConfig:
    """Load configuration from an optional file and overrides."""

    data: dict[str, Any] = {}
    if path:
        import yaml

        data = yaml.safe_load(path.read_text()) or {}
    if overrides:
        _deep_update(data, overrides)
    settings_kwargs: dict[str, object] = {}
    if env_file is not None:
        settings_kwargs["_env_file"] = env_file
    config = RunnerConfig(**data, **settings_kwargs)
    if not data:
        return config

    merged = config.model_dump(mode="python")
    _deep_update(merged, data)
    return RunnerConfig.model_validate(merged)


def load_config_from_env(environ: Mapping[str, str] | None = None) -> RunnerConfig:
    """Load configuration, honouring the config file named in the environment."""

    environ = os.environ if environ is None else environ
    config_file = environ.get(CONFIG_FILE_ENV)
    return load_config(Path(config_file) if config_file else None)


def export_config_env(
    config: RunnerConfig,
    environ: MutableMapping[str, str] | None = None,
) -> None:
    """Write ``config`` into environment variables read back by :class:`RunnerConfig`.

    Each field is exported as one variable. Nested ``__`` variables for the
    same field are removed, since they would be merged over the export.
    """

    environ = os.environ if environ is None else environ
    for key, value in config.model_dump(mode="json").items():
        name = f"{ENV_PREFIX}{key.upper()}"
        nested_prefix = f"{name}{NESTED_DELIMITER}"
        for stale in [item for item in environ if item.upper().startswith(nested_prefix)]:
            del environ[stale]
        if value is None:
            environ.pop(name, None)
        elif isinstance(value, (dict, list)):
            environ[name] = json.dumps(value)
        else:
            environ[name] = str(value)


def _deep_update(target: dict[str, Any], updates: Mapping[str, Any]) -> None:
    """Recursively merge ``updates`` into ``target`` in-place."""

    for key, value in updates.items():
        if (
            isinstance(value, Mapping)
            and isinstance(existing := target.get(key), Mapping)
        ):
            nested: dict[str, Any]
            if isinstance(existing, dict):
                nested = existing
            else:
                nested = dict(existing)
            _deep_update(nested, value)
            target[key] = nested
        else:
            target[key] = value
