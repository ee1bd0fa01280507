from pathlib import Path

import pytest
from pydantic import ValidationError

from browser_world.config import (
    CONFIG_FILE_ENV,
    RunnerConfig,
    TeardownPolicy,
    export_config_env,
    load_config,
    load_config_from_env,
)


def test_defaults():
    config = load_config()

    assert config.browser.name == "chrome"
    assert config.default_timeout == 10_000
    assert config.teardown == TeardownPolicy.CLEAR
    assert config.reports.path is None


def test_load_config_reads_env_file(tmp_path: Path) -> None:
    env_path = tmp_path / ".env"
    env_path.write_text(
        "\n".join(
            [
                "BROWSER_WORLD_BROWSER__NAME=firefox",
                "BROWSER_WORLD_DEFAULT_TIMEOUT=2500",
                "BROWSER_WORLD_TEARDOWN=always",
            ]
        )
    )

    config = load_config(env_file=env_path)

    assert config.browser.name == "firefox"
    assert config.default_timeout == 2500
    assert config.teardown == TeardownPolicy.ALWAYS


def test_load_config_prioritises_overrides(tmp_path: Path) -> None:
    env_path = tmp_path / ".env"
    env_path.write_text("BROWSER_WORLD_BROWSER__NAME=firefox\nBROWSER_WORLD_NO_SCREENSHOT=true\n")
    config_path = tmp_path / "run.yaml"
    config_path.write_text(
        "\n".join(
            [
                "browser:",
                "  name: webkit",
                "  headless: true",
                "reports:",
                "  path: reports",
            ]
        )
    )

    config = load_config(config_path, env_file=env_path, browser={"name": "chrome"})

    assert config.browser.name == "chrome"
    assert config.browser.headless is True
    assert config.reports.path == Path("reports")
    assert config.no_screenshot is True


def test_exported_config_round_trips_through_environment(monkeypatch, tmp_path):
    original = load_config(
        browser={"name": "headless"},
        default_timeout=4000,
        shared_object_paths=[str(tmp_path / "shared")],
        reports={"path": str(tmp_path)},
    )
    environ: dict[str, str] = {}

    export_config_env(original, environ)

    assert "BROWSER_WORLD_EYES_KEY" not in environ
    for name, value in environ.items():
        monkeypatch.setenv(name, value)
    restored = load_config_from_env()
    assert restored.browser.name == "headless"
    assert restored.default_timeout == 4000
    assert restored.shared_object_paths == [tmp_path / "shared"]
    assert restored.reports.path == tmp_path


def test_config_file_named_in_environment(monkeypatch, tmp_path):
    config_path = tmp_path / "run.yaml"
    config_path.write_text("teardown: none\npoll_interval: 50\n")

    config = load_config_from_env({CONFIG_FILE_ENV: str(config_path)})

    assert config.teardown == TeardownPolicy.NONE
    assert config.poll_interval == 50


@pytest.mark.parametrize("field", ["default_timeout", "poll_interval"])
def test_non_positive_timing_is_rejected(field):
    with pytest.raises(ValidationError):
        RunnerConfig.model_validate({field: 0})


def test_export_replaces_nested_variables():
    environ = {
        "BROWSER_WORLD_BROWSER__NAME": "firefox",
        "browser_world_reports__path": "stale",
        "BROWSER_WORLD_DEFAULT_TIMEOUT": "1",
        "PATH": "/usr/bin",
    }

    export_config_env(load_config(browser={"name": "chrome"}), environ)

    assert "BROWSER_WORLD_BROWSER__NAME" not in environ
    assert "browser_world_reports__path" not in environ
    assert environ["BROWSER_WORLD_DEFAULT_TIMEOUT"] == "10000"
    assert environ["PATH"] == "/usr/bin"
    assert '"name": "chrome"' in environ["BROWSER_WORLD_BROWSER"]
