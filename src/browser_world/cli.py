"""Command line interface for browser-world."""

from __future__ import annotations

import logging
import os
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as get_version
from pathlib import Path
from typing import Annotated, Any, Optional

import typer
from behave.__main__ import main as behave_main

from .config import CONFIG_FILE_ENV, TeardownPolicy, export_config_env, load_config

app = typer.Typer(help="Browser World entry point")


@app.callback()
def main(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable debug logging"),
    ] = False,
) -> None:
    """Configure logging before executing any command."""

    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


@app.command()
def version() -> None:
    """Print the package version."""

    try:
        typer.echo(get_version("browser-world"))
    except PackageNotFoundError:  # pragma: no cover - when running from source tree
        typer.echo("0.0.0")


@app.command()
def run(
    paths: Annotated[
        Optional[list[Path]],
        typer.Argument(help="Feature files or directories passed to behave."),
    ] = None,
    config_path: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Path to YAML configuration."),
    ] = None,
    env_file: Annotated[
        Optional[Path],
        typer.Option(
            "--env-file",
            help="Path to an .env file with default configuration values.",
        ),
    ] = None,
    browser: Annotated[
        Optional[str],
        typer.Option("--browser", "-b", help="Named browser or path to a driver module."),
    ] = None,
    headless: Annotated[
        Optional[bool],
        typer.Option("--headless/--headed", help="Run the browser in headless mode (or headed)."),
    ] = None,
    teardown: Annotated[
        Optional[TeardownPolicy],
        typer.Option("--teardown", help="Browser teardown policy."),
    ] = None,
    timeout: Annotated[
        Optional[int],
        typer.Option("--timeout", "-t", help="Default wait timeout in milliseconds."),
    ] = None,
    reports_path: Annotated[
        Optional[Path],
        typer.Option("--reports-path", "-r", help="Directory for JSON and HTML reports."),
    ] = None,
    junit_path: Annotated[
        Optional[Path],
        typer.Option("--junit-path", help="Directory for the JUnit XML report."),
    ] = None,
    no_screenshot: Annotated[
        bool,
        typer.Option("--no-screenshot", help="Do not capture screenshots of failed scenarios."),
    ] = False,
    shared_objects: Annotated[
        Optional[list[Path]],
        typer.Option("--shared-objects", "-s", help="Directory of shared objects (repeatable)."),
    ] = None,
    page_objects: Annotated[
        Optional[Path],
        typer.Option("--page-objects", "-p", help="Directory of page objects."),
    ] = None,
    tags: Annotated[
        Optional[list[str]],
        typer.Option("--tags", help="Only run scenarios matching these behave tag expressions."),
    ] = None,
) -> None:
    """Run feature files with behave against a managed browser session."""

    overrides: dict[str, Any] = {}
    if browser is not None or headless is not None:
        overrides.setdefault("browser", {})
        if browser is not None:
            overrides["browser"]["name"] = browser
        if headless is not None:
            overrides["browser"]["headless"] = headless
    if reports_path is not None or junit_path is not None:
        overrides.setdefault("reports", {})
        if reports_path is not None:
            overrides["reports"]["path"] = str(reports_path)
        if junit_path is not None:
            overrides["reports"]["junit_path"] = str(junit_path)
    if teardown is not None:
        overrides["teardown"] = teardown.value
    if timeout is not None:
        overrides["default_timeout"] = timeout
    if no_screenshot:
        overrides["no_screenshot"] = True
    if shared_objects:
        overrides["shared_object_paths"] = [str(path) for path in shared_objects]
    if page_objects is not None:
        overrides["page_object_path"] = str(page_objects)

    config = load_config(config_path, env_file=env_file, **overrides)
    if config.reports.path is not None:
        config.reports.path.mkdir(parents=True, exist_ok=True)
    typer.echo(f"Running features with browser: {config.browser.name}")
    export_config_env(config)
    # the exported variables already carry the file values
    os.environ.pop(CONFIG_FILE_ENV, None)

    behave_args = [str(path) for path in paths or []]
    for expression in tags or []:
        behave_args.extend(["--tags", expression])
    status = behave_main(behave_args)
    if status:
        raise typer.Exit(code=int(status))
    typer.echo("All scenarios passed.")


if __name__ == "__main__":
    app()
