"""Driver factory: turn a browser identifier into a live session."""

from __future__ import annotations

import importlib.util
import inspect
import logging
from pathlib import Path
from typing import Callable, Optional

from .browser.base import BrowserSession
from .browser.providers import BUILTIN_PROVIDERS, DriverProvider
from .config import BrowserConfig
from .errors import DriverLoadError, UnknownDriverError

LOGGER = logging.getLogger(__name__)

CUSTOM_FACTORY_NAME = "create_session"

PROVIDERS: dict[str, type[DriverProvider]] = {
    provider.name: provider for provider in BUILTIN_PROVIDERS
}


def register_provider(provider: type[DriverProvider]) -> type[DriverProvider]:
    """Register ``provider`` under its name; usable as a class decorator."""

    PROVIDERS[provider.name.lower()] = provider
    return provider


def create_session(
    identifier: str,
    config: Optional[BrowserConfig] = None,
    *,
    base_dir: Optional[Path] = None,
) -> BrowserSession:
    """Create a session for a named provider or a custom driver module."""

    config = config or BrowserConfig()
    provider = PROVIDERS.get(identifier.lower())
    if provider is not None:
        try:
            return provider(config)()
        except Exception as exc:
            raise DriverLoadError(provider.name, f"launch failed: {exc}") from exc

    path = ((base_dir or Path.cwd()) / identifier).resolve()
    if not path.is_file():
        raise UnknownDriverError(identifier, path)
    LOGGER.info("Loading custom driver from %s", path)
    factory = load_custom_factory(path)
    try:
        session = factory()
    except Exception as exc:
        raise DriverLoadError(path, f"{CUSTOM_FACTORY_NAME}() raised {exc!r}") from exc
    if not isinstance(session, BrowserSession):
        raise DriverLoadError(
            path,
            f"{CUSTOM_FACTORY_NAME}() returned {type(session).__name__}, expected a BrowserSession",
        )
    if not session.identifier:
        session.identifier = identifier
    return session


def build_session(config: BrowserConfig) -> BrowserSession:
    return create_session(config.name, config)


def load_custom_factory(path: Path) -> Callable[[], object]:
    """Import ``path`` and return its zero-argument ``create_session``."""

    module_name = f"browser_world_driver_{path.stem.replace('-', '_')}"
    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        raise DriverLoadError(path, "not an importable Python module")
    module = importlib.util.module_from_spec(spec)
    try:
        spec.loader.exec_module(module)
    except Exception as exc:
        raise DriverLoadError(path, f"module raised {exc!r}") from exc

    factory = getattr(module, CUSTOM_FACTORY_NAME, None)
    if not callable(factory):
        raise DriverLoadError(path, f"module does not define a callable {CUSTOM_FACTORY_NAME}()")
    if not _accepts_no_arguments(factory):
        raise DriverLoadError(path, f"{CUSTOM_FACTORY_NAME}() must take no arguments")
    return factory


def _accepts_no_arguments(func: Callable[..., object]) -> bool:
    try:
        signature = inspect.signature(func)
    except (TypeError, ValueError):
        return True
    for parameter in signature.parameters.values():
        if parameter.kind in (parameter.VAR_POSITIONAL, parameter.VAR_KEYWORD):
            continue
        if parameter.default is parameter.empty:
            return False
    return True
