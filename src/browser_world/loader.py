"""Load shared and page object modules from directories."""

from __future__ import annotations

import importlib.util
import logging
from collections.abc import Iterable
from pathlib import Path
from types import ModuleType
from typing import Any, Optional, Union

LOGGER = logging.getLogger(__name__)


class ObjectNamespace(dict):
    """Dictionary whose keys are also readable as attributes."""

    def __getattr__(self, name: str) -> Any:
        try:
            return self[name]
        except KeyError:
            raise AttributeError(name) from None


def load_directory(path: Path) -> ObjectNamespace:
    """Import every module beneath ``path`` into a nested namespace.

    Files and directories whose names start with ``_`` or ``.`` are skipped.
    A missing directory yields an empty namespace.
    """

    namespace = ObjectNamespace()
    if not path.is_dir():
        LOGGER.debug("Object directory %s does not exist", path)
        return namespace
    for entry in sorted(path.iterdir()):
        if entry.name.startswith(("_", ".")):
            continue
        key = _key_for(entry)
        if entry.is_dir():
            nested = load_directory(entry)
            if nested:
                namespace[key] = nested
        elif entry.suffix == ".py":
            namespace[key] = _import_file(entry)
    return namespace


def load_shared_objects(paths: Iterable[Union[str, Path]]) -> ObjectNamespace:
    """Merge several directories; later directories override earlier keys."""

    merged = ObjectNamespace()
    for item in paths:
        merged.update(load_directory(Path(item)))
    return merged


def load_page_objects(path: Optional[Union[str, Path]]) -> ObjectNamespace:
    if path is None:
        return ObjectNamespace()
    return load_directory(Path(path))


def _key_for(entry: Path) -> str:
    stem = entry.stem if entry.is_file() else entry.name
    return stem.replace("-", "_").replace(" ", "_")


def _import_file(path: Path) -> ModuleType:
    module_name = f"browser_world_objects_{abs(hash(path.resolve()))}_{_key_for(path)}"
    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        raise ImportError(f"Cannot import {path}")
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    LOGGER.debug("Loaded object module %s", path)
    return module
