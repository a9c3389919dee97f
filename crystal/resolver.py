"""
Module Resolver - optional loading of project units.

A *unit* is something the bootstrap may or may not find: a configuration
file, a hook module, a resource driver. The resolver tells "the unit does not
exist" apart from "the unit exists but is broken". Only the former is benign;
every other failure propagates to the caller untouched.

Locators:
    - filesystem locations (``Path`` objects, or strings that are absolute or
      contain a path separator). ``<loc>`` resolves to the first existing file
      among ``<loc>.py``, ``<loc>.json``, ``<loc>.yaml``, ``<loc>.yml`` and then
      ``<loc>/__init__.py``, ``<loc>/index.json``, ``<loc>/index.yaml``,
      ``<loc>/index.yml``.
    - importable module names (``"crystal-node-redis"``). Hyphens are mapped to
      underscores, the way distribution names map to import names.

The export of a Python unit is its ``default`` attribute when it defines one,
otherwise the module object itself. Data files export their parsed document.
"""

from __future__ import annotations

import hashlib
import importlib
import importlib.util
import json
import logging
import os
import re
import sys
from dataclasses import dataclass
from pathlib import Path
from types import ModuleType
from typing import Any, Optional, Union

import yaml

logger = logging.getLogger("crystal.resolver")

Locator = Union[str, "os.PathLike[str]"]

FILE_SUFFIXES = (".py", ".json", ".yaml", ".yml")
INDEX_FILES = ("__init__.py", "index.json", "index.yaml", "index.yml")
EXPORT_ATTRIBUTE = "default"

_NON_IDENTIFIER = re.compile(r"\W")


class _Sentinel:
    """Falsy named singleton."""

    def __init__(self, name: str):
        self._name = name

    def __repr__(self) -> str:
        return self._name

    def __bool__(self) -> bool:
        return False


# Returned by try_load / try_load_first when nothing was found
ABSENT: Any = _Sentinel("ABSENT")

# Returned by resolve() when the unit does not exist
NOT_FOUND: Any = _Sentinel("NOT_FOUND")


@dataclass(frozen=True)
class Found:
    """A unit that exists and was loaded."""

    value: Any
    origin: str


Resolution = Union[Found, _Sentinel]


def export_of(module: ModuleType) -> Any:
    """Return the value a Python unit exports."""
    return getattr(module, EXPORT_ATTRIBUTE, module)


class ModuleResolver:
    """
    Loads optional units by path or by module name.

    Usage:
        resolver = ModuleResolver()
        hook = resolver.try_load(paths.init / "pre-init")
        if hook is not ABSENT:
            ...
    """

    @staticmethod
    def is_path_locator(locator: Locator) -> bool:
        if isinstance(locator, os.PathLike):
            return True
        if os.path.isabs(locator) or os.sep in locator:
            return True
        return bool(os.altsep) and os.altsep in locator

    def resolve(self, locator: Locator) -> Resolution:
        """
        Resolve ``locator`` to ``Found(value, origin)`` or ``NOT_FOUND``.

        Raises:
            Whatever loading the unit raises, when the unit exists.
        """
        if self.is_path_locator(locator):
            return self._resolve_path(Path(locator))
        return self._resolve_module(str(locator))

    def try_load(self, locator: Locator, fallback: Any = ABSENT) -> Any:
        """Load the export of ``locator``, or return ``fallback`` when it does not exist."""
        resolution = self.resolve(locator)
        if resolution is NOT_FOUND:
            return fallback
        return resolution.value

    def try_load_first(self, *locators: Locator) -> Any:
        """
        Try each locator in order.

        Returns the first export that is neither absent nor ``None``;
        ``ABSENT`` when every locator misses.
        """
        for locator in locators:
            value = self.try_load(locator)
            if value is not ABSENT and value is not None:
                return value
        return ABSENT

    def find_file(self, location: Path) -> Optional[Path]:
        """Return the file a filesystem locator points at, if any."""
        if location.is_file():
            return location
        for suffix in FILE_SUFFIXES:
            candidate = location.parent / (location.name + suffix)
            if candidate.is_file():
                return candidate
        if location.is_dir():
            for index in INDEX_FILES:
                candidate = location / index
                if candidate.is_file():
                    return candidate
        return None

    # ------------------------------------------------------------------
    # Filesystem units
    # ------------------------------------------------------------------

    def _resolve_path(self, location: Path) -> Resolution:
        path = self.find_file(location)
        if path is None:
            logger.debug(f"No unit at {location}")
            return NOT_FOUND

        if path.suffix == ".py":
            value = export_of(self._exec_module(path))
        elif path.suffix == ".json":
            value = json.loads(path.read_text(encoding="utf-8"))
        elif path.suffix in (".yaml", ".yml"):
            value = yaml.safe_load(path.read_text(encoding="utf-8"))
            if value is None:
                value = {}
        else:
            raise ValueError(f"Unsupported unit format: {path}")

        logger.debug(f"Loaded unit {path}")
        return Found(value=value, origin=str(path))

    def _exec_module(self, path: Path) -> ModuleType:
        """Execute a Python file as a fresh module."""
        module_name = self._module_name(path)

        if path.name == "__init__.py":
            spec = importlib.util.spec_from_file_location(
                module_name, path, submodule_search_locations=[str(path.parent)]
            )
        else:
            spec = importlib.util.spec_from_file_location(module_name, path)
        if spec is None or spec.loader is None:
            raise ImportError(f"Cannot load unit from {path}")

        module = importlib.util.module_from_spec(spec)
        # Registered before execution so relative imports inside packages work
        sys.modules[module_name] = module
        try:
            spec.loader.exec_module(module)
        except BaseException:
            sys.modules.pop(module_name, None)
            raise
        return module

    @staticmethod
    def _module_name(path: Path) -> str:
        stem = path.parent.name if path.name == "__init__.py" else path.stem
        digest = hashlib.sha1(str(path).encode()).hexdigest()[:10]
        safe_stem = _NON_IDENTIFIER.sub("_", stem)
        return f"_crystal_unit_{safe_stem}_{digest}"

    # ------------------------------------------------------------------
    # Importable modules
    # ------------------------------------------------------------------

    def _resolve_module(self, name: str) -> Resolution:
        module_name = name.replace("-", "_")
        try:
            spec = importlib.util.find_spec(module_name)
        except ModuleNotFoundError as exc:
            # A missing parent package means the unit itself does not exist
            if exc.name and (module_name == exc.name or module_name.startswith(exc.name + ".")):
                logger.debug(f"No module named {module_name}")
                return NOT_FOUND
            raise

        if spec is None:
            logger.debug(f"No module named {module_name}")
            return NOT_FOUND

        module = importlib.import_module(module_name)
        logger.debug(f"Imported module {module_name}")
        return Found(value=export_of(module), origin=module_name)
