"""
Config Loader - base configuration plus environment override.

Merge order (later overrides earlier):
1. Base unit at ``src/config`` (``config.py``, ``config/__init__.py``,
   ``config.yaml``, ``config/index.json``, ...)
2. Environment unit at ``src/config/<env>``

The environment name comes from the ``env`` argument, then the
``CRYSTAL_ENV`` variable (optionally read from ``<root>/.env``). When neither
is set the literal segment ``"undefined"`` is used, so a project may ship a
``config/undefined.yaml`` that applies when no environment was chosen.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from types import ModuleType
from typing import Any, Dict, Mapping, Optional

from dotenv import load_dotenv

from .faults import ConfigInvalidFault, ConfigLoadFault, Fault
from .paths import PathSet
from .resolver import ModuleResolver

logger = logging.getLogger("crystal.config")

ENV_VAR = "CRYSTAL_ENV"
UNSET_ENV = "undefined"
ENV_FILE = ".env"


def resolve_env(env: Optional[str] = None) -> str:
    """Return the environment segment used to locate the override unit."""
    if env is not None:
        return env
    value = os.environ.get(ENV_VAR)
    if value is None:
        # TODO: decide whether an unset environment should skip the override entirely
        return UNSET_ENV
    return value


def override_location(paths: PathSet, env_name: str) -> Path:
    """
    Location of the environment unit, always below ``paths.config``.

    The name is appended as a path segment, so an absolute name such as
    ``/etc/prod`` resolves to ``src/config/etc/prod`` rather than ``/etc/prod``.
    """
    return Path(f"{paths.config}{os.sep}{env_name}")


def load_env_file(root: Path) -> bool:
    """Load ``<root>/.env`` without overriding variables already set."""
    env_path = Path(root) / ENV_FILE
    if not env_path.is_file():
        return False
    loaded = load_dotenv(env_path, override=False)
    logger.debug(f"Loaded environment file {env_path}")
    return loaded


def deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Deep merge ``override`` onto ``base`` and return a new dict.

    Mappings present on both sides merge key by key; any other override
    value (lists included) replaces the base value. Neither input is mutated.
    """
    merged = {key: _clone(value) for key, value in base.items()}
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, Mapping):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = _clone(value)
    return merged


def _clone(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {key: _clone(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_clone(item) for item in value]
    return value


class ConfigLoader:
    """
    Loads and merges the project configuration.

    Usage:
        loader = ConfigLoader()
        config = loader.load(PathSet.from_root("."), env="production")
    """

    def __init__(self, resolver: Optional[ModuleResolver] = None, *, load_env_file: bool = True):
        self.resolver = resolver or ModuleResolver()
        self.load_env_file = load_env_file

    def load(self, paths: PathSet, env: Optional[str] = None) -> Dict[str, Any]:
        """
        Load the base unit, then merge the environment unit over it.

        Raises:
            ConfigLoadFault: A unit exists but failed to evaluate
            ConfigInvalidFault: A unit does not export a mapping
        """
        if self.load_env_file:
            load_env_file(paths.root)

        env_name = resolve_env(env)
        base = self._load_unit(paths.config)
        override = self._load_unit(override_location(paths, env_name))

        config = deep_merge(base, override)
        logger.info(f"Configuration loaded (env={env_name}, keys={sorted(map(str, config))})")
        return config

    def _load_unit(self, location: Path) -> Dict[str, Any]:
        try:
            value = self.resolver.try_load(location, fallback={})
        except Fault:
            raise
        except Exception as exc:
            raise ConfigLoadFault(str(location), exc) from exc
        return self._normalize(value, location)

    @staticmethod
    def _normalize(value: Any, location: Path) -> Dict[str, Any]:
        if value is None:
            return {}
        if isinstance(value, Mapping):
            return dict(value)
        if isinstance(value, ModuleType):
            # Module without a ``default`` export: public UPPERCASE names
            return {
                name.lower(): attr
                for name, attr in vars(value).items()
                if name.isupper() and not name.startswith("_")
            }
        raise ConfigInvalidFault(
            str(location),
            f"expected a mapping, got {type(value).__name__}",
        )
