"""
Resource Provisioner - opens every resource declared in configuration.

The ``db`` section maps a resource type to either a factory or driver options::

    DB = {
        "redis": {"url": "redis://localhost"},   # options for a resolved driver
        "cache": build_cache,                    # factory called with the app
    }

Entries are provisioned one at a time in declaration order. The first failure
aborts the remaining entries.
"""

from __future__ import annotations

import inspect
import logging
import time
from typing import Any, Dict, Mapping, Optional

from .drivers import DriverChain
from .faults import (
    ConfigInvalidFault,
    Fault,
    ResourceConnectFault,
    UnsupportedResourceTypeFault,
)
from .resolver import ABSENT

logger = logging.getLogger("crystal.resources")

RESOURCES_KEY = "db"


async def _maybe_await(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


class ResourceProvisioner:
    """Provision named resources through factories or resolved drivers."""

    def __init__(self, drivers: DriverChain):
        self.drivers = drivers

    async def provision(
        self,
        app: Any,
        section: Optional[Mapping[str, Any]],
        registry: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Provision every entry of ``section`` into ``registry``.

        Args:
            app: Application passed to inline factories
            section: The configuration's resource section
            registry: Dict filled in place (a new one when omitted)

        Returns:
            The registry, keyed by resource type

        Raises:
            ConfigInvalidFault: The section is not a mapping
            UnsupportedResourceTypeFault: No callable driver for a type
            ResourceConnectFault: A factory or driver failed
        """
        if registry is None:
            registry = {}
        if section is None:
            return registry
        if not isinstance(section, Mapping):
            raise ConfigInvalidFault(
                RESOURCES_KEY,
                f"expected a mapping of resources, got {type(section).__name__}",
            )

        for name, options in section.items():
            start = time.perf_counter()
            registry[name] = await self._provision_one(app, name, options)
            elapsed = (time.perf_counter() - start) * 1000
            logger.info(f"  ↳ {name} ready ({elapsed:.1f}ms)")

        return registry

    async def _provision_one(self, app: Any, name: str, options: Any) -> Any:
        if callable(options):
            logger.debug(f"  ↳ {name}: calling inline factory")
            return await self._call(name, options, app)

        try:
            driver = self.drivers.resolve(name)
        except Fault:
            raise
        except Exception as exc:
            raise ResourceConnectFault(name, exc, metadata={"stage": "driver-load"}) from exc

        if driver is ABSENT or not callable(driver):
            raise UnsupportedResourceTypeFault(name)

        logger.debug(f"  ↳ {name}: calling driver {getattr(driver, '__qualname__', driver)!s}")
        return await self._call(name, driver, options)

    @staticmethod
    async def _call(name: str, factory: Any, argument: Any) -> Any:
        try:
            return await _maybe_await(factory(argument))
        except Fault:
            raise
        except Exception as exc:
            raise ResourceConnectFault(name, exc) from exc
