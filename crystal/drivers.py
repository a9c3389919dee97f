"""
Driver lookup - ordered strategies for finding resource drivers.

A driver is a callable ``(options) -> handle`` (sync or async) that opens a
named resource. Drivers are looked up by resource type through a chain of
strategies; the first strategy that produces a value wins.

Default chain:
    1. project-local unit at ``src/db/<type>``
    2. explicit registry passed by the caller (if any)
    3. importable package ``crystal-node-<type>`` (``crystal_node_<type>``)
    4. installed entry point ``<type>`` in the ``crystal.drivers`` group
"""

from __future__ import annotations

import importlib.metadata
import logging
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Protocol, Sequence

from .paths import PathSet
from .resolver import ABSENT, ModuleResolver

logger = logging.getLogger("crystal.drivers")

PACKAGE_PREFIX = "crystal-node-"
ENTRYPOINT_GROUP = "crystal.drivers"

Driver = Callable[[Any], Any]


class DriverStrategy(Protocol):
    """Minimal interface a lookup strategy must satisfy."""

    name: str

    def lookup(self, resource_type: str) -> Any: ...


class LocalDriverStrategy:
    """Project-local driver units under a directory."""

    name = "local"

    def __init__(self, resolver: ModuleResolver, directory: Path):
        self.resolver = resolver
        self.directory = Path(directory)

    def lookup(self, resource_type: str) -> Any:
        return self.resolver.try_load(self.directory / resource_type)


class RegistryDriverStrategy:
    """Drivers registered in code, keyed by resource type."""

    name = "registry"

    def __init__(self, drivers: Optional[Mapping[str, Driver]] = None):
        self.drivers: Dict[str, Driver] = dict(drivers or {})

    def register(self, resource_type: str, driver: Driver) -> None:
        self.drivers[resource_type] = driver

    def lookup(self, resource_type: str) -> Any:
        return self.drivers.get(resource_type, ABSENT)


class PackageDriverStrategy:
    """Conventionally named external packages (``crystal-node-<type>``)."""

    name = "package"

    def __init__(self, resolver: ModuleResolver, prefix: str = PACKAGE_PREFIX):
        self.resolver = resolver
        self.prefix = prefix

    def lookup(self, resource_type: str) -> Any:
        return self.resolver.try_load(f"{self.prefix}{resource_type}")


class EntryPointDriverStrategy:
    """Drivers advertised by installed distributions through entry points."""

    name = "entrypoint"

    def __init__(self, group: str = ENTRYPOINT_GROUP):
        self.group = group

    def lookup(self, resource_type: str) -> Any:
        for ep in importlib.metadata.entry_points(group=self.group):
            if ep.name == resource_type:
                logger.debug(f"Loading driver '{resource_type}' from entry point {ep.value}")
                return ep.load()
        return ABSENT


class DriverChain:
    """
    Ordered list of lookup strategies.

    Usage:
        chain = DriverChain.default(resolver, paths, registry={"redis": connect})
        driver = chain.resolve("redis")
    """

    def __init__(self, strategies: Sequence[DriverStrategy]):
        self.strategies: List[DriverStrategy] = list(strategies)

    @classmethod
    def default(
        cls,
        resolver: ModuleResolver,
        paths: PathSet,
        registry: Optional[Mapping[str, Driver]] = None,
    ) -> "DriverChain":
        strategies: List[DriverStrategy] = [LocalDriverStrategy(resolver, paths.db)]
        if registry:
            strategies.append(RegistryDriverStrategy(registry))
        strategies.append(PackageDriverStrategy(resolver))
        strategies.append(EntryPointDriverStrategy())
        return cls(strategies)

    def resolve(self, resource_type: str) -> Any:
        """Return the first driver found for ``resource_type``, or ``ABSENT``."""
        for strategy in self.strategies:
            driver = strategy.lookup(resource_type)
            if driver is not ABSENT and driver is not None:
                logger.debug(f"Driver for '{resource_type}' found by {strategy.name} strategy")
                return driver
        return ABSENT
