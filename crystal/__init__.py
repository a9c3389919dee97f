"""
Crystal - convention-based application bootstrap.

Given a project root, Crystal:
- Derives the conventional paths (src, config, init, db)
- Loads the base configuration and merges the environment override
- Runs the optional pre-init hook
- Provisions the resources declared under ``db`` through factories or drivers
- Runs the optional post-init hook
- Signals readiness through a future and a replaying ``"ready"`` event
"""

__version__ = "0.3.0"

from .app import Application, READY_EVENT, ERROR_EVENT
from .config import ConfigLoader, deep_merge, resolve_env
from .drivers import (
    DriverChain,
    DriverStrategy,
    LocalDriverStrategy,
    RegistryDriverStrategy,
    PackageDriverStrategy,
    EntryPointDriverStrategy,
)
from .events import EventEmitter
from .lifecycle import InitPhase, LifecycleError, Readiness, ReadinessState
from .paths import PathSet
from .resolver import ABSENT, NOT_FOUND, Found, ModuleResolver
from .resources import ResourceProvisioner

from .faults import (
    Fault,
    FaultDomain,
    Severity,
    ConfigFault,
    ConfigLoadFault,
    ConfigInvalidFault,
    HookFault,
    ResourceFault,
    UnsupportedResourceTypeFault,
    ResourceConnectFault,
)

__all__ = [
    "__version__",

    # Application
    "Application",
    "READY_EVENT",
    "ERROR_EVENT",
    "EventEmitter",
    "InitPhase",
    "LifecycleError",
    "Readiness",
    "ReadinessState",

    # Paths and loading
    "PathSet",
    "ModuleResolver",
    "Found",
    "ABSENT",
    "NOT_FOUND",

    # Configuration
    "ConfigLoader",
    "deep_merge",
    "resolve_env",

    # Resources
    "ResourceProvisioner",
    "DriverChain",
    "DriverStrategy",
    "LocalDriverStrategy",
    "RegistryDriverStrategy",
    "PackageDriverStrategy",
    "EntryPointDriverStrategy",

    # Faults
    "Fault",
    "FaultDomain",
    "Severity",
    "ConfigFault",
    "ConfigLoadFault",
    "ConfigInvalidFault",
    "HookFault",
    "ResourceFault",
    "UnsupportedResourceTypeFault",
    "ResourceConnectFault",
]
