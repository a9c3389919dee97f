"""
Crystal faults - structured errors raised during initialization.

Every failure that aborts initialization is a typed fault carrying a stable
code, a domain and the original exception as ``__cause__``.

Core exports:
- Fault: Base fault class
- FaultDomain: Domain enumeration
- Severity: Severity levels
- Domain faults for configuration, hooks and resources
"""

from .core import (
    Fault,
    FaultDomain,
    Severity,
)

from .domains import (
    ConfigFault,
    ConfigLoadFault,
    ConfigInvalidFault,
    HookFault,
    ResourceFault,
    UnsupportedResourceTypeFault,
    ResourceConnectFault,
)

__all__ = [
    # Core types
    "Fault",
    "FaultDomain",
    "Severity",

    # Domain faults
    "ConfigFault",
    "ConfigLoadFault",
    "ConfigInvalidFault",
    "HookFault",
    "ResourceFault",
    "UnsupportedResourceTypeFault",
    "ResourceConnectFault",
]
