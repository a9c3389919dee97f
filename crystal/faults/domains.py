"""
Crystal faults - Domain-specific fault types.

Provides concrete fault classes for each domain:
- CONFIG faults
- LIFECYCLE faults
- RESOURCE faults
"""

from typing import Any, Optional
from .core import Fault, FaultDomain, Severity


def _cause_metadata(cause: Optional[BaseException]) -> dict[str, Any]:
    if cause is None:
        return {}
    return {"cause": f"{type(cause).__name__}: {cause}"}


# ============================================================================
# CONFIG Faults
# ============================================================================

class ConfigFault(Fault):
    """Base class for configuration faults."""

    def __init__(
        self,
        code: str,
        message: str,
        *,
        severity: Severity = Severity.FATAL,
        metadata: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            code=code,
            message=message,
            domain=FaultDomain.CONFIG,
            severity=severity,
            retryable=False,
            metadata=metadata,
        )


class ConfigLoadFault(ConfigFault):
    """A configuration unit exists but could not be evaluated."""

    def __init__(self, locator: str, cause: Optional[BaseException] = None, **kwargs):
        super().__init__(
            code="CONFIG_LOAD_FAILED",
            message=f"Configuration unit '{locator}' failed to load",
            metadata={"locator": locator, **_cause_metadata(cause), **kwargs.get("metadata", {})},
        )


class ConfigInvalidFault(ConfigFault):
    """Configuration value is invalid."""

    def __init__(self, key: str, reason: str, **kwargs):
        super().__init__(
            code="CONFIG_INVALID",
            message=f"Configuration key '{key}' is invalid: {reason}",
            metadata={"key": key, "reason": reason, **kwargs.get("metadata", {})},
        )


# ============================================================================
# LIFECYCLE Faults
# ============================================================================

class HookFault(Fault):
    """An initialization hook was found but failed to load or run."""

    def __init__(self, hook: str, cause: Optional[BaseException] = None, **kwargs):
        super().__init__(
            code="HOOK_FAILED",
            message=f"Initialization hook '{hook}' failed",
            domain=FaultDomain.LIFECYCLE,
            metadata={"hook": hook, **_cause_metadata(cause), **kwargs.get("metadata", {})},
        )
        self.hook = hook


# ============================================================================
# RESOURCE Faults
# ============================================================================

class ResourceFault(Fault):
    """Base class for resource provisioning faults."""

    def __init__(
        self,
        code: str,
        message: str,
        *,
        resource: str,
        retryable: bool = False,
        metadata: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            code=code,
            message=message,
            domain=FaultDomain.RESOURCE,
            retryable=retryable,
            metadata={"resource": resource, **(metadata or {})},
        )
        self.resource = resource


class UnsupportedResourceTypeFault(ResourceFault):
    """No callable driver could be resolved for a declared resource."""

    def __init__(self, resource: str, **kwargs):
        super().__init__(
            code="RESOURCE_TYPE_UNSUPPORTED",
            message=f"Resource type '{resource}' is not supported",
            resource=resource,
            metadata=kwargs.get("metadata"),
        )


class ResourceConnectFault(ResourceFault):
    """A factory or driver was invoked but did not produce a handle."""

    def __init__(self, resource: str, cause: Optional[BaseException] = None, **kwargs):
        super().__init__(
            code="RESOURCE_CONNECT_FAILED",
            message=f"Resource '{resource}' failed to connect",
            resource=resource,
            retryable=True,
            metadata={**_cause_metadata(cause), **kwargs.get("metadata", {})},
        )
