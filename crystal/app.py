"""
Application - convention-based bootstrap with a readiness lifecycle.

Constructing an ``Application`` schedules its initialization on the event loop
and returns immediately. Initialization runs these phases in order:

    config     load ``src/config`` and merge ``src/config/<env>`` over it
    pre-init   call ``src/init/pre-init`` (if it exports a callable)
    resources  provision every entry of ``config["db"]``
    post-init  call ``src/init`` (if it exports a callable)

Usage:
    app = Application("/srv/project")
    app.on("ready", lambda: print(app.db))
    await app.ready()

A ``"ready"`` listener registered after initialization succeeded is called
immediately at registration time.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import time
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional, Sequence, Union

from .config import ConfigLoader
from .drivers import Driver, DriverChain, DriverStrategy
from .events import EventEmitter, Listener
from .faults import Fault, HookFault, Severity
from .lifecycle import InitPhase, Readiness, ReadinessState
from .paths import PathSet
from .resolver import ModuleResolver
from .resources import RESOURCES_KEY, ResourceProvisioner

logger = logging.getLogger("crystal.app")

READY_EVENT = "ready"
ERROR_EVENT = "error"

PRE_INIT_UNITS = ("pre-init", "pre_init")

_LOG_LEVELS = {
    Severity.INFO: logging.INFO,
    Severity.WARN: logging.WARNING,
    Severity.ERROR: logging.ERROR,
    Severity.FATAL: logging.CRITICAL,
}


def _log_level(exc: BaseException) -> int:
    """Log level for a failure; plain exceptions log at ERROR."""
    if isinstance(exc, Fault):
        return _LOG_LEVELS[exc.severity]
    return logging.ERROR


class Application(EventEmitter):
    """
    Application rooted at a project directory.

    Attributes:
        config: Merged configuration (empty until the config phase ran)
        db: Resource registry keyed by resource type
    """

    def __init__(
        self,
        root: Union[str, Path],
        *,
        env: Optional[str] = None,
        resolver: Optional[ModuleResolver] = None,
        drivers: Optional[Mapping[str, Driver]] = None,
        driver_strategies: Optional[Sequence[DriverStrategy]] = None,
        load_env_file: bool = True,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ):
        """
        Initialize the application and schedule its initialization.

        Args:
            root: Project root directory
            env: Environment name (defaults to ``CRYSTAL_ENV``)
            resolver: Module resolver used for config, hooks and drivers
            drivers: Drivers registered in code, consulted after ``src/db``
            driver_strategies: Full driver lookup chain, replacing the default one
            load_env_file: Whether ``<root>/.env`` is loaded before reading ``CRYSTAL_ENV``
            loop: Event loop to schedule on (defaults to the running loop)

        Raises:
            RuntimeError: No loop given and none is running
        """
        loop = loop or asyncio.get_running_loop()
        super().__init__(loop=loop)

        self._paths = PathSet.from_root(root)
        self._env = env
        self.resolver = resolver or ModuleResolver()
        self.config_loader = ConfigLoader(self.resolver, load_env_file=load_env_file)

        if driver_strategies is not None:
            chain = DriverChain(driver_strategies)
        else:
            chain = DriverChain.default(self.resolver, self._paths, drivers)
        self.provisioner = ResourceProvisioner(chain)

        self.config: Dict[str, Any] = {}
        self.db: Dict[str, Any] = {}
        self._phase: Optional[InitPhase] = None
        self._readiness = Readiness(loop)
        self._task = loop.create_task(self._initialize())

    def __repr__(self) -> str:
        return f"<Application root={str(self._paths.root)!r} state={self.state.value}>"

    # ------------------------------------------------------------------
    # Public surface
    # ------------------------------------------------------------------

    @property
    def paths(self) -> PathSet:
        return self._paths

    @property
    def is_ready(self) -> bool:
        return self._readiness.is_ready

    @property
    def state(self) -> ReadinessState:
        return self._readiness.state

    @property
    def error(self) -> Optional[BaseException]:
        """The fault that aborted initialization, if any."""
        return self._readiness.error

    @property
    def phase(self) -> Optional[InitPhase]:
        """The phase currently (or last) running."""
        return self._phase

    @property
    def resources(self) -> Dict[str, Any]:
        return self.db

    def ready(self) -> "asyncio.Future[None]":
        """Return the completion future (always the same object)."""
        return self._readiness.future

    # ------------------------------------------------------------------
    # Ready replay
    # ------------------------------------------------------------------

    def _add(self, event: str, listener: Listener, *, once: bool, prepend: bool) -> "Application":
        if event != READY_EVENT or not self.is_ready:
            super()._add(event, listener, once=once, prepend=prepend)
            return self

        # Already ready: call now. Persistent registrations are still recorded.
        if not once:
            super()._add(event, listener, once=False, prepend=prepend)
        self._invoke(event, listener, ())
        return self

    # ------------------------------------------------------------------
    # Initialization
    # ------------------------------------------------------------------

    async def _initialize(self) -> None:
        logger.info(f"Initializing application at {self._paths.root}")
        start = time.perf_counter()

        try:
            await self._run_phase(InitPhase.CONFIG, self._load_config)
            await self._run_phase(InitPhase.PRE_INIT, self._pre_init)
            await self._run_phase(InitPhase.RESOURCES, self._provision)
            await self._run_phase(InitPhase.POST_INIT, self._post_init)
        except asyncio.CancelledError:
            self._readiness.future.cancel()
            raise
        except Exception as exc:
            self._fail(exc)
            return

        self._readiness.mark_ready()
        elapsed = (time.perf_counter() - start) * 1000
        logger.info(f"✅ Application ready ({len(self.db)} resources, {elapsed:.1f}ms)")
        self.emit(READY_EVENT)
        self._readiness.settle()

    def _fail(self, exc: Exception) -> None:
        self._readiness.mark_failed(exc)
        phase = self._phase.value if self._phase else "startup"
        logger.log(_log_level(exc), f"❌ Initialization failed during {phase}: {exc}")
        if not self.emit(ERROR_EVENT, exc):
            logger.debug("No 'error' listeners registered")
        self._readiness.settle()

    async def _run_phase(self, phase: InitPhase, step: Callable[[], Awaitable[None]]) -> None:
        self._phase = phase
        start = time.perf_counter()
        logger.debug(f"Phase {phase.value} started")
        await step()
        elapsed = (time.perf_counter() - start) * 1000
        logger.debug(f"Phase {phase.value} finished ({elapsed:.1f}ms)")

    async def _load_config(self) -> None:
        self.config = self.config_loader.load(self._paths, self._env)

    async def _pre_init(self) -> None:
        await self._run_hook(
            "pre-init",
            *(self._paths.init / unit for unit in PRE_INIT_UNITS),
        )

    async def _provision(self) -> None:
        self.db = {}
        await self.provisioner.provision(self, self.config.get(RESOURCES_KEY), self.db)

    async def _post_init(self) -> None:
        await self._run_hook("post-init", self._paths.init)

    async def _run_hook(self, name: str, *locators: Path) -> None:
        try:
            hook = self.resolver.try_load_first(*locators)
            if not callable(hook):
                logger.debug(f"  ↳ no {name} hook")
                return
            logger.info(f"  ↳ Running {name} hook")
            result = hook(self)
            if inspect.isawaitable(result):
                await result
        except Fault:
            raise
        except Exception as exc:
            raise HookFault(name, exc) from exc
