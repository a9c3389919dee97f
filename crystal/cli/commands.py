"""Command implementations behind the ``crystal`` CLI."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Dict, Optional

from ..app import Application
from ..config import ConfigLoader
from ..paths import PathSet


def load_config(root: Path, env: Optional[str] = None) -> Dict[str, Any]:
    """Load the merged configuration without running hooks or drivers."""
    return ConfigLoader().load(PathSet.from_root(root), env)


def boot(root: Path, env: Optional[str] = None) -> Application:
    """
    Run a full initialization and return the ready application.

    Raises:
        Fault: Initialization failed
    """

    async def _boot() -> Application:
        app = Application(root, env=env)
        await app.ready()
        return app

    return asyncio.run(_boot())
