"""
Convention-based project paths.

Every project is laid out the same way below its root::

    <root>/
        src/
            config/     base configuration and per-environment overrides
            init/       pre-init and post-init hooks
            db/         project-local resource drivers
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Union


@dataclass(frozen=True)
class PathSet:
    """The five absolute paths derived from a project root."""

    root: Path
    src: Path
    config: Path
    init: Path
    db: Path

    @classmethod
    def from_root(cls, root: Union[str, Path]) -> "PathSet":
        """Derive the path set from ``root`` (relative roots resolve against the cwd)."""
        root = Path(root).resolve()
        src = root / "src"
        return cls(
            root=root,
            src=src,
            config=src / "config",
            init=src / "init",
            db=src / "db",
        )

    def as_dict(self) -> Dict[str, str]:
        return {
            "root": str(self.root),
            "src": str(self.src),
            "config": str(self.config),
            "init": str(self.init),
            "db": str(self.db),
        }
