"""
Shared test fixtures and helpers for the Crystal test suite.
"""

import sys
import textwrap
from pathlib import Path
from typing import Callable

import pytest

from crystal.config import ENV_VAR


# ============================================================================
# Project Helpers
# ============================================================================


def write(root: Path, relpath: str, content: str = "") -> Path:
    """Write a dedented file below ``root``, creating parent directories."""
    path = root / relpath
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(textwrap.dedent(content).lstrip("\n"), encoding="utf-8")
    return path


@pytest.fixture
def project(tmp_path) -> Path:
    """An empty project root."""
    root = tmp_path / "project"
    root.mkdir()
    return root


@pytest.fixture
def make_file(project) -> Callable[[str, str], Path]:
    """Write files into the project root."""

    def _make(relpath: str, content: str = "") -> Path:
        return write(project, relpath, content)

    return _make


@pytest.fixture
def site_packages(tmp_path, monkeypatch) -> Path:
    """A directory on ``sys.path`` for fake external driver packages."""
    site = tmp_path / "site"
    site.mkdir()
    monkeypatch.syspath_prepend(str(site))
    return site


# ============================================================================
# Isolation
# ============================================================================


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Unset the environment variable and restore it after the test (even if .env set it)."""
    monkeypatch.setenv(ENV_VAR, "placeholder")
    monkeypatch.delenv(ENV_VAR)


@pytest.fixture(autouse=True)
def forget_units():
    """Drop modules loaded by the resolver so tests do not share them."""
    before = set(sys.modules)
    yield
    for name in set(sys.modules) - before:
        if name.startswith(("_crystal_unit_", "crystal_node_")):
            del sys.modules[name]
