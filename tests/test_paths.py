"""
Path System (paths.py)

Tests PathSet derivation from a project root.
"""

import dataclasses
import os
from pathlib import Path

import pytest

from crystal.paths import PathSet


class TestPathSet:

    def test_derived_paths(self, tmp_path):
        paths = PathSet.from_root(tmp_path)
        assert paths.root == tmp_path.resolve()
        assert paths.src == tmp_path.resolve() / "src"
        assert paths.config == tmp_path.resolve() / "src" / "config"
        assert paths.init == tmp_path.resolve() / "src" / "init"
        assert paths.db == tmp_path.resolve() / "src" / "db"

    def test_all_paths_absolute(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        paths = PathSet.from_root("relative/app")
        for value in (paths.root, paths.src, paths.config, paths.init, paths.db):
            assert value.is_absolute()
        assert paths.root == tmp_path.resolve() / "relative" / "app"

    def test_deterministic(self, tmp_path):
        assert PathSet.from_root(tmp_path) == PathSet.from_root(str(tmp_path))

    def test_root_need_not_exist(self, tmp_path):
        paths = PathSet.from_root(tmp_path / "missing")
        assert paths.db.name == "db"

    def test_frozen(self, tmp_path):
        paths = PathSet.from_root(tmp_path)
        with pytest.raises(dataclasses.FrozenInstanceError):
            paths.root = Path("/elsewhere")

    def test_as_dict(self, tmp_path):
        data = PathSet.from_root(tmp_path).as_dict()
        assert list(data) == ["root", "src", "config", "init", "db"]
        assert data["config"] == os.path.join(str(tmp_path.resolve()), "src", "config")
