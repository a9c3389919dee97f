"""
CLI (cli/)

Tests the crystal command group with Click's CliRunner.
"""

import json

import pytest
from click.testing import CliRunner

from crystal import __version__
from crystal.cli.__main__ import cli

from tests.conftest import write


@pytest.fixture
def runner():
    return CliRunner()


def invoke(runner, *args):
    return runner.invoke(cli, list(args), obj={})


class TestGroup:

    def test_version(self, runner):
        result = invoke(runner, "--version")
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_help_lists_commands(self, runner):
        result = invoke(runner, "--help")
        assert result.exit_code == 0
        for command in ("paths", "config", "check"):
            assert command in result.output


# ============================================================================
# paths
# ============================================================================

class TestPathsCommand:

    def test_lists_paths(self, runner, project):
        result = invoke(runner, "paths", str(project))
        assert result.exit_code == 0
        root = str(project.resolve())
        assert "root:" in result.output
        assert root in result.output
        for name in ("src", "config", "init", "db"):
            assert f"{name}:" in result.output

    def test_quiet_prints_bare_paths(self, runner, project):
        result = invoke(runner, "--quiet", "paths", str(project))
        assert result.exit_code == 0
        root = project.resolve()
        assert result.output.splitlines() == [
            str(root),
            str(root / "src"),
            str(root / "src" / "config"),
            str(root / "src" / "init"),
            str(root / "src" / "db"),
        ]


# ============================================================================
# config
# ============================================================================

class TestConfigCommand:

    def test_empty(self, runner, project):
        result = invoke(runner, "config", str(project))
        assert result.exit_code == 0
        assert "(empty configuration)" in result.output

    def test_quiet_empty(self, runner, project):
        result = invoke(runner, "--quiet", "config", str(project))
        assert result.exit_code == 0
        assert result.output == ""

    def test_json_with_env(self, runner, project, make_file):
        make_file("src/config.json", '{"name": "base", "db": {"mysql": {"port": 3306}}}')
        make_file("src/config/production.json", '{"name": "production"}')
        result = invoke(runner, "config", str(project), "--env", "production", "--json")
        assert result.exit_code == 0
        assert json.loads(result.output) == {
            "name": "production",
            "db": {"mysql": {"port": 3306}},
        }

    def test_key_values(self, runner, project, make_file):
        make_file("src/config.yaml", "debug: true\n")
        result = invoke(runner, "config", str(project))
        assert result.exit_code == 0
        assert "debug:" in result.output
        assert "True" in result.output

    def test_callables_rendered_as_repr(self, runner, project, make_file):
        make_file("src/config/__init__.py", "def cache(app):\n    return 1\n\ndefault = {'db': {'cache': cache}}\n")
        result = invoke(runner, "config", str(project), "--json")
        assert result.exit_code == 0
        assert "<function cache" in json.loads(result.output)["db"]["cache"]

    def test_broken_config(self, runner, project, make_file):
        make_file("src/config.json", "{broken")
        result = invoke(runner, "config", str(project))
        assert result.exit_code == 1
        assert "CONFIG_LOAD_FAILED" in result.output


# ============================================================================
# check
# ============================================================================

class TestCheckCommand:

    def test_ready(self, runner, project, make_file, site_packages):
        write(site_packages, "crystal_node_mysql.py", """
            class Connection:
                def __init__(self, options):
                    self.options = options

            default = Connection
        """)
        make_file("src/config.json", '{"db": {"mysql": {"url": "x"}}}')

        result = invoke(runner, "check", str(project))
        assert result.exit_code == 0
        assert "Application ready" in result.output
        assert "mysql: Connection" in result.output

    def test_no_resources(self, runner, project):
        result = invoke(runner, "check", str(project))
        assert result.exit_code == 0
        assert "(none)" in result.output

    def test_quiet(self, runner, project):
        result = invoke(runner, "--quiet", "check", str(project))
        assert result.exit_code == 0
        assert result.output == ""

    def test_failure(self, runner, project, make_file):
        make_file("src/config.json", '{"db": {"foo": {}}}')
        result = invoke(runner, "check", str(project))
        assert result.exit_code == 1
        assert "Initialization failed" in result.output
        assert "RESOURCE_TYPE_UNSUPPORTED" in result.output

    def test_verbose_failure_shows_cause(self, runner, project, make_file):
        make_file("src/init/pre-init.py", "def default(app):\n    raise RuntimeError('hook exploded')\n")
        result = invoke(runner, "--verbose", "check", str(project))
        assert result.exit_code == 1
        assert "caused by RuntimeError: hook exploded" in result.output
