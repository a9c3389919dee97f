"""Crystal CLI - Main Entry Point.

The `crystal` command inspects and boots convention-based projects.

Commands:
    paths    - Show the derived project paths
    config   - Show the merged configuration
    check    - Run a full initialization
"""

import json
import logging
import sys
from pathlib import Path
from typing import Optional

import click

from .. import __version__
from ..faults import Fault
from . import __cli_name__
from .utils import success, error, dim, section, kv, bullet, _CHECK, _CROSS

logger = logging.getLogger("crystal.cli")


@click.group()
@click.version_option(version=__version__, prog_name=__cli_name__)
@click.option('--verbose', '-v', is_flag=True, help='Verbose output')
@click.option('--quiet', '-q', is_flag=True, help='Minimal output')
@click.pass_context
def cli(ctx, verbose: bool, quiet: bool):
    """Inspect and boot convention-based projects.

    \b
    Quick start:
      crystal paths .
      crystal config . --env production
      crystal check .
    """
    ctx.ensure_object(dict)
    ctx.obj['verbose'] = verbose
    ctx.obj['quiet'] = quiet
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@cli.command('paths')
@click.argument('root', type=click.Path(file_okay=False, path_type=Path), default='.')
@click.pass_context
def paths(ctx, root: Path):
    """
    Show the paths derived from ROOT.

    With --quiet only the paths are printed, one per line.

    Examples:
      crystal paths .
    """
    from ..paths import PathSet

    for name, value in PathSet.from_root(root).as_dict().items():
        if ctx.obj['quiet']:
            click.echo(value)
        else:
            kv(name, value)


@cli.command('config')
@click.argument('root', type=click.Path(file_okay=False, path_type=Path), default='.')
@click.option('--env', type=str, help='Environment name (default: $CRYSTAL_ENV)')
@click.option('--json', 'as_json', is_flag=True, help='Print as JSON')
@click.pass_context
def config(ctx, root: Path, env: Optional[str], as_json: bool):
    """
    Show the merged configuration of ROOT.

    Hooks are not run and no resource is provisioned.

    Examples:
      crystal config .
      crystal config . --env production --json
    """
    from .commands import load_config

    try:
        merged = load_config(root, env)
    except Fault as e:
        error(f"  {_CROSS} {e}")
        sys.exit(1)

    if as_json:
        click.echo(json.dumps(merged, indent=2, default=repr))
        return

    if not merged:
        if not ctx.obj['quiet']:
            dim("  (empty configuration)")
        return
    for key, value in merged.items():
        kv(str(key), repr(value))


@cli.command('check')
@click.argument('root', type=click.Path(file_okay=False, path_type=Path), default='.')
@click.option('--env', type=str, help='Environment name (default: $CRYSTAL_ENV)')
@click.pass_context
def check(ctx, root: Path, env: Optional[str]):
    """
    Run a full initialization of ROOT.

    Exits with status 1 if any phase fails.

    Examples:
      crystal check .
      crystal check /srv/project --env staging
    """
    from .commands import boot

    logger.debug(f"Booting {root} (env={env})")
    try:
        app = boot(root, env)
    except Fault as e:
        error(f"  {_CROSS} Initialization failed: {e}")
        cause = e.__cause__
        if cause is not None and ctx.obj['verbose']:
            error(f"    caused by {type(cause).__name__}: {cause}")
        sys.exit(1)

    if ctx.obj['quiet']:
        return

    success(f"  {_CHECK} Application ready")
    kv("Root", str(app.paths.root))
    section("Resources")
    if not app.db:
        dim("  (none)")
    for name, handle in app.db.items():
        bullet(f"{name}: {type(handle).__name__}")


def main():
    """Entry point for `crystal` command."""
    cli(obj={})


if __name__ == '__main__':
    main()
