"""
Crystal CLI - output helpers built on Click.

    success(), error(), info(), dim()   coloured messages
    section()                           section divider with title
    kv()                                aligned key-value pair
    bullet()                            bulleted list item
"""

from __future__ import annotations

import shutil
from typing import Optional

import click

_L_H = "\u2500"      # ─
_BULLET = "\u2022"   # •
_CHECK = "\u2713"    # ✓
_CROSS = "\u2717"    # ✗


def _tw() -> int:
    """Terminal width clamped to a sane range."""
    return max(40, min(shutil.get_terminal_size((80, 24)).columns, 120))


def success(message: str) -> None:
    """Print success message in green."""
    click.echo(click.style(message, fg="green"))


def error(message: str) -> None:
    """Print error message in red."""
    click.echo(click.style(message, fg="red"), err=True)


def dim(message: str) -> None:
    """Print dimmed message."""
    click.echo(click.style(message, dim=True))


def section(title: str, *, width: Optional[int] = None, fg: str = "cyan") -> None:
    """
    Print a section header with a ruled line.

        ── Resources ──────────────────────────────
    """
    w = width or _tw()
    dashes = max(4, w - len(title) - 6)
    click.echo(click.style(f"{_L_H}{_L_H} {title} {_L_H * dashes}", fg=fg, bold=True))


def kv(
    key: str,
    value: str,
    *,
    key_width: int = 12,
    indent: int = 2,
    key_fg: str = "white",
    val_fg: str = "cyan",
) -> None:
    """
    Print an aligned key-value pair.

        root:       /srv/project
        config:     /srv/project/src/config
    """
    prefix = " " * indent
    k = click.style(f"{key}:", fg=key_fg)
    v = click.style(str(value), fg=val_fg)
    padding = " " * max(1, key_width - len(key) - 1)
    click.echo(f"{prefix}{k}{padding}{v}")


def bullet(text: str, *, indent: int = 2, fg: str = "white") -> None:
    """Print a bulleted item."""
    click.echo(" " * indent + click.style(f"{_BULLET} {text}", fg=fg))
