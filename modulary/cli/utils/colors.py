"""
Modulary CLI - styled output primitives built on Click.

    success(), error(), warning(), info(), dim(), bold()
    section()   - section divider with title
    kv()        - key-value pair, aligned
    badge()     - inline severity badge
    bullet()    - bulleted list item
    table()     - minimal aligned table

click.style handles NO_COLOR / TERM=dumb.
"""

from __future__ import annotations

import shutil
from typing import Optional, Sequence

import click

_TERM_WIDTH: Optional[int] = None


def _tw() -> int:
    """Terminal width, cached and clamped to a sane range."""
    global _TERM_WIDTH
    if _TERM_WIDTH is None:
        _TERM_WIDTH = max(40, min(shutil.get_terminal_size((80, 24)).columns, 100))
    return _TERM_WIDTH


def success(message: str) -> None:
    click.echo(click.style(message, fg="green"))


def error(message: str) -> None:
    click.echo(click.style(message, fg="red"), err=True)


def warning(message: str) -> None:
    click.echo(click.style(message, fg="yellow"))


def info(message: str) -> None:
    click.echo(click.style(message, fg="cyan"))


def dim(message: str) -> None:
    click.echo(click.style(message, dim=True))


def bold(message: str) -> str:
    """Return bold-styled text (does not echo)."""
    return click.style(message, bold=True)


_L_H = "\u2500"        # ─
_BULLET = "\u2022"     # •
_ARROW = "\u2192"      # →
_CHECK = "\u2713"      # ✓
_CROSS = "\u2717"      # ✗
_DOT = "\u00b7"        # ·


def section(title: str, *, width: Optional[int] = None, fg: str = "cyan") -> None:
    """
    Print a section header with a ruled line.

        ── Preloads ───────────────────────────────
    """
    w = width or _tw()
    dashes = max(4, w - len(title) - 6)
    click.echo(click.style(f"{_L_H}{_L_H} {title} {_L_H * dashes}", fg=fg, bold=True))


def kv(key: str, value: str, *, key_width: int = 16, indent: int = 2) -> None:
    """
    Print an aligned key-value pair.

        Registered:     12
        Fingerprint:    3f2a...
    """
    padding = " " * max(1, key_width - len(key) - 1)
    click.echo(f"{' ' * indent}{key}:{padding}{click.style(str(value), fg='cyan')}")


def badge(label: str, *, style: str = "info") -> str:
    """
    Return an inline badge string (not echoed).

        [✓ OK]  [✗ ERROR]  [! WARN]
    """
    colours = {
        "ok": ("green", _CHECK),
        "error": ("red", _CROSS),
        "warn": ("yellow", "!"),
        "info": ("cyan", _DOT),
    }
    fg, icon = colours.get(style, ("white", _DOT))
    return click.style(f"[{icon} {label}]", fg=fg)


def bullet(text: str, *, indent: int = 2, fg: str = "white") -> None:
    click.echo(f"{' ' * indent}{click.style(_BULLET, fg='cyan')} {click.style(text, fg=fg)}")


def table(
    headers: Sequence[str],
    rows: Sequence[Sequence[str]],
    *,
    indent: int = 2,
) -> None:
    """
    Print a minimal aligned table.

        Id          Priority   Address
        ─────────── ────────── ─────────────
        shared      high       /js/shared.js
    """
    prefix = " " * indent
    widths = [len(h) for h in headers]
    for row in rows:
        for i, cell in enumerate(row[: len(headers)]):
            widths[i] = max(widths[i], len(str(cell)))
    widths = [w + 2 for w in widths]

    header = "".join(h.ljust(widths[i]) for i, h in enumerate(headers))
    click.echo(f"{prefix}{click.style(header, fg='cyan', bold=True)}")
    click.echo(f"{prefix}{click.style(''.join(_L_H * w for w in widths), dim=True)}")
    for row in rows:
        line = "".join(str(cell).ljust(widths[i]) for i, cell in enumerate(row))
        click.echo(f"{prefix}{line.rstrip()}")
