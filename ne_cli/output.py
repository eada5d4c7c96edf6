"""Styled terminal output for the ne CLI.

All user-facing messages go through these functions so every command
renders success, progress, warnings and errors the same way:

    from ne_cli.output import detail, error, heading, info, success, warn

    heading("Extracting to: /data/ne-10m--95-29--87-34")
    info("Layers: 8")
    success("Successfully extracted 8 layers")
    warn("Skipping unavailable layers: glaciated_areas")
    error("Invalid extent format. Use: xmin,ymin,xmax,ymax")
    detail("  admin_0_countries")

Plan-only runs pass dry_run=True, which prefixes the message with
``[DRY RUN]``.

Warnings and errors go to stderr; everything else goes to stdout.
"""

from __future__ import annotations

import sys
from typing import TextIO

import click

_STYLES: dict[str, dict[str, object]] = {
    "success": {"fg": "green"},
    "info": {"fg": "white"},
    "warn": {"fg": "yellow"},
    "error": {"fg": "red"},
    "detail": {"fg": "bright_black"},
    "heading": {"fg": "cyan", "bold": True},
}

_PREFIXES = {
    "success": "✓",  # checkmark
    "info": "→",  # arrow
    "warn": "⚠",  # warning
    "error": "✗",  # X
    "detail": " ",
    "heading": "",
}


def _output(
    message: str,
    style: str,
    *,
    file: TextIO | None = None,
    nl: bool = True,
    dry_run: bool = False,
) -> None:
    if dry_run:
        message = f"[DRY RUN] {message}"

    prefix = _PREFIXES[style]
    text = f"{prefix} {message}" if prefix else message
    click.echo(click.style(text, **_STYLES[style]), file=file, nl=nl)  # type: ignore[arg-type]


def success(
    message: str,
    *,
    file: TextIO | None = None,
    nl: bool = True,
    dry_run: bool = False,
) -> None:
    """Print a success message with a green checkmark.

    Example:
        >>> success("Successfully extracted 8 layers")
        ✓ Successfully extracted 8 layers
    """
    _output(message, "success", file=file, nl=nl, dry_run=dry_run)


def info(
    message: str,
    *,
    file: TextIO | None = None,
    nl: bool = True,
    dry_run: bool = False,
) -> None:
    """Print an informational message with an arrow."""
    _output(message, "info", file=file, nl=nl, dry_run=dry_run)


def warn(
    message: str,
    *,
    file: TextIO | None = None,
    nl: bool = True,
    dry_run: bool = False,
) -> None:
    """Print a warning in yellow (default: stderr)."""
    _output(message, "warn", file=file or sys.stderr, nl=nl, dry_run=dry_run)


def error(
    message: str,
    *,
    file: TextIO | None = None,
    nl: bool = True,
    dry_run: bool = False,
) -> None:
    """Print an error in red (default: stderr).

    Example:
        >>> error("Scale must be 10, 50, or 110")
        ✗ Scale must be 10, 50, or 110
    """
    _output(message, "error", file=file or sys.stderr, nl=nl, dry_run=dry_run)


def detail(
    message: str,
    *,
    file: TextIO | None = None,
    nl: bool = True,
    dry_run: bool = False,
) -> None:
    """Print a dimmed detail line (listings, progress, hints)."""
    _output(message, "detail", file=file, nl=nl, dry_run=dry_run)


def heading(
    message: str,
    *,
    file: TextIO | None = None,
    nl: bool = True,
    dry_run: bool = False,
) -> None:
    """Print a bold section heading without a prefix symbol."""
    _output(message, "heading", file=file, nl=nl, dry_run=dry_run)


def mark(ok: bool) -> str:
    """Styled ✓ or ✗ for inline progress lines."""
    return click.style("✓", fg="green") if ok else click.style("✗", fg="red")
