"""Extent and buffer handling for extraction planning.

This module turns the raw ``--extent`` and ``--buffer`` strings into
validated values and derives the destination directory from them:
- Extent: Immutable lon/lat rectangle
- BufferConfig: Independent east-west / north-south expansion percentages
- parse_extent() / parse_buffer(): Validate raw text, raising typed errors
- apply_buffer(): Expand an extent outward by a BufferConfig
- format_extent(): Render an extent back to ``xmin,ymin,xmax,ymax``
- directory_fragment(): ``ne-{scale}m-{xmin}-{ymin}-{xmax}-{ymax}`` name
- find_available_directory(): First non-existing ``fragment[-N]`` path

Directory names round each bound half away from zero, so ``28.5`` becomes
``29`` and ``-28.5`` becomes ``-29``. Negative bounds produce a double dash
(``ne-10m--95-29--87-34``), which the cleanup tooling matches on.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from pathlib import Path
from typing import Any

from ne_cli.constants import DEFAULT_BUFFER_PERCENT
from ne_cli.errors import InvalidBufferError, InvalidExtentError


@dataclass(frozen=True)
class Extent:
    """Axis-aligned rectangle in longitude/latitude degrees.

    Attributes:
        xmin: Western bound.
        ymin: Southern bound.
        xmax: Eastern bound (strictly greater than xmin).
        ymax: Northern bound (strictly greater than ymin).
    """

    xmin: float
    ymin: float
    xmax: float
    ymax: float

    @property
    def width(self) -> float:
        """East-west size in degrees."""
        return self.xmax - self.xmin

    @property
    def height(self) -> float:
        """North-south size in degrees."""
        return self.ymax - self.ymin

    def to_dict(self) -> dict[str, float]:
        """Convert to a JSON-serializable dict."""
        return {"xmin": self.xmin, "ymin": self.ymin, "xmax": self.xmax, "ymax": self.ymax}


@dataclass(frozen=True)
class BufferConfig:
    """Buffer percentages applied to each axis, each within [0, 100]."""

    ew: float = DEFAULT_BUFFER_PERCENT
    ns: float = DEFAULT_BUFFER_PERCENT

    @property
    def is_uniform(self) -> bool:
        return self.ew == self.ns

    def to_dict(self) -> dict[str, float]:
        """Convert to the ``buffer_config`` shape used in metadata records."""
        return {"ew_percent": self.ew, "ns_percent": self.ns}


def _parse_number(token: str) -> float | None:
    """Parse a finite float, returning None for anything else."""
    try:
        value = float(token)
    except ValueError:
        return None
    if not math.isfinite(value):
        return None
    return value


def parse_extent(text: str | None) -> Extent:
    """Parse ``xmin,ymin,xmax,ymax`` into an Extent.

    Args:
        text: Raw extent string. Whitespace around tokens is ignored.

    Returns:
        The parsed Extent.

    Raises:
        InvalidExtentError: If the text is missing, does not have exactly four
            tokens, contains a non-numeric token, or the bounds are not
            strictly increasing on both axes.
    """
    if text is None:
        raise InvalidExtentError(text, "extent is required")

    parts = [part.strip() for part in text.split(",")]
    if len(parts) != 4:
        raise InvalidExtentError(text, f"expected 4 values, got {len(parts)}")

    coords = [c for c in (_parse_number(part) for part in parts) if c is not None]
    if len(coords) != 4:
        raise InvalidExtentError(text, "all values must be numeric")

    xmin, ymin, xmax, ymax = coords
    if xmin >= xmax:
        raise InvalidExtentError(text, "xmin must be less than xmax")
    if ymin >= ymax:
        raise InvalidExtentError(text, "ymin must be less than ymax")

    return Extent(xmin=xmin, ymin=ymin, xmax=xmax, ymax=ymax)


def _parse_buffer_value(text: str, token: str) -> float:
    value = _parse_number(token)
    if value is None:
        raise InvalidBufferError(text, f"{token!r} is not a number")

    # Fractions are shorthand for percentages: 0.15 -> 15 (decimal math keeps it exact)
    if 0 < value < 1:
        value = float(Decimal(token) * 100)

    if value < 0 or value > 100:
        raise InvalidBufferError(text, f"{token!r} is outside 0-100")

    return value


def parse_buffer(text: str | None) -> BufferConfig:
    """Parse a buffer specification into a BufferConfig.

    A single value applies to both axes; two values set east-west and
    north-south independently. Values strictly between 0 and 1 are read
    as fractions and scaled to percentages.

    Args:
        text: Raw buffer string, or None/empty for the 20% default.

    Returns:
        BufferConfig with percentages in [0, 100].

    Raises:
        InvalidBufferError: On a wrong token count, non-numeric token, or
            out-of-range value.
    """
    if not text:
        return BufferConfig()

    parts = [part.strip() for part in text.split(",")]

    if len(parts) == 1:
        value = _parse_buffer_value(text, parts[0])
        return BufferConfig(ew=value, ns=value)

    if len(parts) == 2:
        ew = _parse_buffer_value(text, parts[0])
        ns = _parse_buffer_value(text, parts[1])
        return BufferConfig(ew=ew, ns=ns)

    raise InvalidBufferError(text, f"expected 1 or 2 values, got {len(parts)}")


def apply_buffer(extent: Extent, buffer: BufferConfig) -> Extent:
    """Expand an extent outward by a percentage of its width and height.

    A 0% buffer returns an equal extent; 100% doubles each dimension.
    """
    dx = extent.width * (buffer.ew / 100.0)
    dy = extent.height * (buffer.ns / 100.0)

    return Extent(
        xmin=extent.xmin - dx,
        ymin=extent.ymin - dy,
        xmax=extent.xmax + dx,
        ymax=extent.ymax + dy,
    )


def _format_number(value: Any) -> str:
    return repr(value) if isinstance(value, float) else str(value)


def format_extent(extent: Extent) -> str:
    """Render an extent as ``xmin,ymin,xmax,ymax``."""
    return ",".join(
        _format_number(v) for v in (extent.xmin, extent.ymin, extent.xmax, extent.ymax)
    )


def round_half_away(value: float) -> int:
    """Round to the nearest integer, ties away from zero (2.5 -> 3, -2.5 -> -3)."""
    return int(Decimal(value).to_integral_value(rounding=ROUND_HALF_UP))


def directory_fragment(scale: str, extent: Extent) -> str:
    """Build the destination directory name for a scale and extent.

    Example:
        >>> directory_fragment("10", Extent(-95.3, 28.7, -87.2, 33.6))
        'ne-10m--95-29--87-34'
    """
    xmin, ymin, xmax, ymax = (
        round_half_away(v) for v in (extent.xmin, extent.ymin, extent.xmax, extent.ymax)
    )
    return f"ne-{scale}m-{xmin}-{ymin}-{xmax}-{ymax}"


def find_available_directory(
    scale: str,
    extent: Extent,
    base_path: Path | None = None,
) -> Path:
    """Find the first destination path that does not exist yet.

    Tries ``base/fragment`` first, then ``base/fragment-1``, ``-2`` and so on.
    Nothing is created here, so two concurrent runs can pick the same path.

    Args:
        scale: Scale value (10, 50, or 110).
        extent: Extent used to derive the directory name.
        base_path: Parent directory (default: current working directory).

    Returns:
        Path that did not exist at the time of the check.
    """
    name = directory_fragment(scale, extent)
    base = base_path if base_path is not None else Path.cwd()

    candidate = base / name
    if not candidate.exists():
        return candidate

    sequence = 1
    while True:
        candidate = base / f"{name}-{sequence}"
        if not candidate.exists():
            return candidate
        sequence += 1
