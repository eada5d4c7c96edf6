"""Extraction planning: from raw request strings to an ExtractionPlan.

This module ties the extent and layer components together:
- ExtractionRequest: The five raw strings given on the command line
- ExtractionPlan: Everything derived from them, ready for extraction
- plan_extraction(): Validate the request and build the plan

Planning never touches the filesystem beyond existence checks; the
destination directory is created later by the extraction step.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from ne_cli.constants import SCALES
from ne_cli.errors import (
    EmptyCatalogError,
    EmptyLayerSelectionError,
    InvalidScaleError,
    NoAvailableLayersError,
    OutputDirectoryNotFoundError,
    OutputDirectoryNotWritableError,
)
from ne_cli.extent import (
    BufferConfig,
    Extent,
    apply_buffer,
    find_available_directory,
    parse_buffer,
    parse_extent,
)
from ne_cli.layers import Catalog, filter_available, resolve_layers


@dataclass(frozen=True)
class ExtractionRequest:
    """Raw extract arguments, exactly as given.

    Attributes:
        scale: "10", "50", or "110" (validated by plan_extraction).
        extent: Raw ``xmin,ymin,xmax,ymax`` text.
        buffer: Raw buffer text, or None for the default.
        layers: Raw layer list, or None for the default layers.
        output: Raw output directory, or None for the working directory.
    """

    scale: str | None
    extent: str | None
    buffer: str | None = None
    layers: str | None = None
    output: str | None = None

    def to_arguments(self) -> dict[str, str | None]:
        """Echo the raw arguments in canonical field order."""
        return {
            "scale": self.scale,
            "extent": self.extent,
            "buffer": self.buffer,
            "layers": self.layers,
            "output": self.output,
        }


@dataclass(frozen=True)
class ExtractionPlan:
    """Values derived from an ExtractionRequest.

    Attributes:
        scale: Validated scale.
        parsed_extent: Extent as requested.
        buffer: Buffer percentages per axis.
        buffered_extent: Extent used for clipping.
        resolved_layers: Layer names after default expansion.
        available_layers: Resolved names present in the catalog.
        unavailable_layers: Resolved names missing from the catalog.
        destination: Collision-free destination directory (not yet created).
    """

    scale: str
    parsed_extent: Extent
    buffer: BufferConfig
    buffered_extent: Extent
    resolved_layers: list[str]
    available_layers: list[str]
    unavailable_layers: list[str]
    destination: Path

    def derived(self) -> dict[str, Any]:
        """Derived values in the shape the metadata recorder consumes."""
        return {
            "parsed_extent": self.parsed_extent,
            "buffer_config": self.buffer,
            "buffered_extent": self.buffered_extent,
            "destination_directory": self.destination,
            "resolved_layers": list(self.resolved_layers),
        }


def validate_scale(scale: str | None) -> str:
    """Return the scale if it is one of 10/50/110, else raise InvalidScaleError."""
    if scale not in SCALES:
        raise InvalidScaleError(scale)
    return scale


def validate_output_directory(output: str | None, cwd: Path | None = None) -> Path:
    """Resolve the output directory and check it can be written to.

    Args:
        output: Raw --output value (``~`` and relative paths allowed).
        cwd: Directory relative paths are resolved against.

    Returns:
        Absolute output directory.

    Raises:
        OutputDirectoryNotFoundError: If the directory does not exist.
        OutputDirectoryNotWritableError: If it exists but is not writable.
    """
    base = cwd if cwd is not None else Path.cwd()
    directory = (base / Path(output).expanduser()) if output else base
    directory = directory.absolute()

    if not directory.is_dir():
        raise OutputDirectoryNotFoundError(str(directory))
    if not os.access(directory, os.W_OK):
        raise OutputDirectoryNotWritableError(str(directory))

    return directory


def plan_extraction(
    request: ExtractionRequest,
    catalog: Catalog,
    cwd: Path | None = None,
) -> ExtractionPlan:
    """Validate an extract request and derive its plan.

    Checks run in this order, stopping at the first failure: scale,
    output directory, extent, buffer, layer selection, catalog contents,
    layer availability.

    Args:
        request: Raw request.
        catalog: Catalog built for ``request.scale``.
        cwd: Working directory (default: current working directory).

    Returns:
        ExtractionPlan with a destination path that did not exist when checked.

    Raises:
        NaturalEarthError: One of the typed errors from ne_cli.errors.
    """
    scale = validate_scale(request.scale)
    output_dir = validate_output_directory(request.output, cwd)

    parsed_extent = parse_extent(request.extent)
    buffer = parse_buffer(request.buffer)
    buffered_extent = apply_buffer(parsed_extent, buffer)

    resolved = resolve_layers(request.layers, catalog)
    if not resolved:
        raise EmptyLayerSelectionError(request.layers)

    if len(catalog) == 0:
        raise EmptyCatalogError(scale)

    partition = filter_available(resolved, catalog)
    if not partition.available:
        raise NoAvailableLayersError(scale, partition.unavailable)

    destination = find_available_directory(scale, parsed_extent, output_dir)

    return ExtractionPlan(
        scale=scale,
        parsed_extent=parsed_extent,
        buffer=buffer,
        buffered_extent=buffered_extent,
        resolved_layers=resolved,
        available_layers=partition.available,
        unavailable_layers=partition.unavailable,
        destination=destination,
    )
