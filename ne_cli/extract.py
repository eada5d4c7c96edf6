"""Per-layer extraction with ogr2ogr.

This module runs an ExtractionPlan against the Natural Earth data tree:
- LayerResult: Outcome for one layer
- ExtractionSummary: Aggregate outcome (success count out of total)
- source_path(): Where a catalog layer's shapefile lives
- build_command() / extract_layer(): One ogr2ogr clip per layer
- run_extraction(): Create the destination and clip each layer in turn

Layers are processed sequentially. A failed layer is recorded and the
batch continues; the summary, not an exception, reports failures.
"""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from ne_cli.config import Settings
from ne_cli.constants import OGR2OGR
from ne_cli.errors import LayerExtractionError
from ne_cli.extent import Extent
from ne_cli.layers import Catalog, CatalogEntry
from ne_cli.plan import ExtractionPlan

logger = logging.getLogger(__name__)

Extractor = Callable[[Path, Path, Extent], bool]


@dataclass(frozen=True)
class LayerResult:
    """Outcome of extracting a single layer."""

    name: str
    success: bool

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "success": self.success}


@dataclass
class ExtractionSummary:
    """Aggregate outcome of an extraction run.

    Attributes:
        layers: Per-layer results in extraction order.
        unavailable_layers: Requested layers skipped because the catalog
            does not have them at this scale.
    """

    layers: list[LayerResult] = field(default_factory=list)
    unavailable_layers: list[str] = field(default_factory=list)

    @property
    def total_layers(self) -> int:
        return len(self.layers)

    @property
    def successful(self) -> int:
        """Count of layers extracted successfully."""
        return sum(1 for r in self.layers if r.success)

    @property
    def failed(self) -> int:
        """Count of layers that failed."""
        return self.total_layers - self.successful

    @property
    def all_succeeded(self) -> bool:
        return self.successful == self.total_layers

    def to_dict(self) -> dict[str, Any]:
        """Convert to the ``extraction_results`` shape of the metadata record."""
        return {
            "total_layers": self.total_layers,
            "successful": self.successful,
            "failed": self.failed,
            "layers": [r.to_dict() for r in self.layers],
            "unavailable_layers": list(self.unavailable_layers),
        }


def source_path(data_dir: Path, scale: str, entry: CatalogEntry) -> Path:
    """Shapefile for a layer, e.g. ``{data_dir}/10m_physical/ne_10m_land.shp``."""
    return data_dir / f"{scale}m_{entry.theme}" / f"ne_{scale}m_{entry.name}.shp"


def build_command(source: Path, destination: Path, extent: Extent) -> list[str]:
    """ogr2ogr argv clipping ``source`` to ``extent`` into ``destination``."""
    return [
        OGR2OGR,
        "-spat",
        repr(extent.xmin),
        repr(extent.ymin),
        repr(extent.xmax),
        repr(extent.ymax),
        "-clipsrc",
        "spat_extent",
        str(destination),
        str(source),
    ]


def extract_layer(
    source: Path,
    destination: Path,
    extent: Extent,
    *,
    debug: bool = False,
) -> bool:
    """Clip one shapefile into the destination directory.

    Args:
        source: Source shapefile.
        destination: Existing destination directory.
        extent: Clip rectangle.
        debug: If True, capture ogr2ogr's output and log it at debug level
            (stderr) instead of discarding it. Stdout is never inherited.

    Returns:
        True if ogr2ogr exited with status 0, False otherwise (including a
        missing source file or a missing ogr2ogr executable).
    """
    if not source.exists():
        logger.debug("Source file not found: %s", source)
        return False

    cmd = build_command(source, destination, extent)
    logger.debug("Command: %s", " ".join(cmd))

    try:
        if debug:
            completed = subprocess.run(cmd, capture_output=True, text=True, check=False)
        else:
            completed = subprocess.run(
                cmd, stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL, check=False
            )
    except OSError as e:
        logger.debug("Could not run %s: %s", OGR2OGR, e)
        return False

    if debug:
        for line in (completed.stdout or "").splitlines() + (completed.stderr or "").splitlines():
            logger.debug("%s: %s", OGR2OGR, line)

    return completed.returncode == 0


def run_extraction(
    plan: ExtractionPlan,
    catalog: Catalog,
    settings: Settings,
    *,
    on_layer: Callable[[int, int, LayerResult], None] | None = None,
    extractor: Extractor | None = None,
) -> ExtractionSummary:
    """Create the destination directory and extract every available layer.

    Args:
        plan: Plan from plan_extraction().
        catalog: Catalog the plan was built against.
        settings: Settings supplying the data directory.
        on_layer: Called after each layer with (index, total, result),
            index starting at 1.
        extractor: Replacement for extract_layer (same positional signature).

    Returns:
        ExtractionSummary with one result per available layer.
    """
    extract = extractor if extractor is not None else extract_layer
    plan.destination.mkdir()

    summary = ExtractionSummary(unavailable_layers=list(plan.unavailable_layers))
    total = len(plan.available_layers)

    for index, name in enumerate(plan.available_layers, start=1):
        source = source_path(settings.data_dir, plan.scale, catalog[name])
        ok = extract(source, plan.destination, plan.buffered_extent)
        if not ok:
            failure = LayerExtractionError(name, f"could not extract {source}")
            logger.info("%s [%s]", failure.message, failure.code)

        result = LayerResult(name=name, success=ok)
        summary.layers.append(result)
        if on_layer is not None:
            on_layer(index, total, result)

    return summary
