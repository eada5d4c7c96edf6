"""ne CLI - Plan and record Natural Earth extractions for a map extent."""

from ne_cli.cli import cli
from ne_cli.extent import BufferConfig, Extent
from ne_cli.layers import Catalog, CatalogEntry
from ne_cli.plan import ExtractionPlan, ExtractionRequest, plan_extraction

__all__ = [
    "BufferConfig",
    "Catalog",
    "CatalogEntry",
    "Extent",
    "ExtractionPlan",
    "ExtractionRequest",
    "cli",
    "plan_extraction",
]
