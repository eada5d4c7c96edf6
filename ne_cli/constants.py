"""Shared constants for the ne CLI.

This module contains constants that are used across multiple modules
to avoid duplication and ensure consistency.
"""

from __future__ import annotations

import re

# Natural Earth scale tiers (1:10m, 1:50m, 1:110m), in catalog order
SCALES: tuple[str, ...] = ("10", "50", "110")

SCALE_DESCRIPTIONS: dict[str, str] = {
    "10": "1:10,000,000, largest scale, greatest detail",
    "50": "1:50,000,000, intermediate scale, moderate detail",
    "110": "1:110,000,000, smallest scale, least detail",
}

# Catalog rows whose layer name starts with this are auxiliary assets, not layers
AUXILIARY_PREFIX: str = "ne/"

# Buffer applied to both axes when none is requested (percent)
DEFAULT_BUFFER_PERCENT: float = 20.0

# Catalog file looked up in the working directory
CATALOG_FILENAME: str = "ne.csv"

# Provenance record written into every destination directory
METADATA_FILENAME: str = "metadata.json"

# Where the Natural Earth shapefiles live unless configured otherwise
DEFAULT_DATA_DIR: str = "/Users/Shared/Geodata/ne"

# External clipping tool
OGR2OGR: str = "ogr2ogr"

# Destination directory names, with optional collision suffix
DIRECTORY_NAME_PATTERN: re.Pattern[str] = re.compile(
    r"^ne-(10|50|110)m-(-?\d+)-(-?\d+)-(-?\d+)-(-?\d+)(-\d+)?$"
)
