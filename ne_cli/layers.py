"""Layer catalog and layer-selection resolution.

The catalog is a CSV file (``ne.csv``) with ``scale,theme,layer`` columns
and an optional ``default`` column marking the standard basemap layers.
A catalog is built fresh for one scale on every run:

    rows = read_catalog_rows(settings.catalog_path)
    catalog = build_catalog(rows, "50")
    names = resolve_layers("default,glaciated_areas", catalog)
    partition = filter_available(names, catalog)
"""

from __future__ import annotations

import csv
import logging
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from pathlib import Path

from ne_cli.constants import AUXILIARY_PREFIX, SCALES
from ne_cli.errors import CatalogUnreadableError

logger = logging.getLogger(__name__)

# Basemap layers used when the catalog has no ``default`` column
FALLBACK_DEFAULT_LAYERS: tuple[str, ...] = (
    "land",
    "lakes",
    "rivers_lake_centerlines_scale_rank",
    "admin_0_countries",
    "admin_0_boundary_lines_disputed_areas",
    "admin_0_boundary_lines_land",
    "admin_1_states_provinces_scale_rank",
    "admin_1_states_provinces_lines",
)

DEFAULT_TOKEN = "default"

_REQUIRED_COLUMNS = ("scale", "theme", "layer")


@dataclass(frozen=True)
class CatalogEntry:
    """One layer known to exist at a given scale.

    Attributes:
        name: Layer name (e.g., "admin_0_countries").
        theme: Classification such as "physical" or "cultural".
        scale: Scale tier the layer belongs to ("10", "50", "110").
        is_default: True if the layer is part of the standard basemap set.
    """

    name: str
    theme: str
    scale: str
    is_default: bool = False


@dataclass
class Catalog:
    """Layers available at one scale, keyed by name in catalog order.

    Attributes:
        scale: Scale the catalog was built for.
        entries: Mapping of layer name to CatalogEntry.
        has_default_flags: False when the source rows carry no ``default``
            column, in which case FALLBACK_DEFAULT_LAYERS is used.
    """

    scale: str
    entries: dict[str, CatalogEntry] = field(default_factory=dict)
    has_default_flags: bool = True

    def __contains__(self, name: object) -> bool:
        return name in self.entries

    def __getitem__(self, name: str) -> CatalogEntry:
        return self.entries[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)


@dataclass
class LayerPartition:
    """Requested layers split by availability, both in request order."""

    available: list[str] = field(default_factory=list)
    unavailable: list[str] = field(default_factory=list)


def load_catalog_rows(path: Path) -> list[dict[str, str]]:
    """Read every row of a catalog CSV file.

    Args:
        path: Path to the catalog file.

    Returns:
        Rows as dicts keyed by header name.

    Raises:
        CatalogUnreadableError: If the file is missing, unreadable, not valid
            CSV, or lacks the scale/theme/layer columns.
    """
    if not path.is_file():
        raise CatalogUnreadableError(str(path), "file not found")

    try:
        with path.open(newline="", encoding="utf-8") as f:
            reader = csv.DictReader(f)
            header = reader.fieldnames or []
            missing = [c for c in _REQUIRED_COLUMNS if c not in header]
            if missing:
                raise CatalogUnreadableError(
                    str(path), f"missing column(s): {', '.join(missing)}"
                )
            return [dict(row) for row in reader]
    except (OSError, UnicodeDecodeError, csv.Error) as e:
        raise CatalogUnreadableError(str(path), str(e)) from e


def read_catalog_rows(path: Path) -> list[dict[str, str]]:
    """Read catalog rows, treating an unreadable catalog as empty.

    The failure is logged; callers see an empty list and report that no
    layer information is available.
    """
    try:
        return load_catalog_rows(path)
    except CatalogUnreadableError as err:
        logger.warning("%s [%s]", err.message, err.code)
        return []


def _is_layer_row(row: Mapping[str, str | None]) -> bool:
    layer = row.get("layer")
    return bool(layer) and not str(layer).startswith(AUXILIARY_PREFIX)


def _is_truthy_flag(value: str | None) -> bool:
    return (value or "").strip().upper() == "TRUE"


def build_catalog(rows: Iterable[Mapping[str, str | None]], scale: str) -> Catalog:
    """Build the catalog for one scale.

    Rows for other scales and auxiliary ``ne/`` rows are dropped. A missing
    ``default`` attribute means the layer is not a default layer.

    Args:
        rows: Raw catalog rows (see load_catalog_rows).
        scale: Scale to keep ("10", "50", or "110").

    Returns:
        Catalog keyed by layer name, in row order.
    """
    rows = list(rows)
    catalog = Catalog(
        scale=scale,
        has_default_flags=any("default" in row for row in rows),
    )

    for row in rows:
        if row.get("scale") != scale or not _is_layer_row(row):
            continue
        name = str(row["layer"])
        catalog.entries[name] = CatalogEntry(
            name=name,
            theme=row.get("theme") or "",
            scale=scale,
            is_default=_is_truthy_flag(row.get("default")),
        )

    return catalog


def default_layers(catalog: Catalog) -> list[str]:
    """Return the default layer names in catalog order."""
    if not catalog.has_default_flags:
        return list(FALLBACK_DEFAULT_LAYERS)
    return [entry.name for entry in catalog.entries.values() if entry.is_default]


def resolve_layers(request: str | None, catalog: Catalog) -> list[str]:
    """Turn a ``--layers`` value into an ordered list of layer names.

    - None or empty: the default layers.
    - Contains ``default``: the default layers followed by the other tokens
      in request order. Duplicates are kept.
    - Otherwise: the trimmed, non-empty tokens as given.

    Args:
        request: Comma-separated layer names, possibly including "default".
        catalog: Catalog supplying the default layer set.

    Returns:
        Layer names (may be empty if the request held only separators).
    """
    if not request:
        return default_layers(catalog)

    parts = [part.strip() for part in request.split(",")]
    parts = [part for part in parts if part]

    if DEFAULT_TOKEN in parts:
        extras = [part for part in parts if part != DEFAULT_TOKEN]
        return default_layers(catalog) + extras

    return parts


def filter_available(requested: Iterable[str], catalog: Catalog) -> LayerPartition:
    """Split requested names into available and unavailable, keeping order."""
    partition = LayerPartition()
    for name in requested:
        if name in catalog:
            partition.available.append(name)
        else:
            partition.unavailable.append(name)
    return partition


def list_layers(
    rows: Iterable[Mapping[str, str | None]],
    scale: str | None = None,
) -> dict[str, dict[str, list[str]]]:
    """Group catalog layers by scale, then theme, for display.

    Args:
        rows: Raw catalog rows.
        scale: Restrict to one scale, or None for all.

    Returns:
        ``{scale: {theme: [sorted names]}}`` with scales in 10/50/110 order
        and themes sorted alphabetically.
    """
    rows = list(rows)
    scales = [scale] if scale is not None else list(SCALES)
    grouped: dict[str, dict[str, list[str]]] = {}

    for s in scales:
        by_theme: dict[str, list[str]] = {}
        for entry in build_catalog(rows, s).entries.values():
            by_theme.setdefault(entry.theme, []).append(entry.name)
        if by_theme:
            grouped[s] = {theme: sorted(by_theme[theme]) for theme in sorted(by_theme)}

    return grouped
