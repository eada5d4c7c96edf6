"""Shared pytest fixtures for ne CLI tests."""

from __future__ import annotations

import csv
from collections.abc import Callable
from pathlib import Path

import pytest

CATALOG_HEADER = ["scale", "theme", "layer", "default"]

# Rows in the shape of ne.csv; order matters for default-layer tests
CATALOG_ROWS: list[dict[str, str]] = [
    {"scale": "10", "theme": "physical", "layer": "land", "default": "TRUE"},
    {"scale": "10", "theme": "physical", "layer": "lakes", "default": "TRUE"},
    {"scale": "10", "theme": "physical", "layer": "glaciated_areas", "default": "FALSE"},
    {"scale": "10", "theme": "cultural", "layer": "admin_0_countries", "default": "TRUE"},
    {"scale": "10", "theme": "cultural", "layer": "populated_places", "default": ""},
    {"scale": "10", "theme": "physical", "layer": "ne/10m_physical/README", "default": "TRUE"},
    {"scale": "50", "theme": "physical", "layer": "land", "default": "true"},
    {"scale": "50", "theme": "cultural", "layer": "admin_0_countries", "default": "TRUE"},
    {"scale": "110", "theme": "physical", "layer": "coastline", "default": "FALSE"},
]


def write_catalog(
    path: Path,
    rows: list[dict[str, str]],
    header: list[str] | None = None,
) -> Path:
    """Write rows as a catalog CSV file and return its path."""
    fieldnames = header if header is not None else CATALOG_HEADER
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=fieldnames, extrasaction="ignore")
        writer.writeheader()
        writer.writerows(rows)
    return path


@pytest.fixture
def catalog_rows() -> list[dict[str, str]]:
    """Raw catalog rows covering all three scales."""
    return [dict(row) for row in CATALOG_ROWS]


@pytest.fixture
def catalog_csv(tmp_path: Path) -> Path:
    """Path to an ne.csv file holding CATALOG_ROWS."""
    return write_catalog(tmp_path / "ne.csv", CATALOG_ROWS)


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    """Natural Earth data tree with an (empty) shapefile per 10m catalog layer."""
    root = tmp_path / "geodata"
    for row in CATALOG_ROWS:
        if row["scale"] != "10" or row["layer"].startswith("ne/"):
            continue
        layer_dir = root / f"10m_{row['theme']}"
        layer_dir.mkdir(parents=True, exist_ok=True)
        (layer_dir / f"ne_10m_{row['layer']}.shp").write_bytes(b"")
    return root


@pytest.fixture
def make_catalog(tmp_path: Path) -> Callable[..., Path]:
    """Factory writing custom catalog rows to tmp_path/ne.csv."""

    def _make(rows: list[dict[str, str]], header: list[str] | None = None) -> Path:
        return write_catalog(tmp_path / "ne.csv", rows, header)

    return _make
