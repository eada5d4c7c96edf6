"""Unit tests for ne_cli.plan."""

from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

from ne_cli.errors import (
    EmptyCatalogError,
    EmptyLayerSelectionError,
    InvalidBufferError,
    InvalidExtentError,
    InvalidScaleError,
    NoAvailableLayersError,
    OutputDirectoryNotFoundError,
    OutputDirectoryNotWritableError,
)
from ne_cli.extent import BufferConfig, Extent
from ne_cli.layers import Catalog, build_catalog
from ne_cli.plan import (
    ExtractionRequest,
    plan_extraction,
    validate_output_directory,
    validate_scale,
)


@pytest.fixture
def catalog(catalog_rows: list[dict[str, str]]) -> Catalog:
    return build_catalog(catalog_rows, "10")


class TestValidateScale:
    """Tests for validate_scale."""

    @pytest.mark.unit
    @pytest.mark.parametrize("scale", ["10", "50", "110"])
    def test_accepts_known_scales(self, scale: str) -> None:
        assert validate_scale(scale) == scale

    @pytest.mark.unit
    @pytest.mark.parametrize("scale", [None, "", "20", "10m", "1:10"])
    def test_rejects_anything_else(self, scale: str | None) -> None:
        with pytest.raises(InvalidScaleError):
            validate_scale(scale)


class TestValidateOutputDirectory:
    """Tests for validate_output_directory."""

    @pytest.mark.unit
    def test_defaults_to_cwd(self, tmp_path: Path) -> None:
        """No output means the working directory."""
        assert validate_output_directory(None, cwd=tmp_path) == tmp_path.absolute()

    @pytest.mark.unit
    def test_resolves_relative_path(self, tmp_path: Path) -> None:
        """Relative paths are resolved against the working directory."""
        (tmp_path / "out").mkdir()

        assert validate_output_directory("out", cwd=tmp_path) == (tmp_path / "out").absolute()

    @pytest.mark.unit
    def test_expands_home(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """~ expands to the home directory."""
        monkeypatch.setenv("HOME", str(tmp_path))
        (tmp_path / "maps").mkdir()

        assert validate_output_directory("~/maps") == (tmp_path / "maps").absolute()

    @pytest.mark.unit
    def test_missing_directory(self, tmp_path: Path) -> None:
        """A missing output directory is an error."""
        with pytest.raises(OutputDirectoryNotFoundError) as exc_info:
            validate_output_directory("nope", cwd=tmp_path)

        assert exc_info.value.code == "NE-OUT001"

    @pytest.mark.unit
    @pytest.mark.skipif(
        sys.platform == "win32" or (hasattr(os, "geteuid") and os.geteuid() == 0),
        reason="permission bits are not enforced",
    )
    def test_unwritable_directory(self, tmp_path: Path) -> None:
        """A read-only output directory is an error."""
        locked = tmp_path / "locked"
        locked.mkdir()
        locked.chmod(0o500)
        try:
            with pytest.raises(OutputDirectoryNotWritableError):
                validate_output_directory(str(locked))
        finally:
            locked.chmod(0o700)


class TestPlanExtraction:
    """Tests for plan_extraction."""

    @pytest.mark.unit
    def test_builds_complete_plan(self, catalog: Catalog, tmp_path: Path) -> None:
        """A valid request yields every derived value."""
        request = ExtractionRequest(
            scale="10",
            extent="-95,28,-87,34",
            buffer="25,15",
            layers="default,glaciated_areas,roads",
            output=str(tmp_path),
        )

        plan = plan_extraction(request, catalog)

        assert plan.scale == "10"
        assert plan.parsed_extent == Extent(xmin=-95.0, ymin=28.0, xmax=-87.0, ymax=34.0)
        assert plan.buffer == BufferConfig(ew=25.0, ns=15.0)
        assert plan.buffered_extent.xmin == pytest.approx(-97.0)
        assert plan.buffered_extent.ymax == pytest.approx(34.9)
        assert plan.resolved_layers == [
            "land",
            "lakes",
            "admin_0_countries",
            "glaciated_areas",
            "roads",
        ]
        assert plan.available_layers == ["land", "lakes", "admin_0_countries", "glaciated_areas"]
        assert plan.unavailable_layers == ["roads"]
        assert plan.destination == tmp_path.absolute() / "ne-10m--95-28--87-34"

    @pytest.mark.unit
    def test_does_not_create_destination(self, catalog: Catalog, tmp_path: Path) -> None:
        """Planning leaves the filesystem untouched."""
        request = ExtractionRequest(scale="10", extent="-95,28,-87,34", output=str(tmp_path))

        plan = plan_extraction(request, catalog)

        assert not plan.destination.exists()

    @pytest.mark.unit
    def test_destination_uses_unbuffered_extent(self, catalog: Catalog, tmp_path: Path) -> None:
        """The directory name comes from the requested extent, not the buffered one."""
        request = ExtractionRequest(
            scale="10", extent="-95.3,28.7,-87.2,33.6", buffer="50", output=str(tmp_path)
        )

        plan = plan_extraction(request, catalog)

        assert plan.destination.name == "ne-10m--95-29--87-34"

    @pytest.mark.unit
    def test_scale_checked_first(self, catalog: Catalog) -> None:
        """An invalid scale is reported before anything else."""
        request = ExtractionRequest(scale="20", extent="garbage", output="/does/not/exist")

        with pytest.raises(InvalidScaleError):
            plan_extraction(request, catalog)

    @pytest.mark.unit
    def test_output_checked_before_extent(self, catalog: Catalog, tmp_path: Path) -> None:
        """A bad output directory is reported before a bad extent."""
        request = ExtractionRequest(scale="10", extent="garbage", output="missing")

        with pytest.raises(OutputDirectoryNotFoundError):
            plan_extraction(request, catalog, cwd=tmp_path)

    @pytest.mark.unit
    def test_invalid_extent(self, catalog: Catalog, tmp_path: Path) -> None:
        request = ExtractionRequest(scale="10", extent="1,2,3", output=str(tmp_path))

        with pytest.raises(InvalidExtentError):
            plan_extraction(request, catalog)

    @pytest.mark.unit
    def test_invalid_buffer(self, catalog: Catalog, tmp_path: Path) -> None:
        request = ExtractionRequest(
            scale="10", extent="-95,28,-87,34", buffer="150", output=str(tmp_path)
        )

        with pytest.raises(InvalidBufferError):
            plan_extraction(request, catalog)

    @pytest.mark.unit
    def test_empty_layer_selection(self, catalog: Catalog, tmp_path: Path) -> None:
        """A layer list of only separators resolves to nothing."""
        request = ExtractionRequest(
            scale="10", extent="-95,28,-87,34", layers=",,", output=str(tmp_path)
        )

        with pytest.raises(EmptyLayerSelectionError):
            plan_extraction(request, catalog)

    @pytest.mark.unit
    def test_empty_catalog(self, tmp_path: Path) -> None:
        """An empty (or unreadable) catalog stops planning."""
        request = ExtractionRequest(scale="10", extent="-95,28,-87,34", output=str(tmp_path))

        with pytest.raises(EmptyCatalogError):
            plan_extraction(request, build_catalog([], "10"))

    @pytest.mark.unit
    def test_no_available_layers(self, catalog: Catalog, tmp_path: Path) -> None:
        """If nothing requested exists at the scale, planning fails."""
        request = ExtractionRequest(
            scale="10", extent="-95,28,-87,34", layers="roads,railroads", output=str(tmp_path)
        )

        with pytest.raises(NoAvailableLayersError) as exc_info:
            plan_extraction(request, catalog)

        assert exc_info.value.unavailable == ["roads", "railroads"]

    @pytest.mark.unit
    def test_collision_suffix(self, catalog: Catalog, tmp_path: Path) -> None:
        """An existing destination gets a numeric suffix."""
        (tmp_path / "ne-10m--95-28--87-34").mkdir()
        request = ExtractionRequest(scale="10", extent="-95,28,-87,34", output=str(tmp_path))

        plan = plan_extraction(request, catalog)

        assert plan.destination.name == "ne-10m--95-28--87-34-1"


class TestExtractionRequest:
    """Tests for ExtractionRequest and ExtractionPlan.derived."""

    @pytest.mark.unit
    def test_to_arguments_keeps_absent_values(self) -> None:
        request = ExtractionRequest(scale="50", extent="0,0,1,1")

        assert request.to_arguments() == {
            "scale": "50",
            "extent": "0,0,1,1",
            "buffer": None,
            "layers": None,
            "output": None,
        }

    @pytest.mark.unit
    def test_derived_values(self, catalog: Catalog, tmp_path: Path) -> None:
        request = ExtractionRequest(scale="10", extent="-95,28,-87,34", output=str(tmp_path))
        plan = plan_extraction(request, catalog)

        derived = plan.derived()

        assert derived["parsed_extent"] is plan.parsed_extent
        assert derived["buffer_config"] == BufferConfig()
        assert derived["destination_directory"] == plan.destination
        assert derived["resolved_layers"] == ["land", "lakes", "admin_0_countries"]
