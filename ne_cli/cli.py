"""ne CLI - Command-line interface for extracting Natural Earth data.

The CLI is a thin wrapper around the planning and extraction modules.
All validation lives in the library and is reported here; the CLI only
handles user interaction and exit codes.
"""

from __future__ import annotations

import functools
import logging
from typing import Any, NoReturn

import click

from ne_cli.config import load_settings
from ne_cli.constants import SCALE_DESCRIPTIONS, SCALES
from ne_cli.errors import (
    CatalogUnreadableError,
    ConfigError,
    InvalidScaleError,
    LayerExtractionError,
    MetadataWriteError,
    NaturalEarthError,
    NoAvailableLayersError,
)
from ne_cli.extent import format_extent
from ne_cli.extract import ExtractionSummary, LayerResult, extract_layer, run_extraction
from ne_cli.json_output import ErrorDetail, error_envelope, success_envelope
from ne_cli.layers import build_catalog, list_layers, load_catalog_rows, read_catalog_rows
from ne_cli.metadata import build_record, write_record
from ne_cli.output import detail, error, heading, info, mark, success, warn
from ne_cli.plan import ExtractionPlan, ExtractionRequest, plan_extraction

logger = logging.getLogger(__name__)


def should_output_json(ctx: click.Context) -> bool:
    """True if the global --format option asked for JSON."""
    obj = ctx.find_root().obj or {}
    return obj.get("format", "text") == "json"


def is_debug(ctx: click.Context) -> bool:
    obj = ctx.find_root().obj or {}
    return bool(obj.get("debug", False))


def output_json_envelope(envelope: Any) -> None:
    """Output a JSON envelope to stdout."""
    click.echo(envelope.to_json())


def fail(command: str, err: NaturalEarthError, *, use_json: bool) -> NoReturn:
    """Report a structured error and exit with status 1."""
    if use_json:
        output_json_envelope(error_envelope(command, [ErrorDetail.from_error(err)]))
    else:
        error(f"Error: {err.message}")
    raise SystemExit(1) from err


def print_scale_reminder() -> None:
    """Explain the scale options when --scale is missing or invalid."""
    error("Error: --scale is required and must be 10, 50, or 110")
    click.echo("Scale options:")
    for scale in SCALES:
        click.echo(f"  {scale:<4} - {SCALE_DESCRIPTIONS[scale]}")


@click.group()
@click.version_option(package_name="ne-cli")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["json", "text"]),
    default="text",
    help="Output format (json for machine parsing, text for humans).",
)
@click.option(
    "--debug",
    is_flag=True,
    envvar="NE_DEBUG",
    help="Log debug details and show ogr2ogr output.",
)
@click.pass_context
def cli(ctx: click.Context, output_format: str, debug: bool) -> None:
    """ne - Extract Natural Earth layers for a map extent."""
    ctx.ensure_object(dict)
    ctx.obj["format"] = output_format
    ctx.obj["debug"] = debug
    if debug:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


# ─────────────────────────────────────────────────────────────────────────────
# List command
# ─────────────────────────────────────────────────────────────────────────────


def _print_layer_listing(grouped: dict[str, dict[str, list[str]]], scale: str | None) -> None:
    click.echo()
    if scale:
        heading(f"Natural Earth Layers ({scale}m scale):")
    else:
        heading("Natural Earth Layers:")

    for s, themes in grouped.items():
        click.echo()
        click.echo(click.style(f"{s}m Scale (1:{s},000,000):", bold=True))
        for theme, names in themes.items():
            click.echo(click.style(f"  {theme.capitalize()}:", fg="yellow"))
            for name in names:
                click.echo(f"    {name}")

    total = sum(len(names) for themes in grouped.values() for names in themes.values())
    click.echo()
    heading(f"Total: {total} layers")


@cli.command("list")
@click.option("--scale", "-s", default=None, help="Filter by scale (10, 50, or 110)")
@click.option("--catalog", default=None, help="Catalog CSV (default: ./ne.csv)")
@click.pass_context
def list_command(ctx: click.Context, scale: str | None, catalog: str | None) -> None:
    """List available Natural Earth layers.

    Layers are grouped by scale, then by theme.

    Examples:

        ne list

        ne list --scale 50
    """
    use_json = should_output_json(ctx)

    if scale is not None and scale not in SCALES:
        fail("list", InvalidScaleError(scale), use_json=use_json)

    try:
        settings = load_settings(catalog=catalog)
        rows = load_catalog_rows(settings.catalog_path)
    except (ConfigError, CatalogUnreadableError) as err:
        fail("list", err, use_json=use_json)

    grouped = list_layers(rows, scale)

    if use_json:
        total = sum(len(n) for themes in grouped.values() for n in themes.values())
        output_json_envelope(
            success_envelope("list", {"scale": scale, "layers": grouped, "total": total})
        )
        return

    if not grouped:
        warn(f"No layers found for scale {scale}" if scale else "No layers found")
        return

    _print_layer_listing(grouped, scale)


# ─────────────────────────────────────────────────────────────────────────────
# Extract command
# ─────────────────────────────────────────────────────────────────────────────


def _buffer_label(plan: ExtractionPlan) -> str:
    if plan.buffer.is_uniform:
        return f"{plan.buffer.ew}% buffer"
    return f"{plan.buffer.ew}% EW, {plan.buffer.ns}% NS buffer"


def _print_plan(plan: ExtractionPlan, *, dry_run: bool = False) -> None:
    click.echo()
    heading(f"Extracting to: {plan.destination}", dry_run=dry_run)
    info(f"Scale: {plan.scale}m (1:{plan.scale},000,000)")
    info(f"Original extent: {format_extent(plan.parsed_extent)}")
    info(f"Buffered extent: {format_extent(plan.buffered_extent)} ({_buffer_label(plan)})")
    info(f"Layers: {len(plan.available_layers)}")

    if plan.unavailable_layers:
        warn(f"Skipping unavailable layers: {', '.join(plan.unavailable_layers)}")


def _print_layer_progress(index: int, total: int, result: LayerResult) -> None:
    click.echo(f"  [{index}/{total}] {result.name}... {mark(result.success)}")


def _print_extraction_summary(summary: ExtractionSummary) -> None:
    click.echo()
    if summary.all_succeeded:
        success(f"Successfully extracted {summary.successful} layers")
    else:
        warn(f"Extracted {summary.successful}/{summary.total_layers} layers")


@cli.command()
@click.option("--scale", "-s", default=None, help="Scale: 10, 50, or 110")
@click.option("--extent", "-e", default=None, help="Spatial extent: xmin,ymin,xmax,ymax")
@click.option(
    "--buffer",
    "-b",
    default=None,
    help="Expand extent by percentage, one value or EW,NS (default: 20)",
)
@click.option(
    "--layers",
    "-l",
    default=None,
    help="Comma-separated layer list; 'default' adds the standard basemap layers",
)
@click.option("--output", "-o", default=None, help="Output directory (default: current directory)")
@click.option("--data-dir", default=None, help="Natural Earth data directory (env: NE_DATA_DIR)")
@click.option("--catalog", default=None, help="Catalog CSV (default: ./ne.csv)")
@click.option("--dry-run", is_flag=True, help="Show the plan without extracting anything")
@click.pass_context
def extract(
    ctx: click.Context,
    scale: str | None,
    extent: str | None,
    buffer: str | None,
    layers: str | None,
    output: str | None,
    data_dir: str | None,
    catalog: str | None,
    dry_run: bool,
) -> None:
    """Extract Natural Earth data for a specific extent.

    Each layer is clipped with ogr2ogr into a new directory named after
    the scale and the rounded extent, e.g. ne-10m--95-29--87-34. A
    metadata.json provenance record is written alongside the layers.

    Examples:

        ne extract -s 10 -e -95.0,28.0,-87.7,33.8

        ne extract -s 50 -e -10,35,30,60 -b 25,15 -l default,glaciated_areas

        ne --format json extract -s 110 -e -180,-90,180,90 -b 0
    """
    use_json = should_output_json(ctx)

    if scale not in SCALES:
        if use_json:
            fail("extract", InvalidScaleError(scale), use_json=True)
        print_scale_reminder()
        raise SystemExit(1)

    try:
        settings = load_settings(data_dir=data_dir, catalog=catalog)
    except ConfigError as err:
        fail("extract", err, use_json=use_json)

    layer_catalog = build_catalog(read_catalog_rows(settings.catalog_path), scale)
    request = ExtractionRequest(
        scale=scale, extent=extent, buffer=buffer, layers=layers, output=output
    )

    try:
        plan = plan_extraction(request, layer_catalog)
    except NoAvailableLayersError as err:
        if not use_json:
            error(f"Error: {err.message}")
            if err.unavailable:
                detail(f"Unavailable layers: {', '.join(err.unavailable)}")
            raise SystemExit(1) from err
        fail("extract", err, use_json=True)
    except NaturalEarthError as err:
        fail("extract", err, use_json=use_json)

    if dry_run:
        if use_json:
            data = {
                "dry_run": True,
                "destination": str(plan.destination),
                "parsed_extent": plan.parsed_extent.to_dict(),
                "buffer_config": plan.buffer.to_dict(),
                "buffered_extent": plan.buffered_extent.to_dict(),
                "resolved_layers": plan.resolved_layers,
                "available_layers": plan.available_layers,
                "unavailable_layers": plan.unavailable_layers,
            }
            output_json_envelope(success_envelope("extract", data))
        else:
            _print_plan(plan, dry_run=True)
        return

    if not use_json:
        _print_plan(plan)
        click.echo()

    extractor = functools.partial(extract_layer, debug=is_debug(ctx))
    summary = run_extraction(
        plan,
        layer_catalog,
        settings,
        on_layer=None if use_json else _print_layer_progress,
        extractor=extractor,
    )

    record = build_record(
        request.to_arguments(), plan.derived(), summary.to_dict(), settings=settings
    )
    warnings: list[str] = []
    try:
        write_record(plan.destination, record)
    except MetadataWriteError as err:
        logger.debug("Metadata write failed [%s]: %s", err.code, err.message)
        warnings.append(err.message)
        if not use_json:
            warn(f"Warning: {err.message}")

    if use_json:
        data = record.to_dict()
        data["destination"] = str(plan.destination)
        data["warnings"] = warnings
        if summary.all_succeeded:
            output_json_envelope(success_envelope("extract", data))
        else:
            failed = [r.name for r in summary.layers if not r.success]
            errors = [
                ErrorDetail(
                    type="LayerExtractionError",
                    message=f"Extracted {summary.successful}/{summary.total_layers} layers; "
                    f"failed: {', '.join(failed)}",
                    code=LayerExtractionError.code,
                )
            ]
            output_json_envelope(error_envelope("extract", errors, data=data))
    else:
        _print_extraction_summary(summary)

    if not summary.all_succeeded:
        raise SystemExit(1)
