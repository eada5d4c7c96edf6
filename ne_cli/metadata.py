"""Provenance records for extraction runs.

Every extract run writes one ``metadata.json`` into its destination
directory. The record echoes the request, the derived plan, the
extraction outcome and the environment, so a run can be reproduced
and audited later:

    {
        "command": "ne extract --scale 10 --extent -95,28,-87,34",
        "timestamp": "2026-10-17T14:03:11+00:00",
        "arguments": {"scale": "10", "extent": "-95,28,-87,34", ...},
        "derived": {"parsed_extent": {...}, "buffer_config": {...}, ...},
        "extraction_results": {"total_layers": 8, "successful": 8, ...},
        "metadata": {"ne_version": "0.3.0", "python_version": "3.12.4", ...}
    }

The destination is recorded by basename only so the directory can be
moved without invalidating its record.
"""

from __future__ import annotations

import json
import platform
import shlex
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timezone
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as distribution_version
from pathlib import Path
from typing import Any

from ne_cli.config import Settings
from ne_cli.constants import METADATA_FILENAME
from ne_cli.errors import MetadataWriteError

DISTRIBUTION_NAME = "ne-cli"

# Canonical flag order for the reconstructed command
COMMAND_FIELDS: tuple[str, ...] = ("scale", "extent", "buffer", "layers", "output")


def tool_version() -> str:
    """Return the installed ne-cli version, or "unknown" outside an install."""
    try:
        return distribution_version(DISTRIBUTION_NAME)
    except PackageNotFoundError:
        return "unknown"


@dataclass(frozen=True)
class MetadataRecord:
    """Provenance document for a single extraction run.

    Attributes:
        command: Canonical ``ne extract`` invocation.
        timestamp: ISO-8601 build time with UTC offset.
        arguments: Raw arguments, absent ones as None.
        derived: Parsed extent, buffer, buffered extent, destination name, layers.
        extraction_results: Outcome summary, as passed in.
        metadata: Tool version, Python version, data directory.
    """

    command: str
    timestamp: str
    arguments: dict[str, str | None]
    derived: dict[str, Any]
    extraction_results: dict[str, Any]
    metadata: dict[str, str]

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dict."""
        return {
            "command": self.command,
            "timestamp": self.timestamp,
            "arguments": dict(self.arguments),
            "derived": dict(self.derived),
            "extraction_results": dict(self.extraction_results),
            "metadata": dict(self.metadata),
        }

    def to_json(self, *, indent: int | None = 2) -> str:
        """Convert to a JSON string (pretty-printed by default)."""
        return json.dumps(self.to_dict(), indent=indent)


def reconstruct_command(arguments: Mapping[str, str | None]) -> str:
    """Rebuild the extract command using long-form option names.

    Options missing from ``arguments`` (or None) are left out.

    Example:
        >>> reconstruct_command({"scale": "10", "extent": "-95,28,-87,34"})
        'ne extract --scale 10 --extent -95,28,-87,34'
    """
    parts = ["ne extract"]
    for key in COMMAND_FIELDS:
        value = arguments.get(key)
        if value is not None:
            parts.append(f"--{key} {shlex.quote(value)}")
    return " ".join(parts)


def format_timestamp(now: datetime | None = None) -> str:
    """ISO-8601 timestamp with an explicit offset, to the second."""
    moment = now if now is not None else datetime.now(timezone.utc)
    return moment.isoformat(timespec="seconds")


def _as_dict(value: Any) -> Any:
    return value.to_dict() if hasattr(value, "to_dict") else value


def _buffer_percentages(buffer: Any) -> dict[str, float]:
    if isinstance(buffer, Mapping):
        return {"ew_percent": buffer["ew"], "ns_percent": buffer["ns"]}
    return {"ew_percent": buffer.ew, "ns_percent": buffer.ns}


def build_record(
    arguments: Mapping[str, str | None],
    derived: Mapping[str, Any],
    extraction_results: Mapping[str, Any],
    *,
    settings: Settings,
    now: datetime | None = None,
) -> MetadataRecord:
    """Assemble the provenance record for a run.

    Args:
        arguments: Raw request arguments (see ExtractionRequest.to_arguments).
        derived: Derived values (see ExtractionPlan.derived). Extents and the
            buffer may be model objects or plain mappings.
        extraction_results: Outcome summary (see ExtractionSummary.to_dict).
        settings: Settings in effect for the run.
        now: Build instant (default: current UTC time).

    Returns:
        Immutable MetadataRecord.
    """
    return MetadataRecord(
        command=reconstruct_command(arguments),
        timestamp=format_timestamp(now),
        arguments={key: arguments.get(key) for key in COMMAND_FIELDS},
        derived={
            "parsed_extent": _as_dict(derived["parsed_extent"]),
            "buffer_config": _buffer_percentages(derived["buffer_config"]),
            "buffered_extent": _as_dict(derived["buffered_extent"]),
            "destination_directory": Path(str(derived["destination_directory"])).name,
            "resolved_layers": list(derived["resolved_layers"]),
        },
        extraction_results=dict(extraction_results),
        metadata={
            "ne_version": tool_version(),
            "python_version": platform.python_version(),
            "natural_earth_data_dir": str(settings.data_dir),
        },
    )


def write_record(destination: Path, record: MetadataRecord) -> Path:
    """Write the record as ``metadata.json`` inside the destination directory.

    Args:
        destination: Destination directory of the run.
        record: Record to write.

    Returns:
        Path of the written file.

    Raises:
        MetadataWriteError: If the file cannot be written. Callers treat this
            as a warning; the extraction itself has already happened.
    """
    path = destination / METADATA_FILENAME
    try:
        path.write_text(record.to_json() + "\n", encoding="utf-8")
    except OSError as e:
        raise MetadataWriteError(str(path), e) from e
    return path
