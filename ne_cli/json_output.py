"""JSON output envelope for ``--format json``.

Every command emits exactly one envelope so scripts can parse results
without scraping styled text:

    {
        "success": true|false,
        "command": "extract",
        "data": { ... },
        "errors": [ {"type": ..., "message": ..., "code": ...} ]  # only on failure
    }

Usage:
    from ne_cli.json_output import ErrorDetail, error_envelope, success_envelope

    print(success_envelope("list", {"layers": grouped}).to_json())
    print(error_envelope("extract", [ErrorDetail.from_error(err)]).to_json())
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

from ne_cli.errors import NaturalEarthError


@dataclass
class ErrorDetail:
    """One entry in the errors array.

    Attributes:
        type: Error class name (e.g., "InvalidExtentError")
        message: Human-readable error description
        code: Structured error code (e.g., "NE-EXT001"), if known
    """

    type: str
    message: str
    code: str | None = None

    @classmethod
    def from_error(cls, err: NaturalEarthError) -> ErrorDetail:
        """Build an entry from a structured ne error."""
        return cls(type=type(err).__name__, message=err.message, code=err.code)

    def to_dict(self) -> dict[str, str]:
        """Convert to dictionary for JSON serialization."""
        result = {"type": self.type, "message": self.message}
        if self.code is not None:
            result["code"] = self.code
        return result


@dataclass
class OutputEnvelope:
    """Wrapper structure for all JSON command output.

    Attributes:
        success: True if the command completed without errors
        command: Name of the command (e.g., "list", "extract")
        data: Command-specific payload
        errors: Error entries; present only when success=False
    """

    success: bool
    command: str
    data: dict[str, Any] | None
    errors: list[ErrorDetail] | None = field(default=None)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization.

        The errors field is excluded when None.
        """
        result: dict[str, Any] = {
            "success": self.success,
            "command": self.command,
            "data": self.data,
        }
        if self.errors is not None:
            result["errors"] = [e.to_dict() for e in self.errors]
        return result

    def to_json(self, *, indent: int | None = 2) -> str:
        """Convert to a JSON string (pretty-printed by default)."""
        return json.dumps(self.to_dict(), indent=indent)


def success_envelope(command: str, data: dict[str, Any]) -> OutputEnvelope:
    """Create a success envelope."""
    return OutputEnvelope(success=True, command=command, data=data)


def error_envelope(
    command: str,
    errors: list[ErrorDetail],
    *,
    data: dict[str, Any] | None = None,
) -> OutputEnvelope:
    """Create an error envelope, optionally carrying partial data."""
    return OutputEnvelope(
        success=False,
        command=command,
        data=data if data is not None else {},
        errors=errors,
    )
