"""Structured error codes for the ne CLI.

All errors follow the format NE-{category}{number}:
- NE-SCL*: Scale errors
- NE-EXT*: Extent errors
- NE-BUF*: Buffer errors
- NE-LYR*: Layer selection and extraction errors
- NE-CAT*: Catalog errors
- NE-OUT*: Output directory errors
- NE-MET*: Metadata record errors
- NE-CFG*: Configuration errors
"""

from __future__ import annotations

from typing import Any


class NaturalEarthError(Exception):
    """Base class for all ne errors.

    All errors have:
    - code: Structured error code (e.g., NE-EXT001)
    - message: Human-readable error message
    """

    code: str = "NE-000"

    # Reserved attribute names that cannot be overwritten by context
    _RESERVED_ATTRS = frozenset({"code", "message", "context", "args"})

    def __init__(self, message: str, **context: Any) -> None:
        """Initialize an ne error.

        Args:
            message: Human-readable error message.
            **context: Additional context stored as error attributes.
                Reserved keys (code, message, context, args) are ignored.
        """
        self.message = message
        self.context = context
        for key, value in context.items():
            if key not in self._RESERVED_ATTRS:
                setattr(self, key, value)
        super().__init__(f"[{self.code}] {message}")

    def to_dict(self) -> dict[str, Any]:
        """Convert error to JSON-serializable dict."""
        return {
            "code": self.code,
            "message": self.message,
            "context": self.context,
        }


# Scale Errors (NE-SCL*)
class ScaleError(NaturalEarthError):
    """Base class for scale-related errors."""

    code = "NE-SCL000"


class InvalidScaleError(ScaleError):
    """Raised when a scale is missing or not one of 10, 50, 110.

    Error code: NE-SCL001
    """

    code = "NE-SCL001"

    def __init__(self, scale: str | None) -> None:
        super().__init__(f"Scale must be 10, 50, or 110 (got {scale!r})", scale=scale)


# Extent Errors (NE-EXT*)
class ExtentError(NaturalEarthError):
    """Base class for extent-related errors."""

    code = "NE-EXT000"


class InvalidExtentError(ExtentError):
    """Raised when an extent string cannot be parsed into a valid rectangle.

    Error code: NE-EXT001
    """

    code = "NE-EXT001"

    def __init__(self, extent: str | None, reason: str) -> None:
        super().__init__(
            f"Invalid extent {extent!r}: {reason}. Use: xmin,ymin,xmax,ymax",
            extent=extent,
            reason=reason,
        )


# Buffer Errors (NE-BUF*)
class BufferSpecError(NaturalEarthError):
    """Base class for buffer-related errors."""

    code = "NE-BUF000"


class InvalidBufferError(BufferSpecError):
    """Raised when a buffer specification is malformed or out of range.

    Error code: NE-BUF001
    """

    code = "NE-BUF001"

    def __init__(self, buffer: str, reason: str) -> None:
        super().__init__(
            f"Invalid buffer {buffer!r}: {reason}. "
            "Use a number between 0-100 or 0.0-1.0, optionally as EW,NS",
            buffer=buffer,
            reason=reason,
        )


# Layer Errors (NE-LYR*)
class LayerError(NaturalEarthError):
    """Base class for layer-related errors."""

    code = "NE-LYR000"


class EmptyLayerSelectionError(LayerError):
    """Raised when layer resolution yields no names.

    Error code: NE-LYR001
    """

    code = "NE-LYR001"

    def __init__(self, layers: str | None) -> None:
        super().__init__("No valid layers specified", layers=layers)


class NoAvailableLayersError(LayerError):
    """Raised when none of the resolved layers exist at the requested scale.

    Error code: NE-LYR002
    """

    code = "NE-LYR002"

    def __init__(self, scale: str, unavailable: list[str]) -> None:
        super().__init__(
            f"None of the specified layers are available at scale {scale}",
            scale=scale,
            unavailable=unavailable,
        )


class LayerExtractionError(LayerError):
    """A single layer could not be extracted.

    Error code: NE-LYR003

    Never raised out of the batch loop; used as logging context and
    counted in the extraction summary.
    """

    code = "NE-LYR003"

    def __init__(self, layer: str, reason: str) -> None:
        super().__init__(f"Extraction failed for {layer}: {reason}", layer=layer, reason=reason)


# Catalog Errors (NE-CAT*)
class CatalogError(NaturalEarthError):
    """Base class for catalog-related errors."""

    code = "NE-CAT000"


class CatalogUnreadableError(CatalogError):
    """Raised when the catalog file is missing or cannot be parsed.

    Error code: NE-CAT001
    """

    code = "NE-CAT001"

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(
            f"Could not read layer information from {path}: {reason}",
            path=path,
            reason=reason,
        )


class EmptyCatalogError(CatalogError):
    """Raised when the catalog has no layers at the requested scale.

    Error code: NE-CAT002

    An unreadable catalog file also ends up here, since it reads as empty.
    """

    code = "NE-CAT002"

    def __init__(self, scale: str) -> None:
        super().__init__(f"No layer information available at scale {scale}", scale=scale)


# Output Directory Errors (NE-OUT*)
class OutputDirectoryError(NaturalEarthError):
    """Base class for output directory errors."""

    code = "NE-OUT000"


class OutputDirectoryNotFoundError(OutputDirectoryError):
    """Raised when the requested output directory does not exist.

    Error code: NE-OUT001
    """

    code = "NE-OUT001"

    def __init__(self, path: str) -> None:
        super().__init__(f"Output directory does not exist: {path}", path=path)


class OutputDirectoryNotWritableError(OutputDirectoryError):
    """Raised when the requested output directory is not writable.

    Error code: NE-OUT002
    """

    code = "NE-OUT002"

    def __init__(self, path: str) -> None:
        super().__init__(f"Output directory is not writable: {path}", path=path)


# Metadata Errors (NE-MET*)
class MetadataError(NaturalEarthError):
    """Base class for metadata record errors."""

    code = "NE-MET000"


class MetadataWriteError(MetadataError):
    """Raised when the metadata record cannot be written.

    Error code: NE-MET001

    Callers report this as a warning; it does not fail the extraction.
    """

    code = "NE-MET001"

    def __init__(self, path: str, original_error: Exception) -> None:
        super().__init__(
            f"Failed to write metadata to {path}: {original_error}",
            path=path,
            original_error_type=type(original_error).__name__,
            original_error_message=str(original_error),
        )
        # Keep original exception for programmatic access (not serialized)
        self.original_exception = original_error


# Configuration Errors (NE-CFG*)
class ConfigError(NaturalEarthError):
    """Base class for configuration-related errors."""

    code = "NE-CFG000"


class ConfigParseError(ConfigError):
    """Raised when a configuration file cannot be parsed.

    Error code: NE-CFG001
    """

    code = "NE-CFG001"

    def __init__(self, path: str, parse_error: str) -> None:
        super().__init__(
            f"Failed to parse config file {path}: {parse_error}",
            path=path,
            parse_error=parse_error,
        )


class ConfigInvalidStructureError(ConfigError):
    """Raised when a configuration file has an invalid structure.

    Error code: NE-CFG002
    """

    code = "NE-CFG002"

    def __init__(self, path: str, detail: str) -> None:
        super().__init__(
            f"Invalid config structure in {path}: {detail}",
            path=path,
            detail=detail,
        )
