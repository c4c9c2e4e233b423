"""Domain-specific exceptions for package loading and frame resolution."""

from pathlib import Path


class InvalidPackageError(ValueError):
    """Raised when an export package is missing, unreadable or malformed."""

    def __init__(self, path: Path | str, reason: str | None = None):
        message = f"Invalid export package: {path}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)
        self.path = path
        self.reason = reason


class PackageNotFoundError(InvalidPackageError):
    """Raised when the input file does not exist."""

    def __init__(self, path: Path | str):
        super().__init__(path, reason="File not found")


class ArchiveSecurityError(InvalidPackageError):
    """Raised when an archive fails a size, entry-count or path check."""


class ValidationError(ValueError):
    """Raised when user-provided settings fail validation."""


class SchemaValidationError(ValueError):
    """Raised when project or prototype data fails schema validation."""


class MissingAssetError(InvalidPackageError):
    """Raised when media files declared by the package are absent or corrupt."""

    def __init__(self, path: Path | str, missing: list[str]):
        super().__init__(path, reason=f"Missing or unreadable media files: {', '.join(missing)}")
        self.missing = missing


class ProjectLoadError(RuntimeError):
    """Raised when a remote project cannot be fetched before the deadline."""
