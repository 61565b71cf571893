"""Exception types raised by the export pipeline."""

from __future__ import annotations


class ExportError(RuntimeError):
    """Base exception for export pipeline failures."""


class ConfigurationError(ExportError):
    """Raised when required configuration is missing or invalid."""


class SigningKeyError(ExportError):
    """Raised when the signing key cannot be loaded or used.

    Fatal to the whole invocation; bundles are never published unsigned.
    """


class SchemaError(ExportError):
    """Raised when a payload does not match the export wire schema."""


class EmptyExportError(ExportError):
    """Raised when asked to encode an export with no keys at all."""


class StorageError(ExportError):
    """Raised when the object store rejects an upload or delete."""

    def __init__(self, message: str, *, key: str | None = None) -> None:
        super().__init__(message)
        self.key = key


class RetentionError(StorageError):
    """Raised after a retention sweep when one or more object deletes failed."""

    def __init__(self, failures: dict[str, BaseException]) -> None:
        paths = ", ".join(sorted(failures))
        super().__init__(f"Failed to delete {len(failures)} expired bundle(s): {paths}")
        self.failures = failures
