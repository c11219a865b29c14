"""
Custom Exceptions Module.

This module defines the exceptions raised by the ingestion engine.
Per-document errors are caught at the orchestrator boundary and turned
into a failed ImportResult, so a batch run keeps going.

Exception Hierarchy:
    InvoiceIngestError (base)
    ├── InputError
    │   ├── SourceNotFoundError
    │   ├── UnsupportedFileTypeError
    │   ├── UnreadableSourceError
    │   └── NoExtractableTextError
    ├── ParsingError
    │   ├── InvoiceNumberNotFoundError
    │   └── DateNotFoundError
    └── StorageError
        ├── DatabaseError
        ├── DocumentStorageError
        └── ReportExportError

A duplicate invoice is not an error; the orchestrator reports it as a
skipped ImportResult. Unrecognized lines are dropped and only logged.
"""


class InvoiceIngestError(Exception):
    """
    Base exception for all ingestion errors.

    Attributes:
        message: Human-readable error message.
        details: Optional dictionary with additional error details.
    """

    def __init__(self, message: str, details: dict = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


# =============================================================================
# INPUT ERRORS
# =============================================================================

class InputError(InvoiceIngestError):
    """Base exception for input handling errors."""
    pass


class SourceNotFoundError(InputError):
    """Raised when an input file or directory cannot be found."""

    def __init__(self, path: str):
        super().__init__(f"Source not found: {path}", {"path": path})


class UnsupportedFileTypeError(InputError):
    """
    Raised when an unsupported file type is provided.

    Example:
        >>> raise UnsupportedFileTypeError(".doc", [".pdf", ".txt"])
    """

    def __init__(self, file_type: str, supported_types: list):
        message = f"Unsupported file type: '{file_type}'"
        details = {"file_type": file_type, "supported_types": sorted(supported_types)}
        super().__init__(message, details)


class UnreadableSourceError(InputError):
    """Raised when a document cannot be opened or decoded."""

    def __init__(self, filepath: str, reason: str = None):
        message = f"Cannot read document: {filepath}"
        details = {"filepath": filepath, "reason": reason}
        super().__init__(message, details)


class NoExtractableTextError(InputError):
    """Raised when a document has no text layer (a scan that needs OCR)."""

    def __init__(self, filepath: str):
        message = f"No extractable text in document: {filepath}"
        super().__init__(message, {"filepath": filepath})


# =============================================================================
# PARSING ERRORS
# =============================================================================

class ParsingError(InvoiceIngestError):
    """Base exception for text parsing errors."""
    pass


class InvoiceNumberNotFoundError(ParsingError):
    """Raised when neither the text nor the filename yields an invoice number."""

    def __init__(self, filename: str):
        message = f"Invoice number not found in: {filename}"
        super().__init__(message, {"filename": filename})


class DateNotFoundError(ParsingError):
    """Raised by strict date lookups when no plausible date exists."""

    def __init__(self, text: str):
        message = "No plausible date found"
        super().__init__(message, {"text": text[:80]})


# =============================================================================
# STORAGE ERRORS
# =============================================================================

class StorageError(InvoiceIngestError):
    """Base exception for persistence and output errors."""
    pass


class DatabaseError(StorageError):
    """Raised when database operations fail."""

    def __init__(self, operation: str, reason: str = None):
        message = f"Database operation failed: {operation}"
        details = {"operation": operation, "reason": reason}
        super().__init__(message, details)


class DocumentStorageError(StorageError):
    """Raised when a source document copy cannot be stored."""

    def __init__(self, identifier: str, reason: str = None):
        message = f"Cannot store document for: {identifier}"
        details = {"identifier": identifier, "reason": reason}
        super().__init__(message, details)


class ReportExportError(StorageError):
    """Raised when the Excel import report cannot be written."""

    def __init__(self, filepath: str, reason: str = None):
        message = f"Failed to export import report: {filepath}"
        details = {"filepath": filepath, "reason": reason}
        super().__init__(message, details)


__all__ = [
    'InvoiceIngestError',
    'InputError',
    'SourceNotFoundError',
    'UnsupportedFileTypeError',
    'UnreadableSourceError',
    'NoExtractableTextError',
    'ParsingError',
    'InvoiceNumberNotFoundError',
    'DateNotFoundError',
    'StorageError',
    'DatabaseError',
    'DocumentStorageError',
    'ReportExportError',
]
