"""Exception hierarchy for lineageflow."""

from .codes import OutcomeCode


class LineageError(Exception):
    """Base exception for lineageflow errors."""
    pass


class IntentRejected(LineageError):
    """Raised when an edit intent fails validation and must not be applied."""
    def __init__(self, code: OutcomeCode, message: str):
        self.code = code
        self.message = message
        super().__init__(message)


class LineageIOError(LineageError):
    """Base for read/write/parse failures at the file boundary."""
    pass


class DocumentIOError(LineageIOError):
    """Raised when a lineage document cannot be read, parsed or written."""
    pass


class CsvImportError(LineageIOError):
    """Raised when a CSV import file cannot be read or has the wrong header."""
    pass


class ImageExportError(LineageIOError):
    """Raised when an exported image payload cannot be decoded or written."""
    pass
