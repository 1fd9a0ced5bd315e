"""Custom exceptions for the :mod:`pdfcatx` package.

Errors fall into three groups:

* per-source load errors (:class:`PdfLoadError` and subclasses), which are
  recoverable when ``continue_on_error`` is enabled,
* structural merge errors (:class:`MergeFailedError` and friends), which are
  always fatal for the merge call that raised them,
* configuration and output errors, which are raised before or after the merge
  and are never skipped.
"""

from __future__ import annotations

from pathlib import Path


class PdfCatError(Exception):
    """Base exception for all :mod:`pdfcatx` errors."""

    exit_code: int = 1
    recoverable: bool = False

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.default_message)
        self.message = message or self.default_message

    @property
    def default_message(self) -> str:
        return "An unknown pdfcatx error occurred."


# -- Input errors ------------------------------------------------------------


class PdfLoadError(PdfCatError):
    """Raised when a single input PDF cannot be loaded."""

    exit_code = 2
    recoverable = True

    def __init__(self, path: str | Path, message: str = "") -> None:
        self.path = Path(path)
        super().__init__(message)

    @property
    def default_message(self) -> str:
        return f"Failed to load PDF: {self.path}"


class PdfNotFoundError(PdfLoadError):
    """Raised when an input path does not exist."""

    @property
    def default_message(self) -> str:
        return f"File not found: {self.path}"


class PdfNotAccessibleError(PdfLoadError):
    """Raised when an input path exists but cannot be read."""

    @property
    def default_message(self) -> str:
        return f"Cannot access file: {self.path}"


class NotAFileError(PdfLoadError):
    """Raised when an input path is a directory or other non-regular file."""

    @property
    def default_message(self) -> str:
        return f"Not a file: {self.path}"


class EncryptedPdfError(PdfLoadError):
    """Raised when an input PDF is encrypted."""

    @property
    def default_message(self) -> str:
        return (
            f"PDF is encrypted and cannot be processed: {self.path}\n"
            "  Hint: Decrypt the PDF first using 'qpdf --decrypt' or similar tools"
        )


class CorruptedPdfError(PdfLoadError):
    """Raised when an input PDF is malformed, empty or has no pages."""

    def __init__(self, path: str | Path, details: str = "") -> None:
        self.details = details
        super().__init__(path, f"Corrupted or invalid PDF: {path}\n  Details: {details}" if details else "")

    @property
    def default_message(self) -> str:
        return f"Corrupted or invalid PDF: {self.path}"


class PdfLoadFailedError(PdfLoadError):
    """Raised when loading fails for any other reason."""

    def __init__(self, path: str | Path, reason: str = "") -> None:
        self.reason = reason
        super().__init__(path, f"Failed to load PDF: {path}\n  Reason: {reason}" if reason else "")


# -- Structural errors -------------------------------------------------------


class MergeFailedError(PdfCatError):
    """Raised when the object graph cannot be restructured."""

    exit_code = 3

    @property
    def default_message(self) -> str:
        return "Merge operation failed"

    def __init__(self, reason: str = "") -> None:
        self.reason = reason
        super().__init__(f"Merge operation failed: {reason}" if reason else "")


class InvalidPageRangeError(PdfCatError):
    """Raised when a page selection falls outside the document."""

    exit_code = 3

    def __init__(
        self,
        requested: str,
        total: int,
        path: str | Path | None = None,
    ) -> None:
        self.requested = requested
        self.total = total
        self.path = Path(path) if path is not None else None
        where = f" for PDF: {self.path}" if self.path is not None else ""
        super().__init__(
            f"Invalid page range '{requested}'{where}\n"
            f"  PDF has {total} page(s). Page numbers must be between 1 and {total}"
        )


class BookmarkError(PdfCatError):
    """Raised when the outline structure cannot be built or read."""

    exit_code = 3

    @property
    def default_message(self) -> str:
        return "Failed to process bookmarks"


class MetadataError(PdfCatError):
    """Raised when the document information dictionary cannot be written."""

    exit_code = 3

    @property
    def default_message(self) -> str:
        return "Failed to set metadata"


# -- Configuration and output errors -----------------------------------------


class NoFilesToMergeError(PdfCatError):
    """Raised when no input survived loading."""

    exit_code = 2

    @property
    def default_message(self) -> str:
        return "No input files specified for merging"


class InvalidConfigError(PdfCatError):
    """Raised when options are missing, malformed or conflicting."""

    exit_code = 64

    def __init__(self, message: str = "") -> None:
        super().__init__(f"Invalid configuration: {message}" if message else "")

    @property
    def default_message(self) -> str:
        return "Invalid configuration"


class InputListError(PdfCatError):
    """Raised when an input list file cannot be read."""

    exit_code = 66

    def __init__(self, path: str | Path, reason: str = "") -> None:
        self.path = Path(path)
        super().__init__(f"Failed to read input list file: {self.path}\n  Reason: {reason}")


class OutputExistsError(PdfCatError):
    """Raised when the output exists and overwriting is not permitted."""

    exit_code = 73

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        super().__init__(
            f"Output file already exists: {self.path}\n"
            "  Use --force to overwrite or choose a different output path"
        )


class PdfWriteError(PdfCatError):
    """Raised when the merged document cannot be written."""

    exit_code = 74

    def __init__(self, path: str | Path, reason: str = "") -> None:
        self.path = Path(path)
        super().__init__(f"Failed to write to output file: {self.path}\n  Reason: {reason}")


class CancelledError(PdfCatError):
    """Raised when the user declines an interactive confirmation."""

    exit_code = 130

    @property
    def default_message(self) -> str:
        return "Operation cancelled by user"


__all__ = [
    "PdfCatError",
    "PdfLoadError",
    "PdfNotFoundError",
    "PdfNotAccessibleError",
    "NotAFileError",
    "EncryptedPdfError",
    "CorruptedPdfError",
    "PdfLoadFailedError",
    "MergeFailedError",
    "InvalidPageRangeError",
    "BookmarkError",
    "MetadataError",
    "NoFilesToMergeError",
    "InvalidConfigError",
    "InputListError",
    "OutputExistsError",
    "PdfWriteError",
    "CancelledError",
]
