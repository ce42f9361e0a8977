"""
Custom exceptions for PDF Edit.

This module defines all custom exceptions used throughout the library.
Pre-flight errors (geometry, config) abort before any file is touched,
per-document errors are captured into a ``ModificationOutcome`` and
per-edit errors (subclasses of :class:`EditError`) are soft failures.
"""


class PDFEditException(Exception):
    """Base exception for all PDF Edit errors."""

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.default_message)
        self.message = message or self.default_message

    @property
    def default_message(self) -> str:
        return "An unknown PDF edit error occurred."


class MalformedGeometryError(PDFEditException, ValueError):
    """Raised when a coordinate or box string cannot be parsed."""

    @property
    def default_message(self) -> str:
        return "Malformed coordinate specification."


class ConfigParseError(PDFEditException):
    """Raised when an edit configuration file is invalid."""

    @property
    def default_message(self) -> str:
        return "Invalid edit configuration."


class DocumentOpenError(PDFEditException):
    """Raised when a source PDF is missing or cannot be parsed."""

    @property
    def default_message(self) -> str:
        return "Unable to open PDF document."


class PersistError(PDFEditException):
    """Raised when a modified PDF cannot be written."""

    @property
    def default_message(self) -> str:
        return "Unable to write modified PDF document."


class TemplateNotFoundError(PDFEditException):
    """Raised when an edit template name is not in the catalog."""

    @property
    def default_message(self) -> str:
        return "Unknown edit template."


class EditError(PDFEditException):
    """Base class for failures local to a single edit."""

    @property
    def default_message(self) -> str:
        return "Edit could not be applied."


class FieldNotFoundError(EditError):
    """Raised when a form field name is not present in the document."""

    @property
    def default_message(self) -> str:
        return "Form field not found."


class FieldTypeMismatchError(EditError):
    """Raised when a value does not fit the kind of form field."""

    @property
    def default_message(self) -> str:
        return "Value is not valid for this form field."


class UnsupportedImageFormatError(EditError):
    """Raised when an image is unreadable or not PNG/JPEG."""

    @property
    def default_message(self) -> str:
        return "Unsupported image format."


class PageOutOfRangeError(EditError):
    """Raised when an edit targets a page that does not exist."""

    @property
    def default_message(self) -> str:
        return "Target page does not exist."


class UnsafeFileError(PDFEditException):
    """Raised when the safety validator rejects a file."""

    def __init__(self, message: str = "", issues=None) -> None:
        super().__init__(message)
        self.issues = list(issues or [])

    @property
    def default_message(self) -> str:
        return "File failed safety validation."


class ExtractionError(PDFEditException):
    """Raised when text extraction fails."""

    @property
    def default_message(self) -> str:
        return "Failed to extract content from PDF."


class GenerationError(PDFEditException):
    """Raised when PDF generation through an external engine fails."""

    @property
    def default_message(self) -> str:
        return "PDF generation failed."
