"""Exceptions raised by textify.

Every failure carries a ``user_message`` that is safe to show to an end
user. Engine error details are chained via ``__cause__`` and logged, never
placed in the message.
"""


class TextifyError(Exception):
    """Base exception for textify errors."""

    user_message = "An unknown error occurred."

    def __init__(self, message: str | None = None):
        super().__init__(message or self.user_message)


class UnsupportedFileKindError(TextifyError):
    """Raised when the media type is neither an image nor a PDF."""

    user_message = "Unsupported file type. Please upload an image or PDF."


class NoTextFoundError(TextifyError):
    """Raised when OCR recognizes nothing but whitespace."""

    user_message = "No text could be extracted from this image. Try a clearer image."


class ImageProcessingError(TextifyError):
    """Raised when the OCR engine fails."""

    user_message = "Failed to process image. Please try another image file."


class CorruptOrProtectedPdfError(TextifyError):
    """Raised when a PDF cannot be opened, read or rendered."""

    user_message = "Failed to process PDF. The file may be corrupted or password-protected."


class ExtractionCancelledError(TextifyError):
    """Raised when a cancellation token fires between two extraction steps."""

    user_message = "Extraction was cancelled."


class InvalidPayloadError(TextifyError):
    """Raised when an uploaded payload cannot be decoded."""

    user_message = "Uploaded file could not be read."


class ConfigurationError(TextifyError):
    """Raised for invalid or conflicting configuration."""

    user_message = "Invalid textify configuration."
