"""Custom exceptions for PDF compression requests.

All error messages are written in plain English so users know exactly
what went wrong and how to fix it.
"""

from typing import Optional


class PDFCompressionError(Exception):
    """Base exception for all PDF compression errors."""

    error_type: str = "PDFCompressionError"
    status_code: int = 400

    def __init__(
        self,
        message: str,
        detail: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        # Diagnostic text shown only in development mode
        self.detail = detail


class EncryptionError(PDFCompressionError):
    """PDF is password-protected or encrypted.

    User-friendly message examples:
    - "This PDF is password-protected. Please remove the password and try again."
    """

    error_type: str = "EncryptionError"
    status_code: int = 422

    @staticmethod
    def for_file(filename: str, detail: Optional[str] = None) -> "EncryptionError":
        """Create error with simple message for a specific file."""
        return EncryptionError(
            f"'{filename}' is password-protected or encrypted. "
            f"Please remove the password before compression.",
            detail=detail,
        )


class UnsupportedImageError(PDFCompressionError):
    """PDF contains image streams the aggressive recipe cannot resample."""

    error_type: str = "UnsupportedImageError"
    status_code: int = 422

    @staticmethod
    def for_file(filename: str, detail: Optional[str] = None) -> "UnsupportedImageError":
        return UnsupportedImageError(
            f"'{filename}' contains images that cannot be processed with the \"strong\" preset. "
            f"Try the \"recommended\" preset instead, though compression may be limited.",
            detail=detail,
        )


class EngineUnavailableError(PDFCompressionError):
    """Ghostscript is missing or cannot be executed on this server."""

    error_type: str = "EngineUnavailableError"
    status_code: int = 503

    @staticmethod
    def for_command(command: Optional[str] = None, detail: Optional[str] = None) -> "EngineUnavailableError":
        name = command or "Ghostscript"
        return EngineUnavailableError(
            f"The PDF engine ({name}) is not installed or cannot be started on this server. "
            f"Please contact the service administrator.",
            detail=detail,
        )


class ProcessingTimeoutError(PDFCompressionError):
    """Compression exceeded the configured time limit."""

    error_type: str = "ProcessingTimeoutError"
    status_code: int = 504

    @staticmethod
    def for_file(filename: str, timeout_seconds: float, detail: Optional[str] = None) -> "ProcessingTimeoutError":
        return ProcessingTimeoutError(
            f"Compressing '{filename}' timed out after {timeout_seconds:.0f} seconds. "
            f"This file is too complex to process in the time limit. "
            f"Try a smaller file or split the PDF first.",
            detail=detail,
        )


class CompressionFailedError(PDFCompressionError):
    """Catch-all for engine failures that match no known pattern."""

    error_type: str = "CompressionFailedError"
    status_code: int = 500

    @staticmethod
    def for_file(filename: str, detail: Optional[str] = None) -> "CompressionFailedError":
        return CompressionFailedError(
            f"PDF compression failed for '{filename}'. The file may be corrupted.",
            detail=detail,
        )


class InvalidUploadError(PDFCompressionError):
    """Upload is missing or is not a PDF."""

    error_type: str = "InvalidUploadError"
    status_code: int = 400

    @staticmethod
    def missing_file() -> "InvalidUploadError":
        return InvalidUploadError("No file uploaded. Please upload a PDF file.")

    @staticmethod
    def not_pdf(filename: str) -> "InvalidUploadError":
        return InvalidUploadError(f"'{filename}' is not a PDF. Only PDF files are allowed.")


class RateLimitError(PDFCompressionError):
    """Client exceeded the request budget for the current window."""

    error_type: str = "RateLimitError"
    status_code: int = 429

    def __init__(self, message: str, retry_after: int) -> None:
        super().__init__(message)
        self.retry_after = retry_after

    @staticmethod
    def for_window(max_requests: int, window_seconds: int, retry_after: int) -> "RateLimitError":
        minutes = window_seconds / 60
        return RateLimitError(
            f"Rate limit exceeded. Maximum {max_requests} requests allowed per {minutes:g} minutes.",
            retry_after=retry_after,
        )
