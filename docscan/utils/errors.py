from typing import Optional


class ScanError(Exception):
    """Base class for failures inside the document scan pipeline."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status = status


class DownloadError(ScanError):
    """The document file could not be fetched from its download URL."""


class NoAvailableModelError(ScanError):
    """Every model in the ladder reported itself as unavailable."""

    def __init__(self, purpose: str, last_error: Optional[BaseException] = None):
        self.purpose = purpose
        self.last_error = last_error
        status = getattr(last_error, "status_code", None) or getattr(last_error, "status", None)
        details = str(last_error) if last_error else "Unknown error"
        message = (
            f"No available Gemini model found for {purpose}. "
            f"Please check GOOGLE_GEMINI_API_KEY and model access. "
            f"Last error ({status or 'unknown'}): {details}"
        )
        super().__init__(message, status=status)


class ValidationAPIError(ScanError):
    """The validation model call failed (network, auth, quota or empty reply)."""


class PersistenceError(ScanError):
    """The validation record could not be written back to the document store."""
