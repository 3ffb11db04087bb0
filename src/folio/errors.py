"""Error taxonomy shared by codecs, record files and backends."""

from __future__ import annotations


class FolioError(Exception):
    """Base class for all folio errors."""


class NotFound(FolioError):
    """A file or reference does not exist in the backend."""


class UnsupportedFormat(FolioError):
    """The file extension is not a recognised structured-text format."""


class UnsupportedOperation(FolioError):
    """The operation is not available for this kind of file."""


class EncodeError(FolioError):
    """The root value cannot be serialized."""


class BackendFailure(FolioError):
    """A git command or a hosted API call failed.

    ``detail`` holds stderr (local git) or the API error message (GitHub).
    """

    def __init__(self, operation: str, detail: str = "", status: int | None = None) -> None:
        self.operation = operation
        self.detail = detail.strip()
        self.status = status
        message = f"{operation} failed"
        if status is not None:
            message += f" ({status})"
        if self.detail:
            message += f": {self.detail}"
        super().__init__(message)


class AuthenticationError(BackendFailure):
    """The backend rejected the supplied credentials."""
