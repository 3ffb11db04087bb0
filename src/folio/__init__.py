"""folio: structured records stored as YAML files in a git repository."""

from folio.errors import (
    AuthenticationError,
    BackendFailure,
    EncodeError,
    FolioError,
    NotFound,
    UnsupportedFormat,
    UnsupportedOperation,
)
from folio.files import Document, Schema, Views
from folio.record_file import RecordFile
from folio.session import Folio, build_backend

__all__ = [
    "AuthenticationError",
    "BackendFailure",
    "Document",
    "EncodeError",
    "Folio",
    "FolioError",
    "NotFound",
    "RecordFile",
    "Schema",
    "UnsupportedFormat",
    "UnsupportedOperation",
    "Views",
    "build_backend",
]
