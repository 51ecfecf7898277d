"""Error types raised by the uploader."""
from __future__ import annotations

from typing import Optional


class UploaderError(RuntimeError):
    """Base class for every failure surfaced by an upload run."""


class ConfigurationError(UploaderError):
    """Raised when inputs are missing or hold invalid values."""


class UpstreamError(UploaderError):
    """Raised when the Allure server answers with a non-success status."""

    def __init__(self, operation: str, status_code: int, body: str):
        self.operation = operation
        self.status_code = status_code
        self.body = body
        super().__init__(f"{operation}. Status code: {status_code} Body: {body}")


class ReportIndexError(UpstreamError):
    """Raised when the project index carries no usable report id."""


class ResultsDirectoryError(UploaderError, OSError):
    """Raised when the results directory cannot be enumerated."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path
