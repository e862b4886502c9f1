"""Errors raised while importing and storing Figma files."""


class FigmaSyncError(Exception):
    """Base class for all figma-sync errors."""


class FigmaApiError(FigmaSyncError):
    """Raised when a Figma REST API call fails.

    ``status_code`` is ``None`` for transport errors (DNS, timeouts, refused
    connections) where no HTTP response was received.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class InvalidFigmaResponseError(FigmaSyncError):
    """Raised when a file response lacks the document tree."""


class VariablesUnavailableError(FigmaSyncError):
    """Raised when the local variables endpoint returns an incomplete payload."""


class NoStylesFoundError(FigmaSyncError):
    """Raised when a file has neither styles nor variables to import."""


class RecordNotFound(FigmaSyncError):
    """Raised when a stored file id does not exist."""

    def __init__(self, file_id: int) -> None:
        super().__init__(f"Figma file {file_id} not found")
        self.file_id = file_id


class StorageError(FigmaSyncError):
    """Raised when the database rejects a write, such as a duplicate node id."""
