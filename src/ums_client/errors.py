"""Error types raised at the edges of the profile pipeline."""


class UploadError(Exception):
    """Asset upload failed in transport or was rejected by the size policy."""


class MutationError(Exception):
    """User-record service rejected a request with a non-2xx response."""

    def __init__(self, message: str, status_code: int) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class NetworkError(Exception):
    """Request to the backend never produced an HTTP response."""
