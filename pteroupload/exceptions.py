"""Exceptions raised by the panel client and the sync engine."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import TransferResult


class PanelError(Exception):
    """Base exception for all pteroupload errors."""


class PanelConfigError(PanelError):
    """Raised when the client or the run is not configured correctly."""


class PanelValidationError(PanelError):
    """Raised when the run configuration or a local source is invalid."""


class PanelAPIError(PanelError):
    """Raised when the panel answers a request with an error status."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class PanelAuthenticationError(PanelAPIError):
    """Raised on HTTP 401."""


class PanelPermissionError(PanelAPIError):
    """Raised on HTTP 403."""


class PanelNotFoundError(PanelAPIError):
    """Raised on HTTP 404."""


class PanelNetworkError(PanelAPIError):
    """Raised when the request never produced a response."""


class PanelInvalidResponseError(PanelAPIError):
    """Raised when a response body cannot be understood."""


class RemoteListError(PanelAPIError):
    """Raised when a remote directory cannot be listed."""

    def __init__(
        self, directory: str, status_code: int | None = None, reason: str = ""
    ):
        message = f"Failed to list {directory}"
        if status_code is not None:
            message = f"{message} (HTTP {status_code})"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message, status_code)
        self.directory = directory


class RemoteDeleteError(PanelAPIError):
    """Raised when a delete call for remote files fails."""

    def __init__(
        self,
        root: str,
        files: list[str],
        status_code: int | None = None,
        reason: str = "",
    ):
        message = f"Failed to delete {len(files)} item(s) in {root}"
        if status_code is not None:
            message = f"{message} (HTTP {status_code})"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message, status_code)
        self.root = root
        self.files = files


class RemoteDecompressError(PanelAPIError):
    """Raised when the panel fails to decompress an uploaded archive."""

    def __init__(
        self, path: str, status_code: int | None = None, reason: str = ""
    ):
        message = f"Failed to decompress {path}"
        if status_code is not None:
            message = f"{message} (HTTP {status_code})"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message, status_code)
        self.path = path


class UploadExhaustedError(PanelError):
    """Raised in strict mode when an upload gave up after all attempts."""

    def __init__(self, remote_path: str, result: TransferResult):
        super().__init__(
            f"Upload of {remote_path} failed after {result.attempts} attempt(s)"
            + (f": {result.error}" if result.error else "")
        )
        self.remote_path = remote_path
        self.result = result
