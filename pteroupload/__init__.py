"""pteroupload - upload build artifacts to game servers through a panel API."""

from .api import PanelClient
from .exceptions import (
    PanelAPIError,
    PanelAuthenticationError,
    PanelConfigError,
    PanelError,
    PanelInvalidResponseError,
    PanelNetworkError,
    PanelNotFoundError,
    PanelPermissionError,
    PanelValidationError,
    RemoteDecompressError,
    RemoteDeleteError,
    RemoteListError,
    UploadExhaustedError,
)
from .models import FilterMode, RemoteFileEntry, TransferResult
from .utils import matches_pattern

__all__ = [
    "PanelClient",
    "PanelError",
    "PanelAPIError",
    "PanelAuthenticationError",
    "PanelConfigError",
    "PanelInvalidResponseError",
    "PanelNetworkError",
    "PanelNotFoundError",
    "PanelPermissionError",
    "PanelValidationError",
    "RemoteDecompressError",
    "RemoteDeleteError",
    "RemoteListError",
    "UploadExhaustedError",
    "FilterMode",
    "RemoteFileEntry",
    "TransferResult",
    "matches_pattern",
]
