"""Data models shared by the panel client and the sync engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Optional

from .exceptions import PanelValidationError


class FilterMode(str, Enum):
    """How cleanup patterns are interpreted.

    In blacklist mode matching entries are deleted. In whitelist mode
    matching entries are kept and everything else is deleted.
    """

    WHITELIST = "whitelist"
    BLACKLIST = "blacklist"

    @classmethod
    def parse(cls, value: "str | FilterMode") -> "FilterMode":
        """Parse a filter mode from user input.

        Args:
            value: ``"whitelist"`` or ``"blacklist"`` (case-insensitive)

        Returns:
            The matching FilterMode

        Raises:
            PanelValidationError: If the value is neither mode
        """
        if isinstance(value, FilterMode):
            return value
        normalized = (value or "").strip().lower()
        for mode in cls:
            if mode.value == normalized:
                return mode
        raise PanelValidationError(
            f"Invalid files type '{value}': must be 'whitelist' or 'blacklist'"
        )


@dataclass
class RemoteFileEntry:
    """One entry of a remote directory listing."""

    name: str
    is_directory: bool = False

    @classmethod
    def from_api(cls, item: dict[str, Any]) -> "RemoteFileEntry":
        """Create an entry from one item of a listing response.

        The panel wraps entry fields in an ``attributes`` object; some
        backends return them at the top level instead.

        Args:
            item: Listing item from the API

        Returns:
            RemoteFileEntry instance
        """
        data = item.get("attributes", item)
        return cls(
            name=str(data.get("name", "")),
            is_directory=bool(data.get("is_directory", False)),
        )


@dataclass
class UploadTask:
    """A single file to push to a single server."""

    server_id: str
    local_path: Path
    remote_path: str


@dataclass
class TransferResult:
    """Outcome of an operation retried up to a fixed number of attempts."""

    success: bool
    attempts: int
    status_code: Optional[int] = None
    """Status of the last response, if any response was received"""

    error: Optional[str] = None
    """Message of the last failure, if any"""

    @property
    def exhausted(self) -> bool:
        """True when every attempt failed."""
        return not self.success


@dataclass
class CleanupBatch:
    """Names deleted with a single delete call in one remote directory."""

    root: str
    names: list[str] = field(default_factory=list)


@dataclass
class CleanupReport:
    """Delete batches of one cleanup pass, in execution order."""

    batches: list[CleanupBatch] = field(default_factory=list)

    @property
    def deleted_count(self) -> int:
        """Total number of names across all batches."""
        return sum(len(batch.names) for batch in self.batches)

    def names_for(self, root: str) -> list[str]:
        """Return the names batched for a remote directory."""
        for batch in self.batches:
            if batch.root == root:
                return batch.names
        return []


@dataclass
class TargetMapping:
    """An additional source glob uploaded to its own target path."""

    source: str
    target: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TargetMapping":
        """Create a mapping from a config file entry.

        Raises:
            PanelValidationError: If ``source`` or ``target`` is missing
        """
        missing = [key for key in ("source", "target") if not data.get(key)]
        if missing:
            raise PanelValidationError(
                f"Missing required fields in targets entry: {', '.join(missing)}"
            )
        return cls(source=str(data["source"]), target=str(data["target"]))
