"""Filtered cleanup of remote directories before upload."""

import logging
import posixpath

from ..api import PanelClient
from ..models import CleanupBatch, CleanupReport, FilterMode, RemoteFileEntry
from ..utils import match_any_pattern
from .scanner import RemoteLister

logger = logging.getLogger(__name__)


def should_delete(
    entry: RemoteFileEntry,
    relative_path: str,
    mode: FilterMode,
    patterns: list[str],
) -> bool:
    """Decide whether a remote entry is removed by a cleanup pass.

    With patterns, blacklist mode deletes matching entries and whitelist
    mode deletes everything that does not match. Without patterns,
    blacklist mode deletes every entry and whitelist mode keeps every
    entry.

    Args:
        entry: Remote entry
        relative_path: Entry path relative to the filesystem root, without
            a leading separator
        mode: Filter mode
        patterns: Filter patterns

    Returns:
        True if the entry should be deleted
    """
    if not patterns:
        return mode == FilterMode.BLACKLIST

    matched = match_any_pattern(entry.name, relative_path, patterns)
    if mode == FilterMode.WHITELIST:
        return not matched
    return matched


class CleanupPlanner:
    """Computes and executes filtered deletes in a remote directory tree.

    Directories selected for deletion are explored as well, and the
    batches for their contents are issued before the batch of the
    directory that names them. Each directory gets at most one delete
    call.

    Examples:
        >>> planner = CleanupPlanner(client)
        >>> report = planner.clean("1a2b3c4d", "/home/container/plugins/",
        ...                        FilterMode.BLACKLIST, ["*.jar"])
        >>> report.deleted_count
        3
    """

    def __init__(self, client: PanelClient):
        """Initialize the planner.

        Args:
            client: Panel API client
        """
        self.client = client
        self.lister = RemoteLister(client)

    def _plan_directory(
        self,
        server_id: str,
        directory: str,
        mode: FilterMode,
        patterns: list[str],
    ) -> tuple[list[str], list[str]]:
        """Select the entries of one directory.

        Returns:
            Tuple of (names to delete, child directories to explore)
        """
        names: list[str] = []
        subdirectories: list[str] = []
        base = directory.lstrip("/")

        for entry in self.lister.list(server_id, directory):
            relative_path = posixpath.join(base, entry.name)
            if not should_delete(entry, relative_path, mode, patterns):
                continue
            if entry.is_directory:
                subdirectories.append(f"{directory}{entry.name}/")
            names.append(entry.name)

        return names, subdirectories

    def plan(
        self,
        server_id: str,
        directory: str,
        mode: FilterMode,
        patterns: list[str],
    ) -> CleanupReport:
        """Compute the delete batches for a directory tree without deleting.

        Args:
            server_id: Server identifier
            directory: Remote directory, ending with ``/``
            mode: Filter mode
            patterns: Filter patterns

        Returns:
            Report whose batches are ordered children first

        Raises:
            RemoteListError: If any directory cannot be listed
        """
        if not directory.endswith("/"):
            directory = f"{directory}/"

        batches: list[CleanupBatch] = []
        # Each directory is pushed twice: once to list it, once to emit
        # its batch after all of its selected subdirectories.
        stack: list[tuple[str, bool]] = [(directory, False)]
        planned: dict[str, list[str]] = {}

        while stack:
            current, children_done = stack.pop()
            if children_done:
                names = planned.pop(current)
                if names:
                    batches.append(CleanupBatch(root=current, names=names))
                continue

            names, subdirectories = self._plan_directory(
                server_id, current, mode, patterns
            )
            planned[current] = names
            stack.append((current, True))
            for subdirectory in reversed(subdirectories):
                stack.append((subdirectory, False))

        return CleanupReport(batches=batches)

    def clean(
        self,
        server_id: str,
        directory: str,
        mode: FilterMode,
        patterns: list[str],
    ) -> CleanupReport:
        """Delete the entries of a directory tree selected by the filter.

        Args:
            server_id: Server identifier
            directory: Remote directory, ending with ``/``
            mode: Filter mode
            patterns: Filter patterns

        Returns:
            Report of the delete calls that were issued

        Raises:
            RemoteListError: If any directory cannot be listed
            RemoteDeleteError: If a delete call fails
        """
        logger.info(
            f"Deleting files in {directory} on server {server_id} "
            f"with {mode.value} mode"
        )
        report = self.plan(server_id, directory, mode, patterns)

        if not report.batches:
            logger.info(f"No files to delete after applying {mode.value} filter")
            return report

        for batch in report.batches:
            self.client.delete_files(server_id, batch.root, batch.names)
            logger.info(f"Deleted {len(batch.names)} items from {batch.root}")

        return report
