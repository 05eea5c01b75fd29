"""Local source expansion and remote directory listing."""

import glob
import logging
from pathlib import Path

from ..api import PanelClient
from ..exceptions import PanelValidationError
from ..models import RemoteFileEntry
from ..utils import is_glob_pattern

logger = logging.getLogger(__name__)


def validate_source_file(path: Path) -> None:
    """Check that a local source can be uploaded.

    Args:
        path: Local source path

    Raises:
        PanelValidationError: If the path does not exist or is a directory
    """
    if not path.exists() and not path.is_symlink():
        raise PanelValidationError(f"Source file {path} does not exist.")
    if path.is_dir():
        raise PanelValidationError(
            f"Source {path} must be a file, not a directory."
        )


class SourceScanner:
    """Expands source glob patterns into local paths.

    Examples:
        >>> scanner = SourceScanner(follow_symlinks=False)
        >>> scanner.expand("build/libs/*.jar")
        [PosixPath('build/libs/app.jar')]
    """

    def __init__(self, follow_symlinks: bool = False):
        """Initialize the scanner.

        Args:
            follow_symlinks: Whether matches may be reached through
                symlinked directories
        """
        self.follow_symlinks = follow_symlinks

    def _through_symlink(self, path: Path, pattern: str) -> bool:
        """Check whether a match lies below a symlinked directory.

        Only directories below the literal prefix of the pattern count;
        a symlink the user typed out is followed.
        """
        literal_parts = 0
        for part in Path(pattern).parts:
            if is_glob_pattern(part):
                break
            literal_parts += 1

        parents = [p for p in reversed(path.parents) if p != Path(".")]
        for parent in parents[literal_parts:]:
            if parent.is_symlink():
                return True
        return False

    def expand(self, pattern: str) -> list[Path]:
        """Expand one pattern.

        ``**`` matches any number of directories. A pattern without
        wildcards yields the path itself, existing or not, so validation
        can report it.

        Args:
            pattern: Glob pattern or plain path

        Returns:
            Sorted list of matching paths
        """
        if not is_glob_pattern(pattern):
            return [Path(pattern)]

        matches = sorted(glob.glob(pattern, recursive=True))
        paths = [Path(match) for match in matches]
        if not self.follow_symlinks:
            paths = [p for p in paths if not self._through_symlink(p, pattern)]
        logger.debug(f"Pattern {pattern} matched {len(paths)} path(s)")
        return paths

    def expand_all(self, patterns: list[str]) -> list[Path]:
        """Expand several patterns, keeping pattern order."""
        paths: list[Path] = []
        for pattern in patterns:
            paths.extend(self.expand(pattern))
        return paths


class RemoteLister:
    """Lists remote directories through the panel API."""

    def __init__(self, client: PanelClient):
        self.client = client

    def list(self, server_id: str, directory: str) -> list[RemoteFileEntry]:
        """List one remote directory.

        Args:
            server_id: Server identifier
            directory: Remote directory path

        Returns:
            Entries of the directory (empty for an empty directory)

        Raises:
            RemoteListError: If the listing request fails
        """
        items = self.client.list_files(server_id, directory)
        entries = [RemoteFileEntry.from_api(item) for item in items]
        logger.debug(f"Listed {len(entries)} entries in {directory} on {server_id}")
        return entries
