"""Utility functions for pteroupload."""

import posixpath
import re
from functools import lru_cache
from pathlib import Path
from typing import Iterable

# =============================================================================
# Constants
# =============================================================================

# Attempts for file writes and for archive deletes after decompression
MAX_UPLOAD_ATTEMPTS: int = 3
MAX_DELETE_ATTEMPTS: int = 3

# Extensions the panel can decompress server-side
ARCHIVE_EXTENSIONS: tuple[str, ...] = (".zip", ".tar", ".tar.gz", ".tgz", ".rar")

# Configuration file read from the working directory
CONFIG_FILE_NAME: str = ".pterodactyl-upload.json"


# =============================================================================
# Pattern matching
# =============================================================================


def is_glob_pattern(value: str) -> bool:
    """Check whether a string contains ``*`` or ``?`` wildcards.

    Examples:
        >>> is_glob_pattern("*.log")
        True
        >>> is_glob_pattern("server.properties")
        False
    """
    return "*" in value or "?" in value


@lru_cache(maxsize=256)
def glob_to_regex(pattern: str) -> "re.Pattern[str]":
    """Compile a glob pattern into an anchored regular expression.

    Only ``*`` (any run of characters, including none) and ``?`` (exactly
    one character) are wildcards. Every other character is literal.

    Args:
        pattern: Glob pattern

    Returns:
        Compiled regex matching the whole string
    """
    parts = []
    for char in pattern:
        if char == "*":
            parts.append(".*")
        elif char == "?":
            parts.append(".")
        else:
            parts.append(re.escape(char))
    return re.compile("".join(parts) + r"\Z", re.DOTALL)


def glob_match(pattern: str, name: str) -> bool:
    """Match a whole string against a glob pattern (case-sensitive).

    Examples:
        >>> glob_match("*.log", "latest.log")
        True
        >>> glob_match("*.LOG", "latest.log")
        False
    """
    return glob_to_regex(pattern).match(name) is not None


def normalize_pattern(pattern: str) -> str:
    """Strip one trailing path separator from a pattern.

    ``"logs/"`` selects the directory ``logs`` and is compared as ``"logs"``.
    """
    return pattern[:-1] if pattern.endswith("/") else pattern


def matches_pattern(name: str, relative_path: str, pattern: str) -> bool:
    """Check whether a remote entry matches a filter pattern.

    The pattern is tried against the bare entry name and against its path
    relative to the scan root. A pattern without a separator is compared
    with the last component of each candidate, so ``"a.txt"`` also
    matches ``"dir/a.txt"``.

    Args:
        name: Entry name
        relative_path: Entry path relative to the scan root
        pattern: Filter pattern

    Returns:
        True if either candidate matches
    """
    normalized = normalize_pattern(pattern)
    base_only = "/" not in normalized
    for candidate in (name, relative_path):
        if base_only:
            candidate = posixpath.basename(candidate.rstrip("/")) or candidate
        if glob_match(normalized, candidate):
            return True
    return False


def match_any_pattern(name: str, relative_path: str, patterns: Iterable[str]) -> bool:
    """Check whether an entry matches at least one pattern."""
    return any(matches_pattern(name, relative_path, p) for p in patterns)


def parse_pattern_list(raw: str | None) -> list[str]:
    """Split a filter list given as comma- or newline-separated text.

    Examples:
        >>> parse_pattern_list("*.log, cache/\\nconfig.yml")
        ['*.log', 'cache/', 'config.yml']
    """
    if not raw:
        return []
    items = re.split(r"[,\n]", raw)
    return [item.strip() for item in items if item.strip()]


# =============================================================================
# Remote path helpers
# =============================================================================


def is_archive_file(path: str) -> bool:
    """Check whether a path names an archive the panel can decompress.

    Examples:
        >>> is_archive_file("/home/container/plugins.TAR.GZ")
        True
        >>> is_archive_file("/home/container/server.jar")
        False
    """
    return path.lower().endswith(ARCHIVE_EXTENSIONS)


def get_target_file(target_path: str, source: str | Path) -> str:
    """Resolve the remote path a local source is written to.

    A target ending with ``/`` is a directory and receives the source's
    base name. Any other target is used as the file path as is.
    """
    if target_path.endswith("/"):
        return posixpath.join(target_path, Path(source).name)
    return target_path


def split_remote_path(remote_path: str) -> tuple[str, str]:
    """Split a remote path into (root directory, file name).

    A path without a directory part is rooted at ``/``.

    Examples:
        >>> split_remote_path("/home/container/app.zip")
        ('/home/container', 'app.zip')
        >>> split_remote_path("app.zip")
        ('/', 'app.zip')
    """
    root_dir = posixpath.dirname(remote_path)
    file_name = posixpath.basename(remote_path)
    if root_dir in ("", "."):
        root_dir = "/"
    return root_dir, file_name


# =============================================================================
# Size formatting utilities
# =============================================================================


def format_size(size_bytes: int) -> str:
    """Format file size in human-readable format.

    Args:
        size_bytes: Size in bytes

    Returns:
        Formatted size string (e.g., "1.5 MB", "256 B")
    """
    if size_bytes < 1024:
        return f"{size_bytes} B"
    elif size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.1f} KB"
    elif size_bytes < 1024 * 1024 * 1024:
        return f"{size_bytes / 1024 / 1024:.1f} MB"
    else:
        return f"{size_bytes / 1024 / 1024 / 1024:.1f} GB"
