"""CLI progress display for uploads.

This module provides a Rich-based progress display fed by the upload
progress callback of the sync engine.
"""

from typing import Optional

from rich.markup import escape
from rich.progress import (
    BarColumn,
    DownloadColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TaskProgressColumn,
    TextColumn,
    TransferSpeedColumn,
)

from .config import Settings
from .sync.engine import SyncEngine


class UploadProgressDisplay:
    """Rich-based progress display with one bar per uploaded file.

    Use as a context manager and pass the instance itself as the
    engine's progress callback.
    """

    def __init__(self) -> None:
        """Initialize the progress display."""
        self._progress: Optional[Progress] = None
        self._tasks: dict[str, TaskID] = {}

    def __call__(self, remote_path: str, sent: int, total: int) -> None:
        """Update the bar of a file.

        Args:
            remote_path: Remote path being written
            sent: Bytes sent so far in the current attempt
            total: Total bytes of the file
        """
        if self._progress is None:
            return

        task_id = self._tasks.get(remote_path)
        if task_id is None:
            task_id = self._progress.add_task(escape(remote_path), total=total)
            self._tasks[remote_path] = task_id
        # A retry restarts the count from zero
        self._progress.update(task_id, completed=sent, total=total)

    def __enter__(self) -> "UploadProgressDisplay":
        """Enter context manager - start progress display."""
        self._progress = Progress(
            SpinnerColumn(),
            TextColumn("[bold blue]{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            DownloadColumn(),
            TransferSpeedColumn(),
            refresh_per_second=4,
            transient=True,
        )
        self._progress.__enter__()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit context manager - stop progress display."""
        if self._progress is not None:
            self._progress.__exit__(exc_type, exc_val, exc_tb)
            self._progress = None
            self._tasks = {}


def run_with_progress(engine: SyncEngine, settings: Settings, strict: bool) -> dict:
    """Run an upload with a Rich progress display.

    Args:
        engine: SyncEngine instance
        settings: Run configuration
        strict: If True, abort on the first exhausted upload

    Returns:
        Dictionary with run statistics
    """
    with UploadProgressDisplay() as display:
        return engine.run(settings, strict=strict, progress_callback=display)
