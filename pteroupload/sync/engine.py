"""Core sync engine that drives a whole upload run."""

import logging
from pathlib import Path
from typing import Optional

from ..api import PanelClient
from ..config import Settings
from ..exceptions import UploadExhaustedError
from ..models import UploadTask
from ..output import OutputFormatter
from ..utils import get_target_file, is_archive_file
from .cleanup import CleanupPlanner
from .operations import ProgressCallback, SyncOperations
from .scanner import SourceScanner, validate_source_file

logger = logging.getLogger(__name__)


class SyncEngine:
    """Uploads local sources to every configured server, one at a time."""

    def __init__(
        self,
        client: PanelClient,
        output: Optional[OutputFormatter] = None,
    ):
        """Initialize sync engine.

        Args:
            client: Panel API client
            output: Output formatter for displaying progress/status
        """
        self.client = client
        self.output = output or OutputFormatter()
        self.operations = SyncOperations(client)
        self.planner = CleanupPlanner(client)

    def _create_empty_stats(self) -> dict:
        return {
            "servers": 0,
            "uploads": 0,
            "failed_uploads": 0,
            "decompressed": 0,
            "deleted": 0,
            "commands": 0,
            "restarts": 0,
        }

    def collect_sources(self, settings: Settings) -> list[tuple[list[Path], str]]:
        """Expand all source patterns once.

        Returns:
            List of (local paths, target path) groups in upload order:
            the default sources first, then each additional mapping
        """
        scanner = SourceScanner(follow_symlinks=settings.follow_symlinks)
        groups: list[tuple[list[Path], str]] = []
        if settings.sources:
            groups.append((scanner.expand_all(settings.sources), settings.target))
        for mapping in settings.targets:
            logger.debug(f"Processing target {mapping.source} -> {mapping.target}")
            groups.append((scanner.expand(mapping.source), mapping.target))
        return groups

    def run(
        self,
        settings: Settings,
        strict: bool = False,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> dict:
        """Run the configured uploads against every server in order.

        Args:
            settings: Run configuration
            strict: If True, raise when an upload gives up instead of
                reporting it and moving on
            progress_callback: Optional callback function(remote_path,
                bytes_sent, total_bytes)

        Returns:
            Dictionary with run statistics

        Raises:
            PanelValidationError: If a source is missing or a directory
            PanelAPIError: If a listing, delete, decompress, command or
                power call fails
            UploadExhaustedError: In strict mode, if an upload gives up
        """
        stats = self._create_empty_stats()
        groups = self.collect_sources(settings)

        for server_id in settings.server_ids:
            logger.debug(f"Uploading to server {server_id}")
            self.output.info(f"Server {server_id}")
            stats["servers"] += 1

            if settings.cleanup_enabled:
                report = self.planner.clean(
                    server_id,
                    settings.target,
                    settings.files_type,
                    settings.files_list,
                )
                stats["deleted"] += report.deleted_count
                self.output.info(
                    f"Cleaned {settings.target}: {report.deleted_count} item(s) deleted"
                )

            for paths, target in groups:
                for source in paths:
                    logger.debug(f"Processing source {source}")
                    validate_source_file(source)
                    task = UploadTask(
                        server_id=server_id,
                        local_path=source,
                        remote_path=get_target_file(target, source),
                    )
                    self._upload(task, settings, stats, strict, progress_callback)

            if settings.command:
                self.client.send_command(server_id, settings.command)
                stats["commands"] += 1
                self.output.info(f"Sent command to {server_id}: {settings.command}")

            if settings.restart:
                self.client.restart_server(server_id)
                stats["restarts"] += 1
                self.output.info(f"Restarting {server_id}")

        return stats

    def _upload(
        self,
        task: UploadTask,
        settings: Settings,
        stats: dict,
        strict: bool,
        progress_callback: Optional[ProgressCallback],
    ) -> None:
        """Upload one file and post-process it when it is an archive."""
        content = task.local_path.read_bytes()
        result = self.operations.upload_file(
            task.server_id,
            task.remote_path,
            content,
            progress_callback=progress_callback,
        )

        if not result.success:
            stats["failed_uploads"] += 1
            if strict:
                raise UploadExhaustedError(task.remote_path, result)
            self.output.error(
                f"Giving up on {task.remote_path} after {result.attempts} attempts"
                + (f": {result.error}" if result.error else "")
            )
            return

        stats["uploads"] += 1
        self.output.success(
            f"Uploaded {task.local_path} to {task.remote_path} "
            f"({self.output.format_size(len(content))})"
        )

        if settings.decompress_target and is_archive_file(task.remote_path):
            delete_result = self.operations.post_process(
                task.server_id, task.remote_path
            )
            stats["decompressed"] += 1
            if delete_result.success:
                self.output.info(f"Decompressed {task.remote_path}")
            else:
                self.output.warning(
                    f"Decompressed {task.remote_path} but could not confirm "
                    "the archive was deleted"
                )
