"""Retried upload and post-upload operations against one server."""

import logging
from typing import Callable, Optional

from ..api import PanelClient
from ..exceptions import PanelAPIError, RemoteDeleteError
from ..models import TransferResult
from ..utils import MAX_DELETE_ATTEMPTS, MAX_UPLOAD_ATTEMPTS, split_remote_path

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str, int, int], None]


class SyncOperations:
    """Upload and post-processing operations with their retry policies."""

    def __init__(self, client: PanelClient):
        """Initialize sync operations.

        Args:
            client: Panel API client
        """
        self.client = client

    def upload_file(
        self,
        server_id: str,
        remote_path: str,
        content: bytes,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> TransferResult:
        """Write a file to a server, retrying failed attempts.

        An attempt succeeds only when the panel answers 204. Failed
        attempts are logged and retried immediately, up to
        MAX_UPLOAD_ATTEMPTS in total. Exhaustion is reported through the
        returned result, not raised.

        Args:
            server_id: Server identifier
            remote_path: Remote file path
            content: File contents
            progress_callback: Optional callback function(remote_path,
                bytes_sent, total_bytes)

        Returns:
            Outcome of the upload
        """
        last_percent = -1

        def on_progress(sent: int, total: int) -> None:
            nonlocal last_percent
            percent = round(sent * 100 / total) if total else 100
            if percent != last_percent:
                last_percent = percent
                logger.info(f"Uploading {remote_path} to {server_id} ({percent}%)")
            if progress_callback:
                progress_callback(remote_path, sent, total)

        status_code: Optional[int] = None
        error: Optional[str] = None

        for attempt in range(1, MAX_UPLOAD_ATTEMPTS + 1):
            last_percent = -1
            try:
                status_code = self.client.write_file(
                    server_id, remote_path, content, progress_callback=on_progress
                )
            except PanelAPIError as e:
                status_code = e.status_code
                error = str(e)
                logger.error(f"Upload failed with error {e}, retrying...")
                continue

            if status_code == 204:
                return TransferResult(
                    success=True, attempts=attempt, status_code=status_code
                )

            error = f"unexpected status {status_code}"
            logger.error(f"Upload failed with status {status_code}, retrying...")

        return TransferResult(
            success=False,
            attempts=MAX_UPLOAD_ATTEMPTS,
            status_code=status_code,
            error=error,
        )

    def delete_archive(self, server_id: str, remote_path: str) -> TransferResult:
        """Delete an uploaded archive by its absolute path.

        Only HTTP 403 answers are retried, since the panel may still hold
        the archive open right after decompression. A 403 on the last
        attempt and any other error are raised. A successful answer other
        than 204 counts as an unconfirmed attempt.

        Args:
            server_id: Server identifier
            remote_path: Absolute remote path of the archive

        Returns:
            Outcome of the delete

        Raises:
            RemoteDeleteError: If the delete fails with a status other than
                403, or with 403 on every attempt
        """
        status_code: Optional[int] = None
        error: Optional[str] = None

        for attempt in range(1, MAX_DELETE_ATTEMPTS + 1):
            try:
                status_code = self.client.delete_files(server_id, "/", [remote_path])
            except RemoteDeleteError as e:
                if e.status_code != 403 or attempt == MAX_DELETE_ATTEMPTS:
                    raise
                status_code = e.status_code
                error = str(e)
                logger.info(f"Delete failed with 403, retrying... (attempt {attempt})")
                continue

            if status_code == 204:
                logger.info(f"Successfully deleted {remote_path}")
                return TransferResult(
                    success=True, attempts=attempt, status_code=status_code
                )
            error = f"unexpected status {status_code}"

        logger.warning(f"Could not confirm deletion of {remote_path}")
        return TransferResult(
            success=False,
            attempts=MAX_DELETE_ATTEMPTS,
            status_code=status_code,
            error=error,
        )

    def post_process(self, server_id: str, remote_path: str) -> TransferResult:
        """Decompress an uploaded archive, then delete the archive.

        Args:
            server_id: Server identifier
            remote_path: Remote path of the uploaded archive

        Returns:
            Outcome of the archive delete

        Raises:
            RemoteDecompressError: If decompression fails
            RemoteDeleteError: If the delete fails with a status other than 403
        """
        root_dir, file_name = split_remote_path(remote_path)
        self.client.decompress_file(server_id, root_dir, file_name)
        logger.info(f"Decompressed {remote_path} on {server_id}")
        return self.delete_archive(server_id, remote_path)
