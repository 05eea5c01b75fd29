"""Tests for the sync engine."""

import os
from pathlib import Path
from unittest.mock import Mock, call

import pytest

from pteroupload.api import PanelClient
from pteroupload.config import Settings
from pteroupload.exceptions import (
    PanelValidationError,
    RemoteListError,
    UploadExhaustedError,
)
from pteroupload.models import FilterMode, TargetMapping
from pteroupload.output import OutputFormatter
from pteroupload.sync import SyncEngine


@pytest.fixture
def mock_client():
    """Create a mock panel client whose calls all succeed."""
    client = Mock(spec=PanelClient)
    client.write_file.return_value = 204
    client.delete_files.return_value = 204
    client.decompress_file.return_value = 204
    client.list_files.return_value = []
    return client


@pytest.fixture
def mock_output():
    """Create a mock output formatter."""
    output = Mock(spec=OutputFormatter)
    output.quiet = True
    output.format_size.return_value = "1 B"
    return output


@pytest.fixture
def engine(mock_client, mock_output):
    return SyncEngine(mock_client, mock_output)


@pytest.fixture
def build_dir(tmp_path, monkeypatch):
    """Create a build directory and make tmp_path the working directory."""
    monkeypatch.chdir(tmp_path)
    build = tmp_path / "build"
    build.mkdir()
    return build


def make_settings(**kwargs):
    defaults = {
        "panel_host": "https://panel.example.com",
        "api_key": "key",
        "server_ids": ["srv1"],
    }
    defaults.update(kwargs)
    return Settings(**defaults)


class TestSyncEngine:
    """Test SyncEngine functionality."""

    def test_create_sync_engine(self, mock_client, mock_output):
        engine = SyncEngine(mock_client, mock_output)
        assert engine.client == mock_client
        assert engine.output == mock_output
        assert engine.operations is not None
        assert engine.planner is not None

    def test_archive_upload_end_to_end(self, engine, mock_client, build_dir):
        """Test write, decompress and delete calls for an uploaded archive."""
        (build_dir / "app.zip").write_bytes(b"PK\x03\x04")
        settings = make_settings(
            sources=["build/app.zip"],
            target="/home/container/",
            decompress_target=True,
        )

        stats = engine.run(settings)

        assert mock_client.method_calls == [
            call.write_file(
                "srv1",
                "/home/container/app.zip",
                b"PK\x03\x04",
                progress_callback=mock_client.write_file.call_args.kwargs[
                    "progress_callback"
                ],
            ),
            call.decompress_file("srv1", "/home/container", "app.zip"),
            call.delete_files("srv1", "/", ["/home/container/app.zip"]),
        ]
        assert stats["uploads"] == 1
        assert stats["decompressed"] == 1

    def test_archive_not_decompressed_without_flag(
        self, engine, mock_client, build_dir
    ):
        (build_dir / "app.zip").write_bytes(b"zip")
        settings = make_settings(sources=["build/app.zip"], target="/home/container/")

        engine.run(settings)

        mock_client.decompress_file.assert_not_called()
        mock_client.delete_files.assert_not_called()

    def test_glob_sources_and_file_target(self, engine, mock_client, build_dir):
        (build_dir / "a.jar").write_bytes(b"a")
        (build_dir / "b.jar").write_bytes(b"b")
        (build_dir / "notes.txt").write_bytes(b"n")
        settings = make_settings(sources=["build/*.jar"], target="/plugins/")

        stats = engine.run(settings)

        remote_paths = [c.args[1] for c in mock_client.write_file.call_args_list]
        assert remote_paths == ["/plugins/a.jar", "/plugins/b.jar"]
        assert stats["uploads"] == 2

    def test_servers_processed_in_order(self, engine, mock_client, build_dir):
        """Test that each server gets its uploads, command and restart in order."""
        (build_dir / "server.jar").write_bytes(b"jar")
        settings = make_settings(
            server_ids=["srv1", "srv2"],
            sources=["build/server.jar"],
            target="/home/container/server.jar",
            command="say deployed",
            restart=True,
        )

        stats = engine.run(settings)

        calls = [(c[0], c.args[0]) for c in mock_client.method_calls]
        assert calls == [
            ("write_file", "srv1"),
            ("send_command", "srv1"),
            ("restart_server", "srv1"),
            ("write_file", "srv2"),
            ("send_command", "srv2"),
            ("restart_server", "srv2"),
        ]
        mock_client.send_command.assert_any_call("srv1", "say deployed")
        assert stats["servers"] == 2
        assert stats["commands"] == 2
        assert stats["restarts"] == 2

    def test_target_mappings_uploaded_after_sources(
        self, engine, mock_client, build_dir
    ):
        (build_dir / "server.jar").write_bytes(b"jar")
        (build_dir / "config.yml").write_bytes(b"yml")
        settings = make_settings(
            sources=["build/server.jar"],
            target="/",
            targets=[TargetMapping(source="build/config.yml", target="/plugins/x/")],
        )

        engine.run(settings)

        remote_paths = [c.args[1] for c in mock_client.write_file.call_args_list]
        assert remote_paths == ["/server.jar", "/plugins/x/config.yml"]

    def test_cleanup_runs_before_uploads(self, engine, mock_client, build_dir):
        (build_dir / "a.jar").write_bytes(b"a")
        mock_client.list_files.return_value = [
            {"attributes": {"name": "old.jar", "is_directory": False}},
            {"attributes": {"name": "keep.yml", "is_directory": False}},
        ]
        settings = make_settings(
            sources=["build/a.jar"],
            target="/plugins/",
            delete_files_in_dir=True,
            files_type=FilterMode.BLACKLIST,
            files_list=["*.jar"],
        )

        stats = engine.run(settings)

        names = [c[0] for c in mock_client.method_calls]
        assert names == ["list_files", "delete_files", "write_file"]
        mock_client.delete_files.assert_called_once_with("srv1", "/plugins/", ["old.jar"])
        assert stats["deleted"] == 1

    def test_cleanup_skipped_for_file_target(self, engine, mock_client, build_dir):
        (build_dir / "a.jar").write_bytes(b"a")
        settings = make_settings(
            sources=["build/a.jar"],
            target="/plugins/a.jar",
            delete_files_in_dir=True,
        )

        engine.run(settings)

        mock_client.list_files.assert_not_called()

    def test_cleanup_list_failure_aborts_run(self, engine, mock_client, build_dir):
        (build_dir / "a.jar").write_bytes(b"a")
        mock_client.list_files.side_effect = RemoteListError("/plugins/", 500)
        settings = make_settings(
            sources=["build/a.jar"], target="/plugins/", delete_files_in_dir=True
        )

        with pytest.raises(RemoteListError):
            engine.run(settings)

        mock_client.write_file.assert_not_called()

    def test_missing_source_aborts_run(self, engine, mock_client, build_dir):
        settings = make_settings(sources=["build/missing.jar"], target="/")

        with pytest.raises(PanelValidationError, match="does not exist"):
            engine.run(settings)

        mock_client.write_file.assert_not_called()

    def test_directory_source_aborts_run(self, engine, mock_client, build_dir):
        """Test that a glob matching a directory stops the whole run."""
        (build_dir / "a.jar").write_bytes(b"a")
        (build_dir / "libs").mkdir()
        settings = make_settings(sources=["build/*"], target="/")

        with pytest.raises(PanelValidationError, match="not a directory"):
            engine.run(settings)

        # build/a.jar sorts before build/libs and was uploaded first
        assert mock_client.write_file.call_count == 1

    def test_exhausted_upload_reported(
        self, engine, mock_client, mock_output, build_dir
    ):
        """Test that a failed upload is counted and skips post-processing."""
        (build_dir / "app.zip").write_bytes(b"zip")
        mock_client.write_file.return_value = 500
        settings = make_settings(
            sources=["build/app.zip"], target="/", decompress_target=True
        )

        stats = engine.run(settings)

        assert stats["failed_uploads"] == 1
        assert stats["uploads"] == 0
        assert mock_client.write_file.call_count == 3
        mock_client.decompress_file.assert_not_called()
        mock_output.error.assert_called_once()

    def test_exhausted_upload_strict(self, engine, mock_client, build_dir):
        (build_dir / "a.jar").write_bytes(b"a")
        mock_client.write_file.return_value = 500
        settings = make_settings(sources=["build/a.jar"], target="/")

        with pytest.raises(UploadExhaustedError, match="after 3 attempt"):
            engine.run(settings, strict=True)

    def test_unconfirmed_archive_delete_warns(
        self, engine, mock_client, mock_output, build_dir
    ):
        (build_dir / "app.zip").write_bytes(b"zip")
        mock_client.delete_files.return_value = 200
        settings = make_settings(
            sources=["build/app.zip"], target="/", decompress_target=True
        )

        engine.run(settings)

        mock_output.warning.assert_called_once()

    @pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unsupported")
    def test_symlinked_directories_not_followed(
        self, engine, mock_client, build_dir, tmp_path
    ):
        outside = tmp_path / "outside"
        outside.mkdir()
        (outside / "linked.jar").write_bytes(b"l")
        (build_dir / "link").symlink_to(outside, target_is_directory=True)
        (build_dir / "a.jar").write_bytes(b"a")
        settings = make_settings(sources=["build/**/*.jar"], target="/")

        engine.run(settings)

        remote_paths = [c.args[1] for c in mock_client.write_file.call_args_list]
        assert remote_paths == ["/a.jar"]

    def test_progress_callback_passed_through(self, engine, mock_client, build_dir):
        (build_dir / "a.jar").write_bytes(b"abcd")

        def write_file(server_id, remote_path, content, progress_callback=None):
            progress_callback(4, 4)
            return 204

        mock_client.write_file.side_effect = write_file
        progress = Mock()
        settings = make_settings(sources=["build/a.jar"], target="/")

        engine.run(settings, progress_callback=progress)

        progress.assert_called_once_with("/a.jar", 4, 4)

    def test_collect_sources(self, engine, build_dir):
        (build_dir / "a.jar").write_bytes(b"a")
        settings = make_settings(
            sources=["build/a.jar"],
            target="/",
            targets=[TargetMapping(source="build/*.jar", target="/x/")],
        )

        groups = engine.collect_sources(settings)

        assert groups == [
            ([Path("build/a.jar")], "/"),
            ([Path("build/a.jar")], "/x/"),
        ]
