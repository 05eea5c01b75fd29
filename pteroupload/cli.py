"""CLI interface for pteroupload."""

import logging
from pathlib import Path
from typing import Any, Optional

import click

from .api import PanelClient
from .cli_progress import run_with_progress
from .config import load_settings, read_config_file
from .models import FilterMode
from .output import OutputFormatter
from .sync import CleanupPlanner, RemoteLister, SyncEngine
from .utils import CONFIG_FILE_NAME, parse_pattern_list

logger = logging.getLogger(__name__)


def _create_client(ctx: Any) -> PanelClient:
    """Build the panel client from the group options."""
    return PanelClient(
        panel_host=ctx.obj["panel_host"],
        api_key=ctx.obj["api_key"],
        proxy=ctx.obj["proxy"],
        timeout=ctx.obj["timeout"],
    )


@click.group()
@click.option(
    "--panel-host",
    envvar="PTERODACTYL_PANEL_HOST",
    help="Panel URL, e.g. https://panel.example.com",
)
@click.option("--api-key", "-k", envvar="PTERODACTYL_API_KEY", help="Client API key")
@click.option(
    "--proxy",
    envvar="PTERODACTYL_PROXY",
    help="Forward proxy as user:pass@host:port",
)
@click.option(
    "--timeout",
    type=float,
    default=None,
    help="Request timeout in seconds (default: no timeout)",
)
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output")
@click.option("--json", is_flag=True, help="Output in JSON format")
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose/debug logging output",
)
@click.version_option(package_name="pteroupload")
@click.pass_context
def main(
    ctx: Any,
    panel_host: Optional[str],
    api_key: Optional[str],
    proxy: Optional[str],
    timeout: Optional[float],
    quiet: bool,
    json: bool,
    verbose: bool,
) -> None:
    """pteroupload - Upload build artifacts to game servers."""
    ctx.ensure_object(dict)
    ctx.obj["panel_host"] = panel_host
    ctx.obj["api_key"] = api_key
    ctx.obj["proxy"] = proxy
    ctx.obj["timeout"] = timeout
    ctx.obj["out"] = OutputFormatter(json_output=json, quiet=quiet)
    ctx.obj["verbose"] = verbose

    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%H:%M:%S",
        )
        logging.getLogger("pteroupload").setLevel(logging.DEBUG)
    else:
        logging.basicConfig(level=logging.WARNING)


@main.command()
@click.option("--source", "-s", help="Local file or glob to upload")
@click.option(
    "--sources",
    multiple=True,
    help="Additional local files or globs (repeatable, overrides --source)",
)
@click.option("--target", "-t", help="Remote file, or directory ending with /")
@click.option("--server-id", help="Server identifier")
@click.option(
    "--server-ids",
    multiple=True,
    help="Server identifiers (repeatable, overrides --server-id)",
)
@click.option(
    "--command", "console_command", help="Console command to send after upload"
)
@click.option("--restart", is_flag=True, help="Restart the server after upload")
@click.option(
    "--decompress-target",
    is_flag=True,
    help="Decompress uploaded archives and delete the archive",
)
@click.option(
    "--delete-files-in-dir",
    is_flag=True,
    help="Delete files in the target directory before uploading",
)
@click.option(
    "--files-type",
    type=click.Choice(["whitelist", "blacklist"], case_sensitive=False),
    default="blacklist",
    help="How --files-list is applied when cleaning (default: blacklist)",
)
@click.option(
    "--files-list",
    help="Comma- or newline-separated patterns used when cleaning",
)
@click.option(
    "--follow-symbolic-links",
    is_flag=True,
    help="Follow symbolic links when expanding source globs",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=CONFIG_FILE_NAME,
    show_default=True,
    help="JSON config file with source(s), target, server(s) and targets",
)
@click.option(
    "--strict",
    is_flag=True,
    help="Fail the run as soon as an upload gives up",
)
@click.option("--no-progress", is_flag=True, help="Disable progress bars")
@click.pass_context
def upload(
    ctx: Any,
    source: Optional[str],
    sources: tuple[str, ...],
    target: Optional[str],
    server_id: Optional[str],
    server_ids: tuple[str, ...],
    console_command: Optional[str],
    restart: bool,
    decompress_target: bool,
    delete_files_in_dir: bool,
    files_type: str,
    files_list: Optional[str],
    follow_symbolic_links: bool,
    config_path: Path,
    strict: bool,
    no_progress: bool,
) -> None:
    """Upload files to one or more servers.

    Optionally cleans the target directory first, decompresses uploaded
    archives, sends a console command and restarts each server.
    """
    out: OutputFormatter = ctx.obj["out"]

    logger.debug(f"restart: {restart}")
    logger.debug(f"command: {console_command}")

    try:
        settings = load_settings(
            panel_host=ctx.obj["panel_host"],
            api_key=ctx.obj["api_key"],
            source=source,
            sources=sources,
            target=target,
            server_id=server_id,
            server_ids=server_ids,
            proxy=ctx.obj["proxy"],
            command=console_command,
            restart=restart,
            decompress_target=decompress_target,
            delete_files_in_dir=delete_files_in_dir,
            files_type=files_type,
            files_list=files_list,
            follow_symlinks=follow_symbolic_links,
            config_data=read_config_file(config_path),
        )

        with _create_client(ctx) as client:
            engine = SyncEngine(client, out)
            if no_progress or out.quiet or out.json_output:
                stats = engine.run(settings, strict=strict)
            else:
                stats = run_with_progress(engine, settings, strict)
    except Exception as e:
        out.error(str(e))
        ctx.exit(1)

    if out.json_output:
        out.output_json(stats)
    else:
        out.print_summary(
            "Upload Complete",
            [
                ("Servers", str(stats["servers"])),
                ("Uploaded", str(stats["uploads"])),
                ("Failed", str(stats["failed_uploads"])),
                ("Decompressed", str(stats["decompressed"])),
                ("Deleted", str(stats["deleted"])),
            ],
        )
        out.success("Done")


@main.command(name="ls")
@click.argument("server_id")
@click.argument("directory", default="/")
@click.pass_context
def ls(ctx: Any, server_id: str, directory: str) -> None:
    """List a remote directory."""
    out: OutputFormatter = ctx.obj["out"]

    try:
        with _create_client(ctx) as client:
            entries = RemoteLister(client).list(server_id, directory)
    except Exception as e:
        out.error(str(e))
        ctx.exit(1)

    if out.json_output:
        out.output_json(
            [
                {"name": entry.name, "is_directory": entry.is_directory}
                for entry in entries
            ]
        )
        return

    if not entries:
        out.info(f"{directory} is empty")
        return

    out.output_table(
        directory,
        ["Name", "Type"],
        [
            [
                f"{entry.name}/" if entry.is_directory else entry.name,
                "dir" if entry.is_directory else "file",
            ]
            for entry in entries
        ],
    )


@main.command()
@click.argument("server_id")
@click.argument("directory")
@click.option(
    "--files-type",
    type=click.Choice(["whitelist", "blacklist"], case_sensitive=False),
    default="blacklist",
    help="How --files-list is applied (default: blacklist)",
)
@click.option("--files-list", help="Comma- or newline-separated patterns")
@click.option(
    "--dry-run", is_flag=True, help="Show what would be deleted without deleting"
)
@click.pass_context
def clean(
    ctx: Any,
    server_id: str,
    directory: str,
    files_type: str,
    files_list: Optional[str],
    dry_run: bool,
) -> None:
    """Delete filtered entries of a remote directory.

    Without --files-list, blacklist mode deletes everything in DIRECTORY
    and whitelist mode deletes nothing.
    """
    out: OutputFormatter = ctx.obj["out"]

    try:
        mode = FilterMode.parse(files_type)
        patterns = parse_pattern_list(files_list)
        with _create_client(ctx) as client:
            planner = CleanupPlanner(client)
            if dry_run:
                report = planner.plan(server_id, directory, mode, patterns)
            else:
                report = planner.clean(server_id, directory, mode, patterns)
    except Exception as e:
        out.error(str(e))
        ctx.exit(1)

    if out.json_output:
        out.output_json(
            [{"root": batch.root, "files": batch.names} for batch in report.batches]
        )
        return

    verb = "Would delete" if dry_run else "Deleted"
    for batch in report.batches:
        for name in batch.names:
            out.print(f"{verb} {batch.root}{name}")
    out.success(f"{verb} {report.deleted_count} item(s)")


@main.command(name="command")
@click.argument("server_id")
@click.argument("console_command")
@click.pass_context
def send_command(ctx: Any, server_id: str, console_command: str) -> None:
    """Send a console command to a server."""
    out: OutputFormatter = ctx.obj["out"]

    try:
        with _create_client(ctx) as client:
            client.send_command(server_id, console_command)
    except Exception as e:
        out.error(str(e))
        ctx.exit(1)

    out.success(f"Sent command to {server_id}")


@main.command()
@click.argument("server_id")
@click.pass_context
def restart(ctx: Any, server_id: str) -> None:
    """Restart a server."""
    out: OutputFormatter = ctx.obj["out"]

    try:
        with _create_client(ctx) as client:
            client.restart_server(server_id)
    except Exception as e:
        out.error(str(e))
        ctx.exit(1)

    out.success(f"Restarting {server_id}")
