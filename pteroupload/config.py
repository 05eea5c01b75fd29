"""Run configuration: CLI values merged over the project config file."""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Sequence

from .exceptions import PanelConfigError, PanelValidationError
from .models import FilterMode, TargetMapping
from .utils import CONFIG_FILE_NAME, parse_pattern_list

logger = logging.getLogger(__name__)


@dataclass
class Settings:
    """Everything one upload run needs."""

    panel_host: str
    api_key: str
    server_ids: list[str]
    sources: list[str] = field(default_factory=list)
    target: str = ""
    targets: list[TargetMapping] = field(default_factory=list)
    proxy: Optional[str] = None
    command: str = ""
    restart: bool = False
    decompress_target: bool = False
    delete_files_in_dir: bool = False
    files_type: FilterMode = FilterMode.BLACKLIST
    files_list: list[str] = field(default_factory=list)
    follow_symlinks: bool = False

    @property
    def cleanup_enabled(self) -> bool:
        """Cleanup runs only when requested and the target is a directory."""
        return self.delete_files_in_dir and self.target.endswith("/")


def read_config_file(path: Optional[Path] = None) -> dict[str, Any]:
    """Read the JSON project config file.

    Args:
        path: Config file path (default: .pterodactyl-upload.json in the
            working directory)

    Returns:
        Parsed config, or an empty dict when the file does not exist

    Raises:
        PanelConfigError: If the file is not a valid JSON object
    """
    config_path = path or Path(CONFIG_FILE_NAME)
    if not config_path.is_file():
        return {}

    logger.info(f"Found {config_path}, using it for configuration.")
    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise PanelConfigError(f"Failed to read config file {config_path}: {e}") from e
    if not isinstance(data, dict):
        raise PanelConfigError(f"Config file {config_path} must contain a JSON object")
    return data


def _as_list(value: Any) -> list[str]:
    if not value:
        return []
    if isinstance(value, str):
        return [line.strip() for line in value.splitlines() if line.strip()]
    return [str(item).strip() for item in value if str(item).strip()]


def load_settings(
    panel_host: Optional[str],
    api_key: Optional[str],
    source: Optional[str] = None,
    sources: Sequence[str] = (),
    target: Optional[str] = None,
    server_id: Optional[str] = None,
    server_ids: Sequence[str] = (),
    proxy: Optional[str] = None,
    command: Optional[str] = None,
    restart: bool = False,
    decompress_target: bool = False,
    delete_files_in_dir: bool = False,
    files_type: str = "blacklist",
    files_list: Optional[str] = None,
    follow_symlinks: bool = False,
    config_data: Optional[dict[str, Any]] = None,
) -> Settings:
    """Merge CLI values over config file values and validate the result.

    For source, sources, target, server and servers a non-empty CLI value
    wins over the config file. Additional ``targets`` only come from the
    config file.

    Raises:
        PanelConfigError: If the panel host or API key is missing
        PanelValidationError: If sources, servers or the filter mode are invalid
    """
    config_data = config_data or {}
    logger.debug(f"config: {json.dumps(config_data)}")

    if not panel_host:
        raise PanelConfigError("panel-host is required")
    if not api_key:
        raise PanelConfigError("api-key is required")

    source = source or config_data.get("source") or ""
    source_list = _as_list(sources) or _as_list(config_data.get("sources"))
    target = target or config_data.get("target") or ""
    server_id = str(server_id or config_data.get("server") or "")
    server_list = _as_list(server_ids) or _as_list(config_data.get("servers"))
    targets = [TargetMapping.from_dict(t) for t in config_data.get("targets") or []]

    logger.debug(f"source: {source}")
    logger.debug(f"sources: {source_list}")
    logger.debug(f"target: {target}")
    logger.debug(f"server-id: {server_id}")
    logger.debug(f"server-ids: {server_list}")

    if not source and not source_list and not targets:
        raise PanelValidationError(
            "Either source or sources must be defined. Both are empty."
        )
    if not server_id and not server_list:
        raise PanelValidationError(
            "Either server-id or server-ids must be defined. Both are empty."
        )

    if source and not source_list:
        source_list = [source]
    if server_id and not server_list:
        server_list = [server_id]

    if source_list and not target:
        raise PanelValidationError("target must be defined when sources are given.")

    return Settings(
        panel_host=panel_host,
        api_key=api_key,
        server_ids=server_list,
        sources=source_list,
        target=target,
        targets=targets,
        proxy=proxy or None,
        command=command or "",
        restart=restart,
        decompress_target=decompress_target,
        delete_files_in_dir=delete_files_in_dir,
        files_type=FilterMode.parse(files_type),
        files_list=parse_pattern_list(files_list),
        follow_symlinks=follow_symlinks,
    )
