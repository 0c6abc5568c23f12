# Platform adapter base utilities
import json
import logging
import os
import shutil
import sys
import tempfile
from pathlib import Path
from typing import Any

from mmcp.models import AgentAdapter, Config, Normalization
from mmcp.utils.json_merge import SERVERS_KEY, merge_json_config

logger = logging.getLogger(__name__)


def get_app_support_dir() -> Path:
    """Get the per-user application data directory for current OS.

    ABOUTME: macOS ~/Library/Application Support, Windows %APPDATA%, else ~/.config
    """
    if sys.platform == "darwin":
        return Path.home() / "Library/Application Support"
    elif sys.platform == "win32":
        return Path(os.environ.get("APPDATA", Path.home() / "AppData/Roaming"))
    else:  # Linux and others
        return Path.home() / ".config"


def read_text_file(path: Path) -> str:
    """Read a UTF-8 text file, "" if it doesn't exist."""
    if not path.exists():
        return ""
    return path.read_text(encoding="utf-8")


def write_text_file(path: Path, content: str) -> None:
    """Write text atomically.

    ABOUTME: Creates parent directories if needed
    ABOUTME: Writes a temp file next to the target, then os.replace() over it
    ABOUTME: An existing target keeps its permission bits
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    with tempfile.NamedTemporaryFile(
        "w", encoding="utf-8", delete=False, dir=str(path.parent), prefix=path.name + "."
    ) as tf:
        tf.write(content)
        tmp_name = tf.name
    try:
        if path.exists():
            shutil.copymode(path, tmp_name)
        os.replace(tmp_name, path)
    except OSError:
        Path(tmp_name).unlink(missing_ok=True)
        raise
    logger.debug(f"Wrote {path}")


def read_json_file(path: Path) -> dict[str, Any]:
    """Read JSON file with error handling.

    ABOUTME: Returns empty dict if file doesn't exist
    ABOUTME: Raises ValueError for invalid JSON or a non-object top level
    """
    if not path.exists():
        return {}

    try:
        with open(path, encoding="utf-8") as f:
            result = json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in {path}: {e}") from e

    if not isinstance(result, dict):
        raise ValueError(f"Expected a JSON object in {path}, got {type(result).__name__}")
    return result


def write_json_file(path: Path, data: dict[str, Any]) -> None:
    """Write JSON file atomically.

    ABOUTME: Uses 2-space indentation, keeps key order and non-ASCII text
    """
    write_text_file(path, json.dumps(data, indent=2, ensure_ascii=False) + "\n")


class JsonPlatformAdapter(AgentAdapter):
    """Adapter for applications storing servers under a top-level mcpServers key.

    ABOUTME: Subclasses set id, name, normalization and default_config_path()
    ABOUTME: All merge logic lives in merge_json_config
    """

    id: str = ""
    name: str = ""
    normalization: Normalization = "none"

    def __init__(self, config_path: Path | None = None) -> None:
        """Initialize adapter with optional custom config path."""
        self._config_path = config_path if config_path else self.default_config_path()

    def default_config_path(self) -> Path:
        """Target file used when no config_path is given.

        ABOUTME: Every concrete adapter must override this
        """
        raise NotImplementedError(f"{type(self).__name__} must define default_config_path()")

    @property
    def config_path(self) -> Path:
        """Path to platform config file."""
        return self._config_path

    def load(self) -> dict[str, dict[str, Any]]:
        """Load existing MCP servers from platform config.

        ABOUTME: Returns empty dict if config doesn't exist
        """
        data = read_json_file(self._config_path)
        servers = data.get(SERVERS_KEY, {})
        if not isinstance(servers, dict):
            raise ValueError(f"'{SERVERS_KEY}' in {self._config_path} is not an object")
        return servers

    def merge(self, document: dict[str, Any], config: Config) -> dict[str, Any]:
        return merge_json_config(document, config, self.normalization)

    def apply_config(self, config: Config) -> None:
        """Merge config into the platform file.

        ABOUTME: Result is computed in full before anything is written
        """
        document = read_json_file(self._config_path)
        merged = self.merge(document, config)
        write_json_file(self._config_path, merged)
        logger.info(f"{self.name}: applied {len(config.mcp_servers)} server(s) to {self._config_path}")
