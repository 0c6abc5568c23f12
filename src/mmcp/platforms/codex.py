# Codex CLI platform adapter
import logging
from pathlib import Path
from typing import Any

import tomli
from tomlkit.exceptions import ParseError

from mmcp.models import AgentAdapter, Config
from mmcp.platforms.base import read_text_file, write_text_file
from mmcp.utils.toml_patch import SERVERS_TABLE, merge_toml_config

logger = logging.getLogger(__name__)


class CodexAdapter(AgentAdapter):
    """Adapter for Codex CLI (~/.codex/config.toml).

    ABOUTME: Implements AgentAdapter protocol for Codex CLI
    ABOUTME: Uses snake_case mcp_servers key (not mcpServers)
    ABOUTME: Edits the TOML text in place so user comments survive
    """

    id = "codex-cli"
    name = "Codex CLI"

    def __init__(self, config_path: Path | None = None) -> None:
        """Initialize adapter with optional custom config path.

        ABOUTME: Defaults to ~/.codex/config.toml if not provided
        """
        self._config_path = config_path if config_path else Path.home() / ".codex" / "config.toml"

    @property
    def config_path(self) -> Path:
        """Path to platform config file."""
        return self._config_path

    def load(self) -> dict[str, dict[str, Any]]:
        """Load existing MCP servers from platform config.

        ABOUTME: Returns empty dict if config doesn't exist
        ABOUTME: Parses 'mcp_servers' key from TOML (snake_case)
        """
        if not self._config_path.exists():
            return {}

        try:
            with open(self._config_path, "rb") as f:
                data = tomli.load(f)
        except tomli.TOMLDecodeError as e:
            raise ValueError(f"Invalid TOML in {self._config_path}: {e}") from e

        mcp_servers = data.get(SERVERS_TABLE, {})
        if not isinstance(mcp_servers, dict):
            raise ValueError(f"'{SERVERS_TABLE}' in {self._config_path} is not a table")
        return mcp_servers

    def apply_config(self, config: Config) -> None:
        """Merge config into config.toml.

        ABOUTME: Missing file is treated as an empty document
        ABOUTME: Result is computed in full before anything is written
        """
        content = read_text_file(self._config_path)

        try:
            merged = merge_toml_config(content, config)
        except ParseError as e:
            raise ValueError(f"Invalid TOML in {self._config_path}: {e}") from e

        write_text_file(self._config_path, merged)
        logger.info(f"{self.name}: applied {len(config.mcp_servers)} server(s) to {self._config_path}")
