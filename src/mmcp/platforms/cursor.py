# Cursor platform adapter
from pathlib import Path

from mmcp.platforms.base import JsonPlatformAdapter


class CursorAdapter(JsonPlatformAdapter):
    """Adapter for Cursor (~/.cursor/mcp.json)."""

    id = "cursor"
    name = "Cursor"
    normalization = "none"

    def default_config_path(self) -> Path:
        return Path.home() / ".cursor" / "mcp.json"
