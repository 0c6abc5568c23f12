# GitHub Copilot CLI platform adapter
from pathlib import Path

from mmcp.platforms.base import JsonPlatformAdapter


class CopilotAdapter(JsonPlatformAdapter):
    """Adapter for GitHub Copilot CLI (~/.copilot/mcp-config.json).

    ABOUTME: Copilot CLI rejects entries without type/tools, so every server
    ABOUTME: (managed or not) is backfilled with type, tools, args and env defaults
    """

    id = "copilot-cli"
    name = "GitHub Copilot CLI"
    normalization = "local"

    def default_config_path(self) -> Path:
        return Path.home() / ".copilot" / "mcp-config.json"
