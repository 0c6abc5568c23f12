# Claude Desktop platform adapter
from pathlib import Path

from mmcp.platforms.base import JsonPlatformAdapter, get_app_support_dir


class ClaudeDesktopAdapter(JsonPlatformAdapter):
    """Adapter for Claude Desktop (claude_desktop_config.json).

    ABOUTME: Lives under the OS application data directory, not the home root
    ABOUTME: Server entries are written verbatim (no normalization)
    """

    id = "claude-desktop"
    name = "Claude Desktop"
    normalization = "none"

    def default_config_path(self) -> Path:
        return get_app_support_dir() / "Claude" / "claude_desktop_config.json"
