# Gemini CLI platform adapter
from pathlib import Path

from mmcp.platforms.base import JsonPlatformAdapter


class GeminiAdapter(JsonPlatformAdapter):
    """Adapter for Gemini CLI (~/.gemini/settings.json).

    ABOUTME: Preserves other settings like selectedAuthType, theme
    ABOUTME: Keeps per-server extras such as trust and headers on merge
    """

    id = "gemini-cli"
    name = "Gemini CLI"
    normalization = "none"

    def default_config_path(self) -> Path:
        return Path.home() / ".gemini" / "settings.json"
