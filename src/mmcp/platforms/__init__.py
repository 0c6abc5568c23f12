# Platform adapter registry
from mmcp.models import AgentAdapter
from mmcp.platforms.claude_desktop import ClaudeDesktopAdapter
from mmcp.platforms.codex import CodexAdapter
from mmcp.platforms.copilot import CopilotAdapter
from mmcp.platforms.cursor import CursorAdapter
from mmcp.platforms.gemini import GeminiAdapter

# Registry of all available platform adapters
ALL_PLATFORMS: list[type[AgentAdapter]] = [
    ClaudeDesktopAdapter,
    CursorAdapter,
    GeminiAdapter,
    CopilotAdapter,
    CodexAdapter,
]

PLATFORM_IDS: tuple[str, ...] = tuple(platform_cls.id for platform_cls in ALL_PLATFORMS)

__all__ = [
    "AgentAdapter",
    "ClaudeDesktopAdapter",
    "CursorAdapter",
    "GeminiAdapter",
    "CopilotAdapter",
    "CodexAdapter",
    "ALL_PLATFORMS",
    "PLATFORM_IDS",
    "get_all_platforms",
    "get_platform",
]


def get_all_platforms() -> list[AgentAdapter]:
    """Instantiate and return all platform adapters.

    ABOUTME: Creates instances of all registered adapters
    ABOUTME: Returns list for easy iteration
    """
    return [platform_cls() for platform_cls in ALL_PLATFORMS]


def get_platform(agent_id: str) -> AgentAdapter:
    """Instantiate the adapter registered under agent_id.

    Raises:
        KeyError: If no adapter has that id
    """
    for platform_cls in ALL_PLATFORMS:
        if platform_cls.id == agent_id:
            return platform_cls()
    raise KeyError(f"Unknown agent '{agent_id}'. Known agents: {', '.join(PLATFORM_IDS)}")
