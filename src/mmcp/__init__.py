# mmcp - apply one MCP server config to many AI agents
# ABOUTME: Version information
__version__ = "0.1.0"

# ABOUTME: Export core data models
# ABOUTME: Export config loading functions
from mmcp.config import get_config_path, load_config, save_config
from mmcp.models import (
    DELETE,
    MODES,
    AgentAdapter,
    Config,
    InvalidModeError,
    ServerSpec,
    check_mode,
)

# ABOUTME: Export merge algorithms
from mmcp.utils import merge_json_config, merge_toml_config

__all__ = [
    "__version__",
    "DELETE",
    "MODES",
    "AgentAdapter",
    "Config",
    "InvalidModeError",
    "ServerSpec",
    "check_mode",
    "get_config_path",
    "load_config",
    "save_config",
    "merge_json_config",
    "merge_toml_config",
]
