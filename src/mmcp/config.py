# Configuration loading and parsing for mmcp
import json
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from mmcp.models import DELETE, Config, ServerSpec, check_mode
from mmcp.platforms.base import write_json_file

# ABOUTME: Canonical config file in user's home (JSON format)
CONFIG_FILE = Path.home() / ".mmcp.json"


def get_config_path() -> Path:
    """Return the path to the mmcp config file.

    ABOUTME: Returns ~/.mmcp.json
    ABOUTME: File may not exist yet
    """
    return CONFIG_FILE


def _decode_value(value: Any) -> Any:
    if value is None:
        return DELETE
    if isinstance(value, dict):
        return {key: _decode_value(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_decode_value(item) for item in value]
    return value


def _encode_value(value: Any) -> Any:
    if value is DELETE:
        return None
    if isinstance(value, Mapping):
        return {key: _encode_value(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_encode_value(item) for item in value]
    return value


def config_from_dict(data: Mapping[str, Any]) -> Config:
    """Build a Config from the parsed JSON structure.

    ABOUTME: Missing mode defaults to merge, missing agents/mcpServers to empty
    ABOUTME: A null field value becomes DELETE (remove that key from targets)

    Raises:
        InvalidModeError: If mode is not merge/replace
        ValueError: If agents or mcpServers have the wrong shape
    """
    if not isinstance(data, Mapping):
        raise ValueError("Config must be a JSON object")

    mode = data.get("mode", "merge")
    check_mode(mode)

    agents = data.get("agents", [])
    if not isinstance(agents, list) or not all(isinstance(a, str) for a in agents):
        raise ValueError("'agents' must be a list of strings")

    servers_data = data.get("mcpServers", {})
    if not isinstance(servers_data, Mapping):
        raise ValueError("'mcpServers' must be an object")

    servers: dict[str, ServerSpec] = {}
    for server_name, server_config in servers_data.items():
        if not server_name:
            raise ValueError("Server names must be non-empty")
        if not isinstance(server_config, Mapping):
            raise ValueError(f"Server '{server_name}' must be an object")
        try:
            servers[server_name] = ServerSpec.from_dict(_decode_value(dict(server_config)))
        except ValueError as e:
            raise ValueError(f"Server '{server_name}': {e}") from e

    return Config(mode=mode, agents=tuple(agents), mcp_servers=servers)


def config_to_dict(config: Config) -> dict[str, Any]:
    """Inverse of config_from_dict."""
    return {
        "mode": config.mode,
        "agents": list(config.agents),
        "mcpServers": {
            name: _encode_value(spec.to_dict()) for name, spec in config.mcp_servers.items()
        },
    }


def load_config(path: Path) -> Config:
    """Load and parse mmcp config from JSON file.

    ABOUTME: Fail-fast on parse errors with clear error messages
    ABOUTME: Server fields other than command/args/env are passed through untouched

    Args:
        path: Path to .mmcp.json

    Returns:
        Parsed Config object

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If JSON syntax is invalid or fields have the wrong shape
        InvalidModeError: If mode is not merge/replace
    """
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with path.open("r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in {path}: {e}") from e

    return config_from_dict(data)


def save_config(path: Path, config: Config) -> None:
    """Save config to JSON file.

    ABOUTME: Creates parent directory if needed
    """
    write_json_file(path, config_to_dict(config))


def _load_or_empty(path: Path) -> Config:
    return load_config(path) if path.exists() else Config()


def add_server_to_config(path: Path, name: str, spec: ServerSpec) -> None:
    """Add a server to the config file.

    ABOUTME: Creates new config if file doesn't exist
    ABOUTME: Overwrites server if name already exists
    """
    config = _load_or_empty(path)
    new_servers = dict(config.mcp_servers)
    new_servers[name] = spec
    save_config(path, Config(mode=config.mode, agents=config.agents, mcp_servers=new_servers))


def remove_server_from_config(path: Path, name: str) -> bool:
    """Remove a server from the config file.

    Returns:
        True if server was removed, False if not found

    Raises:
        FileNotFoundError: If config file doesn't exist
    """
    config = load_config(path)
    if name not in config.mcp_servers:
        return False

    new_servers = {k: v for k, v in config.mcp_servers.items() if k != name}
    save_config(path, Config(mode=config.mode, agents=config.agents, mcp_servers=new_servers))
    return True


def add_agent_to_config(path: Path, agent_id: str) -> bool:
    """Append an agent id to the config file.

    ABOUTME: Returns False (and writes nothing) if the agent is already listed
    """
    config = _load_or_empty(path)
    if agent_id in config.agents:
        return False

    save_config(
        path,
        Config(mode=config.mode, agents=(*config.agents, agent_id), mcp_servers=config.mcp_servers),
    )
    return True


def remove_agent_from_config(path: Path, agent_id: str) -> bool:
    """Remove an agent id from the config file.

    Raises:
        FileNotFoundError: If config file doesn't exist
    """
    config = load_config(path)
    if agent_id not in config.agents:
        return False

    agents = tuple(a for a in config.agents if a != agent_id)
    save_config(path, Config(mode=config.mode, agents=agents, mcp_servers=config.mcp_servers))
    return True
