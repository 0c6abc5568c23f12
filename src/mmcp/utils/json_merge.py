# ABOUTME: Generic JSON tree merge shared by every JSON-backed adapter
# ABOUTME: Pure functions - no I/O, inputs are never mutated
import copy
from collections.abc import Mapping
from typing import Any

from mmcp.models import DELETE, Config, Normalization, check_mode

# ABOUTME: Key holding the managed servers region in JSON targets
SERVERS_KEY = "mcpServers"

# ABOUTME: Fields backfilled by the "local" normalization policy
LOCAL_SERVER_DEFAULTS: dict[str, Any] = {
    "type": "local",
    "tools": ["*"],
    "args": [],
    "env": {},
}


def _defaults_for(normalization: Normalization) -> dict[str, Any]:
    if normalization == "local":
        return copy.deepcopy(LOCAL_SERVER_DEFAULTS)
    if normalization == "none":
        return {}
    raise ValueError(f"Unknown normalization policy: {normalization!r}")


def merge_server_entry(
    existing: Mapping[str, Any],
    incoming: Mapping[str, Any],
    normalization: Normalization = "none",
) -> dict[str, Any]:
    """Field-wise merge of one server entry.

    ABOUTME: Precedence is defaults < existing < incoming, top level only
    ABOUTME: Nested lists/mappings from incoming replace existing ones wholesale
    ABOUTME: Fields set to DELETE are dropped from the result

    Examples:
        >>> merge_server_entry(
        ...     {"command": "old", "args": ["-x"], "extra": "stay"},
        ...     {"command": "npx", "args": ["-y"]},
        ... )
        {'command': 'npx', 'args': ['-y'], 'extra': 'stay'}
    """
    merged = {**_defaults_for(normalization), **existing, **incoming}
    return {key: value for key, value in merged.items() if value is not DELETE}


def backfill_defaults(
    servers: Mapping[str, Any], normalization: Normalization
) -> dict[str, Any]:
    """Add missing default fields to every server entry.

    ABOUTME: Sweeps all entries, including ones the config never mentioned
    ABOUTME: Non-mapping entries are left as they are
    """
    defaults = _defaults_for(normalization)
    result: dict[str, Any] = {}
    for name, entry in servers.items():
        if isinstance(entry, Mapping):
            missing = {k: v for k, v in defaults.items() if k not in entry}
            result[name] = {**entry, **copy.deepcopy(missing)} if missing else entry
        else:
            result[name] = entry
    return result


def merge_json_config(
    document: dict[str, Any],
    config: Config,
    normalization: Normalization = "none",
) -> dict[str, Any]:
    """Merge config servers into a JSON-like target document.

    ABOUTME: replace - mcpServers becomes exactly the incoming servers
    ABOUTME: merge - named servers are added/overwritten, others untouched
    ABOUTME: All keys outside mcpServers are preserved in their original order

    Args:
        document: Parsed target document ({} when the file doesn't exist)
        config: Canonical config
        normalization: Adapter policy, "none" or "local"

    Returns:
        New document. In merge mode with no servers and nothing to backfill
        the input document itself is returned.

    Raises:
        InvalidModeError: If config.mode is not merge/replace
        TypeError: If mcpServers (or a targeted entry) is not a mapping
    """
    check_mode(config.mode)

    existing = document.get(SERVERS_KEY)
    if SERVERS_KEY in document and not isinstance(existing, Mapping):
        raise TypeError(
            f"'{SERVERS_KEY}' must be an object, got {type(existing).__name__}"
        )

    if config.mode == "replace":
        servers = {
            name: merge_server_entry({}, spec.to_dict(), normalization)
            for name, spec in config.mcp_servers.items()
        }
    else:
        if not config.mcp_servers and (normalization == "none" or existing is None):
            return document

        servers = dict(existing or {})
        for name, spec in config.mcp_servers.items():
            current = servers.get(name, {})
            if not isinstance(current, Mapping):
                raise TypeError(
                    f"Server '{name}' in '{SERVERS_KEY}' must be an object, "
                    f"got {type(current).__name__}"
                )
            servers[name] = merge_server_entry(current, spec.to_dict(), normalization)

    if normalization != "none":
        servers = backfill_defaults(servers, normalization)

    result = dict(document)
    result[SERVERS_KEY] = servers
    return result
