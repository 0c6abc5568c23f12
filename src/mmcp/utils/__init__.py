# ABOUTME: Merge algorithms for mmcp
# ABOUTME: Exports the JSON tree merge and the TOML section patch merge

from mmcp.utils.json_merge import (
    LOCAL_SERVER_DEFAULTS,
    SERVERS_KEY,
    backfill_defaults,
    merge_json_config,
    merge_server_entry,
)
from mmcp.utils.toml_patch import (
    SERVERS_TABLE,
    Patch,
    apply_patches,
    build_patches,
    merge_toml_config,
    strip_mcp_server_sections,
)

__all__ = [
    "LOCAL_SERVER_DEFAULTS",
    "SERVERS_KEY",
    "backfill_defaults",
    "merge_json_config",
    "merge_server_entry",
    "SERVERS_TABLE",
    "Patch",
    "apply_patches",
    "build_patches",
    "merge_toml_config",
    "strip_mcp_server_sections",
]
