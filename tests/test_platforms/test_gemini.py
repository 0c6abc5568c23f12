# Tests for Gemini CLI platform adapter
import json
from pathlib import Path

import pytest

from mmcp.models import Config, InvalidModeError, ServerSpec
from mmcp.platforms.gemini import GeminiAdapter

SETTINGS = {
    "selectedAuthType": "google",
    "theme": "dark",
    "mcpServers": {
        "context7": {
            "command": "old",
            "args": ["-x"],
            "env": {},
            "trust": True,
            "headers": {"X": "1"},
        },
        "github": {"command": "npx", "args": ["-y", "@modelcontextprotocol/server-github"]},
    },
}


def _config(mode: str = "merge", **servers: dict) -> Config:
    return Config(mode=mode, agents=("gemini-cli",), mcp_servers={k: ServerSpec(v) for k, v in servers.items()})


def test_gemini_adapter_properties(tmp_path: Path) -> None:
    """Test adapter id, name and config_path property."""
    config_file = tmp_path / "settings.json"
    adapter = GeminiAdapter(config_path=config_file)

    assert adapter.id == "gemini-cli"
    assert adapter.name == "Gemini CLI"
    assert adapter.config_path == config_file


def test_gemini_default_path() -> None:
    """Test adapter uses default path when none provided."""
    adapter = GeminiAdapter()

    assert adapter.config_path == Path.home() / ".gemini" / "settings.json"


def test_gemini_load_empty(tmp_path: Path) -> None:
    """Test loading when config doesn't exist."""
    adapter = GeminiAdapter(config_path=tmp_path / "settings.json")

    assert adapter.load() == {}


def test_gemini_load_servers(tmp_path: Path) -> None:
    """Test loading existing servers from config."""
    config_file = tmp_path / "settings.json"
    config_file.write_text(json.dumps(SETTINGS))

    servers = GeminiAdapter(config_path=config_file).load()

    assert set(servers) == {"context7", "github"}
    assert servers["context7"]["trust"] is True


def test_gemini_apply_preserves_settings_and_extras(tmp_path: Path) -> None:
    """Other settings and per-server extras survive a merge."""
    config_file = tmp_path / "settings.json"
    config_file.write_text(json.dumps(SETTINGS, indent=2))
    adapter = GeminiAdapter(config_path=config_file)

    adapter.apply_config(_config(context7={"command": "npx", "args": ["-y"], "env": {"K": "V"}}))

    data = json.loads(config_file.read_text())
    assert data["selectedAuthType"] == "google"
    assert data["theme"] == "dark"
    assert data["mcpServers"]["context7"] == {
        "command": "npx",
        "args": ["-y"],
        "env": {"K": "V"},
        "trust": True,
        "headers": {"X": "1"},
    }
    assert data["mcpServers"]["github"] == SETTINGS["mcpServers"]["github"]
    assert list(data) == ["selectedAuthType", "theme", "mcpServers"]


def test_gemini_apply_replace(tmp_path: Path) -> None:
    """Replace mode drops servers missing from config."""
    config_file = tmp_path / "settings.json"
    config_file.write_text(json.dumps(SETTINGS))
    adapter = GeminiAdapter(config_path=config_file)

    adapter.apply_config(_config("replace", ctx={"command": "npx"}))

    data = json.loads(config_file.read_text())
    assert data["mcpServers"] == {"ctx": {"command": "npx"}}
    assert data["theme"] == "dark"


def test_gemini_apply_creates_file(tmp_path: Path) -> None:
    """Test applying creates config file and parent dirs if missing."""
    config_file = tmp_path / ".gemini" / "settings.json"
    adapter = GeminiAdapter(config_path=config_file)

    adapter.apply_config(_config(ctx={"command": "npx"}))

    assert config_file.read_text().endswith("}\n")
    assert json.loads(config_file.read_text()) == {"mcpServers": {"ctx": {"command": "npx"}}}


def test_gemini_invalid_json_not_overwritten(tmp_path: Path) -> None:
    """A malformed file is reported and left untouched."""
    config_file = tmp_path / "settings.json"
    config_file.write_text("{invalid json")
    adapter = GeminiAdapter(config_path=config_file)

    with pytest.raises(ValueError, match="Invalid JSON"):
        adapter.apply_config(_config(ctx={"command": "npx"}))

    assert config_file.read_text() == "{invalid json"


def test_gemini_invalid_mode_not_written(tmp_path: Path) -> None:
    config_file = tmp_path / "settings.json"
    adapter = GeminiAdapter(config_path=config_file)

    with pytest.raises(InvalidModeError):
        adapter.apply_config(_config("upsert", ctx={"command": "npx"}))

    assert not config_file.exists()
