# ABOUTME: Tests for dispatching a config to agent adapters
# ABOUTME: Includes both unit tests with fakes and integration tests with real adapters
import json
from pathlib import Path
from typing import Any

import pytest
import tomli

from mmcp.models import Config, InvalidModeError, ServerSpec
from mmcp.platforms.codex import CodexAdapter
from mmcp.platforms.cursor import CursorAdapter
from mmcp.sync import SyncReport, apply_config


class FakeAdapter:
    """Records calls, optionally fails."""

    def __init__(self, agent_id: str, error: Exception | None = None) -> None:
        self.id = agent_id
        self.name = f"Fake {agent_id}"
        self.config_path = Path(f"/fake/{agent_id}.json")
        self.error = error
        self.applied: list[Config] = []

    def load(self) -> dict[str, dict[str, Any]]:
        return {}

    def apply_config(self, config: Config) -> None:
        if self.error:
            raise self.error
        self.applied.append(config)


def _config(mode: str = "merge", agents: tuple[str, ...] = ()) -> Config:
    return Config(mode=mode, agents=agents, mcp_servers={"ctx": ServerSpec({"command": "npx"})})


class TestSyncReport:
    """Tests for SyncReport dataclass."""

    def test_initialization(self):
        report = SyncReport()

        assert report.applied == {}
        assert report.errors == []
        assert report.ok

    def test_add_error(self):
        report = SyncReport()

        report.add_error("Cursor: boom")

        assert report.errors == ["Cursor: boom"]
        assert not report.ok


class TestApplyConfig:
    """Tests for apply_config with fake adapters."""

    def test_applies_listed_agents_in_order(self):
        a, b, c = FakeAdapter("a"), FakeAdapter("b"), FakeAdapter("c")
        config = _config(agents=("b", "a"))

        report = apply_config(config, {"a": a, "b": b, "c": c})

        assert list(report.applied) == ["b", "a"]
        assert a.applied == [config]
        assert c.applied == []

    def test_duplicate_agents_applied_once(self):
        a = FakeAdapter("a")

        apply_config(_config(agents=("a", "a")), {"a": a})

        assert len(a.applied) == 1

    def test_failure_is_isolated(self):
        broken = FakeAdapter("broken", error=ValueError("Invalid JSON in /x"))
        ok = FakeAdapter("ok")

        report = apply_config(_config(agents=("broken", "ok")), {"broken": broken, "ok": ok})

        assert report.errors == ["Fake broken: Invalid JSON in /x"]
        assert list(report.applied) == ["ok"]
        assert len(ok.applied) == 1

    def test_unknown_agent_recorded(self):
        report = apply_config(_config(agents=("nope",)), {})

        assert report.errors == ["nope: unknown agent"]

    def test_unknown_agent_from_registry(self):
        report = apply_config(_config(agents=("not-a-real-agent",)))

        assert report.errors == ["not-a-real-agent: unknown agent"]

    def test_invalid_mode_is_fatal(self):
        a = FakeAdapter("a")

        with pytest.raises(InvalidModeError):
            apply_config(_config(mode="bogus", agents=("a",)), {"a": a})

        assert a.applied == []


class TestApplyConfigIntegration:
    """Integration tests with real adapters on tmp files."""

    def test_json_and_toml_targets(self, tmp_path: Path):
        cursor_file = tmp_path / ".cursor" / "mcp.json"
        codex_file = tmp_path / ".codex" / "config.toml"
        adapters = {
            "cursor": CursorAdapter(config_path=cursor_file),
            "codex-cli": CodexAdapter(config_path=codex_file),
        }
        config = Config(
            agents=("cursor", "codex-cli"),
            mcp_servers={"context7": ServerSpec({"command": "npx", "args": ["-y", "@upstash/context7-mcp"]})},
        )

        report = apply_config(config, adapters)

        assert report.ok
        assert report.applied == {"cursor": cursor_file, "codex-cli": codex_file}
        expected = {"command": "npx", "args": ["-y", "@upstash/context7-mcp"]}
        assert json.loads(cursor_file.read_text())["mcpServers"]["context7"] == expected
        assert tomli.loads(codex_file.read_text())["mcp_servers"]["context7"] == expected

    def test_broken_target_does_not_block_others(self, tmp_path: Path):
        cursor_file = tmp_path / "mcp.json"
        cursor_file.write_text("{broken")
        codex_file = tmp_path / "config.toml"
        adapters = {
            "cursor": CursorAdapter(config_path=cursor_file),
            "codex-cli": CodexAdapter(config_path=codex_file),
        }

        report = apply_config(_config(agents=("cursor", "codex-cli")), adapters)

        assert len(report.errors) == 1
        assert report.errors[0].startswith("Cursor: Invalid JSON")
        assert cursor_file.read_text() == "{broken"
        assert "[mcp_servers.ctx]" in codex_file.read_text()
