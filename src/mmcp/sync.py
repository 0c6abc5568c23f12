# Dispatch of a Config to the selected agent adapters
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from mmcp.models import AgentAdapter, Config, check_mode
from mmcp.platforms import get_platform

logger = logging.getLogger(__name__)


@dataclass
class SyncReport:
    """Report from an apply run.

    ABOUTME: Tracks which targets were written and which failed
    ABOUTME: One failing target never stops the others
    """
    applied: dict[str, Path] = field(default_factory=dict)
    errors: list[str] = field(default_factory=list)

    def add_applied(self, agent_id: str, path: Path) -> None:
        self.applied[agent_id] = path

    def add_error(self, error: str) -> None:
        """Record an error that occurred during apply.

        ABOUTME: Errors are non-fatal, apply continues with the next target
        """
        self.errors.append(error)

    @property
    def ok(self) -> bool:
        return not self.errors


def apply_config(
    config: Config,
    adapters: Mapping[str, AgentAdapter] | None = None,
) -> SyncReport:
    """Apply config to every agent listed in config.agents.

    ABOUTME: Invalid mode is fatal and raised before any file is touched
    ABOUTME: Agents are applied in listed order, duplicates only once
    ABOUTME: Adapter failures are recorded in the report, not raised

    Args:
        config: Canonical config
        adapters: Optional id -> adapter mapping; defaults to the registry

    Returns:
        SyncReport with applied paths and per-target errors

    Raises:
        InvalidModeError: If config.mode is not merge/replace
    """
    check_mode(config.mode)
    report = SyncReport()

    for agent_id in dict.fromkeys(config.agents):
        try:
            adapter = adapters[agent_id] if adapters is not None else get_platform(agent_id)
        except KeyError:
            logger.warning(f"Skipping unknown agent '{agent_id}'")
            report.add_error(f"{agent_id}: unknown agent")
            continue

        try:
            adapter.apply_config(config)
        except Exception as e:
            # Record error but continue with other targets
            logger.error(f"{adapter.name}: failed to apply config to {adapter.config_path}: {e}")
            report.add_error(f"{adapter.name}: {e}")
            continue

        report.add_applied(agent_id, adapter.config_path)

    return report
