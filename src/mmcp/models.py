# Core data models for mmcp
import copy
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal, Protocol, runtime_checkable

# ABOUTME: Update policy for the managed servers region of a target
Mode = Literal["merge", "replace"]
MODES: tuple[str, ...] = ("merge", "replace")

# ABOUTME: Per-adapter normalization policy (closed set)
Normalization = Literal["none", "local"]

WELL_KNOWN_FIELDS = ("command", "args", "env")


class InvalidModeError(ValueError):
    """Raised for a mode outside MODES."""

    def __init__(self, mode: object) -> None:
        super().__init__(
            f"Unknown config mode: {mode!r}. Must be one of: {', '.join(MODES)}"
        )
        self.mode = mode


def check_mode(mode: object) -> None:
    """Fail fast on an unrecognized mode."""
    if mode not in MODES:
        raise InvalidModeError(mode)


class _Delete:
    """Deletion sentinel type. Always the same instance, even after copying."""

    _instance: "_Delete | None" = None

    def __new__(cls) -> "_Delete":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "DELETE"

    def __copy__(self) -> "_Delete":
        return self

    def __deepcopy__(self, memo: dict[int, Any]) -> "_Delete":
        return self

    def __reduce__(self) -> str:
        return "DELETE"


# ABOUTME: Field value meaning "remove this key from the target entry"
DELETE = _Delete()


@dataclass(frozen=True)
class ServerSpec:
    """Desired registration of one MCP server.

    ABOUTME: Open record - well-known fields are type-checked, anything else passes through
    ABOUTME: Field order is kept so generated output is deterministic
    """
    data: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not isinstance(self.data, Mapping):
            raise ValueError(
                f"Server spec must be a mapping, got {type(self.data).__name__}"
            )
        # Own a private copy so callers can't mutate us after construction
        object.__setattr__(self, "data", copy.deepcopy(dict(self.data)))

        command = self.data.get("command", DELETE)
        if command is not DELETE and not isinstance(command, str):
            raise ValueError("'command' must be a string")

        args = self.data.get("args", DELETE)
        if args is not DELETE and (
            not isinstance(args, list) or not all(isinstance(a, str) for a in args)
        ):
            raise ValueError("'args' must be a list of strings")

        env = self.data.get("env", DELETE)
        if env is not DELETE and (
            not isinstance(env, Mapping)
            or not all(isinstance(k, str) and isinstance(v, str) for k, v in env.items())
        ):
            raise ValueError("'env' must be a mapping of strings to strings")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ServerSpec":
        return cls(data=data)

    @property
    def command(self) -> str | None:
        value = self.data.get("command")
        return value if isinstance(value, str) else None

    @property
    def args(self) -> list[str]:
        value = self.data.get("args")
        return list(value) if isinstance(value, list) else []

    @property
    def env(self) -> dict[str, str]:
        value = self.data.get("env")
        return dict(value) if isinstance(value, Mapping) else {}

    @property
    def extra(self) -> dict[str, Any]:
        """Fields outside command/args/env, in original order."""
        return {
            key: copy.deepcopy(value)
            for key, value in self.data.items()
            if key not in WELL_KNOWN_FIELDS
        }

    def to_dict(self) -> dict[str, Any]:
        """Independent copy of all fields in original order."""
        return copy.deepcopy(dict(self.data))


@dataclass(frozen=True)
class Config:
    """Canonical description of the servers every target should register.

    ABOUTME: Built once per invocation and never mutated during reconciliation
    ABOUTME: Server names are opaque keys ("a.b" is one name, not a path)
    """
    mode: Mode = "merge"
    agents: tuple[str, ...] = ()
    mcp_servers: dict[str, ServerSpec] = field(default_factory=dict)


@runtime_checkable
class AgentAdapter(Protocol):
    """Protocol for per-application config adapters.

    ABOUTME: Each adapter pairs a target file location with one merge algorithm
    ABOUTME: Uses @runtime_checkable for isinstance() support
    """

    @property
    def id(self) -> str:
        """Stable identifier used in Config.agents."""
        ...

    @property
    def name(self) -> str:
        """Human-readable application name."""
        ...

    @property
    def config_path(self) -> Path:
        """Absolute path of the target file (may not exist yet)."""
        ...

    def load(self) -> dict[str, dict[str, Any]]:
        """Servers currently registered in the target file."""
        ...

    def apply_config(self, config: Config) -> None:
        """Load the target document, merge config into it, write it back."""
        ...
