# CLI interface for mmcp
import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path

from mmcp import __version__
from mmcp.config import (
    add_agent_to_config,
    add_server_to_config,
    get_config_path,
    load_config,
    remove_agent_from_config,
    remove_server_from_config,
)
from mmcp.models import MODES, InvalidModeError, ServerSpec
from mmcp.platforms import PLATFORM_IDS
from mmcp.sync import apply_config

# ABOUTME: Exit codes
# 0 = success, 1 = partial success, 2 = config error, 3 = fatal
EXIT_SUCCESS = 0
EXIT_PARTIAL = 1
EXIT_CONFIG_ERROR = 2
EXIT_FATAL = 3


def _config_path(args: argparse.Namespace) -> Path:
    return Path(args.config) if getattr(args, "config", None) else get_config_path()


def _parse_env(pairs: list[str] | None) -> dict[str, str]:
    """Parse KEY=VALUE pairs into a dict.

    Raises:
        ValueError: If a pair has no '='
    """
    env: dict[str, str] = {}
    for pair in pairs or []:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise ValueError(f"Invalid env var format: '{pair}'. Expected KEY=VALUE")
        env[key] = value
    return env


def cmd_apply(args: argparse.Namespace) -> int:
    """Execute apply command.

    ABOUTME: Loads config, optionally overrides mode/agents, applies to each agent
    ABOUTME: Returns exit code based on results
    """
    config_path = _config_path(args)

    try:
        config = load_config(config_path)
        if args.mode:
            config = replace(config, mode=args.mode)
        if args.agent:
            config = replace(config, agents=tuple(args.agent))

        if not config.agents:
            print("No agents configured. Add one with 'mmcp agents add <id>'.")
            return EXIT_CONFIG_ERROR

        print(f"Applying {len(config.mcp_servers)} server(s) in {config.mode} mode...")
        report = apply_config(config)

        for agent_id, path in report.applied.items():
            print(f"  {agent_id} - {path}")

        if report.errors:
            print()
            for error_msg in report.errors:
                print(f"  Error: {error_msg}")
            print()
            print(f"Apply complete: {len(report.applied)} updated, {len(report.errors)} failed")
            return EXIT_PARTIAL

        print()
        print(f"Apply complete: {len(report.applied)} updated")
        return EXIT_SUCCESS

    except FileNotFoundError as e:
        print(f"Error: {e}")
        print()
        print(f"Config file not found. Create one with 'mmcp add' or write {config_path}")
        return EXIT_CONFIG_ERROR
    except (InvalidModeError, ValueError) as e:
        print(f"Config error: {e}")
        return EXIT_CONFIG_ERROR
    except Exception as e:
        print(f"Fatal error: {e}")
        return EXIT_FATAL


def cmd_list(args: argparse.Namespace) -> int:
    """Execute list command.

    ABOUTME: Displays mode, agents and all servers from the config
    """
    config_path = _config_path(args)

    try:
        config = load_config(config_path)
    except FileNotFoundError as e:
        print(f"Error: {e}")
        return EXIT_CONFIG_ERROR
    except ValueError as e:
        print(f"Config error: {e}")
        return EXIT_CONFIG_ERROR

    print(f"Config: {config_path}")
    print(f"Mode: {config.mode}")
    print(f"Agents: {', '.join(config.agents) if config.agents else '(none)'}")
    print()

    for server_name, server in config.mcp_servers.items():
        print(f"  {server_name}")
        if server.command:
            print(f"    command: {server.command}")
        if server.args:
            print(f"    args: {' '.join(server.args)}")
        if server.env:
            env_str = ", ".join(f"{k}={v}" for k, v in server.env.items())
            print(f"    env: {env_str}")
        for key, value in server.extra.items():
            print(f"    {key}: {value}")
        print()

    print(f"Total: {len(config.mcp_servers)} server(s)")
    return EXIT_SUCCESS


def cmd_add(args: argparse.Namespace) -> int:
    """Execute add command.

    ABOUTME: Adds or replaces a server in the config file (no apply)
    """
    config_path = _config_path(args)

    try:
        env = _parse_env(args.env)
        spec = ServerSpec.from_dict({"command": args.server_command, "args": list(args.args), "env": env})
        add_server_to_config(config_path, args.name, spec)
    except ValueError as e:
        print(f"Error: {e}")
        return EXIT_CONFIG_ERROR

    print(f"Added server '{args.name}' to {config_path}")
    print("Run 'mmcp apply' to write it to your agents.")
    return EXIT_SUCCESS


def cmd_remove(args: argparse.Namespace) -> int:
    """Execute remove command."""
    config_path = _config_path(args)

    try:
        removed = remove_server_from_config(config_path, args.name)
    except FileNotFoundError:
        print(f"Error: Config file not found at {config_path}")
        return EXIT_CONFIG_ERROR
    except ValueError as e:
        print(f"Config error: {e}")
        return EXIT_CONFIG_ERROR

    if not removed:
        print(f"Server '{args.name}' not found in config.")
        return EXIT_CONFIG_ERROR

    print(f"Removed server '{args.name}' from {config_path}")
    return EXIT_SUCCESS


def cmd_agents(args: argparse.Namespace) -> int:
    """Execute agents list/add/remove."""
    config_path = _config_path(args)

    try:
        if args.agents_command == "add":
            if args.agent_id not in PLATFORM_IDS:
                print(f"Unknown agent '{args.agent_id}'. Known agents: {', '.join(PLATFORM_IDS)}")
                return EXIT_CONFIG_ERROR
            if add_agent_to_config(config_path, args.agent_id):
                print(f"Added agent '{args.agent_id}'")
            else:
                print(f"Agent '{args.agent_id}' already configured")
            return EXIT_SUCCESS

        if args.agents_command == "remove":
            if remove_agent_from_config(config_path, args.agent_id):
                print(f"Removed agent '{args.agent_id}'")
                return EXIT_SUCCESS
            print(f"Agent '{args.agent_id}' not found in config.")
            return EXIT_CONFIG_ERROR

        config = load_config(config_path)
        for agent_id in PLATFORM_IDS:
            marker = "*" if agent_id in config.agents else " "
            print(f"  [{marker}] {agent_id}")
        return EXIT_SUCCESS

    except FileNotFoundError:
        print(f"Error: Config file not found at {config_path}")
        return EXIT_CONFIG_ERROR
    except ValueError as e:
        print(f"Config error: {e}")
        return EXIT_CONFIG_ERROR


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mmcp",
        description="Apply one MCP server config to many AI agents"
    )

    parser.add_argument(
        "--version", "-V",
        action="version",
        version=f"mmcp v{__version__}"
    )
    parser.add_argument(
        "--config",
        help="Path to config file (default: ~/.mmcp.json)"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # apply command
    apply_parser = subparsers.add_parser(
        "apply",
        help="Write configured servers to every configured agent"
    )
    apply_parser.add_argument(
        "--mode",
        choices=MODES,
        help="Override the configured update mode"
    )
    apply_parser.add_argument(
        "--agent",
        action="append",
        help="Apply only to this agent (repeatable)"
    )

    # list command
    subparsers.add_parser(
        "list",
        help="List servers and agents in config"
    )

    # add command
    add_parser = subparsers.add_parser(
        "add",
        help="Add an MCP server to config",
        description="Add an MCP server to config. Options such as --env must come before NAME; "
                    "everything after COMMAND is passed to the server unchanged."
    )
    add_parser.add_argument("name", help="Name of the MCP server")
    add_parser.add_argument("server_command", metavar="command", help="Command to run")
    add_parser.add_argument(
        "args", nargs=argparse.REMAINDER,
        help="Arguments for the command, taken verbatim (including anything that looks like an option)"
    )
    add_parser.add_argument(
        "--env", "-e",
        action="append",
        help="KEY=VALUE environment variable (repeatable)"
    )

    # remove command
    remove_parser = subparsers.add_parser(
        "remove",
        help="Remove an MCP server from config"
    )
    remove_parser.add_argument("name", help="Name of the MCP server to remove")

    # agents command
    agents_parser = subparsers.add_parser(
        "agents",
        help="Manage target agents"
    )
    agents_sub = agents_parser.add_subparsers(dest="agents_command")
    agents_sub.add_parser("list", help="List known agents")
    agents_add = agents_sub.add_parser("add", help="Add an agent")
    agents_add.add_argument("agent_id", help="Agent id")
    agents_remove = agents_sub.add_parser("remove", help="Remove an agent")
    agents_remove.add_argument("agent_id", help="Agent id")

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point.

    ABOUTME: Parses args and dispatches to appropriate command
    ABOUTME: Returns exit code for sys.exit()
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )

    # Dispatch to command
    if args.command == "apply":
        return cmd_apply(args)
    elif args.command == "list":
        return cmd_list(args)
    elif args.command == "add":
        return cmd_add(args)
    elif args.command == "remove":
        return cmd_remove(args)
    elif args.command == "agents":
        return cmd_agents(args)
    else:
        # No command specified, show help
        parser.print_help()
        return EXIT_SUCCESS


if __name__ == "__main__":
    sys.exit(main())
