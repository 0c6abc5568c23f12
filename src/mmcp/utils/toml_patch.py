# ABOUTME: TOML section patch merge for the Codex CLI config
# ABOUTME: Section stripping is a textual pass; patching edits a tomlkit document in place
import re
from collections.abc import Mapping, MutableMapping, MutableSequence
from typing import Any

import tomlkit
from tomlkit.items import AoT, InlineTable

from mmcp.models import DELETE, Config, check_mode

# ABOUTME: Table holding one dotted sub-table per server in Codex config.toml
SERVERS_TABLE = "mcp_servers"

# ABOUTME: Matches [table] and [[array.of.tables]] headers, trailing # or ; comment allowed
SECTION_HEADER_PATTERN = re.compile(r"^\s*\[\[?([^\[\]]+)\]\]?\s*(?:[#;].*)?$")

# ABOUTME: Matches mcp_servers written as a top-level dotted key or inline table
TOP_LEVEL_SERVERS_KEY_PATTERN = re.compile(r"""^\s*(["']?)mcp_servers\1\s*[.=]""")

Patch = tuple[tuple[str, ...], Any]

_PRIMITIVES = (str, int, float, bool)


def _is_servers_header(header: str) -> bool:
    first = header.split(".", 1)[0].strip().strip("\"'")
    return first == SERVERS_TABLE


def strip_mcp_server_sections(content: str) -> str:
    """Remove every mcp_servers section from TOML text.

    ABOUTME: A managed section runs from its header to the next unmanaged header
    ABOUTME: Everything else (comments, blank lines, other tables) is kept in order
    ABOUTME: Returns content untouched when there was nothing to strip

    Args:
        content: TOML document text

    Returns:
        Text without [mcp_servers] / [mcp_servers.<name>] sections. When
        something was removed, trailing blank lines are dropped and the text
        ends with a single newline.

    Examples:
        >>> strip_mcp_server_sections('a = 1\\n\\n[mcp_servers.foo]\\ncommand = "x"\\n')
        'a = 1\\n'
    """
    kept: list[str] = []
    skipping = False
    removed = False

    for line in content.split("\n"):
        match = SECTION_HEADER_PATTERN.match(line)
        if match:
            skipping = _is_servers_header(match.group(1))
            if skipping:
                removed = True
                continue
        if not skipping:
            kept.append(line)

    if not removed:
        return content

    # Blank lines that used to separate a removed trailing section
    while kept and not kept[-1].strip():
        kept.pop()
    if not kept:
        return ""
    return "\n".join(kept) + "\n"


def _is_primitive(value: Any) -> bool:
    return isinstance(value, _PRIMITIVES)


def _is_primitive_array(value: Any) -> bool:
    return isinstance(value, list) and all(_is_primitive(item) for item in value)


def _walk(patches: list[Patch], path: tuple[str, ...], value: Any) -> None:
    if value is DELETE or _is_primitive(value) or _is_primitive_array(value):
        patches.append((path, value))
    elif isinstance(value, list):
        for index, item in enumerate(value):
            _walk(patches, (*path, str(index)), item)
    elif isinstance(value, Mapping):
        for key, item in value.items():
            _walk(patches, (*path, str(key)), item)
    else:
        raise TypeError(
            f"Unsupported TOML value at {'.'.join(path)}: {type(value).__name__}"
        )


def build_patches(config: Config) -> list[Patch]:
    """Flatten config servers into path-keyed patches.

    ABOUTME: One patch per primitive / primitive-array leaf, in config order
    ABOUTME: Nested mappings recurse by key, other arrays recurse by index
    ABOUTME: DELETE leaves become deletion patches

    Examples:
        >>> from mmcp.models import ServerSpec
        >>> config = Config(mcp_servers={
        ...     "ctx": ServerSpec({"command": "npx", "env": {"K": "V"}}),
        ... })
        >>> build_patches(config)
        [(('mcp_servers', 'ctx', 'command'), 'npx'), (('mcp_servers', 'ctx', 'env', 'K'), 'V')]
    """
    patches: list[Patch] = []
    for name, spec in config.mcp_servers.items():
        _walk(patches, (SERVERS_TABLE, name), spec.to_dict())
    return patches


def _new_container(depth: int, next_segment: str) -> Any:
    if depth == 0:
        # Only [mcp_servers.<name>] headers are rendered, never a bare [mcp_servers]
        return tomlkit.table(is_super_table=True)
    if depth == 1:
        return tomlkit.table()
    if next_segment.isdigit():
        return tomlkit.array()
    return tomlkit.inline_table()


def _has_child(container: Any, segment: str) -> bool:
    if isinstance(container, MutableSequence):
        return segment.isdigit() and int(segment) < len(container)
    return segment in container


def _child(container: Any, segment: str, next_segment: str, depth: int, path: tuple[str, ...]) -> Any:
    if isinstance(container, MutableSequence):
        if not segment.isdigit():
            raise ValueError(f"Expected an array index at {'.'.join(path)}, got '{segment}'")
        index = int(segment)
        if index == len(container):
            if isinstance(container, AoT):
                container.append(tomlkit.table())
            else:
                container.append(_new_container(depth, next_segment))
        elif index > len(container):
            raise ValueError(f"Array index out of range at {'.'.join(path)}")
        child = container[index]
    else:
        if segment not in container:
            container[segment] = _new_container(depth, next_segment)
        child = container[segment]

    if not isinstance(child, (MutableMapping, MutableSequence)):
        raise ValueError(
            f"Cannot set keys below {'.'.join(path)}: existing value is "
            f"{type(child).__name__}, not a table or array"
        )
    return child


def _apply_patch(document: tomlkit.TOMLDocument, path: tuple[str, ...], value: Any) -> None:
    container: Any = document
    for depth, segment in enumerate(path[:-1]):
        if value is DELETE and not _has_child(container, segment):
            return
        container = _child(container, segment, path[depth + 1], depth, path[: depth + 1])

    leaf = path[-1]
    if isinstance(container, MutableSequence):
        index = int(leaf)
        if value is DELETE:
            if index < len(container):
                del container[index]
        elif index < len(container):
            container[index] = value
        else:
            container.append(value)
    elif value is DELETE:
        if leaf in container:
            del container[leaf]
    else:
        container[leaf] = value


def _servers_table_names(document: tomlkit.TOMLDocument) -> set[str]:
    servers = document.get(SERVERS_TABLE)
    if servers is None:
        return set()
    if isinstance(servers, InlineTable) or not isinstance(servers, MutableMapping):
        raise ValueError(
            f"Unsupported '{SERVERS_TABLE}' value ({type(servers).__name__}): "
            f"servers must be written as [{SERVERS_TABLE}.<name>] tables"
        )
    return set(servers)


def _insert_sections(text: str, sections: list[str]) -> str:
    """Insert rendered server sections after the last mcp_servers section.

    ABOUTME: Falls back to the end of the document when there is no such section
    ABOUTME: Sections are separated from their neighbours by one blank line
    """
    if not sections:
        return text
    block = "\n\n".join(sections).split("\n")
    lines = text.split("\n")

    start = end = None
    in_servers = False
    for index, line in enumerate(lines):
        match = SECTION_HEADER_PATTERN.match(line)
        if not match:
            continue
        if in_servers:
            end = index
        in_servers = _is_servers_header(match.group(1))
        if in_servers:
            start = index
    if in_servers:
        end = len(lines)

    if start is None:
        head = text if not text or text.endswith("\n") else text + "\n"
        if head and not head.endswith("\n\n"):
            head += "\n"
        return head + "\n".join(block) + "\n"

    # Blank lines and comments before the next header stay with that header
    cut = end
    while cut > start + 1 and (not lines[cut - 1].strip() or lines[cut - 1].lstrip().startswith("#")):
        cut -= 1
    tail = lines[cut:]
    if not tail:
        tail = [""]
    elif tail[0].strip():
        tail = ["", *tail]
    return "\n".join([*lines[:cut], "", *block, *tail])


def apply_patches(content: str, patches: list[Patch]) -> str:
    """Apply patches to TOML text, preserving unrelated formatting.

    ABOUTME: Uses tomlkit so comments and layout outside touched keys survive
    ABOUTME: Existing keys are rewritten in place, missing tables are created
    ABOUTME: New server tables land after the last existing mcp_servers table, else at the end

    Raises:
        tomlkit.exceptions.ParseError: If content is not valid TOML
        ValueError: If a patch path runs through an existing scalar value,
            or mcp_servers is not a table
    """
    document = tomlkit.parse(content)
    existing = _servers_table_names(document)

    # Servers missing from the document are rendered separately and inserted as text
    new_servers: dict[str, tomlkit.TOMLDocument] = {}
    for path, value in patches:
        if len(path) > 2 and path[0] == SERVERS_TABLE and path[1] not in existing:
            _apply_patch(new_servers.setdefault(path[1], tomlkit.document()), path, value)
        else:
            _apply_patch(document, path, value)

    sections = [tomlkit.dumps(section).strip("\n") for section in new_servers.values()]
    return _insert_sections(tomlkit.dumps(document), [s for s in sections if s])


def _check_servers_layout(content: str) -> None:
    for number, line in enumerate(content.split("\n"), start=1):
        if SECTION_HEADER_PATTERN.match(line):
            return
        if TOP_LEVEL_SERVERS_KEY_PATTERN.match(line):
            raise ValueError(
                f"Unsupported '{SERVERS_TABLE}' form on line {number}: {line.strip()!r}. "
                f"Servers must be written as [{SERVERS_TABLE}.<name>] tables"
            )


def merge_toml_config(content: str, config: Config) -> str:
    """Merge config servers into a Codex-style TOML document.

    ABOUTME: replace - strip all mcp_servers sections, then patch the stripped text
    ABOUTME: merge - patch the original text, unnamed servers stay as they are
    ABOUTME: Empty config servers: merge is a no-op, replace only strips

    Raises:
        InvalidModeError: If config.mode is not merge/replace
        ValueError: If servers are written as top-level dotted keys or an
            inline table instead of [mcp_servers.<name>] tables
    """
    check_mode(config.mode)

    if config.mode == "replace":
        _check_servers_layout(content)
        stripped = strip_mcp_server_sections(content)
        if not config.mcp_servers:
            return stripped
        return apply_patches(stripped, build_patches(config))

    if not config.mcp_servers:
        return content
    _check_servers_layout(content)
    return apply_patches(content, build_patches(config))
