"""
Tool Descriptor Parser

A tool describes itself through a comment header at the top of its source:

    # Tool: system.info - Returns basic system information
    # Author: ssh-mcp Team
    # Version: 0.1.0
    # Tags: system, monitoring
    #
    # Args:
    #   verbose: Include detailed information (boolean, default: false)
    #
    # Example:
    #   {"tool": "system.info", "args": {"verbose": true}}
    #
    # Schema:
    # { "type": "object", "properties": { ... } }
    # End Schema

A sidecar manifest named <tool-id>.json next to the tool overrides any of the
header fields. Parsing never raises: missing or malformed metadata degrades to
defaults so that discovery keeps working.
"""

import json
import logging
from datetime import date
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .base import (
    DEFAULT_AUTHOR,
    DEFAULT_DESCRIPTION,
    DEFAULT_VERSION,
    ToolDescriptor,
)

logger = logging.getLogger(__name__)

# Header keys that take a single value on the same line.
SCALAR_KEYS = {"tool", "author", "version", "tags"}
# Header keys that open a block of the following lines.
BLOCK_KEYS = {"args": "args", "example": "examples", "examples": "examples"}
SCHEMA_START = "schema"
SCHEMA_END = "end schema"

MANIFEST_SUFFIX = ".json"


def _header_lines(text: str) -> List[str]:
    """
    Return the comment header with comment markers removed.

    The header is the run of '#' lines at the top of the file, after an
    optional shebang. Blank comment lines are kept as empty strings because
    they terminate blocks.
    """
    lines = text.splitlines()
    if lines and lines[0].startswith("#!"):
        lines = lines[1:]

    header: List[str] = []
    for raw in lines:
        stripped = raw.strip()
        if not stripped.startswith("#"):
            if stripped == "" and not header:
                continue
            break
        body = stripped[1:]
        if body.startswith(" "):
            body = body[1:]
        header.append(body.rstrip())
    return header


def _split_key(line: str) -> Tuple[Optional[str], str]:
    """Split 'Key: value' into a lower-cased key and its value."""
    if line[:1].isspace() or ":" not in line:
        return None, line
    key, value = line.split(":", 1)
    key = key.strip().lower()
    if key in SCALAR_KEYS or key in BLOCK_KEYS or key == SCHEMA_START:
        return key, value.strip()
    return None, line


def parse_tags(value: Any) -> Tuple[str, ...]:
    """Normalize a comma separated string or a list into unique tags, in order."""
    if isinstance(value, str):
        items: Iterable[Any] = value.split(",")
    elif isinstance(value, (list, tuple, set, frozenset)):
        items = value
    else:
        return ()

    tags: List[str] = []
    for item in items:
        tag = str(item).strip()
        if tag and tag not in tags:
            tags.append(tag)
    return tuple(tags)


def parse_schema(text: str) -> Dict[str, Any]:
    """Decode an embedded schema; anything but a JSON object yields {}."""
    if not text.strip():
        return {}
    try:
        schema = json.loads(text)
    except ValueError as e:
        logger.debug(f"Ignoring malformed schema: {e}")
        return {}
    return schema if isinstance(schema, dict) else {}


def parse_header(text: str) -> Dict[str, Any]:
    """
    Extract raw metadata fields from a tool's source text.

    Only keys that are present appear in the returned dict.
    """
    fields: Dict[str, Any] = {}
    block: Optional[str] = None
    schema_lines: Optional[List[str]] = None

    for line in _header_lines(text):
        if schema_lines is not None:
            if line.strip().lower() == SCHEMA_END:
                fields["schema"] = parse_schema("\n".join(schema_lines))
                schema_lines = None
            else:
                schema_lines.append(line)
            continue

        key, value = _split_key(line)

        if key == SCHEMA_START:
            block = None
            schema_lines = [value] if value else []
            continue

        if key in BLOCK_KEYS:
            block = BLOCK_KEYS[key]
            entries = fields.setdefault(block, [])
            if value:
                entries.append(value)
            continue

        if key in SCALAR_KEYS:
            block = None
            if key == "tool":
                name, _, description = value.partition(" - ")
                fields["name"] = name.strip()
                if description.strip():
                    fields["description"] = description.strip()
            elif key == "tags":
                fields["tags"] = parse_tags(value)
            elif value:
                fields[key] = value
            continue

        if not line.strip():
            block = None
        elif block is not None:
            fields[block].append(line.strip())

    if schema_lines is not None:
        # No terminator: treat the block as malformed.
        fields["schema"] = {}

    return fields


def load_manifest(path: Path) -> Dict[str, Any]:
    """Read a sidecar manifest, returning only the fields it defines."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.warning(f"Ignoring unreadable manifest {path}: {e}")
        return {}
    if not isinstance(data, dict):
        logger.warning(f"Ignoring manifest {path}: not a JSON object")
        return {}

    fields: Dict[str, Any] = {}
    for key in ("description", "version", "author"):
        if isinstance(data.get(key), str) and data[key].strip():
            fields[key] = data[key].strip()
    if "tags" in data:
        fields["tags"] = parse_tags(data["tags"])
    if "schema" in data:
        fields["schema"] = data["schema"] if isinstance(data["schema"], dict) else {}
    for key, target in (("args", "args"), ("args_doc", "args"), ("examples", "examples")):
        value = data.get(key)
        if isinstance(value, list):
            fields[target] = [
                item if isinstance(item, str) else json.dumps(item) for item in value
            ]
    return fields


def manifest_path(tool_path: Path) -> Path:
    return tool_path.with_suffix(MANIFEST_SUFFIX)


def build_descriptor(
    tool_id: str,
    fields: Dict[str, Any],
    created: Optional[str] = None,
    source: Optional[Path] = None,
) -> ToolDescriptor:
    """Project parsed fields onto a descriptor, filling defaults."""
    header_name = fields.get("name")
    if header_name and header_name != tool_id:
        logger.debug(f"Header names tool '{header_name}', registered as '{tool_id}'")

    return ToolDescriptor(
        name=tool_id,
        description=fields.get("description") or DEFAULT_DESCRIPTION,
        version=fields.get("version") or DEFAULT_VERSION,
        author=fields.get("author") or DEFAULT_AUTHOR,
        tags=tuple(fields.get("tags", ())),
        schema=fields.get("schema") or {},
        args_doc=tuple(fields.get("args", ())),
        examples=tuple(fields.get("examples", ())),
        created=created,
        source=source,
    )


def load_descriptor(tool_id: str, path: Path) -> ToolDescriptor:
    """
    Build the descriptor for the tool at path.

    Reads the header fresh from disk and merges the sidecar manifest over it
    when one exists.
    """
    fields: Dict[str, Any] = {}
    created = None

    try:
        fields = parse_header(path.read_text(encoding="utf-8", errors="replace"))
        created = date.fromtimestamp(path.stat().st_mtime).isoformat()
    except OSError as e:
        logger.warning(f"Could not read tool source {path}: {e}")

    sidecar = manifest_path(path)
    if sidecar != path and sidecar.is_file():
        fields.update(load_manifest(sidecar))

    return build_descriptor(tool_id, fields, created=created, source=path)
