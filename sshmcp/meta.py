"""
Meta Tools

Protocol-level tools that describe the protocol itself. They run in-process
against the registry serving the current request, so they follow the same
search policy as execution.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from .base import BuiltinTool, InvalidArgsError
from .registry import ToolRegistry

logger = logging.getLogger(__name__)

MAX_SUGGESTIONS = 3


def _tool_name_arg(args: Dict[str, Any]) -> str:
    name = args.get("tool")
    if not isinstance(name, str) or not name.strip():
        raise InvalidArgsError(
            "Tool name parameter is required", details={"argument": "tool"}
        )
    return name.strip()


def _tool_name_schema(description: str) -> Dict[str, Any]:
    return {
        "type": "object",
        "properties": {
            "tool": {"type": "string", "description": description},
        },
        "required": ["tool"],
    }


def normalize_category(category: Any) -> str:
    """
    Accept 'system', 'system.' or 'system.*' as the same prefix filter.

    '*' matches every tool, like an empty category.
    """
    if category is None:
        return ""
    if not isinstance(category, str):
        raise InvalidArgsError(
            "category must be a string", details={"argument": "category"}
        )
    category = category.strip()
    if category == "*":
        return ""
    if category.endswith(".*"):
        category = category[:-2]
    return category.rstrip(".")


def normalize_tags(tags: Any) -> Tuple[str, ...]:
    if tags is None or tags == "":
        return ()
    if isinstance(tags, str):
        tags = tags.split(",")
    if not isinstance(tags, list) or not all(isinstance(t, str) for t in tags):
        raise InvalidArgsError(
            "tags must be an array of strings", details={"argument": "tags"}
        )
    return tuple(t.strip() for t in tags if t.strip())


class DiscoverTool(BuiltinTool):
    """meta.discover: list tools, optionally filtered."""

    tags = ("meta", "discovery", "documentation")
    args_doc = (
        "category: Optional filter for tool category (string, optional)",
        "tags: Optional tags to filter by (array, optional)",
    )
    examples = ('{"tool": "meta.discover", "args": {"category": "system"}}',)

    @property
    def name(self) -> str:
        return "meta.discover"

    @property
    def description(self) -> str:
        return "Lists all available tools with their descriptions"

    @property
    def schema(self) -> Dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "category": {
                    "type": "string",
                    "description": "Filter tools by category (e.g., 'system', 'file')",
                },
                "tags": {
                    "type": "array",
                    "items": {"type": "string"},
                    "description": "Filter tools by tags",
                },
            },
        }

    async def execute(self, args: Dict[str, Any], registry: ToolRegistry) -> Dict[str, Any]:
        category = normalize_category(args.get("category"))
        wanted = set(normalize_tags(args.get("tags")))

        tools: List[Dict[str, Any]] = []
        for entry in registry.entries():
            if category and not entry.tool_id.startswith(category + "."):
                continue
            descriptor = entry.descriptor()
            if wanted and not wanted.intersection(descriptor.tags):
                continue
            tools.append(descriptor.summary())

        return {
            "tools": tools,
            "count": len(tools),
            "explanation": (
                "These are all the available tools on this system. You can get more "
                "details about a specific tool using meta.describe."
            ),
            "suggestions": [
                {"tool": tool["name"], "description": "Try this tool"}
                for tool in tools[:MAX_SUGGESTIONS]
            ],
        }


class DescribeTool(BuiltinTool):
    """meta.describe: full descriptor for one tool."""

    tags = ("meta", "discovery", "documentation")
    args_doc = ("tool: Name of the tool to describe (string, required)",)
    examples = ('{"tool": "meta.describe", "args": {"tool": "system.info"}}',)

    @property
    def name(self) -> str:
        return "meta.describe"

    @property
    def description(self) -> str:
        return "Returns detailed description for a specific tool"

    @property
    def schema(self) -> Dict[str, Any]:
        return _tool_name_schema("Name of the tool to describe")

    async def execute(self, args: Dict[str, Any], registry: ToolRegistry) -> Dict[str, Any]:
        descriptor = registry.describe(_tool_name_arg(args))

        result = descriptor.to_dict()
        result["explanation"] = (
            f"This tool ({descriptor.name}) is used for {descriptor.description}. "
            f"It was created by {descriptor.author} and is currently at version "
            f"{descriptor.version}."
        )
        result["suggestions"] = [
            {"tool": "meta.schema", "description": "Get the JSON schema for this tool"},
            {"tool": "meta.discover", "description": "Discover other available tools"},
        ]
        return result


class SchemaTool(BuiltinTool):
    """meta.schema: only the input schema of one tool."""

    tags = ("meta", "schema", "validation")
    args_doc = ("tool: Name of the tool to get schema for (string, required)",)
    examples = ('{"tool": "meta.schema", "args": {"tool": "system.info"}}',)

    @property
    def name(self) -> str:
        return "meta.schema"

    @property
    def description(self) -> str:
        return "Returns the JSON schema for a specific tool"

    @property
    def schema(self) -> Dict[str, Any]:
        return _tool_name_schema("Name of the tool to get schema for")

    async def execute(self, args: Dict[str, Any], registry: ToolRegistry) -> Dict[str, Any]:
        tool_name = _tool_name_arg(args)
        descriptor = registry.describe(tool_name)
        return {
            "tool": tool_name,
            "schema": descriptor.effective_schema(),
            "explanation": (
                f"This is the JSON schema for the {tool_name} tool. "
                "It defines the expected input format."
            ),
            "suggestions": [
                {"tool": "meta.describe", "description": "Get full description of this tool"},
                {"tool": "meta.discover", "description": "Discover other available tools"},
            ],
        }


class VersionsTool(BuiltinTool):
    """meta.versions: installed version of every tool."""

    tags = ("meta", "system")
    examples = ('{"tool": "meta.versions", "args": {}}',)

    @property
    def name(self) -> str:
        return "meta.versions"

    @property
    def description(self) -> str:
        return "Lists the installed version of every available tool"

    @property
    def schema(self) -> Dict[str, Any]:
        return {"type": "object", "properties": {}}

    async def execute(self, args: Dict[str, Any], registry: ToolRegistry) -> Dict[str, Any]:
        versions = {
            entry.tool_id: entry.descriptor().version for entry in registry.entries()
        }
        return {"versions": versions, "count": len(versions)}


def builtin_tools(extra: Optional[List[BuiltinTool]] = None) -> Dict[str, BuiltinTool]:
    """The built-in tools keyed by identifier."""
    tools: List[BuiltinTool] = [DiscoverTool(), DescribeTool(), SchemaTool(), VersionsTool()]
    tools.extend(extra or [])
    return {tool.name: tool for tool in tools}
