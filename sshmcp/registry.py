"""
Tool Registry

Maps tool identifiers to exactly one runnable location. The search order is a
single SearchPolicy shared by lookup ("does this tool exist"), execution
("which copy do we run") and enumeration, so the three can never disagree.

Nothing is cached: every query probes the filesystem, which keeps discovery
in step with the tools currently on disk.
"""

import logging
import re
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterator, List, Mapping, Optional, Sequence, Tuple

from .base import BuiltinTool, ToolDescriptor, ToolNotFoundError
from .config import Settings
from .descriptor import load_descriptor

logger = logging.getLogger(__name__)

# Suffix order also decides which file wins when one directory holds both.
INTERPRETERS: Dict[str, Tuple[str, ...]] = {
    ".sh": ("bash",),
    ".py": (sys.executable,),
}

# Dotted identifiers only; rejects separators and traversal such as "../x".
TOOL_ID_PATTERN = re.compile(r"^[A-Za-z0-9_][A-Za-z0-9_-]*(\.[A-Za-z0-9_-]+)*$")


def is_valid_tool_id(tool_id: str) -> bool:
    return bool(tool_id) and TOOL_ID_PATTERN.match(tool_id) is not None


@dataclass(frozen=True)
class SearchPolicy:
    """Ordered tool directories; earlier directories shadow later ones."""
    directories: Tuple[Path, ...]
    suffixes: Tuple[str, ...] = tuple(INTERPRETERS)

    @classmethod
    def from_settings(cls, settings: Settings) -> "SearchPolicy":
        return cls(directories=tuple(settings.tool_dirs()))

    def candidates(self, tool_id: str) -> Iterator[Path]:
        for directory in self.directories:
            for suffix in self.suffixes:
                yield directory / f"{tool_id}{suffix}"

    def locate(self, tool_id: str) -> Optional[Path]:
        """First artifact for tool_id in precedence order, or None."""
        if not is_valid_tool_id(tool_id):
            return None
        for candidate in self.candidates(tool_id):
            if candidate.is_file():
                return candidate
        return None

    def scan(self) -> Dict[str, Path]:
        """
        Every discoverable tool mapped to the artifact locate() would pick.

        Walks directories and suffixes in the same order as locate(), keeping
        the first hit per identifier.
        """
        found: Dict[str, Path] = {}
        for directory in self.directories:
            if not directory.is_dir():
                continue
            try:
                files = sorted(p for p in directory.iterdir() if p.is_file())
            except OSError as e:
                logger.warning(f"Cannot read tool directory {directory}: {e}")
                continue
            for suffix in self.suffixes:
                for path in files:
                    if not path.name.endswith(suffix):
                        continue
                    tool_id = path.name[: -len(suffix)]
                    if is_valid_tool_id(tool_id):
                        found.setdefault(tool_id, path)
        return found


@dataclass(frozen=True)
class ToolEntry:
    """A resolved tool: either a script on disk or a built-in."""
    tool_id: str
    path: Optional[Path] = None
    builtin: Optional[BuiltinTool] = field(default=None, compare=False)

    @property
    def is_builtin(self) -> bool:
        return self.builtin is not None

    def command(self, args_file: str) -> List[str]:
        """argv used to launch the tool with its argument file."""
        if self.path is None:
            raise ValueError(f"Built-in tool {self.tool_id} has no command")
        interpreter = INTERPRETERS.get(self.path.suffix, ())
        return [*interpreter, str(self.path), args_file]

    def descriptor(self) -> ToolDescriptor:
        if self.builtin is not None:
            return self.builtin.descriptor()
        return load_descriptor(self.tool_id, self.path)


class ToolRegistry:
    """
    Resolution and enumeration over a SearchPolicy plus built-in tools.

    Built-ins take precedence over files with the same identifier.
    """

    def __init__(
        self,
        policy: SearchPolicy,
        builtins: Optional[Mapping[str, BuiltinTool]] = None,
    ):
        self.policy = policy
        self.builtins: Dict[str, BuiltinTool] = dict(builtins or {})

    @classmethod
    def from_settings(
        cls, settings: Settings, builtins: Optional[Mapping[str, BuiltinTool]] = None
    ) -> "ToolRegistry":
        return cls(SearchPolicy.from_settings(settings), builtins)

    def lookup(self, tool_id: str) -> Optional[ToolEntry]:
        if tool_id in self.builtins:
            return ToolEntry(tool_id, builtin=self.builtins[tool_id])
        path = self.policy.locate(tool_id)
        if path is None:
            return None
        return ToolEntry(tool_id, path=path)

    def resolve(self, tool_id: str) -> ToolEntry:
        entry = self.lookup(tool_id)
        if entry is None:
            raise ToolNotFoundError(tool_id)
        logger.debug(f"Resolved {tool_id} -> {entry.path or 'builtin'}")
        return entry

    def exists(self, tool_id: str) -> bool:
        return self.lookup(tool_id) is not None

    def entries(self) -> List[ToolEntry]:
        """All discoverable tools, sorted by identifier."""
        found: Dict[str, ToolEntry] = {
            tool_id: ToolEntry(tool_id, path=path)
            for tool_id, path in self.policy.scan().items()
        }
        for tool_id, builtin in self.builtins.items():
            found[tool_id] = ToolEntry(tool_id, builtin=builtin)
        return [found[tool_id] for tool_id in sorted(found)]

    def list(self) -> List[str]:
        return [entry.tool_id for entry in self.entries()]

    def describe(self, tool_id: str) -> ToolDescriptor:
        return self.resolve(tool_id).descriptor()

    def search_dirs(self) -> Sequence[Path]:
        return self.policy.directories
