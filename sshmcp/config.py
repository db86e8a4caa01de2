"""
Runtime configuration.

Values come from the process environment (optionally seeded from a .env file
by the entry points) and are gathered into a Settings object that is passed
explicitly to the dispatcher.
"""

import logging
import math
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple

logger = logging.getLogger(__name__)

VERSION = "0.1.0"

PACKAGE_DIR = Path(__file__).resolve().parent
BUNDLED_TOOL_DIR = PACKAGE_DIR / "tools"

DEFAULT_HOME = Path(os.path.expanduser("~")) / ".ssh-mcp"


def _flag(value: Optional[str], default: bool) -> bool:
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _seconds(name: str, default: float) -> float:
    """Read a non-negative number of seconds, keeping the default on bad input."""
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    try:
        seconds = float(value)
    except ValueError:
        logger.warning(f"Ignoring {name}={value!r}: not a number, using {default}")
        return default
    if not math.isfinite(seconds) or seconds < 0:
        logger.warning(f"Ignoring {name}={value!r}: must be a finite number >= 0, using {default}")
        return default
    return seconds


def _split(value: Optional[str], sep: str) -> List[str]:
    if not value:
        return []
    return [item.strip() for item in value.split(sep) if item.strip()]


@dataclass
class Settings:
    """Engine configuration."""
    extra_tool_dirs: Tuple[Path, ...] = ()
    local_tool_dir: Optional[Path] = field(default_factory=lambda: Path.cwd() / "tools")
    global_tool_dir: Optional[Path] = DEFAULT_HOME / "tools"
    include_bundled: bool = True
    log_file: Optional[Path] = DEFAULT_HOME / "mcp.log"
    tool_timeout: Optional[float] = 60.0
    kill_grace: float = 2.0
    required_commands: Tuple[str, ...] = ()
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls) -> "Settings":
        local = os.getenv("MCP_LOCAL_TOOL_DIR")
        global_dir = os.getenv("MCP_GLOBAL_TOOL_DIR")
        log_file = os.getenv("MCP_LOG_FILE")
        timeout = _seconds("MCP_TOOL_TIMEOUT", 60.0)

        return cls(
            extra_tool_dirs=tuple(
                Path(p).expanduser() for p in _split(os.getenv("MCP_TOOL_PATH"), os.pathsep)
            ),
            local_tool_dir=Path(local).expanduser() if local else Path.cwd() / "tools",
            global_tool_dir=Path(global_dir).expanduser() if global_dir else DEFAULT_HOME / "tools",
            include_bundled=_flag(os.getenv("MCP_BUNDLED_TOOLS"), True),
            # An explicitly empty MCP_LOG_FILE disables the journal.
            log_file=(
                DEFAULT_HOME / "mcp.log"
                if log_file is None
                else (Path(log_file).expanduser() if log_file else None)
            ),
            tool_timeout=timeout if timeout > 0 else None,
            kill_grace=_seconds("MCP_KILL_GRACE", 2.0),
            required_commands=tuple(_split(os.getenv("MCP_REQUIRED_COMMANDS"), ",")),
            log_level=os.getenv("MCP_LOG_LEVEL", "WARNING").upper(),
        )

    def tool_dirs(self) -> List[Path]:
        """
        Tool search directories in precedence order.

        Extra directories from MCP_TOOL_PATH come first, then the
        development-local directory, then the user-global install, then the
        tools bundled with the package.
        """
        dirs: List[Path] = list(self.extra_tool_dirs)
        for candidate in (self.local_tool_dir, self.global_tool_dir):
            if candidate is not None:
                dirs.append(candidate)
        if self.include_bundled:
            dirs.append(BUNDLED_TOOL_DIR)

        unique: List[Path] = []
        for d in dirs:
            if d not in unique:
                unique.append(d)
        return unique
