"""
Shared fixtures: temporary tool directories and a dispatcher wired to them.
"""

import asyncio
import json
import textwrap
from pathlib import Path
from typing import Callable

import pytest

from sshmcp.config import Settings
from sshmcp.dispatcher import Dispatcher

ECHO_TOOL = '''\
#!/usr/bin/env python3
# Tool: test.echo - Echoes its arguments back
# Author: Test Suite
# Version: 2.0.0
# Tags: test, echo
#
# Args:
#   message: Text to echo (string)
#
# Example:
#   {"tool": "test.echo", "args": {"message": "hi"}}
#
# Schema:
# {
#   "type": "object",
#   "properties": {"message": {"type": "string"}}
# }
# End Schema
import json, sys
with open(sys.argv[1]) as f:
    args = json.load(f)
print(json.dumps({"echo": args, "argv": sys.argv[1:]}))
'''

FAIL_TOOL = '''\
#!/usr/bin/env python3
# Tool: test.fail - Always fails
# Tags: test
import sys
sys.stderr.write("something broke")
sys.exit(3)
'''


@pytest.fixture
def tool_dirs(tmp_path) -> dict:
    """Empty local and global tool directories."""
    dirs = {"local": tmp_path / "local", "global": tmp_path / "global"}
    for d in dirs.values():
        d.mkdir()
    return dirs


@pytest.fixture
def write_tool() -> Callable[..., Path]:
    """Write a tool script: write_tool(directory, "name.py", source)."""

    def _write(directory: Path, filename: str, source: str) -> Path:
        path = directory / filename
        path.write_text(textwrap.dedent(source), encoding="utf-8")
        path.chmod(0o755)
        return path

    return _write


@pytest.fixture
def settings(tool_dirs, tmp_path) -> Settings:
    """Settings isolated from the user's environment, without bundled tools."""
    return Settings(
        local_tool_dir=tool_dirs["local"],
        global_tool_dir=tool_dirs["global"],
        include_bundled=False,
        log_file=tmp_path / "mcp.log",
        tool_timeout=10.0,
        kill_grace=1.0,
    )


@pytest.fixture
def dispatcher(settings) -> Dispatcher:
    return Dispatcher(settings)


@pytest.fixture
def populated(tool_dirs, write_tool) -> dict:
    """Local directory holding an echo tool and a failing tool."""
    write_tool(tool_dirs["local"], "test.echo.py", ECHO_TOOL)
    write_tool(tool_dirs["local"], "test.fail.py", FAIL_TOOL)
    return tool_dirs


@pytest.fixture
def handle(dispatcher) -> Callable:
    """Run a request dict (or raw payload) through the dispatcher, return the envelope."""

    def _handle(request) -> dict:
        payload = request if isinstance(request, (str, bytes)) else json.dumps(request)
        return asyncio.run(dispatcher.handle(payload)).to_dict()

    return _handle

