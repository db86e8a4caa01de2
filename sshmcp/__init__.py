"""
ssh-mcp: Machine Chat Protocol engine

Validates JSON request envelopes, resolves the named tool, runs it and
answers with a uniform JSON response envelope.
"""

from .base import MCPError, Request, Response, ToolDescriptor
from .config import VERSION, Settings
from .dispatcher import Dispatcher
from .registry import SearchPolicy, ToolRegistry

__version__ = VERSION

__all__ = [
    "Dispatcher",
    "MCPError",
    "Request",
    "Response",
    "SearchPolicy",
    "Settings",
    "ToolDescriptor",
    "ToolRegistry",
]
