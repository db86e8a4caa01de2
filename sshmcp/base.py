"""
Protocol Types and Error Taxonomy

Every envelope the engine emits is assembled from the dataclasses below, and
every failure a component can report is an MCPError subclass carrying its
protocol error code and HTTP-style status.
"""

import json
from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

NO_CONVERSATION = "none"

DEFAULT_AUTHOR = "Unknown"
DEFAULT_VERSION = "1.0.0"
DEFAULT_DESCRIPTION = "No description available"


def default_schema() -> Dict[str, Any]:
    """Schema reported for tools that do not declare one."""
    return {"type": "object", "properties": {}}


# ============== Envelopes ==============


@dataclass
class Request:
    """A validated inbound request envelope."""
    tool: str
    args: Dict[str, Any] = field(default_factory=dict)
    conversation_id: str = NO_CONVERSATION
    context: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "tool": self.tool,
            "args": self.args,
            "conversation_id": self.conversation_id,
        }
        if self.context is not None:
            data["context"] = self.context
        return data


@dataclass
class Status:
    code: int
    message: str


@dataclass
class ErrorInfo:
    code: str
    message: str
    details: Dict[str, Any] = field(default_factory=dict)


@dataclass
class Response:
    """
    Outbound envelope.

    Exactly one of result/error is non-null. explanation and suggestions are
    only serialized when a tool supplied them.
    """
    conversation_id: str
    status: Status
    result: Any = None
    error: Optional[ErrorInfo] = None
    explanation: Optional[str] = None
    suggestions: Optional[List[Dict[str, Any]]] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "conversation_id": self.conversation_id,
            "status": asdict(self.status),
            "result": self.result,
            "error": asdict(self.error) if self.error else None,
        }
        if self.explanation is not None:
            data["explanation"] = self.explanation
        if self.suggestions is not None:
            data["suggestions"] = self.suggestions
        return data

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False, default=str)


@dataclass
class ExecutionOutcome:
    """What the sandbox observed while running one tool subprocess."""
    exit_code: int
    stdout: str = ""
    stderr: str = ""
    timed_out: bool = False
    timeout: Optional[float] = None
    duration_ms: float = 0.0

    @property
    def succeeded(self) -> bool:
        return not self.timed_out and self.exit_code == 0


@dataclass(frozen=True)
class ToolDescriptor:
    """Read-only metadata describing one tool, rebuilt on every query."""
    name: str
    description: str = DEFAULT_DESCRIPTION
    version: str = DEFAULT_VERSION
    author: str = DEFAULT_AUTHOR
    tags: Tuple[str, ...] = ()
    schema: Dict[str, Any] = field(default_factory=dict)
    args_doc: Tuple[str, ...] = ()
    examples: Tuple[str, ...] = ()
    created: Optional[str] = None
    source: Optional[Path] = None

    def effective_schema(self) -> Dict[str, Any]:
        """The declared schema, or the minimal object schema when there is none."""
        return dict(self.schema) if self.schema else default_schema()

    def summary(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "version": self.version,
            "author": self.author,
            "tags": list(self.tags),
        }

    def to_dict(self) -> Dict[str, Any]:
        data = self.summary()
        data.update(
            {
                "created": self.created,
                "args_doc": list(self.args_doc),
                "examples": list(self.examples),
                "schema": self.effective_schema(),
            }
        )
        return data


# ============== Errors ==============


class MCPError(Exception):
    """Base exception for protocol-level failures."""

    code = "INTERNAL_ERROR"
    status = 500
    status_message = "Internal error"

    def __init__(self, message: str, details: Dict = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def to_error(self) -> ErrorInfo:
        return ErrorInfo(code=self.code, message=self.message, details=dict(self.details))


class InvalidJSONError(MCPError):
    """Raised when the request payload is not valid JSON."""
    code = "INVALID_JSON"
    status = 400
    status_message = "Invalid JSON"


class InvalidRequestError(MCPError):
    """Raised when the payload is JSON but not a well-formed request envelope."""
    code = "INVALID_REQUEST"
    status = 400
    status_message = "Invalid request"

    def __init__(self, message: str, details: Dict = None, conversation_id: str = NO_CONVERSATION):
        # Echoed in the envelope when the rejected object carried a usable id.
        self.conversation_id = conversation_id
        super().__init__(message, details=details)


class MissingDependencyError(MCPError):
    """Raised when a runtime dependency required to process requests is absent."""
    code = "MISSING_DEPENDENCY"
    status = 500
    status_message = "Missing dependency"


class ToolNotFoundError(MCPError):
    """Raised when a tool identifier cannot be resolved."""
    code = "TOOL_NOT_FOUND"
    status = 404
    status_message = "Tool not found"

    def __init__(self, tool: str, message: str = None):
        self.tool = tool
        super().__init__(
            message or f"The requested tool does not exist: {tool}",
            details={"tool": tool},
        )


class InvalidArgsError(MCPError):
    """Raised by built-in tools when their arguments are unusable."""
    code = "INVALID_ARGS"
    status = 400
    status_message = "Invalid arguments"


class InternalError(MCPError):
    """Wraps an unexpected fault so it can still be reported as an envelope."""


# Raised before a request is accepted; the CLI exits 1 on these.
FATAL_CODES = frozenset(
    cls.code for cls in (InvalidJSONError, InvalidRequestError, MissingDependencyError)
)


EXECUTION_ERROR = "EXECUTION_ERROR"
EXECUTION_TIMEOUT = "EXECUTION_TIMEOUT"
INVALID_TOOL_OUTPUT = "INVALID_TOOL_OUTPUT"


# ============== Built-in tools ==============


class BuiltinTool(ABC):
    """
    A tool implemented inside the engine rather than as an executable.

    Subclasses provide the same metadata a script carries in its header and
    implement execute(), which receives the request args and the registry
    serving the current request.
    """

    author = "ssh-mcp Team"
    version = "0.1.0"
    tags: Tuple[str, ...] = ()
    args_doc: Tuple[str, ...] = ()
    examples: Tuple[str, ...] = ()

    @property
    @abstractmethod
    def name(self) -> str:
        """Dotted tool identifier."""
        pass

    @property
    @abstractmethod
    def description(self) -> str:
        pass

    @property
    def schema(self) -> Dict[str, Any]:
        return {}

    def descriptor(self) -> ToolDescriptor:
        return ToolDescriptor(
            name=self.name,
            description=self.description,
            version=self.version,
            author=self.author,
            tags=tuple(self.tags),
            schema=self.schema,
            args_doc=tuple(self.args_doc),
            examples=tuple(self.examples),
        )

    @abstractmethod
    async def execute(self, args: Dict[str, Any], registry: Any) -> Any:
        """
        Run the tool.

        Returns a JSON-serializable result; may raise MCPError subclasses.
        """
        pass
