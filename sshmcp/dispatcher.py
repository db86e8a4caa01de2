"""
Dispatcher

Orchestrates a single request:

    validate -> resolve -> execute (subprocess or built-in) -> build -> journal

Every failure becomes a response envelope here; nothing escapes to the
transport. A fresh registry is built for each request, so no state survives
between calls.
"""

import json
import logging
from typing import Any, Dict, Mapping, Optional

from . import response as responses
from .base import (
    NO_CONVERSATION,
    BuiltinTool,
    InternalError,
    MCPError,
    Request,
    Response,
)
from .config import Settings
from .journal import Journal
from .meta import builtin_tools
from .registry import SearchPolicy, ToolRegistry
from .sandbox import Sandbox
from .validator import Payload, RequestValidator

logger = logging.getLogger(__name__)


class Dispatcher:
    """
    Entry point of the protocol engine.

    Collaborators default to the ones described by settings and can be
    replaced individually (mainly for testing).
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        validator: Optional[RequestValidator] = None,
        sandbox: Optional[Sandbox] = None,
        journal: Optional[Journal] = None,
        builtins: Optional[Mapping[str, BuiltinTool]] = None,
    ):
        self.settings = settings or Settings.from_env()
        self.policy = SearchPolicy.from_settings(self.settings)
        self.validator = validator or RequestValidator(
            required_commands=self.settings.required_commands
        )
        self.sandbox = sandbox or Sandbox(
            timeout=self.settings.tool_timeout,
            kill_grace=self.settings.kill_grace,
        )
        self.journal = journal or Journal(self.settings.log_file)
        self.builtins = dict(builtins) if builtins is not None else builtin_tools()

    def registry(self) -> ToolRegistry:
        return ToolRegistry(self.policy, self.builtins)

    async def handle(self, payload: Payload) -> Response:
        """Process a raw request payload and return its response envelope."""
        try:
            request = self.validator.parse(payload)
        except MCPError as e:
            logger.info(f"Rejected request: {e.code} {e.message}")
            rejected = responses.from_error(
                e, getattr(e, "conversation_id", NO_CONVERSATION)
            )
        except Exception as e:
            logger.exception("Unexpected error while validating request")
            rejected = responses.from_error(
                InternalError(str(e), details={"type": type(e).__name__})
            )
        else:
            result = await self.dispatch(request)
            self.journal.record(request.conversation_id, payload, result)
            return result

        self.journal.record(rejected.conversation_id, payload, rejected)
        return rejected

    async def call(
        self,
        tool: str,
        args: Optional[Dict[str, Any]] = None,
        conversation_id: str = NO_CONVERSATION,
    ) -> Response:
        """Shorthand used by the CLI flags and HTTP routes."""
        payload = json.dumps(
            {"tool": tool, "args": args or {}, "conversation_id": conversation_id}
        )
        return await self.handle(payload)

    async def dispatch(self, request: Request) -> Response:
        """Resolve and run a validated request."""
        registry = self.registry()
        try:
            entry = registry.resolve(request.tool)
            if entry.is_builtin:
                result = await entry.builtin.execute(request.args, registry)
                return responses.success(request, result)

            outcome = await self.sandbox.execute(entry, request.args)
            return responses.from_outcome(request, outcome)

        except MCPError as e:
            logger.info(f"{request.tool}: {e.code} {e.message}")
            return responses.from_error(e, request.conversation_id)
        except Exception as e:
            logger.exception(f"Unexpected error while handling {request.tool}")
            return responses.from_error(
                InternalError(str(e), details={"type": type(e).__name__}),
                request.conversation_id,
            )
