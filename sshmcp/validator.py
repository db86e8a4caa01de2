"""
Request Validator

Turns a raw payload into a Request or raises the matching protocol error.
Dependencies are checked before the payload is looked at.
"""

import json
import logging
import shutil
from types import ModuleType
from typing import Any, Dict, Optional, Sequence, Union

from .base import (
    NO_CONVERSATION,
    InvalidJSONError,
    InvalidRequestError,
    MissingDependencyError,
    Request,
)

logger = logging.getLogger(__name__)

Payload = Union[bytes, bytearray, str]


class RequestValidator:
    """
    Parses and structurally validates request envelopes.

    Args:
        codec: module providing loads/dumps; None models a runtime without
               JSON support.
        required_commands: executables that must be resolvable on PATH.
    """

    def __init__(
        self,
        codec: Optional[ModuleType] = json,
        required_commands: Sequence[str] = (),
    ):
        self.codec = codec
        self.required_commands = tuple(required_commands)

    def check_dependencies(self) -> None:
        if self.codec is None or not all(
            callable(getattr(self.codec, attr, None)) for attr in ("loads", "dumps")
        ):
            raise MissingDependencyError(
                "JSON support is not available but required for request processing",
                details={"dependency": "json"},
            )

        missing = [cmd for cmd in self.required_commands if shutil.which(cmd) is None]
        if missing:
            raise MissingDependencyError(
                f"{', '.join(missing)} not installed but required",
                details={"missing": missing},
            )

    def decode(self, payload: Payload) -> Any:
        """Decode the payload as JSON without checking its shape."""
        if isinstance(payload, (bytes, bytearray)):
            try:
                payload = bytes(payload).decode("utf-8")
            except UnicodeDecodeError as e:
                raise InvalidJSONError(
                    "The input is not valid UTF-8 text", details={"reason": str(e)}
                )

        if not payload.strip():
            raise InvalidJSONError("The input is empty")

        try:
            return self.codec.loads(payload)
        except ValueError as e:
            raise InvalidJSONError("The input is not valid JSON", details={"reason": str(e)})

    def parse(self, payload: Payload) -> Request:
        self.check_dependencies()
        return self.from_object(self.decode(payload))

    def from_object(self, data: Any) -> Request:
        if not isinstance(data, dict):
            raise InvalidRequestError(
                "The request must be a JSON object",
                details={"type": type(data).__name__},
            )

        conversation_id = self._conversation_id(data.get("conversation_id"))

        tool = data.get("tool")
        if not isinstance(tool, str) or not tool.strip():
            raise InvalidRequestError(
                "The 'tool' field is required and must be a non-empty string",
                details={"field": "tool"},
                conversation_id=conversation_id,
            )

        args = data.get("args")
        if args is None:
            args = {}
        elif not isinstance(args, dict):
            raise InvalidRequestError(
                "The 'args' field must be a JSON object",
                details={"field": "args", "type": type(args).__name__},
                conversation_id=conversation_id,
            )

        return Request(
            tool=tool.strip(),
            args=args,
            conversation_id=conversation_id,
            context=self._context(data.get("context"), conversation_id),
        )

    @staticmethod
    def _conversation_id(value: Any) -> str:
        if value is None:
            return NO_CONVERSATION
        if isinstance(value, bool) or not isinstance(value, (str, int, float)):
            raise InvalidRequestError(
                "The 'conversation_id' field must be a string",
                details={"field": "conversation_id"},
            )
        return str(value)

    @staticmethod
    def _context(value: Any, conversation_id: str) -> Optional[Dict[str, Any]]:
        if value is None:
            return None
        if not isinstance(value, dict):
            raise InvalidRequestError(
                "The 'context' field must be a JSON object",
                details={"field": "context"},
                conversation_id=conversation_id,
            )
        return value
