"""
Response Builder

Pure functions producing response envelopes. Nothing here touches the
filesystem or the journal.
"""

import json
from typing import Any, Dict, List, Optional, Tuple

from .base import (
    EXECUTION_ERROR,
    EXECUTION_TIMEOUT,
    INVALID_TOOL_OUTPUT,
    NO_CONVERSATION,
    ErrorInfo,
    ExecutionOutcome,
    MCPError,
    Request,
    Response,
    Status,
)

SUCCESS = Status(0, "Success")

TIMEOUT_STATUS = 504
INVALID_OUTPUT_STATUS = 502

# Longest slice of a tool's raw output echoed back in error details.
MAX_ECHOED_OUTPUT = 2000


def _hoist(result: Any) -> Tuple[Any, Optional[str], Optional[List[Dict[str, Any]]]]:
    """
    Split tool-supplied explanation/suggestions out of a result object.

    The input is never mutated.
    """
    if not isinstance(result, dict):
        return result, None, None

    explanation = result.get("explanation")
    suggestions = result.get("suggestions")
    if not isinstance(explanation, str):
        explanation = None
    if not isinstance(suggestions, list):
        suggestions = None
    if explanation is None and suggestions is None:
        return result, None, None

    remaining = {
        key: value
        for key, value in result.items()
        if not (key == "explanation" and explanation is not None)
        and not (key == "suggestions" and suggestions is not None)
    }
    return remaining, explanation, suggestions


def success(request: Request, result: Any) -> Response:
    """Envelope for a result value; a null result is reported as invalid output."""
    if result is None:
        return invalid_output(request, "null", "Tool produced a null result")

    result, explanation, suggestions = _hoist(result)
    return Response(
        conversation_id=request.conversation_id,
        status=SUCCESS,
        result=result,
        error=None,
        explanation=explanation,
        suggestions=suggestions,
    )


def from_error(error: MCPError, conversation_id: str = NO_CONVERSATION) -> Response:
    return Response(
        conversation_id=conversation_id,
        status=Status(error.status, error.status_message),
        result=None,
        error=error.to_error(),
    )


def invalid_output(request: Request, stdout: str, message: str) -> Response:
    return Response(
        conversation_id=request.conversation_id,
        status=Status(INVALID_OUTPUT_STATUS, "Invalid tool output"),
        result=None,
        error=ErrorInfo(
            code=INVALID_TOOL_OUTPUT,
            message=message,
            details={"stdout": stdout[:MAX_ECHOED_OUTPUT]},
        ),
    )


def from_outcome(request: Request, outcome: ExecutionOutcome) -> Response:
    """Classify a subprocess outcome: exit 0 succeeds, anything else fails."""
    if outcome.timed_out:
        return Response(
            conversation_id=request.conversation_id,
            status=Status(TIMEOUT_STATUS, "Tool execution timed out"),
            result=None,
            error=ErrorInfo(
                code=EXECUTION_TIMEOUT,
                message=f"Tool did not finish within {outcome.timeout} seconds",
                details={"timeout": outcome.timeout},
            ),
        )

    if outcome.exit_code != 0:
        return Response(
            conversation_id=request.conversation_id,
            status=Status(outcome.exit_code, "Tool execution failed"),
            result=None,
            error=ErrorInfo(
                code=EXECUTION_ERROR,
                message=outcome.stderr or f"Tool exited with status {outcome.exit_code}",
                details={"exit_code": outcome.exit_code},
            ),
        )

    try:
        result = json.loads(outcome.stdout)
    except ValueError as e:
        return invalid_output(request, outcome.stdout, f"Tool output is not valid JSON: {e}")

    return success(request, result)
