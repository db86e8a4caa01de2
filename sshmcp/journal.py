"""
Request/Response Journal

Append-only text log with one line per entry:

    2026-01-01T12:00:00Z [conv-1] REQUEST: {"tool": "system.info", ...}
    2026-01-01T12:00:00Z [conv-1] RESPONSE: {"conversation_id": "conv-1", ...}

Writes are serialized within the process by a lock and across processes by an
advisory file lock. The journal is best-effort: a failed write is reported
through logging and never reaches the caller.
"""

import fcntl
import json
import logging
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, List, Optional, Union

from .base import Response

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def _timestamp() -> str:
    return datetime.now(timezone.utc).strftime(TIMESTAMP_FORMAT)


def _one_line(request: Any) -> str:
    """Render a request for the journal without embedded newlines."""
    if isinstance(request, (bytes, bytearray)):
        request = bytes(request).decode("utf-8", errors="replace")
    if isinstance(request, str):
        try:
            request = json.loads(request)
        except ValueError:
            # Not JSON: keep it as a quoted string literal.
            return json.dumps(request, ensure_ascii=False)
    return json.dumps(request, ensure_ascii=False, default=str)


class Journal:
    """Append-only request/response log."""

    def __init__(self, path: Optional[Union[str, Path]]):
        self.path = Path(path) if path else None
        self._write_lock = threading.Lock()

    @property
    def enabled(self) -> bool:
        return self.path is not None

    def record(self, conversation_id: str, request: Any, response: Response) -> None:
        """Append a REQUEST/RESPONSE line pair."""
        if not self.enabled:
            return
        ts = _timestamp()
        try:
            lines = [
                f"{ts} [{conversation_id}] REQUEST: {_one_line(request)}",
                f"{ts} [{conversation_id}] RESPONSE: {response.to_json()}",
            ]
        except Exception as e:
            logger.warning(f"Failed to render journal entry: {e}")
            return
        self._write(lines)

    def _write(self, lines: List[str]) -> None:
        with self._write_lock:
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                with open(self.path, "a", encoding="utf-8") as f:
                    fcntl.flock(f.fileno(), fcntl.LOCK_EX)
                    try:
                        f.write("\n".join(lines) + "\n")
                        f.flush()
                    finally:
                        fcntl.flock(f.fileno(), fcntl.LOCK_UN)
            except Exception as e:
                logger.warning(f"Failed to write journal {self.path}: {e}")
