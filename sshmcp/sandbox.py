"""
Execution Sandbox

Runs a resolved tool as a subprocess. The args object never reaches the
command line: it is written to a private temporary file whose path is the
tool's only argument, and that file is removed however the run ends.
"""

import asyncio
import contextlib
import json
import logging
import os
import signal
import tempfile
import time
from typing import Any, Dict, Iterator, Optional

from .base import ExecutionOutcome
from .registry import ToolEntry

logger = logging.getLogger(__name__)

# Shell conventions for "found but not runnable" and "not found".
EXIT_NOT_EXECUTABLE = 126
EXIT_NOT_FOUND = 127


@contextlib.contextmanager
def args_file(args: Dict[str, Any], directory: Optional[str] = None) -> Iterator[str]:
    """Write args to a uniquely named file and delete it on exit."""
    fd, path = tempfile.mkstemp(prefix="mcp-args-", suffix=".json", dir=directory)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(args, f, ensure_ascii=False)
        yield path
    finally:
        with contextlib.suppress(FileNotFoundError):
            os.unlink(path)


class Sandbox:
    """
    Subprocess runner with an optional execution deadline.

    Args:
        timeout: seconds before the tool is terminated; None waits forever.
        kill_grace: seconds between SIGTERM and SIGKILL once the deadline hits.
        tmp_dir: where argument files are created (system default if None).
    """

    def __init__(
        self,
        timeout: Optional[float] = 60.0,
        kill_grace: float = 2.0,
        tmp_dir: Optional[str] = None,
    ):
        self.timeout = timeout
        self.kill_grace = kill_grace
        self.tmp_dir = tmp_dir

    async def execute(self, entry: ToolEntry, args: Dict[str, Any]) -> ExecutionOutcome:
        start_time = time.time()

        with args_file(args, self.tmp_dir) as path:
            command = entry.command(path)
            logger.info(f"Executing {entry.tool_id}: {command[-2]}")

            try:
                proc = await asyncio.create_subprocess_exec(
                    *command,
                    stdin=asyncio.subprocess.DEVNULL,
                    stdout=asyncio.subprocess.PIPE,
                    stderr=asyncio.subprocess.PIPE,
                    start_new_session=True,
                )
            except FileNotFoundError as e:
                return self._launch_failure(EXIT_NOT_FOUND, e, start_time)
            except OSError as e:
                return self._launch_failure(EXIT_NOT_EXECUTABLE, e, start_time)

            try:
                stdout, stderr = await asyncio.wait_for(proc.communicate(), self.timeout)
            except asyncio.TimeoutError:
                await self._terminate(proc)
                logger.warning(f"{entry.tool_id} exceeded {self.timeout}s and was terminated")
                return ExecutionOutcome(
                    exit_code=proc.returncode if proc.returncode is not None else -1,
                    timed_out=True,
                    timeout=self.timeout,
                    duration_ms=(time.time() - start_time) * 1000,
                )
            except asyncio.CancelledError:
                await self._terminate(proc)
                raise

        outcome = ExecutionOutcome(
            exit_code=proc.returncode,
            stdout=stdout.decode("utf-8", errors="replace"),
            stderr=stderr.decode("utf-8", errors="replace"),
            duration_ms=(time.time() - start_time) * 1000,
        )
        logger.info(
            f"{entry.tool_id} exited with {outcome.exit_code} in {outcome.duration_ms:.0f}ms"
        )
        return outcome

    async def _terminate(self, proc: asyncio.subprocess.Process) -> None:
        if proc.returncode is not None:
            return
        # Tools run in their own session; signal the whole group.
        _signal_group(proc, signal.SIGTERM)
        try:
            await asyncio.wait_for(proc.wait(), self.kill_grace)
        except asyncio.TimeoutError:
            _signal_group(proc, signal.SIGKILL)
            await proc.wait()

    @staticmethod
    def _launch_failure(exit_code: int, error: OSError, start_time: float) -> ExecutionOutcome:
        logger.error(f"Failed to launch tool: {error}")
        return ExecutionOutcome(
            exit_code=exit_code,
            stderr=f"Failed to launch tool: {error}",
            duration_ms=(time.time() - start_time) * 1000,
        )


def _signal_group(proc: asyncio.subprocess.Process, sig: int) -> None:
    try:
        os.killpg(proc.pid, sig)
    except ProcessLookupError:
        pass
    except PermissionError:
        with contextlib.suppress(ProcessLookupError):
            proc.send_signal(sig)
