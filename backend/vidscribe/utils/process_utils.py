"""
Async subprocess execution for external tools (yt-dlp, ffprobe).

The event loop suspends on the child process instead of polling. When the
awaiting task is cancelled (e.g. the caller disconnected), the child process
is killed before the cancellation propagates.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable

logger = logging.getLogger(__name__)


@dataclass
class ProcessResult:
    """
    Completed subprocess output.

    Attributes:
        returncode: Process exit code
        stdout: Decoded standard output
        stderr: Decoded standard error (diagnostic channel)
    """

    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


# Signature: (command, timeout_seconds) -> ProcessResult
ProcessRunner = Callable[[list[str], float | None], Awaitable[ProcessResult]]


async def run_process(cmd: list[str], timeout: float | None = None) -> ProcessResult:
    """
    Run a command and capture its output.

    Args:
        cmd: Command and arguments (no shell)
        timeout: Seconds before the process is killed (None = no limit)

    Returns:
        ProcessResult with exit code and decoded output

    Raises:
        FileNotFoundError: If the executable does not exist
        asyncio.TimeoutError: If the timeout expires (process is killed)
    """
    logger.debug(f"Running: {' '.join(cmd)}")

    process = await asyncio.create_subprocess_exec(
        *cmd,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )

    try:
        stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=timeout)
    except (asyncio.TimeoutError, asyncio.CancelledError):
        await _kill(process)
        raise

    return ProcessResult(
        returncode=process.returncode if process.returncode is not None else -1,
        stdout=stdout.decode("utf-8", errors="replace"),
        stderr=stderr.decode("utf-8", errors="replace"),
    )


async def _kill(process: asyncio.subprocess.Process) -> None:
    """Kill a still-running process and reap it."""
    if process.returncode is not None:
        return
    try:
        process.kill()
    except ProcessLookupError:
        return
    await process.wait()
    logger.info(f"Killed subprocess pid={process.pid}")
