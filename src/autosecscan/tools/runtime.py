"""Subprocess helpers for external probe binaries such as nmap."""

import asyncio
import logging
import shlex
import shutil
import time
from collections.abc import Iterable
from dataclasses import dataclass

logger = logging.getLogger(__name__)

TERMINATE_GRACE = 3.0


@dataclass
class CommandResult:
    """Decoded output of a finished probe process."""

    command: list[str]
    returncode: int
    stdout: str
    stderr: str

    def first_error_line(self) -> str:
        lines = (self.stderr or self.stdout).strip().splitlines()
        return lines[0] if lines else "unknown error"


def resolve_binary(name: str) -> str | None:
    """Absolute path of *name* on PATH, or None."""
    return shutil.which(name)


async def _stop_process(process: asyncio.subprocess.Process) -> None:
    """SIGTERM, then SIGKILL once the grace period runs out."""
    if process.returncode is not None:
        return
    process.terminate()
    try:
        await asyncio.wait_for(process.wait(), timeout=TERMINATE_GRACE)
    except TimeoutError:
        process.kill()
        await process.wait()


async def run_command(
    command: list[str],
    timeout: float | None = None,
    allowed_exit_codes: Iterable[int] = (0,),
) -> CommandResult:
    """Run *command* and capture its decoded output.

    The child is stopped when *timeout* elapses or the awaiting task is
    cancelled, so an abandoned probe never outlives its caller.
    """
    preview = shlex.join(command)
    logger.debug("running: %s", preview)
    started = time.perf_counter()
    process = await asyncio.create_subprocess_exec(
        *command,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )
    try:
        stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=timeout)
    except TimeoutError:
        await _stop_process(process)
        raise TimeoutError(f"Command timed out after {timeout:.1f}s: {preview}") from None
    except asyncio.CancelledError:
        await asyncio.shield(_stop_process(process))
        raise

    result = CommandResult(
        command=list(command),
        returncode=process.returncode,
        stdout=stdout.decode(errors="replace"),
        stderr=stderr.decode(errors="replace"),
    )
    if result.returncode not in set(allowed_exit_codes):
        raise RuntimeError(
            f"Command failed with exit code {result.returncode}: {result.first_error_line()}"
        )
    logger.debug("done (%.2fs): exit=%s", time.perf_counter() - started, result.returncode)
    return result
