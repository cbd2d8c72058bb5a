"""Bounded child process execution for discovery probes."""

import asyncio
import contextlib
from typing import Awaitable, Callable, Sequence, TypeAlias

from cython_forge.types import ProcessResult
from cython_forge.logging import get_logger

logger = get_logger(__name__)

DEFAULT_MAX_OUTPUT = 1024 * 1024
READ_CHUNK = 64 * 1024

ProcessRunner: TypeAlias = Callable[[str, Sequence[str], float, int], Awaitable[ProcessResult]]


def _kill(process: asyncio.subprocess.Process) -> None:
    if process.returncode is None:
        with contextlib.suppress(ProcessLookupError):
            process.kill()


async def run_process(
    command: str,
    args: Sequence[str],
    timeout: float,
    max_output_bytes: int = DEFAULT_MAX_OUTPUT,
) -> ProcessResult:
    """Run command without a shell and capture its output.

    Raises OSError if the executable cannot be started. A process that
    outlives ``timeout`` seconds or writes more than ``max_output_bytes``
    on either stream is killed.
    """
    logger.debug({"event": "process_exec", "command": command, "args": list(args)})

    process = await asyncio.create_subprocess_exec(
        command,
        *args,
        stdin=asyncio.subprocess.DEVNULL,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )

    overflowed = False

    async def read_stream(stream: asyncio.StreamReader) -> bytes:
        nonlocal overflowed
        chunks: list[bytes] = []
        size = 0
        while chunk := await stream.read(READ_CHUNK):
            size += len(chunk)
            if size > max_output_bytes:
                overflowed = True
                _kill(process)
                break
            chunks.append(chunk)
        return b"".join(chunks)

    try:
        stdout, stderr, _ = await asyncio.wait_for(
            asyncio.gather(
                read_stream(process.stdout),
                read_stream(process.stderr),
                process.wait(),
            ),
            timeout=timeout,
        )
    except asyncio.TimeoutError:
        _kill(process)
        await process.wait()
        logger.debug({"event": "process_timeout", "command": command, "timeout": timeout})
        return ProcessResult(returncode=process.returncode, timed_out=True)

    logger.debug(
        {
            "event": "process_complete",
            "command": command,
            "returncode": process.returncode,
            "overflowed": overflowed,
        }
    )

    return ProcessResult(
        returncode=process.returncode,
        stdout=stdout,
        stderr=stderr,
        overflowed=overflowed,
    )
