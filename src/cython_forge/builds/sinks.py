"""Command sinks that receive the final build command line."""

import asyncio
import contextlib
import os
import signal
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Protocol

import appdirs
from fuuid import b58_fuuid

from cython_forge.logging import get_logger

logger = get_logger(__name__)


class CommandSink(Protocol):
    """A terminal-like surface; one handle per build session."""

    async def create(self, name: str):
        ...

    async def submit(self, handle, command_line: str) -> None:
        ...

    async def dispose(self, handle) -> None:
        ...


@dataclass
class ShellSession:
    """A shell session whose output is written to a log file"""
    id: str
    name: str
    log_path: Path
    process: Optional[asyncio.subprocess.Process] = field(default=None, repr=False)

    @property
    def running(self) -> bool:
        return self.process is not None and self.process.returncode is None


class ShellCommandSink:
    """Launch command lines through the system shell without awaiting them."""

    def __init__(self, log_dir: Optional[Path] = None, env: Optional[dict[str, str]] = None):
        self.log_dir = log_dir or Path(appdirs.user_log_dir("cython-forge"))
        self.env = env

    async def create(self, name: str) -> ShellSession:
        self.log_dir.mkdir(parents=True, exist_ok=True)
        session_id = b58_fuuid()
        session = ShellSession(
            id=session_id, name=name, log_path=self.log_dir / f"build-{session_id}.log"
        )
        logger.debug({"event": "shell_session_created", "id": session.id, "name": name})
        return session

    async def submit(self, session: ShellSession, command_line: str) -> None:
        if session.process is not None:
            raise RuntimeError(f"Session {session.id} already ran a command")

        with open(session.log_path, "ab") as log:
            session.process = await asyncio.create_subprocess_shell(
                command_line,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=log,
                stderr=asyncio.subprocess.STDOUT,
                env={**os.environ, **(self.env or {})},
                start_new_session=True,
            )

        logger.info(
            {
                "event": "shell_session_started",
                "id": session.id,
                "pid": session.process.pid,
                "log": str(session.log_path),
            }
        )

    async def dispose(self, session: ShellSession) -> None:
        """Stop the shell and every process it spawned."""
        if session.running:
            _signal_group(session.process, signal.SIGTERM)
            try:
                await asyncio.wait_for(session.process.wait(), timeout=5)
            except asyncio.TimeoutError:
                _signal_group(session.process, getattr(signal, "SIGKILL", signal.SIGTERM))
                await session.process.wait()
        logger.debug({"event": "shell_session_disposed", "id": session.id})


def _signal_group(process: asyncio.subprocess.Process, sig: int) -> None:
    # The session leader's pid is also its process group id.
    with contextlib.suppress(ProcessLookupError):
        if hasattr(os, "killpg"):
            os.killpg(process.pid, sig)
        elif sig == signal.SIGTERM:
            process.terminate()
        else:
            process.kill()
