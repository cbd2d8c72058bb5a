import pytest
import pytest_asyncio
from pathlib import Path

from cython_forge.config import ForgeConfig
from cython_forge.types import ProcessResult


def write_venv(root: Path, interpreter: str | None = "python3", marker: str | None = "pyvenv.cfg") -> Path:
    """Lay out a virtualenv-shaped directory"""
    root.mkdir(parents=True, exist_ok=True)
    (root / "bin").mkdir(exist_ok=True)
    if interpreter:
        (root / "bin" / interpreter).write_text("#!/bin/sh\n")
    if marker == "pyvenv.cfg":
        (root / "pyvenv.cfg").write_text("home = /usr/bin\n")
    elif marker == "conda-meta":
        (root / "conda-meta").mkdir()
    return root


@pytest.fixture
def make_venv(tmp_path: Path):
    """Factory for venv directories under tmp_path"""
    def _make(name: str = "venv", **kwargs) -> Path:
        return write_venv(tmp_path / name, **kwargs)
    return _make


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """Project folder containing setup.py"""
    project = tmp_path / "project"
    project.mkdir()
    (project / "setup.py").write_text("from setuptools import setup\nsetup()\n")
    return project


@pytest.fixture
def config() -> ForgeConfig:
    return ForgeConfig(conda_timeout=1.0, find_timeout=1.0)


class FakeRunner:
    """Records invocations and replays canned results keyed by command"""

    def __init__(self, results: dict[str, ProcessResult | Exception] | None = None):
        self.results = results or {}
        self.calls: list[tuple[str, list[str]]] = []

    async def __call__(self, command, args, timeout, max_output_bytes):
        self.calls.append((command, list(args)))
        result = self.results.get(command, ProcessResult(returncode=0))
        if isinstance(result, Exception):
            raise result
        return result


@pytest.fixture
def fake_runner():
    return FakeRunner


class RecordingSink:
    """Command sink that records its lifecycle"""

    def __init__(self, fail_on: str | None = None):
        self.fail_on = fail_on
        self.events: list[tuple[str, int]] = []
        self.submitted: list[str] = []
        self.live: set[int] = set()
        self.max_live = 0
        self._next = 0

    @property
    def creates(self) -> int:
        return sum(1 for event, _ in self.events if event == "create")

    async def create(self, name):
        if self.fail_on == "create":
            raise OSError("no terminal")
        self._next += 1
        self.live.add(self._next)
        self.max_live = max(self.max_live, len(self.live))
        self.events.append(("create", self._next))
        return self._next

    async def submit(self, handle, command_line):
        if self.fail_on == "submit":
            raise OSError("terminal closed")
        self.events.append(("submit", handle))
        self.submitted.append(command_line)

    async def dispose(self, handle):
        if self.fail_on == "dispose":
            raise OSError("terminal hung")
        self.live.discard(handle)
        self.events.append(("dispose", handle))


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest_asyncio.fixture
async def executor(sink, config):
    from cython_forge.builds import BuildExecutor
    from cython_forge.paths import POSIX_RULES

    executor = BuildExecutor(sink, config, POSIX_RULES)
    try:
        yield executor
    finally:
        await executor.dispose()
