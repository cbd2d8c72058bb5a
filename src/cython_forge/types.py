"""Core type definitions"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class SourceKind(str, Enum):
    """Where a candidate environment came from"""
    PACKAGE_MANAGER = "conda"
    DISCOVERED_VIRTUALENV = "venv"
    MANUAL_SELECTION = "manual"


class PathStyle(str, Enum):
    POSIX = "posix"
    WINDOWS = "windows"


class ProbeFailure(str, Enum):
    """Why a probe produced no candidates"""
    UNAVAILABLE = "unavailable"
    EXIT_STATUS = "exit_status"
    TIMEOUT = "timeout"
    OUTPUT_LIMIT = "output_limit"
    MALFORMED_OUTPUT = "malformed_output"
    SKIPPED = "skipped"
    ERROR = "error"


class SinkState(str, Enum):
    ABSENT = "absent"
    CREATED = "created"
    ACTIVE = "active"
    DISPOSED = "disposed"


# Decorative label prefix and description per source
SOURCE_LABELS = {
    SourceKind.PACKAGE_MANAGER: ("$(zap)", "Conda"),
    SourceKind.DISCOVERED_VIRTUALENV: ("$(rocket)", "Virtual Environment"),
    SourceKind.MANUAL_SELECTION: ("$(folder)", "Manual Selection"),
}


@dataclass(frozen=True)
class EnvironmentCandidate:
    """A structurally validated environment not yet chosen by the user"""
    name: str
    path: str
    source_kind: SourceKind

    @property
    def label(self) -> str:
        icon, _ = SOURCE_LABELS[self.source_kind]
        return f"{icon} {self.name}"

    @property
    def description(self) -> str:
        return SOURCE_LABELS[self.source_kind][1]

    def to_dict(self) -> dict[str, str]:
        return {
            "label": self.label,
            "description": self.description,
            "name": self.name,
            "path": self.path,
            "type": self.source_kind.value,
        }


@dataclass(frozen=True)
class ProbeResult:
    """Outcome of one discovery probe; failures carry no candidates"""
    candidates: tuple[EnvironmentCandidate, ...] = ()
    failure: Optional[ProbeFailure] = None

    @property
    def succeeded(self) -> bool:
        return self.failure is None

    @classmethod
    def failed(cls, failure: ProbeFailure) -> "ProbeResult":
        return cls(candidates=(), failure=failure)


@dataclass(frozen=True)
class ProcessResult:
    """Captured output of a finished (or killed) child process"""
    returncode: Optional[int]
    stdout: bytes = b""
    stderr: bytes = b""
    timed_out: bool = False
    overflowed: bool = False


@dataclass(frozen=True)
class BuildRequest:
    """Inputs of a single build invocation"""
    project_dir: str
    environment_path: str
    build_args: str = "build_ext --inplace"


@dataclass(frozen=True)
class BuildSubmission:
    """What was handed to the command sink"""
    request: BuildRequest
    interpreter: str
    command_line: str
    sink_id: str

    def to_dict(self) -> dict[str, str]:
        return {
            "project_dir": self.request.project_dir,
            "environment_path": self.request.environment_path,
            "build_args": self.request.build_args,
            "interpreter": self.interpreter,
            "command_line": self.command_line,
            "sink_id": self.sink_id,
        }
