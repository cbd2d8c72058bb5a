"""Python environment discovery and safe setup.py builds."""

from cython_forge.types import (
    SourceKind,
    EnvironmentCandidate,
    ProbeFailure,
    ProbeResult,
    BuildRequest,
    BuildSubmission,
    SinkState,
)
from cython_forge.config import ForgeConfig, load_config
from cython_forge.environments import DiscoveryCoordinator
from cython_forge.builds import BuildExecutor, ShellCommandSink
from cython_forge.errors import ForgeError, ValidationError, ExecutionError

__version__ = "0.1.0"

__all__ = [
    # Types
    "SourceKind",
    "EnvironmentCandidate",
    "ProbeFailure",
    "ProbeResult",
    "BuildRequest",
    "BuildSubmission",
    "SinkState",

    # Configuration
    "ForgeConfig",
    "load_config",

    # Components
    "DiscoveryCoordinator",
    "BuildExecutor",
    "ShellCommandSink",

    # Error types
    "ForgeError",
    "ValidationError",
    "ExecutionError",
]
