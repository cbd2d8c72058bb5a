"""Build command construction and submission."""
from cython_forge.builds.executor import BuildExecutor, build_command_line, inspect_project
from cython_forge.builds.sinks import CommandSink, ShellCommandSink, ShellSession

__all__ = [
    "BuildExecutor",
    "build_command_line",
    "inspect_project",
    "CommandSink",
    "ShellCommandSink",
    "ShellSession",
]
