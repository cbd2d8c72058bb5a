"""Build execution inside a selected virtual environment."""
import asyncio
from typing import Any, Optional

from cython_forge.config import ForgeConfig
from cython_forge.errors import ExecutionError, ValidationError, ValidationReason
from cython_forge.logging import get_logger
from cython_forge.paths.platforms import HOST_RULES, PathRules
from cython_forge.paths.validation import (
    BUILD_DESCRIPTOR,
    basename,
    escape_for_shell,
    has_build_descriptor,
    is_safe_path,
    require_environment,
    require_project_dir,
    resolve_interpreter,
)
from cython_forge.builds.sinks import CommandSink
from cython_forge.types import BuildRequest, BuildSubmission, SinkState

logger = get_logger(__name__)


def build_command_line(
    project_dir: str, interpreter: str, build_args: str, rules: PathRules = HOST_RULES
) -> str:
    """Join ``cd <dir>`` and the setup.py invocation with ``&&``.

    build_args is a trusted configuration value and is passed through as is.
    """
    commands = [
        f"cd {escape_for_shell(project_dir, rules)}",
        f"{escape_for_shell(interpreter, rules)} {BUILD_DESCRIPTOR} {build_args}",
    ]
    return " && ".join(commands)


def inspect_project(folder: Optional[str], rules: PathRules = HOST_RULES) -> dict[str, Any]:
    """Describe a candidate project folder without failing."""
    safe = is_safe_path(folder)
    return {
        "path": folder,
        "name": basename(folder, rules),
        "safe": safe,
        "has_build_descriptor": safe and has_build_descriptor(folder, rules),
    }


class BuildExecutor:
    """Owns the single build sink and submits validated build commands."""

    def __init__(self, sink: CommandSink, config: ForgeConfig, rules: PathRules = HOST_RULES):
        self.sink = sink
        self.config = config
        self.rules = rules
        self._handle = None
        self._state = SinkState.ABSENT
        self._lock = asyncio.Lock()

    @property
    def state(self) -> SinkState:
        return self._state

    @property
    def handle(self):
        return self._handle

    def prepare(
        self, project_dir: Optional[str], environment_path: Optional[str], build_args: Optional[str] = None
    ) -> tuple[BuildRequest, str]:
        """Validate both paths and resolve the interpreter; raises ValidationError."""
        require_project_dir(project_dir, self.rules)
        require_environment(environment_path, self.rules)

        interpreter = resolve_interpreter(environment_path, self.rules)
        if interpreter is None:
            raise ValidationError(ValidationReason.MISSING_INTERPRETER, environment_path)

        request = BuildRequest(
            project_dir=project_dir,
            environment_path=environment_path,
            build_args=build_args or self.config.default_build_args,
        )
        return request, interpreter

    async def execute(
        self, project_dir: Optional[str], environment_path: Optional[str], build_args: Optional[str] = None
    ) -> BuildSubmission:
        """Validate, replace the sink, and submit the build command."""
        logger.info(
            {"event": "build_start", "project_dir": project_dir, "environment_path": environment_path}
        )
        try:
            request, interpreter = self.prepare(project_dir, environment_path, build_args)
        except ValidationError as e:
            logger.error({"event": "build_validation_failed", **e.details})
            raise

        command_line = build_command_line(
            request.project_dir, interpreter, request.build_args, self.rules
        )

        async with self._lock:
            await self._dispose_locked()

            try:
                self._handle = await self.sink.create(self.config.build_sink_name)
            except Exception as e:
                logger.error({"event": "build_sink_create_failed", "error": str(e)})
                raise ExecutionError("Failed to create build terminal", {"error": str(e)}) from e
            self._state = SinkState.CREATED

            try:
                await self.sink.submit(self._handle, command_line)
            except Exception as e:
                logger.error({"event": "build_submit_failed", "error": str(e)})
                await self._dispose_locked()
                raise ExecutionError("Failed to execute build command", {"error": str(e)}) from e
            self._state = SinkState.ACTIVE

            sink_id = str(getattr(self._handle, "id", self._handle))

        logger.info({"event": "build_submitted", "command": command_line, "sink": sink_id})
        return BuildSubmission(
            request=request,
            interpreter=interpreter,
            command_line=command_line,
            sink_id=sink_id,
        )

    async def dispose(self) -> None:
        """Tear down the current sink; safe to call repeatedly."""
        async with self._lock:
            await self._dispose_locked()

    async def _dispose_locked(self) -> None:
        if self._handle is None:
            return
        handle, self._handle = self._handle, None
        try:
            await self.sink.dispose(handle)
        except Exception as e:
            raise ExecutionError("Failed to dispose build terminal", {"error": str(e)}) from e
        finally:
            self._state = SinkState.DISPOSED
        logger.debug({"event": "build_sink_disposed"})
