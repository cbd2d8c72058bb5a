"""Conda package manager probe."""

import json
from dataclasses import dataclass, field

from cython_forge.config import ForgeConfig
from cython_forge.logging import get_logger
from cython_forge.paths.platforms import HOST_RULES, PathRules
from cython_forge.probes.probe import collect_candidates, run_probe_process
from cython_forge.processes import ProcessRunner, run_process
from cython_forge.types import ProbeFailure, ProbeResult, SourceKind

logger = get_logger(__name__)

LIST_ARGS = ("env", "list", "--json")


def parse_env_list(stdout: bytes) -> list[str]:
    """Extract environment paths from ``conda env list --json`` output.

    Raises ValueError on malformed output.
    """
    data = json.loads(stdout.decode())
    if not isinstance(data, dict) or not isinstance(data.get("envs"), list):
        raise ValueError("conda output has no 'envs' list")
    return [env for env in data["envs"] if isinstance(env, str)]


@dataclass(frozen=True)
class CondaProbe:
    """Ask conda for its environments."""
    config: ForgeConfig
    runner: ProcessRunner = run_process
    rules: PathRules = field(default=HOST_RULES)
    name: str = "conda"

    async def probe(self) -> ProbeResult:
        result, failure = await run_probe_process(
            self.name,
            self.config.conda_command,
            LIST_ARGS,
            self.config.conda_timeout,
            self.config,
            self.runner,
        )
        if failure:
            return ProbeResult.failed(failure)

        try:
            env_paths = parse_env_list(result.stdout)
        except ValueError as e:
            # JSONDecodeError and UnicodeDecodeError are both ValueErrors
            logger.warning({"event": "probe_malformed_output", "probe": self.name, "error": str(e)})
            return ProbeResult.failed(ProbeFailure.MALFORMED_OUTPUT)

        candidates = collect_candidates(env_paths, SourceKind.PACKAGE_MANAGER, self.rules)
        logger.info({"event": "probe_complete", "probe": self.name, "count": len(candidates)})
        return ProbeResult(candidates=candidates)
