"""Filesystem search probe for pyvenv.cfg markers."""

import os
from dataclasses import dataclass, field

from cython_forge.config import ForgeConfig
from cython_forge.logging import get_logger
from cython_forge.paths.platforms import HOST_RULES, PathRules
from cython_forge.paths.validation import is_safe_path
from cython_forge.probes.probe import collect_candidates, run_probe_process
from cython_forge.processes import ProcessRunner, run_process
from cython_forge.types import ProbeFailure, ProbeResult, SourceKind

logger = get_logger(__name__)


def find_args(root: str, marker: str, depth: int) -> list[str]:
    return [root, "-maxdepth", str(depth), "-name", marker, "-type", "f"]


@dataclass(frozen=True)
class FilesystemProbe:
    """Search one root directory for virtual environments."""
    root: str
    config: ForgeConfig
    runner: ProcessRunner = run_process
    rules: PathRules = field(default=HOST_RULES)

    @property
    def name(self) -> str:
        return f"find:{self.root}"

    async def probe(self) -> ProbeResult:
        if not is_safe_path(self.root) or not os.path.isdir(self.root):
            logger.debug({"event": "probe_skipped", "probe": self.name})
            return ProbeResult.failed(ProbeFailure.SKIPPED)

        result, failure = await run_probe_process(
            self.name,
            self.config.find_command,
            find_args(self.root, self.rules.config_marker, self.config.search_depth),
            self.config.find_timeout,
            self.config,
            self.runner,
        )
        if failure:
            return ProbeResult.failed(failure)

        lines = result.stdout.decode(errors="replace").splitlines()
        marker_files = [line for line in (raw.strip() for raw in lines) if line and is_safe_path(line)]
        env_paths = [self.rules.dirname(marker) for marker in marker_files]

        candidates = collect_candidates(env_paths, SourceKind.DISCOVERED_VIRTUALENV, self.rules)
        logger.info({"event": "probe_complete", "probe": self.name, "count": len(candidates)})
        return ProbeResult(candidates=candidates)
