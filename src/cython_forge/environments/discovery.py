"""Concurrent environment discovery."""
import asyncio
import os
from typing import Optional, Sequence

from cython_forge.config import ForgeConfig
from cython_forge.errors import ValidationError, ValidationReason
from cython_forge.logging import get_logger
from cython_forge.paths.platforms import HOST_RULES, PathRules
from cython_forge.paths.validation import is_safe_path, is_valid_environment, make_candidate
from cython_forge.probes import CondaProbe, FilesystemProbe, Probe
from cython_forge.processes import ProcessRunner, run_process
from cython_forge.types import EnvironmentCandidate, ProbeFailure, ProbeResult, SourceKind

logger = get_logger(__name__)

# Conventional per-user locations, relative to the home directory
USER_SEARCH_DIRS = (
    (".virtualenvs",),
    (".local", "share", "virtualenvs"),
    (".pyenv", "versions"),
)


def search_roots(
    workspace_root: Optional[str],
    config: ForgeConfig,
    home: Optional[str] = None,
) -> list[str]:
    """Workspace first, then user-level directories, then configured extras."""
    home = home or os.path.expanduser("~")
    roots = []
    if workspace_root:
        roots.append(workspace_root)
    roots.extend(os.path.join(home, *parts) for parts in USER_SEARCH_DIRS)
    roots.extend(config.extra_search_roots)
    return list(dict.fromkeys(roots))


def merge_results(results: Sequence[ProbeResult]) -> list[EnvironmentCandidate]:
    """Concatenate candidates in probe order, keeping the first of each path."""
    seen: set[str] = set()
    merged = []
    for result in results:
        for candidate in result.candidates:
            if candidate.path in seen:
                continue
            seen.add(candidate.path)
            merged.append(candidate)
    return merged


async def run_probes(probes: Sequence[Probe]) -> list[ProbeResult]:
    """Run probes concurrently; results come back in probe order."""
    settled = await asyncio.gather(*(p.probe() for p in probes), return_exceptions=True)

    results = []
    for probe, outcome in zip(probes, settled):
        if isinstance(outcome, BaseException):
            if not isinstance(outcome, Exception):
                raise outcome
            logger.error(
                {"event": "probe_crashed", "probe": probe.name, "error": repr(outcome)}
            )
            outcome = ProbeResult.failed(ProbeFailure.ERROR)
        results.append(outcome)
    return results


async def discover_environments(probes: Sequence[Probe]) -> list[EnvironmentCandidate]:
    results = await run_probes(probes)
    candidates = merge_results(results)
    logger.info(
        {
            "event": "discovery_complete",
            "count": len(candidates),
            "probes": len(probes),
            "failed": [p.name for p, r in zip(probes, results) if not r.succeeded],
        }
    )
    return candidates


class DiscoveryCoordinator:
    """Fans discovery out to one conda probe and one probe per search root."""

    def __init__(
        self,
        config: ForgeConfig,
        runner: ProcessRunner = run_process,
        rules: PathRules = HOST_RULES,
        home: Optional[str] = None,
    ):
        self.config = config
        self.runner = runner
        self.rules = rules
        self.home = home

    def build_probes(self, workspace_root: Optional[str] = None) -> list[Probe]:
        probes: list[Probe] = [CondaProbe(self.config, self.runner, self.rules)]
        probes.extend(
            FilesystemProbe(root, self.config, self.runner, self.rules)
            for root in search_roots(workspace_root, self.config, self.home)
        )
        return probes

    async def discover(self, workspace_root: Optional[str] = None) -> list[EnvironmentCandidate]:
        """Return every environment found; empty means fall back to manual selection."""
        logger.info({"event": "discovery_start", "workspace_root": workspace_root})
        return await discover_environments(self.build_probes(workspace_root))

    def select_manual(self, env_path: Optional[str]) -> EnvironmentCandidate:
        """Validate a user-chosen folder as an environment."""
        if not env_path:
            raise ValidationError(ValidationReason.MISSING_ENVIRONMENT, env_path)
        if not is_safe_path(env_path):
            raise ValidationError(ValidationReason.UNSAFE_PATH, env_path)
        if not is_valid_environment(env_path, self.rules):
            raise ValidationError(ValidationReason.INVALID_ENVIRONMENT, env_path)
        candidate = make_candidate(env_path, SourceKind.MANUAL_SELECTION, self.rules)
        logger.info({"event": "manual_environment_selected", "path": env_path})
        return candidate
