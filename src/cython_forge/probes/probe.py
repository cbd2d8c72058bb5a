"""Shared probe contract and process outcome handling."""

from typing import Iterable, Optional, Protocol, Sequence

from cython_forge.config import ForgeConfig
from cython_forge.logging import get_logger
from cython_forge.paths.platforms import PathRules
from cython_forge.paths.validation import is_safe_path, make_candidate
from cython_forge.processes import ProcessRunner
from cython_forge.types import (
    EnvironmentCandidate,
    ProbeFailure,
    ProbeResult,
    ProcessResult,
    SourceKind,
)

logger = get_logger(__name__)


class Probe(Protocol):
    """One discovery strategy; never raises, degrades to an empty result."""

    name: str

    async def probe(self) -> ProbeResult:
        ...


async def run_probe_process(
    name: str,
    command: str,
    args: Sequence[str],
    timeout: float,
    config: ForgeConfig,
    runner: ProcessRunner,
) -> tuple[Optional[ProcessResult], Optional[ProbeFailure]]:
    """Run a probe's child process, classifying every failure mode."""
    try:
        result = await runner(command, args, timeout, config.max_output_bytes)
    except OSError as e:
        logger.warning(
            {"event": "probe_unavailable", "probe": name, "command": command, "error": str(e)}
        )
        return None, ProbeFailure.UNAVAILABLE

    if result.timed_out:
        logger.warning({"event": "probe_timeout", "probe": name, "timeout": timeout})
        return None, ProbeFailure.TIMEOUT

    if result.overflowed:
        logger.warning(
            {"event": "probe_output_limit", "probe": name, "limit": config.max_output_bytes}
        )
        return None, ProbeFailure.OUTPUT_LIMIT

    if result.returncode != 0:
        logger.warning(
            {
                "event": "probe_failed",
                "probe": name,
                "returncode": result.returncode,
                "stderr": result.stderr.decode(errors="replace"),
            }
        )
        return None, ProbeFailure.EXIT_STATUS

    return result, None


def collect_candidates(
    paths: Iterable[str], source_kind: SourceKind, rules: PathRules
) -> tuple[EnvironmentCandidate, ...]:
    """Filter raw paths through the safety check and structural validation."""
    candidates = []
    for path in paths:
        if not is_safe_path(path):
            logger.debug({"event": "unsafe_path_skipped", "path": path})
            continue
        candidate = make_candidate(path, source_kind, rules)
        if candidate is not None:
            candidates.append(candidate)
    return tuple(candidates)
