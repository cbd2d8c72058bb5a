"""Path safety checks and environment structure validation.

All checks are pure apart from filesystem existence lookups. Platform
differences come from a ``PathRules`` value, defaulting to the host's.
"""
from os.path import exists, isdir, isfile
from typing import Optional

from cython_forge.errors import ValidationError, ValidationReason
from cython_forge.paths.platforms import HOST_RULES, PathRules
from cython_forge.types import EnvironmentCandidate, SourceKind

BUILD_DESCRIPTOR = "setup.py"

# Literal ascent markers; paths are not normalized first
TRAVERSAL_MARKERS = ("../", "..\\")


def is_safe_path(path: Optional[str]) -> bool:
    """Reject empty paths and paths containing a directory ascent."""
    if not path:
        return False
    return not any(marker in path for marker in TRAVERSAL_MARKERS)


def escape_for_shell(path: Optional[str], rules: PathRules = HOST_RULES) -> str:
    if not path:
        return ""
    return rules.escape(path)


def basename(path: Optional[str], rules: PathRules = HOST_RULES) -> str:
    if not path:
        return ""
    return rules.basename(path)


def resolve_interpreter(env_path: Optional[str], rules: PathRules = HOST_RULES) -> Optional[str]:
    """Return the first interpreter that exists inside the environment."""
    if not env_path or not exists(env_path):
        return None

    for candidate in rules.interpreter_candidates(env_path):
        if exists(candidate):
            return candidate
    return None


def has_build_descriptor(folder: Optional[str], rules: PathRules = HOST_RULES) -> bool:
    """Check for setup.py directly inside folder."""
    if not folder or not isdir(folder):
        return False
    return isfile(rules.join(folder, BUILD_DESCRIPTOR))


def has_environment_markers(env_path: str, rules: PathRules = HOST_RULES) -> bool:
    # The scripts directory alone is implied by any interpreter, so it does
    # not count as a marker on its own.
    if not exists(rules.join(env_path, rules.scripts_dir)):
        return False
    markers = (
        rules.join(env_path, rules.config_marker),
        rules.join(env_path, rules.metadata_marker),
    )
    return any(exists(marker) for marker in markers)


def is_valid_environment(env_path: Optional[str], rules: PathRules = HOST_RULES) -> bool:
    """Existence, then interpreter presence, then structural markers."""
    if not env_path or not exists(env_path):
        return False
    if resolve_interpreter(env_path, rules) is None:
        return False
    return has_environment_markers(env_path, rules)


def validate_environment(env_path: Optional[str], rules: PathRules = HOST_RULES) -> bool:
    return is_safe_path(env_path) and is_valid_environment(env_path, rules)


def make_candidate(
    env_path: str, source_kind: SourceKind, rules: PathRules = HOST_RULES
) -> Optional[EnvironmentCandidate]:
    """Build a candidate only for a safe, structurally valid environment."""
    if not validate_environment(env_path, rules):
        return None
    return EnvironmentCandidate(
        name=basename(env_path, rules),
        path=env_path,
        source_kind=source_kind,
    )


def require_project_dir(project_dir: Optional[str], rules: PathRules = HOST_RULES) -> str:
    if not project_dir:
        raise ValidationError(ValidationReason.MISSING_FOLDER, project_dir)
    if not is_safe_path(project_dir):
        raise ValidationError(ValidationReason.UNSAFE_PATH, project_dir)
    if not isdir(project_dir):
        raise ValidationError(ValidationReason.MISSING_FOLDER, project_dir)
    if not has_build_descriptor(project_dir, rules):
        raise ValidationError(ValidationReason.MISSING_BUILD_DESCRIPTOR, project_dir)
    return project_dir


def require_environment(env_path: Optional[str], rules: PathRules = HOST_RULES) -> str:
    if not env_path:
        raise ValidationError(ValidationReason.MISSING_ENVIRONMENT, env_path)
    if not is_safe_path(env_path):
        raise ValidationError(ValidationReason.UNSAFE_PATH, env_path)
    if not exists(env_path):
        raise ValidationError(ValidationReason.MISSING_ENVIRONMENT, env_path)
    if not is_valid_environment(env_path, rules):
        raise ValidationError(ValidationReason.INVALID_ENVIRONMENT, env_path)
    return env_path
