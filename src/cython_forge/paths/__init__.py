"""Path safety and virtual environment structure checks."""
from cython_forge.paths.platforms import (
    PathRules,
    POSIX_RULES,
    WINDOWS_RULES,
    HOST_RULES,
    get_path_rules,
)
from cython_forge.paths.validation import (
    is_safe_path,
    escape_for_shell,
    basename,
    resolve_interpreter,
    has_build_descriptor,
    is_valid_environment,
    validate_environment,
    make_candidate,
)

__all__ = [
    # Platform rules
    "PathRules",
    "POSIX_RULES",
    "WINDOWS_RULES",
    "HOST_RULES",
    "get_path_rules",

    # Validation functions
    "is_safe_path",
    "escape_for_shell",
    "basename",
    "resolve_interpreter",
    "has_build_descriptor",
    "is_valid_environment",
    "validate_environment",
    "make_candidate",
]
