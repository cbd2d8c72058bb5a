"""Platform path rules."""
import ntpath
import platform
import posixpath
import re
from dataclasses import dataclass
from types import ModuleType
from typing import Callable, Dict, Optional

from cython_forge.types import PathStyle

# Characters backslash-escaped for POSIX shells
POSIX_SPECIAL = re.compile(r"([\"\s'$`\\])")


def escape_posix(path: str) -> str:
    return POSIX_SPECIAL.sub(r"\\\1", path)


def escape_windows(path: str) -> str:
    return '"' + path.replace('"', '""') + '"'


@dataclass(frozen=True)
class PathRules:
    """Path conventions of one platform family."""
    style: PathStyle
    flavour: ModuleType
    scripts_dir: str
    interpreters: tuple[str, ...]
    escape: Callable[[str], str]
    config_marker: str = "pyvenv.cfg"
    metadata_marker: str = "conda-meta"

    def join(self, *parts: str) -> str:
        return self.flavour.join(*parts)

    def dirname(self, path: str) -> str:
        return self.flavour.dirname(path)

    def basename(self, path: str) -> str:
        separators = "\\/" if self.style == PathStyle.WINDOWS else "/"
        return self.flavour.basename(path.rstrip(separators))

    def interpreter_candidates(self, env_path: str) -> list[str]:
        return [self.join(env_path, self.scripts_dir, name) for name in self.interpreters]


POSIX_RULES = PathRules(
    style=PathStyle.POSIX,
    flavour=posixpath,
    scripts_dir="bin",
    interpreters=("python3", "python"),
    escape=escape_posix,
)

WINDOWS_RULES = PathRules(
    style=PathStyle.WINDOWS,
    flavour=ntpath,
    scripts_dir="Scripts",
    interpreters=("python.exe", "python3.exe"),
    escape=escape_windows,
)

PATH_RULES: Dict[PathStyle, PathRules] = {
    PathStyle.POSIX: POSIX_RULES,
    PathStyle.WINDOWS: WINDOWS_RULES,
}


def get_path_rules(system: Optional[str] = None) -> PathRules:
    """Get path rules for an operating system name (defaults to the host)."""
    if system is None:
        system = platform.system()
    if system == "Windows":
        return PATH_RULES[PathStyle.WINDOWS]
    return PATH_RULES[PathStyle.POSIX]


HOST_RULES = get_path_rules()
