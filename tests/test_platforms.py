import pytest

from cython_forge.paths.platforms import (
    POSIX_RULES,
    WINDOWS_RULES,
    get_path_rules,
)
from cython_forge.types import PathStyle


@pytest.mark.parametrize("system,style", [
    ("Linux", PathStyle.POSIX),
    ("Darwin", PathStyle.POSIX),
    ("Windows", PathStyle.WINDOWS),
])
def test_get_path_rules(system, style):
    """Rules are picked from the operating system name"""
    assert get_path_rules(system).style == style


def test_posix_interpreter_candidates():
    assert POSIX_RULES.interpreter_candidates("/envs/app") == [
        "/envs/app/bin/python3",
        "/envs/app/bin/python",
    ]


def test_windows_interpreter_candidates():
    assert WINDOWS_RULES.interpreter_candidates("C:\\envs\\app") == [
        "C:\\envs\\app\\Scripts\\python.exe",
        "C:\\envs\\app\\Scripts\\python3.exe",
    ]


def test_dirname_follows_platform():
    assert POSIX_RULES.dirname("/envs/app/pyvenv.cfg") == "/envs/app"
    assert WINDOWS_RULES.dirname("C:\\envs\\app\\pyvenv.cfg") == "C:\\envs\\app"
