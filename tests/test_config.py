import json
import os

import pytest
from pydantic import ValidationError

from cython_forge.config import ForgeConfig, load_config, DEFAULT_BUILD_ARGS, ENV_PREFIX
from cython_forge.errors import ForgeError


@pytest.fixture(autouse=True)
def clean_environ(monkeypatch):
    for key in list(os.environ):
        if key.upper().startswith(ENV_PREFIX):
            monkeypatch.delenv(key)


def test_defaults_without_file(tmp_path):
    """A missing config file yields the defaults"""
    config = load_config(tmp_path / "config.json")
    assert config == ForgeConfig()
    assert config.default_build_args == DEFAULT_BUILD_ARGS == "build_ext --inplace"


def test_file_values(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({
        "default_build_args": "build_ext --inplace --force",
        "extra_search_roots": ["/opt/envs"],
        "unknown_key": 1,
    }))

    config = load_config(path)

    assert config.default_build_args == "build_ext --inplace --force"
    assert config.extra_search_roots == ("/opt/envs",)


def test_environment_overrides_file(tmp_path, monkeypatch):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"default_build_args": "build", "conda_timeout": 3}))

    monkeypatch.setenv("CYTHON_FORGE_DEFAULT_BUILD_ARGS", "bdist_wheel")
    monkeypatch.setenv("CYTHON_FORGE_CONDA_COMMAND", "/opt/conda/bin/conda")
    monkeypatch.setenv("CYTHON_FORGE_EXTRA_SEARCH_ROOTS", json.dumps(["/a", "/b"]))

    config = load_config(path)

    assert config.default_build_args == "bdist_wheel"
    assert config.conda_command == "/opt/conda/bin/conda"
    assert config.extra_search_roots == ("/a", "/b")
    assert config.conda_timeout == 3.0


def test_config_is_read_only():
    config = ForgeConfig()
    with pytest.raises(ValidationError):
        config.conda_timeout = 1.0


@pytest.mark.parametrize("content", ["{not json", "[1, 2]"])
def test_malformed_file(tmp_path, content):
    """Unreadable config is fatal at startup"""
    path = tmp_path / "config.json"
    path.write_text(content)

    with pytest.raises(ForgeError):
        load_config(path)


@pytest.mark.parametrize(
    "data",
    [
        {"extra_search_roots": "/opt/envs"},
        {"extra_search_roots": [1, 2]},
        {"conda_timeout": "fast"},
        {"find_timeout": 0},
        {"search_depth": 0},
        {"max_output_bytes": -1},
        {"default_build_args": ""},
    ],
)
def test_wrongly_typed_values_rejected(tmp_path, data):
    path = tmp_path / "config.json"
    path.write_text(json.dumps(data))

    with pytest.raises(ForgeError) as exc_info:
        load_config(path)
    assert exc_info.value.details == {"path": str(path)}


def test_wrongly_typed_environment_value_rejected(tmp_path, monkeypatch):
    monkeypatch.setenv("CYTHON_FORGE_CONDA_TIMEOUT", "fast")

    with pytest.raises(ForgeError):
        load_config(tmp_path / "config.json")
