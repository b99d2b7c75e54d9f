"""Tests for server config loading (YAML file, env overrides, template checks)."""

from pathlib import Path

import pytest

from staticimp.domain.exceptions import ConfigurationException
from staticimp.infrastructure.config import (
    apply_env_overrides,
    build_server_config,
    load_server_config,
)

SAMPLE = Path(__file__).resolve().parents[2] / "staticimp.sample.yml"

CONFIG_YAML = """
host: 0.0.0.0
port: 9000
backends:
  gitlab:
    driver: gitlab
    host: git.example.com
entries:
  comment:
    fields:
      allowed: [name, comment]
      required: [name]
      extra:
        _id: "{@id}"
    format: yml
    git:
      path: "data/{params.slug}"
"""


def test_load_yaml_file(tmp_path: Path) -> None:
    path = tmp_path / "staticimp.yml"
    path.write_text(CONFIG_YAML)
    cfg = load_server_config(path, environ={})
    assert (cfg.host, cfg.port) == ("0.0.0.0", 9000)
    assert cfg.backends["gitlab"].host == "git.example.com"
    assert cfg.entries["comment"].format.value == "yaml"
    assert cfg.entries["comment"].git.path == "data/{params.slug}"


def test_sample_config_loads() -> None:
    cfg = load_server_config(SAMPLE, environ={})
    assert "comment" in cfg.entries


def test_env_overrides(tmp_path: Path) -> None:
    path = tmp_path / "staticimp.yml"
    path.write_text(CONFIG_YAML)
    env = {
        "gitlab_host": "gitlab.internal",
        "gitlab_token": "glpat-env",
        "timestamp_format": "%Y",
    }
    cfg = load_server_config(path, environ=env)
    assert cfg.backends["gitlab"].host == "gitlab.internal"
    assert cfg.backends["gitlab"].token.get_secret_value() == "glpat-env"
    assert cfg.timestamp_format == "%Y"


def test_overrides_do_not_touch_input() -> None:
    data = {"backends": {"b": {"driver": "debug"}}}
    out = apply_env_overrides(data, {"b_host": "h"})
    assert out["backends"]["b"]["host"] == "h"
    assert "host" not in data["backends"]["b"]


def test_missing_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationException):
        load_server_config(tmp_path / "nope.yml", environ={})


def test_invalid_yaml(tmp_path: Path) -> None:
    path = tmp_path / "bad.yml"
    path.write_text("entries: [unclosed")
    with pytest.raises(ConfigurationException):
        load_server_config(path, environ={})


def test_empty_file_is_default_config(tmp_path: Path) -> None:
    path = tmp_path / "empty.yml"
    path.write_text("")
    cfg = load_server_config(path, environ={})
    assert cfg.backends == {} and cfg.entries == {}


def test_required_not_in_allowed_is_config_error() -> None:
    data = {"entries": {"c": {"fields": {"allowed": ["a"], "required": ["b"]}}}}
    with pytest.raises(ConfigurationException) as exc_info:
        build_server_config(data, environ={})
    assert exc_info.value.error_code == "CONFIGURATION_ERROR"


@pytest.mark.parametrize(
    "template",
    ["{field.name", "{env.HOME}", "{@uuid}", "{name}"],
)
def test_bad_templates_fail_at_load(template: str) -> None:
    data = {"entries": {"c": {"git": {"filename": template}}}}
    with pytest.raises(ConfigurationException) as exc_info:
        build_server_config(data, environ={})
    assert exc_info.value.details["location"] == "git.filename"


def test_bad_extra_template_fails_at_load() -> None:
    data = {"entries": {"c": {"fields": {"extra": {"x": "{@nope}"}}}}}
    with pytest.raises(ConfigurationException) as exc_info:
        build_server_config(data, environ={})
    assert exc_info.value.details["location"] == "fields.extra.x"


def test_unknown_key_is_config_error() -> None:
    with pytest.raises(ConfigurationException):
        build_server_config({"entires": {}}, environ={})
