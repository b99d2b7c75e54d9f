"""Server config loading: YAML file + environment overrides -> ServerConfig.

Environment overrides (exact variable names, applied before validation):

    timestamp_format        server timestamp_format
    <backend>_host          host of backend <backend>
    <backend>_token         token of backend <backend>

so a token never has to be written into the config file.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Mapping

import yaml
from pydantic import ValidationError

from staticimp.application.services.config_merge import validate_entry_templates
from staticimp.domain.entities.config import ServerConfig
from staticimp.domain.exceptions import ConfigurationException
from staticimp.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

_BACKEND_OVERRIDES = ("host", "token")


def apply_env_overrides(
    data: Mapping[str, Any], environ: Mapping[str, str] | None = None
) -> dict[str, Any]:
    """Return a copy of raw config data with environment overrides applied."""
    env = os.environ if environ is None else environ
    result = dict(data)
    if env.get("timestamp_format"):
        result["timestamp_format"] = env["timestamp_format"]
    backends = result.get("backends")
    if isinstance(backends, Mapping):
        overridden = {}
        for name, backend in backends.items():
            backend = dict(backend) if isinstance(backend, Mapping) else backend
            if isinstance(backend, dict):
                for key in _BACKEND_OVERRIDES:
                    value = env.get(f"{name}_{key}")
                    if value:
                        logger.debug("Backend '%s' %s taken from environment", name, key)
                        backend[key] = value
            overridden[name] = backend
        result["backends"] = overridden
    return result


def build_server_config(
    data: Mapping[str, Any] | None, environ: Mapping[str, str] | None = None
) -> ServerConfig:
    """Validate raw config data (after env overrides) and check all templates.

    Raises:
        ConfigurationException: schema violation or invalid template.
    """
    raw = data or {}
    if not isinstance(raw, Mapping):
        raise ConfigurationException("Server config must be a mapping")
    try:
        config = ServerConfig.model_validate(apply_env_overrides(raw, environ))
    except ValidationError as e:
        raise ConfigurationException(
            "Server config is invalid",
            {"errors": e.errors(include_url=False, include_context=False, include_input=False)},
        ) from e
    validate_entry_templates(config.entries)
    return config


def load_server_config(
    path: str | Path, environ: Mapping[str, str] | None = None
) -> ServerConfig:
    """Read and validate the YAML server config file.

    Raises:
        ConfigurationException: missing/unreadable file, bad YAML, or invalid config.
    """
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationException(
            f"Server config not readable: {path}", {"path": str(path)}
        ) from e
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigurationException(
            f"Server config is not valid YAML: {path}", {"path": str(path)}
        ) from e
    config = build_server_config(data, environ)
    logger.info(
        "Loaded server config %s (%d backend(s), %d entry type(s))",
        path,
        len(config.backends),
        len(config.entries),
    )
    return config
