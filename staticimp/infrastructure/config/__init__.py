"""Server config loading."""

from staticimp.infrastructure.config.loader import (
    apply_env_overrides,
    build_server_config,
    load_server_config,
)

__all__ = ["apply_env_overrides", "build_server_config", "load_server_config"]
