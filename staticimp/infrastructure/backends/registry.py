"""Backend registry: driver id -> factory building an IRepositoryBackend.

Adding a provider means registering one factory; the orchestrator never
changes. default_registry() knows `gitlab` and `debug`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable

import httpx

from staticimp.application.interfaces.backends import IRepositoryBackend
from staticimp.domain.entities.config import BackendConfig, ServerConfig
from staticimp.domain.exceptions import ConfigurationException, VaultUnavailableException
from staticimp.infrastructure.backends.debug_backend import DebugBackend
from staticimp.infrastructure.backends.gitlab_backend import GitLabBackend
from staticimp.infrastructure.security.vault import SecretVault


@dataclass(frozen=True)
class BackendDeps:
    """Process-wide resources shared by backend drivers."""

    http_client: httpx.AsyncClient | None = None
    vault: SecretVault | None = None
    default_timeout: float = 30.0
    # injected debug drivers by backend name (tests); otherwise each request gets a new one
    debug_backends: dict[str, DebugBackend] = field(default_factory=dict)


BackendDriverFactory = Callable[[BackendConfig, BackendDeps], IRepositoryBackend]


def _gitlab_token(config: BackendConfig, deps: BackendDeps) -> str:
    token = config.token.get_secret_value()
    if token:
        return token
    if config.encrypted_token:
        if deps.vault is None:
            raise VaultUnavailableException(
                f"Backend '{config.name}' has an encrypted token but no vault key is configured"
            )
        return deps.vault.decrypt(config.encrypted_token, name=f"{config.name}.token")
    raise ConfigurationException(
        f"Backend '{config.name}' has no token",
        {"backend": config.name},
    )


def create_gitlab_backend(config: BackendConfig, deps: BackendDeps) -> IRepositoryBackend:
    """Build a GitLab driver; the token may come from the vault."""
    if not config.host:
        raise ConfigurationException(
            f"Backend '{config.name}' needs a host", {"backend": config.name}
        )
    if deps.http_client is None:
        raise ConfigurationException("GitLab backend needs an HTTP client")
    return GitLabBackend(
        deps.http_client,
        host=config.host,
        token=_gitlab_token(config, deps),
        timeout=config.timeout_seconds or deps.default_timeout,
    )


def create_debug_backend(config: BackendConfig, deps: BackendDeps) -> IRepositoryBackend:
    """Return a fresh in-memory driver, or the instance injected for this backend name."""
    injected = deps.debug_backends.get(config.name)
    if injected is not None:
        return injected
    return DebugBackend(config.name)


class BackendRegistry:
    """Maps driver identifiers to factories."""

    def __init__(self) -> None:
        self._factories: dict[str, BackendDriverFactory] = {}

    def register(self, driver: str, factory: BackendDriverFactory) -> None:
        """Register (or replace) the factory for a driver id."""
        self._factories[driver] = factory

    def drivers(self) -> list[str]:
        return sorted(self._factories)

    def is_registered(self, driver: str) -> bool:
        return driver in self._factories

    def create(self, config: BackendConfig, deps: BackendDeps) -> IRepositoryBackend:
        """Build the driver for a backend config.

        Raises:
            ConfigurationException: unknown driver or incomplete backend config.
        """
        factory = self._factories.get(config.driver)
        if factory is None:
            raise ConfigurationException(
                f"Unknown backend driver '{config.driver}' for backend '{config.name}'",
                {"backend": config.name, "driver": config.driver, "known": self.drivers()},
            )
        return factory(config, deps)

    def validate(self, config: ServerConfig) -> None:
        """Fail fast at startup if any backend names an unregistered driver."""
        for backend in config.backends.values():
            if not self.is_registered(backend.driver):
                raise ConfigurationException(
                    f"Unknown backend driver '{backend.driver}' for backend '{backend.name}'",
                    {"backend": backend.name, "driver": backend.driver, "known": self.drivers()},
                )

    def factory_for(self, deps: BackendDeps) -> Callable[[BackendConfig], IRepositoryBackend]:
        """Bind deps so callers only pass the backend config."""

        def build(config: BackendConfig) -> IRepositoryBackend:
            return self.create(config, deps)

        return build


def default_registry() -> BackendRegistry:
    """Registry with the built-in drivers."""
    registry = BackendRegistry()
    registry.register("gitlab", create_gitlab_backend)
    registry.register("debug", create_debug_backend)
    return registry
