"""Process runtime: the immutable config plus shared resources.

Built once by the lifespan (or directly by tests) and stored on
app.state.runtime. Holds the only cross-request state: server config,
backend registry, secret vault, and the pooled HTTP client.
"""

from __future__ import annotations

from dataclasses import dataclass

import httpx

from staticimp.application.services.config_merge import verify_secrets
from staticimp.application.use_cases.entries import EntrySubmissionService
from staticimp.core.config import Settings
from staticimp.domain.entities.config import ServerConfig
from staticimp.infrastructure.backends import BackendDeps, BackendRegistry, default_registry
from staticimp.infrastructure.config import load_server_config
from staticimp.infrastructure.security import SecretVault
from staticimp.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


@dataclass
class AppRuntime:
    """Everything a request needs besides its own submission."""

    config: ServerConfig
    registry: BackendRegistry
    deps: BackendDeps

    @property
    def vault(self) -> SecretVault | None:
        return self.deps.vault

    def submission_service(self) -> EntrySubmissionService:
        """Per-request service bound to the shared config and drivers."""
        return EntrySubmissionService(
            self.config,
            self.registry.factory_for(self.deps),
            self.deps.vault,
        )

    async def aclose(self) -> None:
        """Close the HTTP client and drop the vault key."""
        if self.deps.http_client is not None:
            await self.deps.http_client.aclose()
            logger.info("Backend HTTP client closed")
        if self.deps.vault is not None:
            self.deps.vault.close()


def build_runtime(
    settings: Settings,
    *,
    config: ServerConfig | None = None,
    registry: BackendRegistry | None = None,
    vault: SecretVault | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> AppRuntime:
    """Load config and vault, check drivers and server secrets, open the HTTP client.

    Explicit arguments replace what would otherwise be built from settings.

    Raises:
        ConfigurationException: bad config or unknown backend driver.
        VaultUnavailableException / DecryptionFailedException: vault problems.
    """
    config = config or load_server_config(settings.config_path)
    registry = registry or default_registry()
    registry.validate(config)
    if vault is None:
        vault = SecretVault.from_settings(settings)
    verify_secrets(config.entries, vault)
    deps = BackendDeps(
        http_client=http_client or httpx.AsyncClient(),
        vault=vault,
        default_timeout=settings.backend_timeout_seconds,
    )
    return AppRuntime(config=config, registry=registry, deps=deps)
