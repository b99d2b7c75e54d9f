"""Tests for the backend driver registry."""

import httpx
import pytest

from staticimp.domain.entities.config import BackendConfig, ServerConfig
from staticimp.domain.exceptions import (
    ConfigurationException,
    DecryptionFailedException,
    VaultUnavailableException,
)
from staticimp.infrastructure.backends import (
    BackendDeps,
    BackendRegistry,
    DebugBackend,
    GitLabBackend,
    default_registry,
)
from staticimp.infrastructure.security import SecretVault, encrypt_secret


def gitlab_config(**overrides) -> BackendConfig:
    values = {"name": "gitlab", "driver": "gitlab", "host": "https://gitlab.example.com/", "token": "t0k"}
    values.update(overrides)
    return BackendConfig(**values)


@pytest.fixture
def deps() -> BackendDeps:
    return BackendDeps(http_client=httpx.AsyncClient(), default_timeout=12.0)


class TestDefaultRegistry:
    def test_builtin_drivers(self) -> None:
        assert default_registry().drivers() == ["debug", "gitlab"]

    def test_gitlab(self, deps: BackendDeps) -> None:
        backend = default_registry().create(gitlab_config(), deps)
        assert isinstance(backend, GitLabBackend)
        assert backend.base_url == "https://gitlab.example.com/api/v4"
        assert backend.timeout == 12.0

    def test_backend_timeout_overrides_default(self, deps: BackendDeps) -> None:
        backend = default_registry().create(gitlab_config(timeout_seconds=3), deps)
        assert backend.timeout == 3

    def test_gitlab_needs_host(self, deps: BackendDeps) -> None:
        with pytest.raises(ConfigurationException):
            default_registry().create(gitlab_config(host=""), deps)

    def test_gitlab_needs_token(self, deps: BackendDeps) -> None:
        with pytest.raises(ConfigurationException) as exc_info:
            default_registry().create(gitlab_config(token=""), deps)
        assert exc_info.value.details == {"backend": "gitlab"}

    def test_gitlab_needs_http_client(self) -> None:
        with pytest.raises(ConfigurationException):
            default_registry().create(gitlab_config(), BackendDeps())

    async def test_debug_backend_is_fresh_per_call(self, deps: BackendDeps) -> None:
        registry = default_registry()
        config = BackendConfig(name="a", driver="debug")
        first = registry.create(config, deps)
        await first.commit_file("p", "main", "d", "f.yml", b"x", "m")
        await first.create_branch("p", "review", "main")

        second = registry.create(config, deps)
        assert isinstance(second, DebugBackend)
        assert second is not first
        assert second.calls == []
        assert second.files == {}
        assert second.branches == set()
        await second.create_branch("p", "review", "main")
        assert deps.debug_backends == {}

    def test_injected_debug_backend_is_reused(self, deps: BackendDeps) -> None:
        injected = DebugBackend("a")
        deps.debug_backends["a"] = injected
        registry = default_registry()
        assert registry.create(BackendConfig(name="a", driver="debug"), deps) is injected
        assert registry.create(BackendConfig(name="b", driver="debug"), deps) is not injected


class TestEncryptedToken:
    def test_decrypted_with_vault(self, vault: SecretVault) -> None:
        config = gitlab_config(token="", encrypted_token=encrypt_secret("glpat-x", vault.public_key_pem()))
        deps = BackendDeps(http_client=httpx.AsyncClient(), vault=vault)
        backend = default_registry().create(config, deps)
        assert backend._token == "glpat-x"

    def test_no_vault(self, vault: SecretVault) -> None:
        config = gitlab_config(token="", encrypted_token=encrypt_secret("glpat-x", vault.public_key_pem()))
        with pytest.raises(VaultUnavailableException):
            default_registry().create(config, BackendDeps(http_client=httpx.AsyncClient()))

    def test_wrong_key(self, vault: SecretVault, other_private_key_pem: bytes) -> None:
        other = SecretVault.from_pem(other_private_key_pem)
        config = gitlab_config(token="", encrypted_token=encrypt_secret("glpat-x", other.public_key_pem()))
        deps = BackendDeps(http_client=httpx.AsyncClient(), vault=vault)
        with pytest.raises(DecryptionFailedException) as exc_info:
            default_registry().create(config, deps)
        assert exc_info.value.details == {"secret": "gitlab.token"}


class TestCustomDrivers:
    def test_register_and_create(self) -> None:
        registry = BackendRegistry()
        made = DebugBackend("custom")
        registry.register("custom", lambda config, deps: made)
        assert registry.is_registered("custom")
        assert registry.create(BackendConfig(name="x", driver="custom"), BackendDeps()) is made

    def test_unknown_driver(self) -> None:
        with pytest.raises(ConfigurationException) as exc_info:
            BackendRegistry().create(BackendConfig(name="x", driver="gitea"), BackendDeps())
        assert exc_info.value.details["driver"] == "gitea"

    def test_validate_server_config(self) -> None:
        config = ServerConfig(backends={"hub": {"driver": "github"}})
        with pytest.raises(ConfigurationException) as exc_info:
            default_registry().validate(config)
        assert exc_info.value.details["backend"] == "hub"
        assert exc_info.value.details["known"] == ["debug", "gitlab"]

    def test_factory_for_binds_deps(self) -> None:
        deps = BackendDeps()
        build = default_registry().factory_for(deps)
        injected = DebugBackend("local")
        deps.debug_backends["local"] = injected
        assert build(BackendConfig(name="local", driver="debug")) is injected
