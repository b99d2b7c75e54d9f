"""Pytest configuration and fixtures for staticimp.

HTTP tests run the app over ASGI with a runtime built from an in-memory
server config and the debug backend, so nothing leaves the process.
"""

from typing import Any

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

from staticimp.core.config import Settings
from staticimp.core.limiter import limiter
from staticimp.core.runtime import AppRuntime, build_runtime
from staticimp.infrastructure.backends import DebugBackend
from staticimp.infrastructure.config import build_server_config
from staticimp.infrastructure.security import SecretVault, generate_private_key_pem
from staticimp.main import create_app

COMMENT_FIELDS: dict[str, Any] = {
    "allowed": ["name", "email", "website", "comment", "replyThread", "replyName", "replyID"],
    "required": ["name", "email", "comment"],
    "extra": {"_id": "{@id}", "date": "{@date:%+}"},
    "transforms": [{"field": "email", "transform": "md5"}],
}

COMMENT_GIT: dict[str, Any] = {
    "path": "data/comments/{params.slug}",
    "filename": "comment-{@timestamp}.yml",
    "branch": "main",
    "commit_message": "New comment from {field.name}",
}


def server_config_data() -> dict[str, Any]:
    """Raw server config used across tests (debug backend only)."""
    return {
        "backends": {"local": {"driver": "debug"}},
        "entries": {
            "comment": {"fields": COMMENT_FIELDS, "format": "yaml", "git": COMMENT_GIT},
            "moderated": {"fields": COMMENT_FIELDS, "review": True, "git": COMMENT_GIT},
            "preview": {"fields": COMMENT_FIELDS, "debug": True, "git": COMMENT_GIT},
            "retired": {"fields": COMMENT_FIELDS, "disabled": True, "git": COMMENT_GIT},
        },
    }


@pytest.fixture(scope="session")
def private_key_pem() -> bytes:
    """One RSA key for the whole session (key generation is slow)."""
    return generate_private_key_pem(key_size=2048)


@pytest.fixture(scope="session")
def other_private_key_pem() -> bytes:
    return generate_private_key_pem(key_size=2048)


@pytest.fixture
def vault(private_key_pem: bytes) -> SecretVault:
    return SecretVault.from_pem(private_key_pem)


@pytest.fixture
def server_config():
    return build_server_config(server_config_data(), environ={})


@pytest.fixture
async def runtime(server_config, vault: SecretVault) -> AppRuntime:
    """Runtime over the test config; closed after the test.

    The `local` backend resolves to one injected DebugBackend so tests can
    inspect what the request committed.
    """
    rt = build_runtime(
        Settings(),
        config=server_config,
        vault=vault,
        http_client=httpx.AsyncClient(),
    )
    rt.deps.debug_backends["local"] = DebugBackend("local")
    yield rt
    await rt.aclose()


@pytest.fixture(autouse=True)
def reset_rate_limits() -> None:
    """Rate limit counters are process-wide; start every test from zero."""
    limiter.reset()


@pytest.fixture
async def client(runtime: AppRuntime) -> AsyncClient:
    """Async HTTP client against the FastAPI app (ASGI)."""
    app = create_app()
    app.state.runtime = runtime
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
