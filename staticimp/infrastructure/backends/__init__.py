"""Repository backend drivers and the driver registry."""

from staticimp.infrastructure.backends.debug_backend import DebugBackend
from staticimp.infrastructure.backends.gitlab_backend import GitLabBackend
from staticimp.infrastructure.backends.registry import (
    BackendDeps,
    BackendRegistry,
    default_registry,
)

__all__ = [
    "BackendDeps",
    "BackendRegistry",
    "DebugBackend",
    "GitLabBackend",
    "default_registry",
]
