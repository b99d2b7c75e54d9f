"""Domain entities: the configuration model."""

from staticimp.domain.entities.config import (
    BackendConfig,
    EntryTypeConfig,
    FieldConfig,
    FieldTransform,
    GitPlacementConfig,
    ProjectConfig,
    ServerConfig,
)

__all__ = [
    "BackendConfig",
    "EntryTypeConfig",
    "FieldConfig",
    "FieldTransform",
    "GitPlacementConfig",
    "ProjectConfig",
    "ServerConfig",
]
