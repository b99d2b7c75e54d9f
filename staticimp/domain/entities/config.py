"""Configuration model: backends, entry types, field rules, git placement.

Built once at startup from the YAML server config (and per request from a
project config file) and never mutated. Models are frozen and reject unknown
keys so that typos in config files fail loudly at load time.
"""

from __future__ import annotations

from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    SecretStr,
    field_validator,
    model_validator,
)

from staticimp.domain.enums import SerializationFormat, TransformKind
from staticimp.shared.utils.datetime import DEFAULT_TIMESTAMP_FORMAT

DEFAULT_MR_DESCRIPTION = (
    "new staticimp entry awaiting approval\n\n"
    "Merge the pull request to accept it, or close it to deny the entry"
)

REDACTED = "***"


class _ConfigModel(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class FieldTransform(_ConfigModel):
    """One transform step: apply `transform` to the current value of `field`."""

    field: str = Field(..., min_length=1)
    transform: TransformKind


class FieldConfig(_ConfigModel):
    """Field validation and generation rules for an entry type.

    - allowed: fields accepted from the submission
    - required: fields that must be present and non-empty (subset of allowed)
    - extra: generated fields, name -> template, evaluated in order
    - transforms: transforms applied in order after generation
    """

    allowed: frozenset[str] = frozenset()
    required: frozenset[str] = frozenset()
    extra: dict[str, str] = Field(default_factory=dict)
    transforms: tuple[FieldTransform, ...] = ()

    @model_validator(mode="after")
    def required_subset_of_allowed(self) -> FieldConfig:
        """required ⊆ allowed; anything else can never validate."""
        stray = sorted(self.required - self.allowed)
        if stray:
            raise ValueError(
                f"required fields not in allowed: {', '.join(stray)}"
            )
        return self


class GitPlacementConfig(_ConfigModel):
    """Where and how an entry lands in the repository. All values are templates."""

    path: str = "data/comments"
    filename: str = "comment-{@timestamp}.yml"
    branch: str = "main"
    commit_message: str = "New staticimp entry"
    review_branch: str = "staticimp_{@id}"
    mr_description: str = DEFAULT_MR_DESCRIPTION

    def templates(self) -> dict[str, str]:
        """All template strings by attribute name."""
        return self.model_dump()


class EntryTypeConfig(_ConfigModel):
    """A configured kind of submission (e.g. `comment`)."""

    disabled: bool = False
    debug: bool = False
    fields: FieldConfig = Field(default_factory=FieldConfig)
    review: bool = False
    format: SerializationFormat = SerializationFormat.JSON
    git: GitPlacementConfig | None = None
    # name -> vault ciphertext; decrypted only when needed, never echoed back
    secrets: dict[str, str] = Field(default_factory=dict)

    def redacted_dump(self) -> dict[str, Any]:
        """JSON-ready dump with secret values replaced (used by debug responses)."""
        data = self.model_dump(mode="json")
        data["secrets"] = {name: REDACTED for name in self.secrets}
        return data


class BackendConfig(_ConfigModel):
    """A configured repository backend (`driver` selects the implementation)."""

    name: str = ""
    driver: str = Field(..., min_length=1)
    host: str = ""
    token: SecretStr = SecretStr("")
    encrypted_token: str = ""
    project_config_path: str = ""
    project_config_format: SerializationFormat = SerializationFormat.YAML
    # None: use the STATICIMP_BACKEND_TIMEOUT_SECONDS setting
    timeout_seconds: float | None = Field(default=None, gt=0)

    @field_validator("host")
    @classmethod
    def strip_scheme(cls, v: str) -> str:
        """Accept `https://git.example.com/` as well as `git.example.com`."""
        v = v.strip()
        for prefix in ("https://", "http://"):
            if v.startswith(prefix):
                v = v[len(prefix) :]
        return v.rstrip("/")


class ProjectConfig(_ConfigModel):
    """Project-owned config file: entry types only (backends stay server-side)."""

    entries: dict[str, EntryTypeConfig] = Field(default_factory=dict)


class ServerConfig(_ConfigModel):
    """Server config file: listen address, backends, entry types."""

    host: str = "127.0.0.1"
    port: int = Field(default=8080, ge=1, le=65535)
    timestamp_format: str = DEFAULT_TIMESTAMP_FORMAT
    backends: dict[str, BackendConfig] = Field(default_factory=dict)
    entries: dict[str, EntryTypeConfig] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def name_backends(cls, data: Any) -> Any:
        """Fill each backend's `name` from its mapping key."""
        if isinstance(data, dict) and isinstance(data.get("backends"), dict):
            backends = {}
            for key, value in data["backends"].items():
                if isinstance(value, dict):
                    value = {**value, "name": key}
                elif isinstance(value, BackendConfig):
                    value = value.model_copy(update={"name": key})
                backends[key] = value
            data = {**data, "backends": backends}
        return data
