"""Config merge: project entry types over server ones, template and secret checks."""

from __future__ import annotations

from typing import Mapping

from pydantic import ValidationError

from staticimp.application.interfaces.security import ISecretDecryptor
from staticimp.application.services.placeholder_engine import validate_template
from staticimp.application.services.serialization import deserialize
from staticimp.domain.entities.config import EntryTypeConfig, ProjectConfig
from staticimp.domain.enums import SerializationFormat
from staticimp.domain.exceptions import (
    ConfigurationException,
    PlaceholderException,
    VaultUnavailableException,
)
from staticimp.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


def verify_secrets(
    entries: Mapping[str, EntryTypeConfig],
    decryptor: ISecretDecryptor | None,
) -> None:
    """Check that every entry type's secrets decrypt with the service key.

    Plaintexts are dropped as soon as each decrypt returns.

    Raises:
        VaultUnavailableException: secrets are configured but no vault is loaded.
        DecryptionFailedException: a secret does not decrypt (label in details).
    """
    for entry_name, entry in entries.items():
        if not entry.secrets:
            continue
        if decryptor is None:
            raise VaultUnavailableException(
                f"Entry type '{entry_name}' has secrets but no vault key is configured"
            )
        for secret_name, ciphertext in entry.secrets.items():
            decryptor.decrypt(ciphertext, name=f"{entry_name}.{secret_name}")


def merge_entry_types(
    server_entries: Mapping[str, EntryTypeConfig],
    project: ProjectConfig | None,
    decryptor: ISecretDecryptor | None = None,
) -> dict[str, EntryTypeConfig]:
    """Project entry types replace server ones of the same name in full.

    Project secrets are verified before the merged mapping is returned.
    """
    merged = dict(server_entries)
    if project is None:
        return merged
    verify_secrets(project.entries, decryptor)
    for name, entry in project.entries.items():
        if name in merged:
            logger.debug("Project entry type '%s' replaces server definition", name)
        merged[name] = entry
    return merged


def validate_entry_templates(entries: Mapping[str, EntryTypeConfig]) -> None:
    """Syntax-check every template in the given entry types.

    Raises:
        ConfigurationException: a template is malformed, names an unknown
            namespace, or an unknown generated variable.
    """
    for entry_name, entry in entries.items():
        templates = {f"fields.extra.{k}": v for k, v in entry.fields.extra.items()}
        if entry.git is not None:
            templates.update(
                {f"git.{k}": v for k, v in entry.git.templates().items()}
            )
        for location, template in templates.items():
            try:
                validate_template(template)
            except PlaceholderException as e:
                raise ConfigurationException(
                    f"Invalid template in entry type '{entry_name}' ({location}): {e.message}",
                    {"entry_type": entry_name, "location": location, **e.details},
                ) from e


def parse_project_config(
    content: bytes | str, fmt: SerializationFormat
) -> ProjectConfig:
    """Parse and validate a project config file.

    An empty file is an empty project config.

    Raises:
        ConfigurationException: unparsable content, schema violation, or bad template.
    """
    try:
        data = deserialize(content, fmt)
    except ValueError as e:
        raise ConfigurationException(
            f"Project config is not valid {fmt.value}", {"reason": str(e)}
        ) from e
    try:
        project = ProjectConfig.model_validate(data or {})
    except ValidationError as e:
        raise ConfigurationException(
            "Project config is invalid",
            {"errors": e.errors(include_url=False, include_context=False, include_input=False)},
        ) from e
    validate_entry_templates(project.entries)
    return project
