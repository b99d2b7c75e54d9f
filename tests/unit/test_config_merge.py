"""Tests for merging project entry types over server ones."""

import pytest

from staticimp.application.services.config_merge import (
    merge_entry_types,
    parse_project_config,
    verify_secrets,
)
from staticimp.domain.entities.config import EntryTypeConfig, ProjectConfig
from staticimp.domain.enums import SerializationFormat
from staticimp.domain.exceptions import (
    ConfigurationException,
    DecryptionFailedException,
    VaultUnavailableException,
)
from staticimp.infrastructure.security import SecretVault

SERVER = {
    "comment": EntryTypeConfig(review=False, fields={"allowed": ["name", "comment"]}),
    "contact": EntryTypeConfig(debug=True),
}

PROJECT_YAML = """
entries:
  comment:
    review: true
    format: yml
  newsletter:
    disabled: true
"""


class TestMerge:
    def test_no_project_config(self) -> None:
        assert merge_entry_types(SERVER, None) == SERVER

    def test_project_replaces_in_full(self) -> None:
        project = parse_project_config(PROJECT_YAML, SerializationFormat.YAML)
        merged = merge_entry_types(SERVER, project)
        assert merged["comment"].review is True
        # replaced, not merged: server field rules are gone
        assert merged["comment"].fields.allowed == frozenset()
        assert merged["contact"] is SERVER["contact"]
        assert merged["newsletter"].disabled is True

    def test_server_mapping_untouched(self) -> None:
        project = ProjectConfig(entries={"comment": EntryTypeConfig(review=True)})
        merge_entry_types(SERVER, project)
        assert SERVER["comment"].review is False


class TestParseProjectConfig:
    def test_json(self) -> None:
        project = parse_project_config(b'{"entries": {"c": {"review": true}}}', SerializationFormat.JSON)
        assert project.entries["c"].review is True

    def test_empty_file(self) -> None:
        assert parse_project_config(b"", SerializationFormat.YAML).entries == {}

    def test_backends_not_allowed_in_project(self) -> None:
        with pytest.raises(ConfigurationException):
            parse_project_config("backends: {}", SerializationFormat.YAML)

    def test_unparsable(self) -> None:
        with pytest.raises(ConfigurationException):
            parse_project_config("{", SerializationFormat.JSON)

    def test_bad_template(self) -> None:
        with pytest.raises(ConfigurationException):
            parse_project_config("entries: {c: {git: {path: '{oops'}}}", SerializationFormat.YAML)


class TestSecrets:
    def test_valid_secrets_pass(self, vault: SecretVault) -> None:
        entries = {"c": EntryTypeConfig(secrets={"k": vault.encrypt("v")})}
        verify_secrets(entries, vault)

    def test_no_secrets_no_vault_needed(self) -> None:
        verify_secrets(SERVER, None)

    def test_secrets_without_vault(self) -> None:
        entries = {"c": EntryTypeConfig(secrets={"k": "abc"})}
        with pytest.raises(VaultUnavailableException):
            verify_secrets(entries, None)

    def test_bad_secret_is_labelled(self, vault: SecretVault) -> None:
        entries = {"c": EntryTypeConfig(secrets={"k": "garbage"})}
        with pytest.raises(DecryptionFailedException) as exc_info:
            verify_secrets(entries, vault)
        assert exc_info.value.details == {"secret": "c.k"}

    def test_project_secrets_checked_on_merge(self, vault: SecretVault, other_private_key_pem: bytes) -> None:
        foreign = SecretVault.from_pem(other_private_key_pem).encrypt("v")
        project = ProjectConfig(entries={"c": EntryTypeConfig(secrets={"k": foreign})})
        with pytest.raises(DecryptionFailedException):
            merge_entry_types(SERVER, project, vault)
