"""Entry submission use case: resolve backend and entry type, then orchestrate."""

from __future__ import annotations

from typing import Callable

from staticimp.application.dtos.entry import EntryOutcome, Submission
from staticimp.application.interfaces.backends import IRepositoryBackend
from staticimp.application.interfaces.security import ISecretDecryptor
from staticimp.application.services.config_merge import (
    merge_entry_types,
    parse_project_config,
)
from staticimp.application.use_cases.entries.orchestrator import EntryOrchestrator
from staticimp.domain.entities.config import (
    BackendConfig,
    EntryTypeConfig,
    ProjectConfig,
    ServerConfig,
)
from staticimp.domain.enums import EntryState
from staticimp.domain.exceptions import (
    BackendNotFoundException,
    StaticimpException,
    UnknownBackendException,
    UnknownEntryTypeException,
)
from staticimp.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

BackendFactory = Callable[[BackendConfig], IRepositoryBackend]


class EntrySubmissionService:
    """Turns a Submission into an EntryOutcome using the server config.

    Args:
        config: Loaded server config.
        backend_factory: Builds a driver for a backend config (registry + deps).
        decryptor: Secret vault, or None when no key is configured.
    """

    def __init__(
        self,
        config: ServerConfig,
        backend_factory: BackendFactory,
        decryptor: ISecretDecryptor | None = None,
    ) -> None:
        self.config = config
        self.backend_factory = backend_factory
        self.decryptor = decryptor

    async def submit(self, submission: Submission) -> EntryOutcome:
        """Process one submission; StaticimpExceptions end in a REJECTED outcome."""
        try:
            backend_config = self.config.backends.get(submission.backend)
            if backend_config is None:
                raise UnknownBackendException(submission.backend)
            backend = self.backend_factory(backend_config)
            project = await self._load_project_config(backend, backend_config, submission)
            entry_config = self._resolve_entry_type(submission.entry_type, project)
        except StaticimpException as exc:
            logger.warning(
                "Submission rejected before processing (%s): %s",
                exc.error_code,
                exc.message,
            )
            return EntryOutcome(
                state=EntryState.REJECTED,
                trail=(EntryState.RECEIVED, EntryState.REJECTED),
                error=exc,
            )
        orchestrator = EntryOrchestrator(backend, self.config.timestamp_format)
        return await orchestrator.process(submission, entry_config)

    async def _load_project_config(
        self,
        backend: IRepositoryBackend,
        backend_config: BackendConfig,
        submission: Submission,
    ) -> ProjectConfig | None:
        """Fetch the project config from the requested branch; None if absent."""
        if not backend_config.project_config_path:
            return None
        try:
            content = await backend.get_file(
                submission.project, submission.branch, backend_config.project_config_path
            )
        except BackendNotFoundException:
            logger.debug(
                "No project config at %s in %s@%s",
                backend_config.project_config_path,
                submission.project,
                submission.branch,
            )
            return None
        return parse_project_config(content, backend_config.project_config_format)

    def _resolve_entry_type(
        self, name: str, project: ProjectConfig | None
    ) -> EntryTypeConfig:
        entries = merge_entry_types(self.config.entries, project, self.decryptor)
        entry = entries.get(name)
        if entry is None or entry.disabled:
            raise UnknownEntryTypeException(name)
        return entry
