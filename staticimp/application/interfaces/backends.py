"""Backend capability interface (port) for repository hosts.

The orchestrator only talks to this protocol; drivers live in
staticimp.infrastructure.backends and are selected by the registry.
All operations wait for a definitive result or raise a BackendException
subclass (see staticimp.domain.exceptions); timeouts surface as
BackendUnavailableException.
"""

from __future__ import annotations

from typing import Protocol

from staticimp.application.dtos.entry import (
    BranchResult,
    CommitResult,
    MergeRequestResult,
)


class IRepositoryBackend(Protocol):
    """Protocol for a remote repository provider (GitLab, debug recorder, ...)."""

    async def commit_file(
        self,
        project: str,
        branch: str,
        path: str,
        filename: str,
        content: bytes,
        commit_message: str,
    ) -> CommitResult:
        """Create or update path/filename on branch in one commit.

        Raises:
            BackendConflictException, BackendAuthException,
            BackendNotFoundException, BackendUnavailableException.
        """
        ...

    async def create_branch(
        self, project: str, new_branch: str, from_branch: str
    ) -> BranchResult:
        """Create new_branch from from_branch.

        Raises:
            BranchAlreadyExistsException: the branch is already there (non-fatal).
        """
        ...

    async def open_merge_request(
        self,
        project: str,
        source_branch: str,
        target_branch: str,
        description: str,
        *,
        title: str | None = None,
    ) -> MergeRequestResult:
        """Open a merge/pull request from source_branch into target_branch."""
        ...

    async def get_file(self, project: str, ref: str, path: str) -> bytes:
        """Raw file content at ref (used to load project config files).

        Raises:
            BackendNotFoundException: the file (or ref) does not exist.
        """
        ...
