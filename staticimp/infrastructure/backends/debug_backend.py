"""In-memory backend for dry runs and tests.

Records every call and keeps committed files in a dict keyed by
(project, branch, file_path), so get_file returns what was committed.
Nothing leaves the process. The registry builds a new instance per
submission, so nothing recorded is shared between submissions.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from staticimp.application.dtos.entry import (
    BranchResult,
    CommitResult,
    MergeRequestResult,
)
from staticimp.domain.exceptions import (
    BackendNotFoundException,
    BranchAlreadyExistsException,
)
from staticimp.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


@dataclass
class RecordedCall:
    """One call made against the debug backend."""

    operation: str
    args: dict[str, Any] = field(default_factory=dict)


class DebugBackend:
    """IRepositoryBackend that stores everything in memory."""

    def __init__(self, name: str = "debug") -> None:
        self.name = name
        self.calls: list[RecordedCall] = []
        self.files: dict[tuple[str, str, str], bytes] = {}
        self.branches: set[tuple[str, str]] = set()
        self.merge_requests: list[MergeRequestResult] = []

    def _record(self, operation: str, **args: Any) -> None:
        self.calls.append(RecordedCall(operation, args))
        logger.debug("debug backend %s: %s %s", self.name, operation, args)

    def operations(self) -> list[str]:
        """Names of the recorded calls, in order."""
        return [call.operation for call in self.calls]

    async def commit_file(
        self,
        project: str,
        branch: str,
        path: str,
        filename: str,
        content: bytes,
        commit_message: str,
    ) -> CommitResult:
        file_path = "/".join(p for p in f"{path}/{filename}".split("/") if p)
        self._record(
            "commit_file",
            project=project,
            branch=branch,
            file_path=file_path,
            commit_message=commit_message,
            size=len(content),
        )
        self.files[(project, branch, file_path)] = content
        return CommitResult(
            branch=branch, file_path=file_path, commit_id=f"debug-{len(self.calls)}"
        )

    async def create_branch(
        self, project: str, new_branch: str, from_branch: str
    ) -> BranchResult:
        self._record(
            "create_branch", project=project, new_branch=new_branch, from_branch=from_branch
        )
        if (project, new_branch) in self.branches:
            raise BranchAlreadyExistsException(new_branch)
        self.branches.add((project, new_branch))
        return BranchResult(name=new_branch, created=True)

    async def open_merge_request(
        self,
        project: str,
        source_branch: str,
        target_branch: str,
        description: str,
        *,
        title: str | None = None,
    ) -> MergeRequestResult:
        self._record(
            "open_merge_request",
            project=project,
            source_branch=source_branch,
            target_branch=target_branch,
            title=title,
        )
        result = MergeRequestResult(
            iid=len(self.merge_requests) + 1,
            source_branch=source_branch,
            target_branch=target_branch,
        )
        self.merge_requests.append(result)
        return result

    async def get_file(self, project: str, ref: str, path: str) -> bytes:
        self._record("get_file", project=project, ref=ref, path=path)
        try:
            return self.files[(project, ref, path)]
        except KeyError:
            raise BackendNotFoundException(
                f"No file {path} at {ref}", {"project": project}
            ) from None
