"""DTOs for entry use cases (no dependency on HTTP schemas or drivers)."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Any, Mapping

from staticimp.domain.enums import EntryState
from staticimp.domain.exceptions import StaticimpException


def _freeze(mapping: Mapping[str, Any]) -> Mapping[str, Any]:
    """Read-only shallow copy (caller mutations after construction are not visible)."""
    return MappingProxyType(dict(mapping))


@dataclass(frozen=True)
class Submission:
    """One inbound entry: URL path parts, query parameters, and body fields."""

    backend: str
    project: str
    branch: str
    entry_type: str
    fields: Mapping[str, Any] = field(default_factory=dict)
    params: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "fields", _freeze(self.fields))
        object.__setattr__(self, "params", _freeze(self.params))


@dataclass(frozen=True)
class ResolvedEntry:
    """Final field mapping after validation, generation, and transforms."""

    entry_id: str
    timestamp: datetime
    fields: Mapping[str, Any]

    def __post_init__(self) -> None:
        object.__setattr__(self, "fields", _freeze(self.fields))

    def to_dict(self) -> dict[str, Any]:
        """Plain dict of the entry fields (what gets serialized into the file)."""
        return dict(self.fields)


@dataclass(frozen=True)
class GitPlacement:
    """Rendered git placement for one entry (all placeholders resolved)."""

    path: str
    filename: str
    branch: str
    commit_message: str
    review_branch: str
    mr_description: str

    @property
    def file_path(self) -> str:
        """Directory and filename joined, without duplicate or leading slashes."""
        parts = [p for p in f"{self.path}/{self.filename}".split("/") if p]
        return "/".join(parts)

    def to_dict(self) -> dict[str, str]:
        return {
            "path": self.path,
            "filename": self.filename,
            "file_path": self.file_path,
            "branch": self.branch,
            "commit_message": self.commit_message,
            "review_branch": self.review_branch,
            "mr_description": self.mr_description,
        }


@dataclass(frozen=True)
class CommitResult:
    """Result of committing one file."""

    branch: str
    file_path: str
    commit_id: str | None = None


@dataclass(frozen=True)
class BranchResult:
    """Result of create_branch; created is False when the branch already existed."""

    name: str
    created: bool = True


@dataclass(frozen=True)
class MergeRequestResult:
    """Result of opening a merge/pull request."""

    iid: int | str
    source_branch: str
    target_branch: str
    web_url: str | None = None


@dataclass(frozen=True)
class DebugReport:
    """Returned instead of committing when the entry type has debug enabled."""

    entry: Mapping[str, Any]
    config: Mapping[str, Any]
    placement: Mapping[str, str] | None = None


@dataclass(frozen=True)
class EntryOutcome:
    """Terminal result of processing one submission.

    state is COMMITTED, DEBUG, or REJECTED; trail lists every state visited
    in order. Rejected outcomes carry the error; nothing else is set then,
    except commit/review_branch for partially committed review entries.
    """

    state: EntryState
    trail: tuple[EntryState, ...]
    entry: ResolvedEntry | None = None
    commit: CommitResult | None = None
    review_branch: str | None = None
    merge_request: MergeRequestResult | None = None
    debug: DebugReport | None = None
    error: StaticimpException | None = None

    @property
    def rejected(self) -> bool:
        return self.state is EntryState.REJECTED

    def raise_for_rejection(self) -> None:
        """Re-raise the attached error if the outcome is REJECTED."""
        if self.rejected and self.error is not None:
            raise self.error
