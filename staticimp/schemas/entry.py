"""Entry submission API schemas."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field

from staticimp.application.dtos.entry import EntryOutcome
from staticimp.domain.enums import EntryState


class MergeRequestInfo(BaseModel):
    """Merge request opened for a review entry."""

    iid: int | str
    source_branch: str
    target_branch: str
    web_url: str | None = None


class EntryResponse(BaseModel):
    """Response for POST /v1/entry/... (committed or debug)."""

    status: Literal["committed", "debug"]
    entry_id: str
    entry: dict[str, Any] = Field(default_factory=dict, description="Resolved entry fields")
    trail: list[str] = Field(default_factory=list, description="States visited")
    branch: str | None = None
    file_path: str | None = None
    review_branch: str | None = None
    merge_request: MergeRequestInfo | None = None
    config: dict[str, Any] | None = Field(
        default=None, description="Effective entry type config (debug only, secrets redacted)"
    )
    placement: dict[str, str] | None = Field(
        default=None, description="Rendered git placement (debug only)"
    )

    @classmethod
    def from_outcome(cls, outcome: EntryOutcome) -> EntryResponse:
        """Build from a COMMITTED or DEBUG outcome."""
        assert outcome.entry is not None
        response = cls(
            status="debug" if outcome.state is EntryState.DEBUG else "committed",
            entry_id=outcome.entry.entry_id,
            entry=outcome.entry.to_dict(),
            trail=[state.value for state in outcome.trail],
            review_branch=outcome.review_branch,
        )
        if outcome.commit is not None:
            response.branch = outcome.commit.branch
            response.file_path = outcome.commit.file_path
        if outcome.merge_request is not None:
            mr = outcome.merge_request
            response.merge_request = MergeRequestInfo(
                iid=mr.iid,
                source_branch=mr.source_branch,
                target_branch=mr.target_branch,
                web_url=mr.web_url,
            )
        if outcome.debug is not None:
            response.config = dict(outcome.debug.config)
            response.placement = (
                dict(outcome.debug.placement) if outcome.debug.placement else None
            )
        return response
