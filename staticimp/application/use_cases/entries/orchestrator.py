"""Entry orchestrator: one submission from raw fields to a committed file.

State machine (recorded in EntryOutcome.trail):

    RECEIVED -> VALIDATED -> GENERATED -> TRANSFORMED -> ROUTED -> COMMITTED
                                              |                  \\-> REJECTED
                                              \\-> DEBUG

Every StaticimpException raised on the way ends the run in REJECTED with the
error attached; nothing is retried here. Review entries never touch the
target branch: the file goes to a review branch and a merge request is
opened back into the target.
"""

from __future__ import annotations

from datetime import datetime
from typing import Callable

from staticimp.application.dtos.context import EvaluationContext
from staticimp.application.dtos.entry import (
    CommitResult,
    DebugReport,
    EntryOutcome,
    GitPlacement,
    MergeRequestResult,
    ResolvedEntry,
    Submission,
)
from staticimp.application.interfaces.backends import IRepositoryBackend
from staticimp.application.services.field_pipeline import FieldPipeline
from staticimp.application.services.placeholder_engine import render
from staticimp.application.services.serialization import serialize_entry
from staticimp.domain.entities.config import EntryTypeConfig
from staticimp.domain.enums import EntryState, ErrorCategory, PipelineStage
from staticimp.domain.exceptions import (
    BackendException,
    BranchAlreadyExistsException,
    BranchNotAllowedException,
    ConfigurationException,
    ReviewPartiallyCommittedException,
    StaticimpException,
)
from staticimp.shared.telemetry.logging import get_logger
from staticimp.shared.utils.datetime import DEFAULT_TIMESTAMP_FORMAT

logger = get_logger(__name__)

_STAGE_STATES: dict[PipelineStage, EntryState] = {
    PipelineStage.VALIDATE: EntryState.VALIDATED,
    PipelineStage.GENERATE: EntryState.GENERATED,
    PipelineStage.TRANSFORM: EntryState.TRANSFORMED,
}


def render_placement(
    entry_config: EntryTypeConfig, ctx: EvaluationContext, requested_branch: str
) -> GitPlacement:
    """Render every git template for one entry.

    The rendered target branch must match the requested branch; an empty
    rendered branch means "the requested branch".

    Raises:
        ConfigurationException: the entry type has no git section.
        BranchNotAllowedException: rendered branch differs from the request.
    """
    cfg = entry_config.git
    if cfg is None:
        raise ConfigurationException("Entry type has no git placement configured")
    branch = render(cfg.branch, ctx)
    if branch and branch != requested_branch:
        raise BranchNotAllowedException(requested_branch)
    return GitPlacement(
        path=render(cfg.path, ctx),
        filename=render(cfg.filename, ctx),
        branch=branch or requested_branch,
        commit_message=render(cfg.commit_message, ctx),
        review_branch=render(cfg.review_branch, ctx),
        mr_description=render(cfg.mr_description, ctx),
    )


class _Run:
    """Mutable bookkeeping for one process() call."""

    def __init__(self) -> None:
        self.trail: list[EntryState] = [EntryState.RECEIVED]
        self.entry: ResolvedEntry | None = None
        self.commit: CommitResult | None = None
        self.review_branch: str | None = None
        self.merge_request: MergeRequestResult | None = None

    def advance(self, state: EntryState) -> None:
        logger.debug("Entry state %s -> %s", self.trail[-1].value, state.value)
        self.trail.append(state)

    def outcome(self, state: EntryState, **kwargs) -> EntryOutcome:
        return EntryOutcome(
            state=state,
            trail=tuple(self.trail),
            entry=self.entry,
            commit=self.commit,
            review_branch=self.review_branch,
            merge_request=self.merge_request,
            **kwargs,
        )


class EntryOrchestrator:
    """Runs the field pipeline and routes the result to a backend.

    Args:
        backend: Repository backend for this submission.
        timestamp_format: Server-wide default for `{@timestamp}`.
        id_factory: Entry id generator (default: CUID2).
        clock: Returns the submission time (default: now, UTC).
    """

    def __init__(
        self,
        backend: IRepositoryBackend,
        timestamp_format: str = DEFAULT_TIMESTAMP_FORMAT,
        *,
        id_factory: Callable[[], str] | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.backend = backend
        self.timestamp_format = timestamp_format
        self._id_factory = id_factory
        self._clock = clock

    def _context(self, submission: Submission) -> EvaluationContext:
        return EvaluationContext.for_submission(
            submission,
            self.timestamp_format,
            entry_id=self._id_factory() if self._id_factory else None,
            now=self._clock() if self._clock else None,
        )

    async def process(
        self, submission: Submission, entry_config: EntryTypeConfig
    ) -> EntryOutcome:
        """Process one submission; never raises StaticimpException (see outcome.error)."""
        run = _Run()
        try:
            return await self._process(run, submission, entry_config)
        except StaticimpException as exc:
            self._log_rejection(submission, exc)
            run.advance(EntryState.REJECTED)
            return run.outcome(EntryState.REJECTED, error=exc)

    async def _process(
        self, run: _Run, submission: Submission, entry_config: EntryTypeConfig
    ) -> EntryOutcome:
        ctx = self._context(submission)
        pipeline = FieldPipeline(entry_config.fields)
        fields = {}
        for result in pipeline.run_stages(submission.fields, ctx):
            fields = result.fields
            run.advance(_STAGE_STATES[result.stage])
        run.entry = ResolvedEntry(entry_id=ctx.entry_id, timestamp=ctx.timestamp, fields=fields)
        entry_ctx = ctx.with_fields(run.entry.fields)

        if entry_config.debug:
            placement = (
                render_placement(entry_config, entry_ctx, submission.branch)
                if entry_config.git is not None
                else None
            )
            run.advance(EntryState.DEBUG)
            logger.info(
                "Debug entry %s for %s/%s (no backend call)",
                ctx.entry_id,
                submission.project,
                submission.entry_type,
            )
            return run.outcome(
                EntryState.DEBUG,
                debug=DebugReport(
                    entry=run.entry.to_dict(),
                    config=entry_config.redacted_dump(),
                    placement=placement.to_dict() if placement else None,
                ),
            )

        placement = render_placement(entry_config, entry_ctx, submission.branch)
        content = serialize_entry(run.entry, entry_config.format)
        run.advance(EntryState.ROUTED)

        if entry_config.review:
            await self._commit_for_review(run, submission.project, placement, content)
        else:
            run.commit = await self.backend.commit_file(
                submission.project,
                placement.branch,
                placement.path,
                placement.filename,
                content,
                placement.commit_message,
            )
        run.advance(EntryState.COMMITTED)
        logger.info(
            "Committed entry %s to %s:%s (%s)",
            ctx.entry_id,
            submission.project,
            run.commit.branch,
            run.commit.file_path,
        )
        return run.outcome(EntryState.COMMITTED)

    async def _commit_for_review(
        self, run: _Run, project: str, placement: GitPlacement, content: bytes
    ) -> None:
        """Branch, commit to the branch, open the merge request."""
        review_branch = placement.review_branch
        if not review_branch or review_branch == placement.branch:
            raise ConfigurationException(
                "Review branch must be non-empty and differ from the target branch",
                {"review_branch": review_branch, "branch": placement.branch},
            )
        try:
            await self.backend.create_branch(project, review_branch, placement.branch)
        except BranchAlreadyExistsException:
            logger.warning("Review branch %s already exists; committing to it", review_branch)
        run.review_branch = review_branch

        run.commit = await self.backend.commit_file(
            project,
            review_branch,
            placement.path,
            placement.filename,
            content,
            placement.commit_message,
        )
        try:
            run.merge_request = await self.backend.open_merge_request(
                project,
                review_branch,
                placement.branch,
                placement.mr_description,
                title=placement.commit_message,
            )
        except BackendException as e:
            raise ReviewPartiallyCommittedException(
                review_branch, run.commit.file_path, e.message
            ) from e

    @staticmethod
    def _log_rejection(submission: Submission, exc: StaticimpException) -> None:
        where = f"{submission.backend}/{submission.project}/{submission.entry_type}"
        if exc.category in (ErrorCategory.CALLER_INPUT, ErrorCategory.BACKEND):
            logger.warning("Entry rejected (%s) for %s: %s", exc.error_code, where, exc.message)
        else:
            logger.error(
                "Entry rejected (%s) for %s: %s %s",
                exc.error_code,
                where,
                exc.message,
                exc.details,
            )
