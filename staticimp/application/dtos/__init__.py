"""Application DTOs (immutable per-submission data)."""

from staticimp.application.dtos.context import EvaluationContext
from staticimp.application.dtos.entry import (
    BranchResult,
    CommitResult,
    DebugReport,
    EntryOutcome,
    GitPlacement,
    MergeRequestResult,
    ResolvedEntry,
    Submission,
)

__all__ = [
    "BranchResult",
    "CommitResult",
    "DebugReport",
    "EntryOutcome",
    "EvaluationContext",
    "GitPlacement",
    "MergeRequestResult",
    "ResolvedEntry",
    "Submission",
]
