"""Entry use cases: orchestration and submission."""

from staticimp.application.use_cases.entries.orchestrator import (
    EntryOrchestrator,
    render_placement,
)
from staticimp.application.use_cases.entries.submit_entry import (
    BackendFactory,
    EntrySubmissionService,
)

__all__ = [
    "BackendFactory",
    "EntryOrchestrator",
    "EntrySubmissionService",
    "render_placement",
]
