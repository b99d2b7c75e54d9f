"""Presentation-layer dependency injection.

Routes depend on these, never on the runtime's internals directly. The
runtime is built by the lifespan (or set by tests) on app.state.runtime.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from staticimp.application.use_cases.entries import EntrySubmissionService
from staticimp.core.runtime import AppRuntime


def get_runtime(request: Request) -> AppRuntime:
    """Return the process runtime; fails loudly if startup did not build it."""
    runtime = getattr(request.app.state, "runtime", None)
    if runtime is None:
        raise RuntimeError("Application runtime is not initialized")
    return runtime


def get_submission_service(
    runtime: Annotated[AppRuntime, Depends(get_runtime)],
) -> EntrySubmissionService:
    """Entry submission service bound to the runtime."""
    return runtime.submission_service()
