"""Evaluation context for placeholder rendering.

One context per submission. The generated values (entry id, timestamp) are
fixed when the context is created, so every template rendered for the same
submission sees the same `{@id}` and `{@timestamp}`.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from types import MappingProxyType
from typing import Any, Mapping

from staticimp.application.dtos.entry import Submission
from staticimp.shared.utils.datetime import DEFAULT_TIMESTAMP_FORMAT, ensure_utc, utc_now
from staticimp.shared.utils.generators import generate_entry_id

GENERATED_NAMESPACE = "@"
FIELD_NAMESPACE = "field"
PARAMS_NAMESPACE = "params"
NAMESPACES = frozenset({GENERATED_NAMESPACE, FIELD_NAMESPACE, PARAMS_NAMESPACE})


@dataclass(frozen=True)
class EvaluationContext:
    """Read-only view exposed to the placeholder engine."""

    entry_id: str
    timestamp: datetime
    timestamp_format: str = DEFAULT_TIMESTAMP_FORMAT
    project: str = ""
    branch: str = ""
    fields: Mapping[str, Any] = field(default_factory=dict)
    params: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "timestamp", ensure_utc(self.timestamp))
        object.__setattr__(self, "fields", MappingProxyType(dict(self.fields)))
        object.__setattr__(self, "params", MappingProxyType(dict(self.params)))

    @classmethod
    def for_submission(
        cls,
        submission: Submission,
        timestamp_format: str = DEFAULT_TIMESTAMP_FORMAT,
        *,
        entry_id: str | None = None,
        now: datetime | None = None,
    ) -> EvaluationContext:
        """Build the context for a new submission (fields start as submitted)."""
        return cls(
            entry_id=entry_id or generate_entry_id(),
            timestamp=now or utc_now(),
            timestamp_format=timestamp_format,
            project=submission.project,
            branch=submission.branch,
            fields=submission.fields,
            params=submission.params,
        )

    def with_fields(self, fields: Mapping[str, Any]) -> EvaluationContext:
        """Same context with a different field mapping."""
        return replace(self, fields=fields)

    def namespace(self, name: str) -> Mapping[str, Any]:
        """Return the `field` or `params` mapping."""
        if name == FIELD_NAMESPACE:
            return self.fields
        if name == PARAMS_NAMESPACE:
            return self.params
        raise KeyError(name)
