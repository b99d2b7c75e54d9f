"""Field pipeline: validate -> generate -> transform.

Each stage is a pure function `(fields, config, ctx) -> new dict`. The
pipeline runs them in STAGES order and yields a StageResult after each one,
so the orchestrator can record state transitions and tests can inspect
intermediate mappings.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Callable, Iterator, Mapping

from staticimp.application.dtos.context import EvaluationContext
from staticimp.application.dtos.entry import ResolvedEntry
from staticimp.application.services.placeholder_engine import render, stringify
from staticimp.application.services.transforms import TransformError, get_transformer
from staticimp.domain.entities.config import FieldConfig
from staticimp.domain.enums import PipelineStage
from staticimp.domain.exceptions import (
    FieldNotAllowedException,
    InvalidEncodingException,
    MissingRequiredFieldException,
    UnknownTransformTargetException,
)

Fields = dict[str, Any]
Stage = Callable[[Mapping[str, Any], FieldConfig, EvaluationContext], Fields]


def _is_missing(value: Any) -> bool:
    return value is None or value == ""


def validate_fields(
    fields: Mapping[str, Any], config: FieldConfig, ctx: EvaluationContext
) -> Fields:
    """Check required and allowed fields; return only the allowed ones.

    Required fields are checked first so a submission missing a required
    field reports that even when it also carries disallowed fields.

    Raises:
        MissingRequiredFieldException: a required field is absent or empty.
        FieldNotAllowedException: a submitted field is not in `allowed`.
    """
    missing = sorted(name for name in config.required if _is_missing(fields.get(name)))
    if missing:
        raise MissingRequiredFieldException(missing)
    not_allowed = sorted(name for name in fields if name not in config.allowed)
    if not_allowed:
        raise FieldNotAllowedException(not_allowed)
    return {name: value for name, value in fields.items() if name in config.allowed}


def generate_fields(
    fields: Mapping[str, Any], config: FieldConfig, ctx: EvaluationContext
) -> Fields:
    """Render `extra` templates in declared order; later ones see earlier ones."""
    result = dict(fields)
    for name, template in config.extra.items():
        result[name] = render(template, ctx.with_fields(result))
    return result


def transform_fields(
    fields: Mapping[str, Any], config: FieldConfig, ctx: EvaluationContext
) -> Fields:
    """Apply configured transforms in declared order, replacing values in place.

    Raises:
        UnknownTransformTargetException: the target field does not exist.
        InvalidEncodingException: the value is not valid input for the transform.
    """
    result = dict(fields)
    for step in config.transforms:
        if step.field not in result:
            raise UnknownTransformTargetException(step.field, step.transform.value)
        transformer = get_transformer(step.transform)
        try:
            result[step.field] = transformer.apply(stringify(result[step.field]))
        except TransformError as e:
            raise InvalidEncodingException(step.field, step.transform.value) from e
    return result


STAGES: tuple[tuple[PipelineStage, Stage], ...] = (
    (PipelineStage.VALIDATE, validate_fields),
    (PipelineStage.GENERATE, generate_fields),
    (PipelineStage.TRANSFORM, transform_fields),
)


@dataclass(frozen=True)
class StageResult:
    """Field mapping as it stands after one stage."""

    stage: PipelineStage
    fields: Mapping[str, Any]


class FieldPipeline:
    """Runs the field stages for one entry type's FieldConfig."""

    def __init__(self, config: FieldConfig) -> None:
        self.config = config

    def run_stages(
        self, fields: Mapping[str, Any], ctx: EvaluationContext
    ) -> Iterator[StageResult]:
        """Yield a StageResult after each stage; a failing stage raises."""
        current: Mapping[str, Any] = dict(fields)
        for stage, func in STAGES:
            current = func(current, self.config, ctx)
            yield StageResult(stage=stage, fields=MappingProxyType(dict(current)))

    def run(self, fields: Mapping[str, Any], ctx: EvaluationContext) -> ResolvedEntry:
        """Run every stage and return the immutable result."""
        last: Mapping[str, Any] = {}
        for result in self.run_stages(fields, ctx):
            last = result.fields
        return ResolvedEntry(entry_id=ctx.entry_id, timestamp=ctx.timestamp, fields=last)
