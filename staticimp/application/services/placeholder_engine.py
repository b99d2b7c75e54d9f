"""Placeholder templates: `{namespace.key}`, `{@name}`, `{@name:argument}`.

Templates are plain text with any number of placeholders. A scanner splits
the template into Literal and Placeholder tokens; each placeholder is
resolved independently against an EvaluationContext and the pieces are
concatenated. Resolved values are never re-scanned, so a field containing
"{@id}" is copied through literally.

Syntax:
    {field.name}        submitted/generated entry field
    {params.name}       URL query parameter
    {@id}               entry id
    {@timestamp}        submission time in the server timestamp format
    {@timestamp:FMT}    submission time in FMT
    {@date:FMT}         submission time in FMT (default "%+", ISO 8601)
    {@branch}           requested branch
    {@project}          requested project
    {{  }}              literal braces

Only the generated timestamp variables take an argument; everything after
the first ':' is the argument, so formats may contain ':' themselves.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Callable, Union

from staticimp.application.dtos.context import (
    GENERATED_NAMESPACE,
    NAMESPACES,
    EvaluationContext,
)
from staticimp.domain.exceptions import (
    MalformedPlaceholderException,
    UnknownNamespaceException,
    UnresolvedPlaceholderException,
)
from staticimp.shared.utils.datetime import format_timestamp

DEFAULT_DATE_FORMAT = "%+"


@dataclass(frozen=True)
class Literal:
    """Literal text (escapes already collapsed)."""

    text: str


@dataclass(frozen=True)
class Placeholder:
    """A parsed `{...}` span."""

    namespace: str
    key: str
    argument: str | None
    raw: str


Token = Union[Literal, Placeholder]


@dataclass(frozen=True)
class _Generated:
    accepts_argument: bool
    resolve: Callable[[EvaluationContext, str | None], str]


def _timestamp(ctx: EvaluationContext, argument: str | None) -> str:
    return format_timestamp(ctx.timestamp, argument or ctx.timestamp_format)


def _date(ctx: EvaluationContext, argument: str | None) -> str:
    return format_timestamp(ctx.timestamp, argument or DEFAULT_DATE_FORMAT)


GENERATED_VARIABLES: dict[str, _Generated] = {
    "id": _Generated(False, lambda ctx, _: ctx.entry_id),
    "timestamp": _Generated(True, _timestamp),
    "date": _Generated(True, _date),
    "branch": _Generated(False, lambda ctx, _: ctx.branch),
    "project": _Generated(False, lambda ctx, _: ctx.project),
}


def _parse_placeholder(template: str, body: str, position: int) -> Placeholder:
    """Split a placeholder body into namespace, key, and optional argument."""
    name, sep, argument = body.partition(":")
    if not name:
        raise MalformedPlaceholderException(template, "empty placeholder name", position)
    if name.startswith("@"):
        namespace, key = GENERATED_NAMESPACE, name[1:]
    else:
        namespace, dot, key = name.partition(".")
        if not dot:
            raise MalformedPlaceholderException(
                template,
                f"'{name}' has no namespace (expected namespace.key or @name)",
                position,
            )
    if not key:
        raise MalformedPlaceholderException(template, f"empty key in '{name}'", position)
    if namespace not in NAMESPACES:
        raise UnknownNamespaceException(namespace)
    if sep:
        generated = GENERATED_VARIABLES.get(key) if namespace == GENERATED_NAMESPACE else None
        if generated is None or not generated.accepts_argument:
            raise MalformedPlaceholderException(
                template, f"'{name}' does not accept a formatting argument", position
            )
    return Placeholder(
        namespace=namespace,
        key=key,
        argument=argument if sep else None,
        raw="{" + body + "}",
    )


@lru_cache(maxsize=1024)
def tokenize(template: str) -> tuple[Token, ...]:
    """Scan a template into Literal and Placeholder tokens.

    Adjacent literal text (including collapsed `{{`/`}}` escapes) is merged
    into one Literal. Results are cached; templates come from config and are
    rendered once per submission.

    Raises:
        MalformedPlaceholderException: unbalanced or nested braces, empty names.
        UnknownNamespaceException: namespace other than @, field, params.
    """
    tokens: list[Token] = []
    literal: list[str] = []
    i = 0
    n = len(template)
    while i < n:
        ch = template[i]
        if ch == "{":
            if i + 1 < n and template[i + 1] == "{":
                literal.append("{")
                i += 2
                continue
            end = i + 1
            while end < n and template[end] not in "{}":
                end += 1
            if end >= n:
                raise MalformedPlaceholderException(template, "unterminated placeholder", i)
            if template[end] == "{":
                raise MalformedPlaceholderException(template, "'{' inside placeholder", end)
            if literal:
                tokens.append(Literal("".join(literal)))
                literal = []
            tokens.append(_parse_placeholder(template, template[i + 1 : end], i))
            i = end + 1
        elif ch == "}":
            if i + 1 < n and template[i + 1] == "}":
                literal.append("}")
                i += 2
                continue
            raise MalformedPlaceholderException(template, "unmatched '}'", i)
        else:
            start = i
            while i < n and template[i] not in "{}":
                i += 1
            literal.append(template[start:i])
    if literal:
        tokens.append(Literal("".join(literal)))
    return tuple(tokens)


def validate_template(template: str) -> list[Placeholder]:
    """Check template syntax and namespaces without a context.

    Generated variables are known up front, so an unknown `{@name}` is
    reported here too; field and params keys are only known per submission.

    Returns:
        The placeholders the template references, in order.
    """
    placeholders = [tok for tok in tokenize(template) if isinstance(tok, Placeholder)]
    for ph in placeholders:
        if ph.namespace == GENERATED_NAMESPACE and ph.key not in GENERATED_VARIABLES:
            raise UnresolvedPlaceholderException(ph.namespace, ph.key)
    return placeholders


def stringify(value: Any) -> str:
    """Text form of a field value as it appears in rendered templates."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"), default=str)


def resolve(placeholder: Placeholder, ctx: EvaluationContext) -> str:
    """Resolve one placeholder against the context."""
    if placeholder.namespace == GENERATED_NAMESPACE:
        generated = GENERATED_VARIABLES.get(placeholder.key)
        if generated is None:
            raise UnresolvedPlaceholderException(placeholder.namespace, placeholder.key)
        return generated.resolve(ctx, placeholder.argument)
    values = ctx.namespace(placeholder.namespace)
    if placeholder.key not in values:
        raise UnresolvedPlaceholderException(placeholder.namespace, placeholder.key)
    return stringify(values[placeholder.key])


def render(template: str, ctx: EvaluationContext) -> str:
    """Render a template against a context.

    Raises:
        MalformedPlaceholderException: invalid placeholder syntax.
        UnknownNamespaceException: unknown namespace.
        UnresolvedPlaceholderException: unknown key in a known namespace.
    """
    return "".join(
        tok.text if isinstance(tok, Literal) else resolve(tok, ctx)
        for tok in tokenize(template)
    )
