"""Tests for the placeholder engine (tokenize, validate_template, render)."""

from datetime import UTC, datetime

import pytest

from staticimp.application.dtos.context import EvaluationContext
from staticimp.application.services.placeholder_engine import (
    Literal,
    Placeholder,
    render,
    stringify,
    tokenize,
    validate_template,
)
from staticimp.domain.exceptions import (
    MalformedPlaceholderException,
    UnknownNamespaceException,
    UnresolvedPlaceholderException,
)

NOW = datetime(2024, 5, 1, 12, 30, 45, 123000, tzinfo=UTC)


def make_ctx(**overrides) -> EvaluationContext:
    values = {
        "entry_id": "abc123",
        "timestamp": NOW,
        "project": "group/site",
        "branch": "main",
        "fields": {"name": "Ada", "count": 3, "ok": True, "none": None, "tags": ["a", "b"]},
        "params": {"slug": "hello-world"},
    }
    values.update(overrides)
    return EvaluationContext(**values)


class TestTokenize:
    """Scanner output: literal and placeholder tokens."""

    def test_plain_text_is_one_literal(self) -> None:
        assert tokenize("data/comments") == (Literal("data/comments"),)

    def test_empty_template_has_no_tokens(self) -> None:
        assert tokenize("") == ()

    def test_interleaved(self) -> None:
        tokens = tokenize("a{field.name}b{@id}")
        assert tokens == (
            Literal("a"),
            Placeholder("field", "name", None, "{field.name}"),
            Literal("b"),
            Placeholder("@", "id", None, "{@id}"),
        )

    def test_argument_is_everything_after_first_colon(self) -> None:
        (token,) = tokenize("{@date:%H:%M}")
        assert isinstance(token, Placeholder)
        assert token.key == "date"
        assert token.argument == "%H:%M"

    def test_escaped_braces_merge_into_literal(self) -> None:
        assert tokenize("{{x}} and {{") == (Literal("{x} and {"),)

    def test_key_may_contain_dots(self) -> None:
        (token,) = tokenize("{field.a.b}")
        assert isinstance(token, Placeholder)
        assert token.namespace == "field"
        assert token.key == "a.b"


class TestMalformed:
    """Invalid syntax raises MalformedPlaceholderException."""

    @pytest.mark.parametrize(
        "template",
        [
            "{field.name",
            "oops}",
            "{field.{name}}",
            "{}",
            "{name}",
            "{field.}",
            "{@}",
            "{field.name:fmt}",
            "{@id:fmt}",
        ],
    )
    def test_rejected(self, template: str) -> None:
        with pytest.raises(MalformedPlaceholderException):
            tokenize(template)

    def test_position_reported(self) -> None:
        with pytest.raises(MalformedPlaceholderException) as exc_info:
            tokenize("abc}")
        assert exc_info.value.details["position"] == 3


class TestNamespaces:
    def test_unknown_namespace(self) -> None:
        with pytest.raises(UnknownNamespaceException) as exc_info:
            render("{env.HOME}", make_ctx())
        assert exc_info.value.details["namespace"] == "env"

    def test_unknown_field_is_unresolved(self) -> None:
        with pytest.raises(UnresolvedPlaceholderException) as exc_info:
            render("{field.missing}", make_ctx())
        assert exc_info.value.error_code == "UNRESOLVED_PLACEHOLDER"

    def test_unknown_param_is_unresolved(self) -> None:
        with pytest.raises(UnresolvedPlaceholderException):
            render("{params.nope}", make_ctx())

    def test_unknown_generated_variable(self) -> None:
        with pytest.raises(UnresolvedPlaceholderException) as exc_info:
            render("{@nope}", make_ctx())
        assert "@nope" in exc_info.value.message


class TestRender:
    def test_no_placeholders_is_identity(self) -> None:
        for text in ["", "plain", "data/comments/x.yml", "a b c"]:
            assert render(text, make_ctx()) == text

    def test_fields_and_params(self) -> None:
        out = render("data/{params.slug}/{field.name}", make_ctx())
        assert out == "data/hello-world/Ada"

    def test_generated_values(self) -> None:
        ctx = make_ctx()
        assert render("{@id}", ctx) == "abc123"
        assert render("{@branch}", ctx) == "main"
        assert render("{@project}", ctx) == "group/site"

    def test_timestamp_uses_server_format(self) -> None:
        assert render("comment-{@timestamp}.yml", make_ctx()) == "comment-20240501T123045.123Z.yml"

    def test_timestamp_with_argument(self) -> None:
        assert render("{@timestamp:%Y}", make_ctx()) == "2024"

    def test_timestamp_custom_server_format(self) -> None:
        ctx = make_ctx(timestamp_format="%Y-%m-%d")
        assert render("{@timestamp}", ctx) == "2024-05-01"

    def test_date_defaults_to_iso8601(self) -> None:
        assert render("{@date}", make_ctx()) == "2024-05-01T12:30:45.123+00:00"

    def test_date_with_colons_in_format(self) -> None:
        assert render("{@date:%H:%M}", make_ctx()) == "12:30"

    def test_value_stringification(self) -> None:
        ctx = make_ctx()
        assert render("{field.count}|{field.ok}|{field.none}|{field.tags}", ctx) == '3|true||["a","b"]'

    def test_no_recursive_expansion(self) -> None:
        ctx = make_ctx(fields={"name": "{@id}"})
        assert render("{field.name}", ctx) == "{@id}"

    def test_escapes_render_as_braces(self) -> None:
        assert render("{{{field.name}}}", make_ctx()) == "{Ada}"

    def test_deterministic(self) -> None:
        ctx = make_ctx()
        template = "{@timestamp}-{@id}-{field.name}"
        assert render(template, ctx) == render(template, ctx)

    def test_rendering_output_again_is_noop(self) -> None:
        ctx = make_ctx()
        once = render("data/{params.slug}", ctx)
        assert render(once, ctx) == once


class TestValidateTemplate:
    def test_returns_placeholders(self) -> None:
        found = validate_template("{field.a}-{@id}")
        assert [(p.namespace, p.key) for p in found] == [("field", "a"), ("@", "id")]

    def test_unknown_generated_variable_fails_without_context(self) -> None:
        with pytest.raises(UnresolvedPlaceholderException):
            validate_template("{@uuid}")

    def test_unknown_field_keys_are_fine_without_context(self) -> None:
        validate_template("{field.anything}")


class TestStringify:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("x", "x"),
            (None, ""),
            (False, "false"),
            (1.5, "1.5"),
            ({"k": "ü"}, '{"k":"ü"}'),
        ],
    )
    def test_values(self, value, expected: str) -> None:
        assert stringify(value) == expected
