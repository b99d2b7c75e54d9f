"""Entry API: decode the request into a Submission and hand it to the service.

POST /v1/entry/{backend}/{project}/{branch}/{entry_type}

The project may contain slashes (`group/subgroup/repo`). The body is a flat
mapping of fields as form data, JSON, or YAML; the query string becomes the
`params` namespace.
"""

from typing import Annotated, Any
from urllib.parse import parse_qsl

from fastapi import APIRouter, Depends, Request

from staticimp.api.v1.dependencies import get_submission_service
from staticimp.application.dtos.entry import Submission
from staticimp.application.services.serialization import deserialize
from staticimp.application.use_cases.entries import EntrySubmissionService
from staticimp.core.limiter import limit_entries
from staticimp.domain.enums import SerializationFormat
from staticimp.domain.exceptions import (
    MalformedEntryException,
    UnsupportedContentTypeException,
)
from staticimp.schemas.entry import EntryResponse

router = APIRouter()

FORM_TYPES = frozenset({"application/x-www-form-urlencoded"})
JSON_TYPES = frozenset({"application/json"})
YAML_TYPES = frozenset({"application/yaml", "application/x-yaml", "text/yaml"})


def parse_entry_body(content_type: str, body: bytes) -> dict[str, Any]:
    """Decode a request body into entry fields.

    Raises:
        UnsupportedContentTypeException: not form, JSON, or YAML.
        MalformedEntryException: undecodable body, or not a flat mapping.
    """
    media_type = content_type.split(";", 1)[0].strip().lower()
    try:
        if media_type in FORM_TYPES:
            return dict(parse_qsl(body.decode("utf-8"), keep_blank_values=True))
        if media_type in JSON_TYPES:
            data = deserialize(body, SerializationFormat.JSON)
        elif media_type in YAML_TYPES:
            data = deserialize(body, SerializationFormat.YAML)
        else:
            raise UnsupportedContentTypeException(media_type)
    except ValueError as e:
        raise MalformedEntryException(str(e)) from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise MalformedEntryException("body must be a mapping of field names to values")
    return {str(key): value for key, value in data.items()}


@router.post(
    "/{backend}/{project:path}/{branch}/{entry_type}",
    response_model=EntryResponse,
    responses={
        400: {"description": "Invalid submission"},
        404: {"description": "Unknown backend or entry type"},
        415: {"description": "Unsupported body format"},
        502: {"description": "Backend rejected the request"},
        503: {"description": "Backend unavailable (retryable)"},
    },
)
@limit_entries
async def submit_entry(
    request: Request,
    backend: str,
    project: str,
    branch: str,
    entry_type: str,
    service: Annotated[EntrySubmissionService, Depends(get_submission_service)],
) -> EntryResponse:
    """Validate, resolve, and commit one entry (or return it for debug entry types)."""
    fields = parse_entry_body(request.headers.get("content-type", ""), await request.body())
    submission = Submission(
        backend=backend,
        project=project,
        branch=branch,
        entry_type=entry_type,
        fields=fields,
        params=dict(request.query_params),
    )
    outcome = await service.submit(submission)
    outcome.raise_for_rejection()
    return EntryResponse.from_outcome(outcome)
