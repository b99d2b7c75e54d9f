"""Entry serialization: the bytes committed to the repository."""

from __future__ import annotations

import json
from typing import Any

import yaml

from staticimp.application.dtos.entry import ResolvedEntry
from staticimp.domain.enums import SerializationFormat


def serialize_fields(fields: dict[str, Any], fmt: SerializationFormat) -> bytes:
    """Serialize a field mapping in the given format (UTF-8, insertion order kept)."""
    if fmt is SerializationFormat.YAML:
        text = yaml.safe_dump(
            fields, sort_keys=False, allow_unicode=True, default_flow_style=False
        )
    else:
        text = json.dumps(fields, ensure_ascii=False, indent=2, default=str) + "\n"
    return text.encode("utf-8")


def serialize_entry(entry: ResolvedEntry, fmt: SerializationFormat) -> bytes:
    """Serialize a resolved entry for commit."""
    return serialize_fields(entry.to_dict(), fmt)


def deserialize(content: bytes | str, fmt: SerializationFormat) -> Any:
    """Parse JSON or YAML text (project config files, request bodies).

    Raises:
        ValueError: content is not valid in the given format.
    """
    text = content.decode("utf-8") if isinstance(content, bytes) else content
    if fmt is SerializationFormat.YAML:
        try:
            return yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise ValueError(f"invalid YAML: {e}") from e
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise ValueError(f"invalid JSON: {e.msg}") from e
