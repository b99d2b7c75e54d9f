"""Field transforms: pure str -> str functions applied after field generation."""

from __future__ import annotations

import base64
import binascii
import hashlib
import re
import unicodedata
from abc import ABC, abstractmethod

from staticimp.domain.enums import TransformKind


class TransformError(ValueError):
    """Raised by a transform when its input is not valid for it."""


class FieldTransformer(ABC):
    """Abstract field transform (one per TransformKind)."""

    kind: TransformKind

    @abstractmethod
    def apply(self, value: str) -> str:
        """Return the transformed value."""
        ...


class Slugify(FieldTransformer):
    """ASCII-fold, lower-case, collapse non-alphanumeric runs into one separator."""

    kind = TransformKind.SLUGIFY
    _NON_ALNUM = re.compile(r"[^a-z0-9]+")

    def __init__(self, separator: str = "-") -> None:
        self.separator = separator

    def apply(self, value: str) -> str:
        folded = (
            unicodedata.normalize("NFKD", value)
            .encode("ascii", "ignore")
            .decode("ascii")
            .lower()
        )
        return self._NON_ALNUM.sub(self.separator, folded).strip(self.separator)


class MD5Digest(FieldTransformer):
    """MD5 hex digest (e.g. email -> gravatar hash)."""

    kind = TransformKind.MD5

    def apply(self, value: str) -> str:
        return hashlib.md5(value.encode("utf-8")).hexdigest()


class SHA256Digest(FieldTransformer):
    """SHA-256 hex digest."""

    kind = TransformKind.SHA256

    def apply(self, value: str) -> str:
        return hashlib.sha256(value.encode("utf-8")).hexdigest()


def encode_base85(data: bytes) -> str:
    """Base85 (RFC 1924 alphabet) text for arbitrary bytes."""
    return base64.b85encode(data).decode("ascii")


def decode_base85(text: str) -> bytes:
    """Bytes from base85 text. Raises TransformError on malformed input."""
    try:
        return base64.b85decode(text.encode("ascii"))
    except (ValueError, binascii.Error) as e:
        raise TransformError("invalid base85 input") from e


class Base85Encode(FieldTransformer):
    """Base85 of the value's UTF-8 bytes."""

    kind = TransformKind.BASE85_ENCODE

    def apply(self, value: str) -> str:
        return encode_base85(value.encode("utf-8"))


class Base85Decode(FieldTransformer):
    """Inverse of Base85Encode; the decoded bytes must be UTF-8 text."""

    kind = TransformKind.BASE85_DECODE

    def apply(self, value: str) -> str:
        raw = decode_base85(value)
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise TransformError("base85 payload is not UTF-8 text") from e


TRANSFORMERS: dict[TransformKind, FieldTransformer] = {
    t.kind: t
    for t in (Slugify(), MD5Digest(), SHA256Digest(), Base85Encode(), Base85Decode())
}


def get_transformer(kind: TransformKind | str) -> FieldTransformer:
    """Look up the transformer for a kind. Raises ValueError for unknown names."""
    return TRANSFORMERS[TransformKind(kind)]
