"""Domain enumerations for staticimp.

String enums so values round-trip through YAML/JSON config and responses.
"""

from enum import Enum


class SerializationFormat(str, Enum):
    """File format of committed entries and of project config files."""

    JSON = "json"
    YAML = "yaml"

    @classmethod
    def _missing_(cls, value: object) -> "SerializationFormat | None":
        if isinstance(value, str) and value.lower() == "yml":
            return cls.YAML
        return None


class TransformKind(str, Enum):
    """Named field transforms available to entry configs.

    The names are part of the config surface; do not rename them.
    """

    SLUGIFY = "slugify"
    MD5 = "md5"
    SHA256 = "sha256"
    BASE85_ENCODE = "base85_encode"
    BASE85_DECODE = "base85_decode"


class EntryState(str, Enum):
    """States of one submission as it moves through the orchestrator."""

    RECEIVED = "received"
    VALIDATED = "validated"
    GENERATED = "generated"
    TRANSFORMED = "transformed"
    ROUTED = "routed"
    COMMITTED = "committed"
    DEBUG = "debug"
    REJECTED = "rejected"


class PipelineStage(str, Enum):
    """Field pipeline stages, in execution order."""

    VALIDATE = "validate"
    GENERATE = "generate"
    TRANSFORM = "transform"


class ErrorCategory(str, Enum):
    """Who is responsible for an error; drives HTTP mapping and logging."""

    CALLER_INPUT = "caller_input"
    CONFIGURATION = "configuration"
    BACKEND = "backend"
    CRYPTO = "crypto"
