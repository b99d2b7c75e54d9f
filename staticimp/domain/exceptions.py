"""Domain exceptions for staticimp.

Every error raised by the entry pipeline derives from StaticimpException and
carries an ErrorCategory:

- caller_input: the submission is wrong (missing/unknown fields, bad body).
- configuration: a server or project config defect (bad template, bad
  transform target). Logged; never shown verbatim to the caller.
- backend: the repository host failed (auth, conflict, not found, outage).
  `retryable` tells the caller whether trying again can help.
- crypto: secret decryption failed. Messages never include key material,
  ciphertext, or plaintext.

The presentation layer maps error_code to HTTP status in
staticimp.core.exception_handlers.
"""

from typing import Any, ClassVar

from staticimp.domain.enums import ErrorCategory


class StaticimpException(Exception):
    """Base exception for all staticimp errors.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. field names, branch).
    """

    category: ClassVar[ErrorCategory] = ErrorCategory.CONFIGURATION
    retryable: ClassVar[bool] = False

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Serialize for API error responses."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


# ---- Caller input ----


class CallerInputException(StaticimpException):
    """Base for errors caused by the submitted request."""

    category = ErrorCategory.CALLER_INPUT


class FieldNotAllowedException(CallerInputException):
    """Raised when the submission contains fields outside the allowed set."""

    def __init__(self, fields: list[str]) -> None:
        super().__init__(
            f"Field(s) not allowed: {', '.join(fields)}",
            "FIELD_NOT_ALLOWED",
            {"fields": fields},
        )


class MissingRequiredFieldException(CallerInputException):
    """Raised when a required field is absent or empty."""

    def __init__(self, fields: list[str]) -> None:
        super().__init__(
            f"Missing required field(s): {', '.join(fields)}",
            "MISSING_REQUIRED_FIELD",
            {"fields": fields},
        )


class InvalidEncodingException(CallerInputException):
    """Raised when a field value cannot be decoded by a decoding transform."""

    def __init__(self, field: str, encoding: str) -> None:
        super().__init__(
            f"Field '{field}' is not valid {encoding}",
            "INVALID_ENCODING",
            {"field": field, "encoding": encoding},
        )


class MalformedEntryException(CallerInputException):
    """Raised when the request body cannot be parsed into entry fields."""

    def __init__(self, reason: str) -> None:
        super().__init__(f"Malformed entry: {reason}", "MALFORMED_ENTRY")


class UnsupportedContentTypeException(CallerInputException):
    """Raised for request bodies in a format staticimp does not parse."""

    def __init__(self, content_type: str) -> None:
        super().__init__(
            f"Unsupported Content-Type: {content_type or '(none)'}",
            "UNSUPPORTED_CONTENT_TYPE",
            {"content_type": content_type},
        )


class UnknownBackendException(CallerInputException):
    """Raised when the URL names a backend that is not configured."""

    def __init__(self, backend: str) -> None:
        super().__init__(
            f"Unknown backend: {backend}",
            "UNKNOWN_BACKEND",
            {"backend": backend},
        )


class UnknownEntryTypeException(CallerInputException):
    """Raised when the entry type is not configured or is disabled."""

    def __init__(self, entry_type: str) -> None:
        super().__init__(
            f"Unknown entry type: {entry_type}",
            "UNKNOWN_ENTRY_TYPE",
            {"entry_type": entry_type},
        )


class BranchNotAllowedException(CallerInputException):
    """Raised when the requested branch differs from the entry type's target branch."""

    def __init__(self, branch: str) -> None:
        super().__init__(
            f"Branch not allowed: {branch}",
            "BRANCH_NOT_ALLOWED",
            {"branch": branch},
        )


# ---- Configuration ----


class ConfigurationException(StaticimpException):
    """Raised for invalid server or project configuration."""

    category = ErrorCategory.CONFIGURATION

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message, "CONFIGURATION_ERROR", details)


class PlaceholderException(StaticimpException):
    """Base for template rendering failures (always a config defect)."""

    category = ErrorCategory.CONFIGURATION


class MalformedPlaceholderException(PlaceholderException):
    """Raised on invalid placeholder syntax (unbalanced braces, empty names, ...)."""

    def __init__(self, template: str, reason: str, position: int | None = None) -> None:
        details: dict[str, Any] = {"template": template, "reason": reason}
        if position is not None:
            details["position"] = position
        super().__init__(
            f"Malformed placeholder in template {template!r}: {reason}",
            "MALFORMED_PLACEHOLDER",
            details,
        )


class UnknownNamespaceException(PlaceholderException):
    """Raised when a placeholder names a namespace that does not exist."""

    def __init__(self, namespace: str) -> None:
        super().__init__(
            f"Unknown placeholder namespace: {namespace}",
            "UNKNOWN_NAMESPACE",
            {"namespace": namespace},
        )


class UnresolvedPlaceholderException(PlaceholderException):
    """Raised when a placeholder key does not exist in its namespace."""

    def __init__(self, namespace: str, key: str) -> None:
        name = f"@{key}" if namespace == "@" else f"{namespace}.{key}"
        super().__init__(
            f"Unresolved placeholder: {name}",
            "UNRESOLVED_PLACEHOLDER",
            {"namespace": namespace, "key": key},
        )


class UnknownTransformTargetException(StaticimpException):
    """Raised when a transform names a field that the entry does not have."""

    category = ErrorCategory.CONFIGURATION

    def __init__(self, field: str, transform: str) -> None:
        super().__init__(
            f"Transform '{transform}' targets unknown field '{field}'",
            "UNKNOWN_TRANSFORM_TARGET",
            {"field": field, "transform": transform},
        )


# ---- Backend ----


class BackendException(StaticimpException):
    """Base for repository backend failures (request rejected by the host)."""

    category = ErrorCategory.BACKEND

    def __init__(
        self,
        message: str,
        error_code: str = "BACKEND_ERROR",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, error_code, details)


class BackendConflictException(BackendException):
    """Branch moved or file changed concurrently. Retry may succeed."""

    retryable = True

    def __init__(self, message: str = "Backend reported a conflict", details: dict[str, Any] | None = None) -> None:
        super().__init__(message, "BACKEND_CONFLICT", details)


class BackendAuthException(BackendException):
    """Backend rejected our credentials (server-side token problem)."""

    def __init__(self, message: str = "Backend authentication failed", details: dict[str, Any] | None = None) -> None:
        super().__init__(message, "BACKEND_AUTH_FAILED", details)


class BackendNotFoundException(BackendException):
    """Project, branch, or file not found on the backend."""

    def __init__(self, message: str = "Not found on backend", details: dict[str, Any] | None = None) -> None:
        super().__init__(message, "BACKEND_NOT_FOUND", details)


class BackendUnavailableException(BackendException):
    """Transient failure: timeout, connection error, or 5xx. Retry may succeed."""

    retryable = True

    def __init__(self, message: str = "Backend unavailable", details: dict[str, Any] | None = None) -> None:
        super().__init__(message, "BACKEND_UNAVAILABLE", details)


class BranchAlreadyExistsException(BackendException):
    """create_branch found the branch already present (non-fatal for review entries)."""

    retryable = True

    def __init__(self, branch: str) -> None:
        super().__init__(
            f"Branch already exists: {branch}",
            "BRANCH_ALREADY_EXISTS",
            {"branch": branch},
        )


class ReviewPartiallyCommittedException(BackendException):
    """Entry committed to the review branch but the merge request could not be opened."""

    def __init__(self, review_branch: str, file_path: str, reason: str) -> None:
        super().__init__(
            "Entry committed to review branch but merge request creation failed",
            "REVIEW_PARTIALLY_COMMITTED",
            {"review_branch": review_branch, "file_path": file_path, "reason": reason},
        )


# ---- Crypto ----


class DecryptionFailedException(StaticimpException):
    """Secret could not be decrypted (tampered, malformed, or wrong key)."""

    category = ErrorCategory.CRYPTO

    def __init__(self, name: str | None = None) -> None:
        details = {"secret": name} if name else {}
        super().__init__("Failed to decrypt secret", "DECRYPTION_FAILED", details)


class VaultUnavailableException(StaticimpException):
    """No private key is loaded (not configured, or the vault was closed)."""

    category = ErrorCategory.CRYPTO

    def __init__(self, reason: str = "Secret vault is not available") -> None:
        super().__init__(reason, "VAULT_UNAVAILABLE")
