"""Error definitions for osbuild_operator.

Every error carries a stable ``code`` so the CLI and the web API can
surface it without string matching on messages.
"""

from __future__ import annotations

from typing import Any

# Error codes
NOT_FOUND = "not_found"
ALREADY_EXISTS = "already_exists"
AMBIGUOUS_BUILDER = "ambiguous_builder"
TEMPLATE_ERROR = "template_error"
INVALID_BLUEPRINT = "invalid_blueprint"
INVALID_MANIFEST = "invalid_manifest"


class OperatorError(Exception):
    """Base error for osbuild_operator operations."""

    def __init__(self, message: str, code: str = "operator_error") -> None:
        super().__init__(message)
        self.code = code

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {"code": self.code, "message": str(self)}


class NotFoundError(OperatorError):
    """Raised when a resource does not exist in the object store."""

    def __init__(self, kind: str, key: object) -> None:
        super().__init__(f"{kind} not found: {key}", code=NOT_FOUND)
        self.kind = kind
        self.key = key


class AlreadyExistsError(OperatorError):
    """Raised when creating a resource whose name is already taken."""

    def __init__(self, kind: str, key: object) -> None:
        super().__init__(f"{kind} already exists: {key}", code=ALREADY_EXISTS)
        self.kind = kind
        self.key = key


class AmbiguousBuilderError(OperatorError):
    """Raised when no single ImageBuilder can be chosen for a request."""

    def __init__(self, count: int) -> None:
        if count == 0:
            message = "No ImageBuilder found"
        else:
            message = f"Found {count} ImageBuilders, cannot pick a default"
        super().__init__(message, code=AMBIGUOUS_BUILDER)
        self.count = count


class TemplateError(OperatorError):
    """Raised when a blueprint template cannot be rendered."""

    def __init__(
        self,
        message: str,
        template_name: str | None = None,
        code: str = TEMPLATE_ERROR,
    ) -> None:
        super().__init__(message, code=code)
        self.template_name = template_name


class ManifestError(OperatorError):
    """Raised when a resource manifest is malformed or of an unknown kind."""

    def __init__(self, message: str) -> None:
        super().__init__(message, code=INVALID_MANIFEST)


__all__ = [
    "ALREADY_EXISTS",
    "AMBIGUOUS_BUILDER",
    "INVALID_BLUEPRINT",
    "INVALID_MANIFEST",
    "NOT_FOUND",
    "TEMPLATE_ERROR",
    "AlreadyExistsError",
    "AmbiguousBuilderError",
    "ManifestError",
    "NotFoundError",
    "OperatorError",
    "TemplateError",
]
