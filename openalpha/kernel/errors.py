"""
Domain error taxonomy.

Services raise these; openalpha.main maps each to an HTTP response carrying a
stable machine-checkable ``kind`` plus a human-readable ``detail``.
"""

from typing import Optional


class TutorError(Exception):
    """Base class for every error the API surfaces deliberately."""

    kind = "internal_failure"
    status_code = 500
    retryable = False

    def __init__(self, detail: str, *, code: Optional[str] = None):
        super().__init__(detail)
        self.detail = detail
        self.code = code

    def to_dict(self) -> dict:
        body = {"detail": self.detail, "kind": self.kind, "retryable": self.retryable}
        if self.code:
            body["code"] = self.code
        return body


class AuthenticationError(TutorError):
    """Identity is missing or cannot be verified."""

    kind = "not_authenticated"
    status_code = 401


class AuthorizationError(TutorError):
    """Role mismatch, or a parent without a link to the target student."""

    kind = "not_authorized"
    status_code = 403


class NotFoundError(TutorError):
    kind = "not_found"
    status_code = 404


class ValidationError(TutorError):
    """Input violates a domain constraint that schema checks cannot see."""

    kind = "validation_failed"
    status_code = 400


class DependencyError(TutorError):
    """The store or the completion backend failed; the client may retry."""

    kind = "dependency_failed"
    status_code = 503
    retryable = True


class CompletionError(DependencyError):
    """Language-model call timed out, failed, or returned unusable output."""


class SessionConflictError(DependencyError):
    """Another turn was committed to the same session first."""


class CurriculumError(Exception):
    """Static curriculum data is inconsistent. Raised at startup, never per request."""
