"""Domain error taxonomy shared by the verification and trust score services."""

from __future__ import annotations


class CredTrustError(Exception):
    """Base exception for credential verification errors."""


class AuthorizationError(CredTrustError):
    """Raised when the acting principal lacks the privilege for an operation."""


class NotFoundError(CredTrustError):
    """Raised when a referenced user, credential, or verification request does not exist."""


class ValidationError(CredTrustError):
    """Raised when an operation is invoked with invalid arguments.

    Examples: rejecting a credential without a note, or an unknown credential
    type or status value.
    """

    def __init__(self, message: str, *, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class DuplicateRequestError(ValidationError):
    """Raised when a credential already has a queued verification request."""
