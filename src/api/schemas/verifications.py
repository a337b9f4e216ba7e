"""Pydantic schemas for credential adjudication and verification requests."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field, model_validator


class CredentialStatusValue(str, Enum):
    PENDING = "pending"
    UNVERIFIED = "unverified"
    VERIFIED = "verified"
    REJECTED = "rejected"


class Decision(str, Enum):
    APPROVED = "approved"
    REJECTED = "rejected"


def _require_note_for_rejection(rejecting: bool, note: str | None) -> None:
    if rejecting and not (note and note.strip()):
        raise ValueError("A note is required when rejecting a credential")


# --- Request Schemas ---


class CredentialStatusUpdateRequest(BaseModel):
    """Request schema for setting a credential's verification status."""

    status: CredentialStatusValue = Field(..., description="Target verification status")
    note: str | None = Field(
        None,
        max_length=2000,
        description="Reviewer note; required when rejecting",
    )

    @model_validator(mode="after")
    def check_note(self) -> CredentialStatusUpdateRequest:
        _require_note_for_rejection(self.status is CredentialStatusValue.REJECTED, self.note)
        return self


class ResolveVerificationRequest(BaseModel):
    """Request schema for approving or rejecting a queued verification request."""

    decision: Decision = Field(..., description="approved or rejected")
    note: str | None = Field(None, max_length=2000, description="Reviewer note")

    @model_validator(mode="after")
    def check_note(self) -> ResolveVerificationRequest:
        _require_note_for_rejection(self.decision is Decision.REJECTED, self.note)
        return self


class VerificationCreateRequest(BaseModel):
    """Request schema for queueing a credential for review."""

    credential_type: str = Field(
        ..., description="certification, education or work_experience"
    )
    credential_id: str = Field(..., min_length=1, max_length=36)


class UserBanRequest(BaseModel):
    banned: bool = Field(..., description="True to suspend, False to reinstate")


# --- Response Schemas ---


class CredentialResponse(BaseModel):
    """Credential state after an adjudication."""

    id: str
    credential_type: str
    owner_id: str
    title: str
    status: str
    rejection_reason: str | None = None
    verified_at: datetime | None = None


class VerificationRequestItem(BaseModel):
    request_id: str
    status: str
    credential_type: str
    credential_id: str
    credential_title: str
    credential_status: str
    owner_id: str
    assigned_admin_id: str | None = None
    notes: str | None = None
    created_at: str | None = None
    updated_at: str | None = None


class VerificationQueueResponse(BaseModel):
    count: int
    items: list[VerificationRequestItem]


class VerificationCreateResponse(BaseModel):
    id: str
    credential_type: str
    credential_id: str
    status: str
    created_at: datetime | None = None


class UserModerationResponse(BaseModel):
    id: str
    email: str
    status: str
    suspended: bool
    trust_score: int = Field(..., description="Stored score; ignore while suspended")
