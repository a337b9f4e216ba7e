"""Pydantic schemas for trust score endpoints."""

from __future__ import annotations

from pydantic import BaseModel, Field


class TrustScoreResponse(BaseModel):
    user_id: str
    total_score: int = Field(..., ge=0, le=100)
    level: str
    experience_score: int
    experience_verified: bool
    education_score: int
    education_verified: bool
    certification_score: int
    certification_verified: bool
    certifications_verified: int
    certifications_total: int
    certifications_pending: int
    has_no_certifications: bool


class SummaryItemResponse(BaseModel):
    id: str
    title: str
    status: str


class CategorySummaryResponse(BaseModel):
    total: int = 0
    verified: int = 0
    pending: int = 0
    rejected: int = 0
    items: list[SummaryItemResponse] = []


class VerificationSummaryResponse(BaseModel):
    user_id: str
    experience: CategorySummaryResponse
    education: CategorySummaryResponse
    certifications: CategorySummaryResponse


class TrustScoreUpdateResponse(BaseModel):
    user_id: str
    trust_score: int = Field(..., ge=0, le=100)


class PublicTrustResponse(BaseModel):
    user_id: str
    score: int | None = Field(None, description="Null while the account is suspended")
    label: str
    suspended: bool
    verified_credentials: int
