from src.domain.models import (
    CategorySummary,
    CredentialCounts,
    Principal,
    PublicTrust,
    SummaryItem,
    TrustScoreBreakdown,
    VerificationSummary,
)

__all__ = [
    "CategorySummary",
    "CredentialCounts",
    "Principal",
    "PublicTrust",
    "SummaryItem",
    "TrustScoreBreakdown",
    "VerificationSummary",
]
