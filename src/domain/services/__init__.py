"""Domain services."""

from src.domain.services.accounts import AccountService
from src.domain.services.trust_score import TrustScoreService
from src.domain.services.verification import (
    VerificationRequestView,
    VerificationService,
)

__all__ = [
    "AccountService",
    "TrustScoreService",
    "VerificationRequestView",
    "VerificationService",
]
