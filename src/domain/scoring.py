"""
Trust score formula.

Components:
- Base: 20 points for having an account
- Experience: 35 points once any work experience is verified
- Education: 35 points once any education record is verified
- Certifications: up to 30 points, proportional to verified / total

Users without certifications are "not applicable" rather than failing: they
receive the full 30 points when both experience and education are verified,
15 when only one of them is. The sum can reach 120, so the total is clamped
to [0, 100].
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from src.domain.models import CredentialCounts, TrustScoreBreakdown

BASE_SCORE = 20
EXPERIENCE_WEIGHT = 35
EDUCATION_WEIGHT = 35
CERTIFICATION_WEIGHT = 30
PARTIAL_CERTIFICATION_BONUS = 15
MIN_SCORE = 0
MAX_SCORE = 100

EXCELLENT_THRESHOLD = 80
GOOD_THRESHOLD = 50

SUSPENDED_LABEL = "Suspended"


def trust_level(score: int) -> str:
    """Level label used by the breakdown view."""
    if score >= EXCELLENT_THRESHOLD:
        return "Excellent"
    if score >= GOOD_THRESHOLD:
        return "Good"
    return "Building"


def profile_trust_label(score: int) -> str:
    """Level label used on public profiles; same bands, different wording."""
    if score >= EXCELLENT_THRESHOLD:
        return "Excellent"
    if score >= GOOD_THRESHOLD:
        return "Good"
    return "Growing"


def clamp_score(value: int) -> int:
    return max(MIN_SCORE, min(MAX_SCORE, value))


def _certification_points(
    certifications: CredentialCounts,
    *,
    experience_verified: bool,
    education_verified: bool,
) -> int:
    if certifications.total == 0:
        if experience_verified and education_verified:
            return CERTIFICATION_WEIGHT
        if experience_verified or education_verified:
            return PARTIAL_CERTIFICATION_BONUS
        return 0

    ratio = Decimal(certifications.verified) / Decimal(certifications.total)
    points = (ratio * CERTIFICATION_WEIGHT).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return int(points)


def compute_trust_breakdown(
    *,
    experience: CredentialCounts,
    education: CredentialCounts,
    certifications: CredentialCounts,
) -> TrustScoreBreakdown:
    """Derive the trust score breakdown from per-category credential counts.

    Pure and deterministic: the same counts always give the same breakdown.
    """
    experience_verified = experience.verified > 0
    education_verified = education.verified > 0

    experience_score = EXPERIENCE_WEIGHT if experience_verified else 0
    education_score = EDUCATION_WEIGHT if education_verified else 0
    certification_score = _certification_points(
        certifications,
        experience_verified=experience_verified,
        education_verified=education_verified,
    )

    total_score = clamp_score(
        BASE_SCORE + experience_score + education_score + certification_score
    )

    return TrustScoreBreakdown(
        total_score=total_score,
        level=trust_level(total_score),
        experience_score=experience_score,
        experience_verified=experience_verified,
        education_score=education_score,
        education_verified=education_verified,
        certification_score=certification_score,
        certification_verified=(
            certifications.total > 0 and certifications.verified == certifications.total
        ),
        certifications_verified=certifications.verified,
        certifications_total=certifications.total,
        certifications_pending=certifications.pending,
        has_no_certifications=certifications.total == 0,
    )
