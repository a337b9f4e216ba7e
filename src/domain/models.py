from __future__ import annotations

from dataclasses import asdict, dataclass, field

from src.core.auth import Role


@dataclass(slots=True, frozen=True)
class Principal:
    """The acting user resolved by the authorization gate for one request."""

    user_id: str
    email: str = ""
    roles: tuple[str, ...] = ()

    @property
    def is_admin(self) -> bool:
        return Role.ADMIN.value in self.roles


@dataclass(slots=True, frozen=True)
class CredentialCounts:
    """Verified/pending/rejected tallies for one credential category."""

    total: int = 0
    verified: int = 0
    pending: int = 0
    rejected: int = 0


@dataclass(slots=True)
class TrustScoreBreakdown:
    """Per-category decomposition of a user's trust score."""

    total_score: int
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

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(slots=True)
class SummaryItem:
    id: str
    title: str
    status: str


@dataclass(slots=True)
class CategorySummary:
    total: int = 0
    verified: int = 0
    pending: int = 0
    rejected: int = 0
    items: list[SummaryItem] = field(default_factory=list)


@dataclass(slots=True)
class VerificationSummary:
    """Status overview of a user's credentials, without scoring."""

    experience: CategorySummary
    education: CategorySummary
    certifications: CategorySummary

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(slots=True)
class PublicTrust:
    """Trust projection shown on a public profile."""

    user_id: str
    score: int | None
    label: str
    suspended: bool
    verified_credentials: int
