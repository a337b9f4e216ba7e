from __future__ import annotations

import enum
import uuid
from datetime import date, datetime

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    func,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column
from src.domain.scoring import BASE_SCORE

from .base import Base


def _enum_column(enum_cls: type[enum.Enum], name: str) -> Enum:
    return Enum(enum_cls, name=name, values_callable=lambda e: [x.value for x in e])


class CredentialType(str, enum.Enum):
    """The three credential variants sharing one verification lifecycle."""

    CERTIFICATION = "certification"
    EDUCATION = "education"
    WORK_EXPERIENCE = "work_experience"

    @classmethod
    def parse(cls, value: CredentialType | str) -> CredentialType:
        if isinstance(value, cls):
            return value
        normalized = str(value).strip().lower().replace("-", "_")
        aliases = {"workexperience": cls.WORK_EXPERIENCE, "experience": cls.WORK_EXPERIENCE}
        if normalized in aliases:
            return aliases[normalized]
        return cls(normalized)


class CredentialStatus(str, enum.Enum):
    """Credential verification status.

    PENDING doubles as "unverified": submitted but not adjudicated.
    """

    PENDING = "pending"
    VERIFIED = "verified"
    REJECTED = "rejected"

    @classmethod
    def parse(cls, value: CredentialStatus | str) -> CredentialStatus:
        if isinstance(value, cls):
            return value
        normalized = str(value).strip().lower()
        if normalized == "unverified":
            return cls.PENDING
        return cls(normalized)

    @property
    def is_resolution(self) -> bool:
        return self in (CredentialStatus.VERIFIED, CredentialStatus.REJECTED)


class VerificationRequestStatus(str, enum.Enum):
    QUEUED = "queued"
    COMPLETED = "completed"
    REJECTED = "rejected"


class UserStatus(str, enum.Enum):
    """User account status."""

    ACTIVE = "active"
    SUSPENDED = "suspended"


class UserRole(str, enum.Enum):
    """User role enum matching auth.Role."""

    USER = "user"
    ADMIN = "admin"


class UserPlan(str, enum.Enum):
    FREE = "free"
    VERIFIED_PRO = "verified_pro"


class UserModel(Base):
    """SQLAlchemy model for users table."""

    __tablename__ = "users"
    __mapper_args__ = {"eager_defaults": True}

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    full_name: Mapped[str | None] = mapped_column(String(128), nullable=True)
    role: Mapped[UserRole] = mapped_column(
        _enum_column(UserRole, "user_role"),
        default=UserRole.USER,
        nullable=False,
    )
    status: Mapped[UserStatus] = mapped_column(
        _enum_column(UserStatus, "user_status"),
        default=UserStatus.ACTIVE,
        nullable=False,
    )
    plan: Mapped[UserPlan] = mapped_column(
        _enum_column(UserPlan, "user_plan"),
        default=UserPlan.FREE,
        nullable=False,
    )
    # Written only by the trust score engine
    trust_score: Mapped[int] = mapped_column(Integer, default=BASE_SCORE, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    @property
    def is_suspended(self) -> bool:
        return self.status == UserStatus.SUSPENDED

    def __repr__(self) -> str:
        return f"<UserModel(id={self.id}, email={self.email}, role={self.role.value})>"


class CredentialMixin:
    """Columns shared by every credential variant."""

    __mapper_args__ = {"eager_defaults": True}

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    user_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    status: Mapped[CredentialStatus] = mapped_column(
        _enum_column(CredentialStatus, "credential_status"),
        default=CredentialStatus.PENDING,
        nullable=False,
        index=True,
    )
    rejection_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    verified_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )


class CertificationModel(CredentialMixin, Base):
    __tablename__ = "certifications"

    credential_type = CredentialType.CERTIFICATION

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    issuing_organization: Mapped[str] = mapped_column(String(255), nullable=False)
    credential_number: Mapped[str | None] = mapped_column(String(128), nullable=True)
    issue_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    expiry_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    document_url: Mapped[str | None] = mapped_column(String(512), nullable=True)

    @property
    def display_title(self) -> str:
        return f"{self.title} - {self.issuing_organization}"


class EducationModel(CredentialMixin, Base):
    __tablename__ = "education"

    credential_type = CredentialType.EDUCATION

    institution: Mapped[str] = mapped_column(String(255), nullable=False)
    degree: Mapped[str] = mapped_column(String(255), nullable=False)
    field_of_study: Mapped[str | None] = mapped_column(String(255), nullable=True)
    start_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    @property
    def display_title(self) -> str:
        return f"{self.degree} - {self.institution}"


class WorkExperienceModel(CredentialMixin, Base):
    __tablename__ = "work_experiences"

    credential_type = CredentialType.WORK_EXPERIENCE

    company: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(255), nullable=False)
    start_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    is_current: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    @property
    def display_title(self) -> str:
        return f"{self.role} - {self.company}"


CredentialModel = CertificationModel | EducationModel | WorkExperienceModel

CREDENTIAL_MODELS: dict[CredentialType, type[CredentialModel]] = {
    CredentialType.CERTIFICATION: CertificationModel,
    CredentialType.EDUCATION: EducationModel,
    CredentialType.WORK_EXPERIENCE: WorkExperienceModel,
}

# Foreign-key column on verification_requests for each credential variant
REQUEST_LINK_COLUMNS: dict[CredentialType, str] = {
    CredentialType.CERTIFICATION: "certification_id",
    CredentialType.EDUCATION: "education_id",
    CredentialType.WORK_EXPERIENCE: "work_experience_id",
}

_QUEUED_ONLY = text("status = 'queued'")


class VerificationRequestModel(Base):
    """One verification attempt for exactly one credential."""

    __tablename__ = "verification_requests"
    __mapper_args__ = {"eager_defaults": True}
    __table_args__ = (
        CheckConstraint(
            "(CASE WHEN certification_id IS NULL THEN 0 ELSE 1 END)"
            " + (CASE WHEN education_id IS NULL THEN 0 ELSE 1 END)"
            " + (CASE WHEN work_experience_id IS NULL THEN 0 ELSE 1 END) = 1",
            name="single_credential",
        ),
        # At most one queued request per credential
        Index(
            "uq_queued_request_certification",
            "certification_id",
            unique=True,
            postgresql_where=_QUEUED_ONLY,
            sqlite_where=_QUEUED_ONLY,
        ),
        Index(
            "uq_queued_request_education",
            "education_id",
            unique=True,
            postgresql_where=_QUEUED_ONLY,
            sqlite_where=_QUEUED_ONLY,
        ),
        Index(
            "uq_queued_request_work_experience",
            "work_experience_id",
            unique=True,
            postgresql_where=_QUEUED_ONLY,
            sqlite_where=_QUEUED_ONLY,
        ),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    certification_id: Mapped[str | None] = mapped_column(
        ForeignKey("certifications.id", ondelete="CASCADE"), nullable=True
    )
    education_id: Mapped[str | None] = mapped_column(
        ForeignKey("education.id", ondelete="CASCADE"), nullable=True
    )
    work_experience_id: Mapped[str | None] = mapped_column(
        ForeignKey("work_experiences.id", ondelete="CASCADE"), nullable=True
    )
    status: Mapped[VerificationRequestStatus] = mapped_column(
        _enum_column(VerificationRequestStatus, "verification_request_status"),
        default=VerificationRequestStatus.QUEUED,
        nullable=False,
        index=True,
    )
    assigned_admin_id: Mapped[str | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    @classmethod
    def for_credential(
        cls, credential_type: CredentialType, credential_id: str
    ) -> VerificationRequestModel:
        return cls(
            status=VerificationRequestStatus.QUEUED,
            **{REQUEST_LINK_COLUMNS[credential_type]: credential_id},
        )

    def linked_credential(self) -> tuple[CredentialType, str] | None:
        """Return the (type, id) this request points at, or None if unlinked."""
        linked = [
            (credential_type, getattr(self, column))
            for credential_type, column in REQUEST_LINK_COLUMNS.items()
            if getattr(self, column)
        ]
        if len(linked) != 1:
            return None
        return linked[0]


__all__ = [
    "CREDENTIAL_MODELS",
    "REQUEST_LINK_COLUMNS",
    "CertificationModel",
    "CredentialMixin",
    "CredentialModel",
    "CredentialStatus",
    "CredentialType",
    "EducationModel",
    "UserModel",
    "UserPlan",
    "UserRole",
    "UserStatus",
    "VerificationRequestModel",
    "VerificationRequestStatus",
    "WorkExperienceModel",
]
