from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from src.api.deps import issue_smoke_token
from src.core.auth import Role
from src.domain.scoring import BASE_SCORE
from src.infrastructure.db.models import (
    CREDENTIAL_MODELS,
    CertificationModel,
    CredentialModel,
    CredentialStatus,
    CredentialType,
    EducationModel,
    UserModel,
    UserRole,
    UserStatus,
    VerificationRequestModel,
    WorkExperienceModel,
)

SessionFactory = async_sessionmaker[AsyncSession]


def auth_headers(user_id: str = "user-1", role: Role = Role.USER) -> dict[str, str]:
    token = issue_smoke_token(user_id, role=role, email=f"{user_id}@example.com")
    return {"Authorization": f"Bearer {token}"}


def _verified_at(status: CredentialStatus) -> datetime | None:
    return datetime.now(UTC) if status is CredentialStatus.VERIFIED else None


async def _store(session_factory: SessionFactory, instance):
    async with session_factory() as session:
        session.add(instance)
        await session.commit()
    return instance


async def create_user(
    session_factory: SessionFactory,
    *,
    email: str = "user@example.com",
    role: UserRole = UserRole.USER,
    status: UserStatus = UserStatus.ACTIVE,
    trust_score: int = BASE_SCORE,
) -> UserModel:
    return await _store(
        session_factory,
        UserModel(email=email, role=role, status=status, trust_score=trust_score),
    )


async def add_certification(
    session_factory: SessionFactory,
    user_id: str,
    *,
    status: CredentialStatus = CredentialStatus.PENDING,
    title: str = "AWS Solutions Architect",
    rejection_reason: str | None = None,
) -> CertificationModel:
    return await _store(
        session_factory,
        CertificationModel(
            user_id=user_id,
            title=title,
            issuing_organization="Amazon",
            status=status,
            verified_at=_verified_at(status),
            rejection_reason=rejection_reason,
        ),
    )


async def add_education(
    session_factory: SessionFactory,
    user_id: str,
    *,
    status: CredentialStatus = CredentialStatus.PENDING,
) -> EducationModel:
    return await _store(
        session_factory,
        EducationModel(
            user_id=user_id,
            institution="State University",
            degree="BSc Computer Science",
            status=status,
            verified_at=_verified_at(status),
        ),
    )


async def add_work_experience(
    session_factory: SessionFactory,
    user_id: str,
    *,
    status: CredentialStatus = CredentialStatus.PENDING,
) -> WorkExperienceModel:
    return await _store(
        session_factory,
        WorkExperienceModel(
            user_id=user_id,
            company="Acme",
            role="Backend Engineer",
            status=status,
            verified_at=_verified_at(status),
        ),
    )


async def queue_request(
    session_factory: SessionFactory,
    credential: CredentialModel,
    *,
    created_at: datetime | None = None,
) -> VerificationRequestModel:
    request = VerificationRequestModel.for_credential(credential.credential_type, credential.id)
    if created_at is not None:
        request.created_at = created_at
    return await _store(session_factory, request)


async def reload_credential(
    session_factory: SessionFactory,
    credential_type: CredentialType,
    credential_id: str,
) -> CredentialModel | None:
    async with session_factory() as session:
        return await session.get(CREDENTIAL_MODELS[credential_type], credential_id)


async def reload_user(session_factory: SessionFactory, user_id: str) -> UserModel | None:
    async with session_factory() as session:
        return await session.get(UserModel, user_id)


async def reload_request(
    session_factory: SessionFactory, request_id: str
) -> VerificationRequestModel | None:
    async with session_factory() as session:
        return await session.get(VerificationRequestModel, request_id)
