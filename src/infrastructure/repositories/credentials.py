from __future__ import annotations

from dataclasses import dataclass, field

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from src.domain.models import CredentialCounts
from src.infrastructure.db.models import (
    CREDENTIAL_MODELS,
    CertificationModel,
    CredentialModel,
    CredentialStatus,
    CredentialType,
    EducationModel,
    WorkExperienceModel,
)


def count_statuses(credentials: list[CredentialModel]) -> CredentialCounts:
    statuses = [credential.status for credential in credentials]
    return CredentialCounts(
        total=len(statuses),
        verified=statuses.count(CredentialStatus.VERIFIED),
        pending=statuses.count(CredentialStatus.PENDING),
        rejected=statuses.count(CredentialStatus.REJECTED),
    )


@dataclass(slots=True)
class CredentialPortfolio:
    """Every credential a user owns, partitioned by variant."""

    certifications: list[CertificationModel] = field(default_factory=list)
    education: list[EducationModel] = field(default_factory=list)
    work_experience: list[WorkExperienceModel] = field(default_factory=list)

    def of_type(self, credential_type: CredentialType) -> list[CredentialModel]:
        if credential_type is CredentialType.CERTIFICATION:
            return list(self.certifications)
        if credential_type is CredentialType.EDUCATION:
            return list(self.education)
        return list(self.work_experience)

    def counts(self, credential_type: CredentialType) -> CredentialCounts:
        return count_statuses(self.of_type(credential_type))


@dataclass
class CredentialRepository:
    """Read and lock access to the three credential tables."""

    session: AsyncSession

    async def get(
        self,
        credential_type: CredentialType,
        credential_id: str,
        *,
        for_update: bool = False,
    ) -> CredentialModel | None:
        model = CREDENTIAL_MODELS[credential_type]
        stmt = select(model).where(model.id == credential_id)
        if for_update:
            # Serializes concurrent transitions on the same credential row
            stmt = stmt.with_for_update()
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_for_owner(self, user_id: str) -> CredentialPortfolio:
        portfolio = CredentialPortfolio()
        for credential_type, model in CREDENTIAL_MODELS.items():
            stmt = select(model).where(model.user_id == user_id).order_by(model.created_at)
            result = await self.session.execute(stmt)
            rows = list(result.scalars().all())
            if credential_type is CredentialType.CERTIFICATION:
                portfolio.certifications = rows
            elif credential_type is CredentialType.EDUCATION:
                portfolio.education = rows
            else:
                portfolio.work_experience = rows
        return portfolio
