from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from src.infrastructure.db.models import (
    REQUEST_LINK_COLUMNS,
    CredentialType,
    VerificationRequestModel,
    VerificationRequestStatus,
)


@dataclass
class VerificationRequestRepository:
    """Access to the verification request ledger."""

    session: AsyncSession

    async def get(self, request_id: str) -> VerificationRequestModel | None:
        stmt = select(VerificationRequestModel).where(VerificationRequestModel.id == request_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_queued_for(
        self,
        credential_type: CredentialType,
        credential_id: str,
        *,
        for_update: bool = False,
    ) -> list[VerificationRequestModel]:
        link_column = getattr(VerificationRequestModel, REQUEST_LINK_COLUMNS[credential_type])
        stmt = select(VerificationRequestModel).where(
            link_column == credential_id,
            VerificationRequestModel.status == VerificationRequestStatus.QUEUED,
        )
        if for_update:
            stmt = stmt.with_for_update()
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_queue(self, *, limit: int) -> list[VerificationRequestModel]:
        stmt = (
            select(VerificationRequestModel)
            .where(VerificationRequestModel.status == VerificationRequestStatus.QUEUED)
            .order_by(VerificationRequestModel.created_at.asc(), VerificationRequestModel.id)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def add(self, request: VerificationRequestModel) -> VerificationRequestModel:
        self.session.add(request)
        await self.session.flush()
        return request
