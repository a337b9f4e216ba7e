from __future__ import annotations

from collections.abc import AsyncIterator
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from src.infrastructure.db.models import UserModel


@dataclass
class UserRepository:
    session: AsyncSession

    async def get(self, user_id: str, *, for_update: bool = False) -> UserModel | None:
        stmt = select(UserModel).where(UserModel.id == user_id)
        if for_update:
            stmt = stmt.with_for_update()
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def iter_ids(self, *, batch_size: int = 500) -> AsyncIterator[list[str]]:
        """Yield user ids in stable batches ordered by id."""
        last_id: str | None = None
        while True:
            stmt = select(UserModel.id).order_by(UserModel.id).limit(batch_size)
            if last_id is not None:
                stmt = stmt.where(UserModel.id > last_id)
            result = await self.session.execute(stmt)
            batch = list(result.scalars().all())
            if not batch:
                return
            yield batch
            last_id = batch[-1]
