from __future__ import annotations

import structlog
from sqlalchemy.ext.asyncio import AsyncSession
from src.infrastructure.repositories.credentials import CredentialRepository
from src.infrastructure.repositories.users import UserRepository
from src.infrastructure.repositories.verification_requests import (
    VerificationRequestRepository,
)

logger = structlog.get_logger()


class UnitOfWork:
    """Groups the repositories of one logical operation into a single transaction.

    Leaving the context commits; any exception rolls everything back.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.users = UserRepository(session)
        self.credentials = CredentialRepository(session)
        self.verification_requests = VerificationRequestRepository(session)

    async def __aenter__(self) -> UnitOfWork:
        logger.debug("uow_enter")
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if exc:
            await self.rollback()
        else:
            await self.commit()
        logger.debug("uow_exit", exc_type=str(exc_type) if exc_type else None)

    async def flush(self) -> None:
        await self.session.flush()

    async def commit(self) -> None:
        await self.session.commit()
        logger.debug("uow_commit")

    async def rollback(self) -> None:
        await self.session.rollback()
        logger.debug("uow_rollback")
