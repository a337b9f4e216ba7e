"""Account moderation: suspending and reinstating users."""

from __future__ import annotations

import structlog
from sqlalchemy.ext.asyncio import AsyncSession
from src.domain.errors import NotFoundError
from src.domain.models import Principal
from src.domain.services.guards import ensure_admin
from src.domain.services.trust_score import TrustScoreService
from src.infrastructure.db.models import UserModel, UserStatus
from src.infrastructure.repositories import UnitOfWork

logger = structlog.get_logger(__name__)


class AccountService:
    def __init__(
        self,
        session: AsyncSession,
        *,
        trust_scores: TrustScoreService | None = None,
    ) -> None:
        self.session = session
        self.trust_scores = trust_scores or TrustScoreService(session)

    async def toggle_user_ban(self, user_id: str, banned: bool, *, actor: Principal) -> UserModel:
        """
        Suspend or reinstate a user.

        Suspension only flips the account status; the stored score is left as
        is and presentation reports the account as suspended. Reinstating
        recomputes the score from the user's current credentials.
        """
        await ensure_admin(actor, operation="toggle_user_ban")

        async with UnitOfWork(self.session) as uow:
            user = await uow.users.get(user_id, for_update=True)
            if user is None:
                raise NotFoundError(f"User {user_id} not found")

            if banned:
                user.status = UserStatus.SUSPENDED
                await uow.flush()
            else:
                user.status = UserStatus.ACTIVE
                await self.trust_scores.recompute(uow, user)

            trust_score = user.trust_score

        await logger.ainfo(
            "user_ban_toggled",
            user_id=user_id,
            banned=banned,
            trust_score=trust_score,
            admin_id=actor.user_id,
        )
        return user
