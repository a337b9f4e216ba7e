"""
Trust score service.

Derives a user's trust score from their current credential portfolio and
persists it onto the user record. The formula itself lives in
``src.domain.scoring``; this module handles loading and storing.
"""

from __future__ import annotations

import structlog
from sqlalchemy.ext.asyncio import AsyncSession
from src.domain.errors import NotFoundError
from src.domain.models import (
    CategorySummary,
    PublicTrust,
    SummaryItem,
    TrustScoreBreakdown,
    VerificationSummary,
)
from src.domain.scoring import SUSPENDED_LABEL, compute_trust_breakdown, profile_trust_label
from src.infrastructure.db.models import (
    CredentialModel,
    CredentialStatus,
    CredentialType,
    UserModel,
)
from src.infrastructure.repositories import CredentialPortfolio, UnitOfWork, count_statuses

logger = structlog.get_logger(__name__)


def breakdown_for(portfolio: CredentialPortfolio) -> TrustScoreBreakdown:
    return compute_trust_breakdown(
        experience=portfolio.counts(CredentialType.WORK_EXPERIENCE),
        education=portfolio.counts(CredentialType.EDUCATION),
        certifications=portfolio.counts(CredentialType.CERTIFICATION),
    )


def _category_summary(credentials: list[CredentialModel]) -> CategorySummary:
    counts = count_statuses(credentials)
    return CategorySummary(
        total=counts.total,
        verified=counts.verified,
        pending=counts.pending,
        rejected=counts.rejected,
        items=[
            SummaryItem(
                id=credential.id,
                title=credential.display_title,
                status=credential.status.value,
            )
            for credential in credentials
        ],
    )


class TrustScoreService:
    """Computes, summarizes and persists trust scores."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def calculate_trust_score(self, user_id: str) -> TrustScoreBreakdown:
        """Return the breakdown for ``user_id`` without writing anything."""
        uow = UnitOfWork(self.session)
        await self._get_user(uow, user_id)
        portfolio = await uow.credentials.list_for_owner(user_id)
        return breakdown_for(portfolio)

    async def get_verification_summary(self, user_id: str) -> VerificationSummary:
        """Per-category verified/pending/rejected counts, without scoring."""
        uow = UnitOfWork(self.session)
        await self._get_user(uow, user_id)
        portfolio = await uow.credentials.list_for_owner(user_id)
        return VerificationSummary(
            experience=_category_summary(portfolio.of_type(CredentialType.WORK_EXPERIENCE)),
            education=_category_summary(portfolio.of_type(CredentialType.EDUCATION)),
            certifications=_category_summary(portfolio.of_type(CredentialType.CERTIFICATION)),
        )

    async def update_user_trust_score(self, user_id: str) -> int:
        """Recompute and store the user's score. Idempotent."""
        async with UnitOfWork(self.session) as uow:
            user = await self._get_user(uow, user_id, for_update=True)
            score = await self.recompute(uow, user)
        return score

    async def recompute(self, uow: UnitOfWork, user: UserModel) -> int:
        """Store a fresh score on ``user`` inside the caller's unit of work.

        Does not commit; the caller's transaction decides.
        """
        portfolio = await uow.credentials.list_for_owner(user.id)
        breakdown = breakdown_for(portfolio)
        previous_score = user.trust_score
        user.trust_score = breakdown.total_score
        await uow.flush()

        await logger.ainfo(
            "trust_score_updated",
            user_id=user.id,
            previous_score=previous_score,
            trust_score=breakdown.total_score,
            level=breakdown.level,
        )
        return breakdown.total_score

    async def recalculate_all(self, *, batch_size: int = 200) -> int:
        """Recompute every user's score, one transaction per batch.

        Returns how many stored scores changed.
        """
        changed = 0
        id_reader = UnitOfWork(self.session)
        batches = [batch async for batch in id_reader.users.iter_ids(batch_size=batch_size)]
        await self.session.commit()

        for batch in batches:
            async with UnitOfWork(self.session) as uow:
                for user_id in batch:
                    user = await uow.users.get(user_id, for_update=True)
                    if user is None:
                        continue
                    previous_score = user.trust_score
                    if await self.recompute(uow, user) != previous_score:
                        changed += 1

        await logger.ainfo("trust_scores_recalculated", changed=changed)
        return changed

    async def get_public_trust(self, user_id: str) -> PublicTrust:
        """Profile-view projection of the stored score."""
        uow = UnitOfWork(self.session)
        user = await self._get_user(uow, user_id)
        portfolio = await uow.credentials.list_for_owner(user_id)
        verified = sum(
            1
            for credential_type in CredentialType
            for credential in portfolio.of_type(credential_type)
            if credential.status == CredentialStatus.VERIFIED
        )

        if user.is_suspended:
            return PublicTrust(
                user_id=user.id,
                score=None,
                label=SUSPENDED_LABEL,
                suspended=True,
                verified_credentials=verified,
            )

        return PublicTrust(
            user_id=user.id,
            score=user.trust_score,
            label=profile_trust_label(user.trust_score),
            suspended=False,
            verified_credentials=verified,
        )

    async def _get_user(
        self, uow: UnitOfWork, user_id: str, *, for_update: bool = False
    ) -> UserModel:
        user = await uow.users.get(user_id, for_update=for_update)
        if user is None:
            raise NotFoundError(f"User {user_id} not found")
        return user
