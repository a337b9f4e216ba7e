"""Trust score routes - breakdown, verification summary, recalculation, public view."""

from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException, status
from src.api.deps import get_current_principal, get_trust_score_service
from src.api.schemas.trust import (
    PublicTrustResponse,
    TrustScoreResponse,
    TrustScoreUpdateResponse,
    VerificationSummaryResponse,
)
from src.domain import Principal
from src.domain.errors import AuthorizationError, NotFoundError
from src.domain.services import TrustScoreService
from src.domain.services.guards import ensure_self_or_admin

router = APIRouter(tags=["Trust Score"])


@router.get(
    "/users/{user_id}/trust-score",
    response_model=TrustScoreResponse,
    summary="Trust score breakdown",
)
async def get_trust_score(
    user_id: str,
    service: TrustScoreService = Depends(get_trust_score_service),
    principal: Principal = Depends(get_current_principal),
) -> TrustScoreResponse:
    try:
        await ensure_self_or_admin(principal, user_id, operation="calculate_trust_score")
        breakdown = await service.calculate_trust_score(user_id)
    except AuthorizationError as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc

    return TrustScoreResponse(user_id=user_id, **breakdown.to_dict())


@router.get(
    "/users/{user_id}/verification-summary",
    response_model=VerificationSummaryResponse,
    summary="Verification status overview",
)
async def get_verification_summary(
    user_id: str,
    service: TrustScoreService = Depends(get_trust_score_service),
    principal: Principal = Depends(get_current_principal),
) -> VerificationSummaryResponse:
    try:
        await ensure_self_or_admin(principal, user_id, operation="get_verification_summary")
        summary = await service.get_verification_summary(user_id)
    except AuthorizationError as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc

    return VerificationSummaryResponse(user_id=user_id, **summary.to_dict())


@router.post(
    "/users/{user_id}/trust-score/recalculate",
    response_model=TrustScoreUpdateResponse,
    summary="Recompute and store the trust score",
)
async def recalculate_trust_score(
    user_id: str,
    service: TrustScoreService = Depends(get_trust_score_service),
    principal: Principal = Depends(get_current_principal),
) -> TrustScoreUpdateResponse:
    try:
        await ensure_self_or_admin(principal, user_id, operation="update_user_trust_score")
        score = await service.update_user_trust_score(user_id)
    except AuthorizationError as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc

    return TrustScoreUpdateResponse(user_id=user_id, trust_score=score)


@router.get(
    "/profiles/{user_id}/trust",
    response_model=PublicTrustResponse,
    summary="Public trust badge",
)
async def get_public_trust(
    user_id: str,
    service: TrustScoreService = Depends(get_trust_score_service),
    _: Principal = Depends(get_current_principal),
) -> PublicTrustResponse:
    try:
        public = await service.get_public_trust(user_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc

    return PublicTrustResponse(**asdict(public))
