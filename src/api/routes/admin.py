"""Admin routes - credential adjudication, review queue, account moderation."""

from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException, Query, status
from src.api.deps import get_account_service, get_verification_service, require_admin
from src.api.schemas.verifications import (
    CredentialResponse,
    CredentialStatusUpdateRequest,
    ResolveVerificationRequest,
    UserBanRequest,
    UserModerationResponse,
    VerificationQueueResponse,
    VerificationRequestItem,
)
from src.core.config import get_settings
from src.domain import Principal
from src.domain.errors import AuthorizationError, NotFoundError, ValidationError
from src.domain.services import AccountService, VerificationService
from src.infrastructure.db.models import CredentialModel

router = APIRouter(prefix="/admin", tags=["Admin"])


def _credential_response(credential: CredentialModel) -> CredentialResponse:
    return CredentialResponse(
        id=credential.id,
        credential_type=credential.credential_type.value,
        owner_id=credential.user_id,
        title=credential.display_title,
        status=credential.status.value,
        rejection_reason=credential.rejection_reason,
        verified_at=credential.verified_at,
    )


@router.patch(
    "/credentials/{credential_type}/{credential_id}/status",
    response_model=CredentialResponse,
    summary="Set credential verification status",
)
async def set_credential_status(
    credential_type: str,
    credential_id: str,
    payload: CredentialStatusUpdateRequest,
    service: VerificationService = Depends(get_verification_service),
    admin: Principal = Depends(require_admin),
) -> CredentialResponse:
    """
    Approve, reject or reset a credential.

    Closes the credential's queued verification request and recomputes the
    owner's trust score in the same transaction.
    """
    try:
        credential = await service.set_credential_status(
            credential_type,
            credential_id,
            payload.status.value,
            payload.note,
            actor=admin,
        )
    except AuthorizationError as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except ValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_CONTENT, detail=str(exc)
        ) from exc

    return _credential_response(credential)


@router.get(
    "/verifications",
    response_model=VerificationQueueResponse,
    summary="List queued verification requests",
)
async def get_verification_queue(
    limit: int | None = Query(None, ge=1, le=500),
    service: VerificationService = Depends(get_verification_service),
    admin: Principal = Depends(require_admin),
) -> VerificationQueueResponse:
    try:
        views = await service.get_verification_queue(
            actor=admin,
            limit=limit or get_settings().verification_queue_limit,
        )
    except AuthorizationError as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc

    return VerificationQueueResponse(
        count=len(views),
        items=[VerificationRequestItem(**asdict(view)) for view in views],
    )


@router.get(
    "/verifications/{request_id}",
    response_model=VerificationRequestItem,
    summary="Get a verification request",
)
async def get_verification_request(
    request_id: str,
    service: VerificationService = Depends(get_verification_service),
    admin: Principal = Depends(require_admin),
) -> VerificationRequestItem:
    try:
        view = await service.get_verification_request(request_id, actor=admin)
    except AuthorizationError as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc

    return VerificationRequestItem(**asdict(view))


@router.post(
    "/verifications/{request_id}/resolve",
    response_model=CredentialResponse,
    summary="Approve or reject a verification request",
)
async def resolve_verification_request(
    request_id: str,
    payload: ResolveVerificationRequest,
    service: VerificationService = Depends(get_verification_service),
    admin: Principal = Depends(require_admin),
) -> CredentialResponse:
    try:
        credential = await service.resolve_verification_request(
            request_id,
            payload.decision.value,
            payload.note,
            actor=admin,
        )
    except AuthorizationError as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except ValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_CONTENT, detail=str(exc)
        ) from exc

    return _credential_response(credential)


@router.post(
    "/users/{user_id}/ban",
    response_model=UserModerationResponse,
    summary="Suspend or reinstate a user",
)
async def toggle_user_ban(
    user_id: str,
    payload: UserBanRequest,
    service: AccountService = Depends(get_account_service),
    admin: Principal = Depends(require_admin),
) -> UserModerationResponse:
    try:
        user = await service.toggle_user_ban(user_id, payload.banned, actor=admin)
    except AuthorizationError as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc

    return UserModerationResponse(
        id=user.id,
        email=user.email,
        status=user.status.value,
        suspended=user.is_suspended,
        trust_score=user.trust_score,
    )
