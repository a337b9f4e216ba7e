from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from src.api.deps import get_current_principal, get_verification_service
from src.api.schemas.verifications import VerificationCreateRequest, VerificationCreateResponse
from src.domain import Principal
from src.domain.errors import (
    AuthorizationError,
    DuplicateRequestError,
    NotFoundError,
    ValidationError,
)
from src.domain.services import VerificationService

router = APIRouter(prefix="/verifications", tags=["Verifications"])


@router.post(
    "",
    response_model=VerificationCreateResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Request verification of a credential",
)
async def request_verification(
    payload: VerificationCreateRequest,
    service: VerificationService = Depends(get_verification_service),
    principal: Principal = Depends(get_current_principal),
) -> VerificationCreateResponse:
    """Queue one of the caller's credentials for admin review."""
    try:
        request = await service.request_verification(
            payload.credential_type,
            payload.credential_id,
            actor=principal,
        )
    except AuthorizationError as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except DuplicateRequestError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except ValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_CONTENT, detail=str(exc)
        ) from exc

    credential_type, credential_id = request.linked_credential()
    return VerificationCreateResponse(
        id=request.id,
        credential_type=credential_type.value,
        credential_id=credential_id,
        status=request.status.value,
        created_at=request.created_at,
    )
