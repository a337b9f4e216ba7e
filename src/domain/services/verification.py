"""
Credential verification workflow.

Applies admin adjudications (approve / reject / reset) to credentials and keeps
the credential, its queued verification request and the owner's trust score
consistent within one transaction.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from src.domain.errors import (
    AuthorizationError,
    DuplicateRequestError,
    NotFoundError,
    ValidationError,
)
from src.domain.models import Principal
from src.domain.services.guards import ensure_admin
from src.domain.services.trust_score import TrustScoreService
from src.infrastructure.db.models import (
    CredentialModel,
    CredentialStatus,
    CredentialType,
    VerificationRequestModel,
    VerificationRequestStatus,
)
from src.infrastructure.repositories import UnitOfWork

logger = structlog.get_logger(__name__)

_DECISIONS = {
    "approved": CredentialStatus.VERIFIED,
    "approve": CredentialStatus.VERIFIED,
    "verified": CredentialStatus.VERIFIED,
    "rejected": CredentialStatus.REJECTED,
    "reject": CredentialStatus.REJECTED,
}


@dataclass(slots=True)
class VerificationRequestView:
    """A verification request joined with the credential it points at."""

    request_id: str
    status: str
    credential_type: str
    credential_id: str
    credential_title: str
    credential_status: str
    owner_id: str
    assigned_admin_id: str | None
    notes: str | None
    created_at: str | None
    updated_at: str | None


def parse_credential_type(value: CredentialType | str) -> CredentialType:
    try:
        return CredentialType.parse(value)
    except ValueError as exc:
        raise ValidationError(
            f"Unknown credential type: {value}", field="credential_type"
        ) from exc


def parse_credential_status(value: CredentialStatus | str) -> CredentialStatus:
    try:
        return CredentialStatus.parse(value)
    except ValueError as exc:
        raise ValidationError(f"Unknown credential status: {value}", field="status") from exc


def parse_decision(value: str) -> CredentialStatus:
    decision = _DECISIONS.get(str(value).strip().lower())
    if decision is None:
        raise ValidationError(f"Unknown decision: {value}", field="decision")
    return decision


def apply_status(
    credential: CredentialModel,
    status: CredentialStatus,
    note: str | None,
    now: datetime,
) -> None:
    """Set ``status`` and keep verified_at / rejection_reason in step with it."""
    credential.status = status
    if status is CredentialStatus.VERIFIED:
        credential.verified_at = now
        credential.rejection_reason = None
    elif status is CredentialStatus.REJECTED:
        credential.verified_at = None
        credential.rejection_reason = note
    else:
        credential.verified_at = None
        credential.rejection_reason = None


def _clean_note(note: str | None) -> str | None:
    if note is None:
        return None
    stripped = note.strip()
    return stripped or None


def _isoformat(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def _duplicate_request(
    credential_type: CredentialType, credential_id: str
) -> DuplicateRequestError:
    return DuplicateRequestError(
        f"{credential_type.value} {credential_id} already has a queued verification request"
    )


class VerificationService:
    """Status transition engine for credentials and their verification requests."""

    def __init__(
        self,
        session: AsyncSession,
        *,
        trust_scores: TrustScoreService | None = None,
    ) -> None:
        self.session = session
        self.trust_scores = trust_scores or TrustScoreService(session)

    async def set_credential_status(
        self,
        credential_type: CredentialType | str,
        credential_id: str,
        new_status: CredentialStatus | str,
        note: str | None = None,
        *,
        actor: Principal,
    ) -> CredentialModel:
        """
        Adjudicate a credential.

        Updates the credential, closes its queued verification request when the
        new status is a resolution, and recomputes the owner's trust score.
        Everything commits together or not at all.
        """
        await ensure_admin(actor, operation="set_credential_status")
        resolved_type = parse_credential_type(credential_type)
        status = parse_credential_status(new_status)
        note = _clean_note(note)

        if status is CredentialStatus.REJECTED and note is None:
            raise ValidationError("A rejection reason is required", field="note")

        async with UnitOfWork(self.session) as uow:
            credential = await uow.credentials.get(resolved_type, credential_id, for_update=True)
            if credential is None:
                raise NotFoundError(f"{resolved_type.value} {credential_id} not found")

            previous_status = credential.status
            owner_id = credential.user_id
            now = datetime.now(UTC)
            apply_status(credential, status, note, now)

            closed_requests: list[str] = []
            if status.is_resolution:
                closed_requests = await self._close_queued_requests(
                    uow,
                    resolved_type,
                    credential_id,
                    status=status,
                    note=note,
                    actor=actor,
                    now=now,
                )

            owner = await uow.users.get(owner_id, for_update=True)
            if owner is None:
                raise NotFoundError(f"Owner of {resolved_type.value} {credential_id} not found")
            trust_score = await self.trust_scores.recompute(uow, owner)

        await logger.ainfo(
            "credential_status_changed",
            credential_type=resolved_type.value,
            credential_id=credential_id,
            previous_status=previous_status.value,
            status=status.value,
            closed_requests=closed_requests,
            owner_id=owner_id,
            trust_score=trust_score,
            admin_id=actor.user_id,
        )
        return credential

    async def resolve_verification_request(
        self,
        request_id: str,
        decision: str,
        note: str | None = None,
        *,
        actor: Principal,
    ) -> CredentialModel:
        """Approve or reject the credential behind a queued request."""
        await ensure_admin(actor, operation="resolve_verification_request")
        status = parse_decision(decision)

        uow = UnitOfWork(self.session)
        request = await uow.verification_requests.get(request_id)
        if request is None:
            raise NotFoundError(f"Verification request {request_id} not found")
        if request.status is not VerificationRequestStatus.QUEUED:
            raise ValidationError(
                f"Verification request {request_id} is already {request.status.value}",
                field="request_id",
            )

        linked = request.linked_credential()
        if linked is None:
            raise NotFoundError(f"Verification request {request_id} has no linked credential")

        credential_type, credential_id = linked
        return await self.set_credential_status(
            credential_type,
            credential_id,
            status,
            note,
            actor=actor,
        )

    async def request_verification(
        self,
        credential_type: CredentialType | str,
        credential_id: str,
        *,
        actor: Principal,
    ) -> VerificationRequestModel:
        """Queue a credential for admin review.

        A credential may have at most one queued request. A previously rejected
        credential goes back to pending.
        """
        resolved_type = parse_credential_type(credential_type)

        async with UnitOfWork(self.session) as uow:
            credential = await uow.credentials.get(resolved_type, credential_id, for_update=True)
            if credential is None:
                raise NotFoundError(f"{resolved_type.value} {credential_id} not found")

            if credential.user_id != actor.user_id and not actor.is_admin:
                raise AuthorizationError(
                    "You can only request verification of your own credentials"
                )

            if credential.status is CredentialStatus.VERIFIED:
                raise ValidationError(f"{resolved_type.value} {credential_id} is already verified")

            outstanding = await uow.verification_requests.list_queued_for(
                resolved_type, credential_id, for_update=True
            )
            if outstanding:
                raise _duplicate_request(resolved_type, credential_id)

            if credential.status is CredentialStatus.REJECTED:
                apply_status(credential, CredentialStatus.PENDING, None, datetime.now(UTC))
                owner = await uow.users.get(credential.user_id, for_update=True)
                if owner is not None:
                    await self.trust_scores.recompute(uow, owner)

            try:
                request = await uow.verification_requests.add(
                    VerificationRequestModel.for_credential(resolved_type, credential_id)
                )
            except IntegrityError as exc:
                raise _duplicate_request(resolved_type, credential_id) from exc

        await logger.ainfo(
            "verification_requested",
            request_id=request.id,
            credential_type=resolved_type.value,
            credential_id=credential_id,
            requested_by=actor.user_id,
        )
        return request

    async def get_verification_queue(
        self, *, actor: Principal, limit: int = 100
    ) -> list[VerificationRequestView]:
        """Queued requests, oldest first."""
        await ensure_admin(actor, operation="get_verification_queue")
        uow = UnitOfWork(self.session)
        requests = await uow.verification_requests.list_queue(limit=limit)
        views: list[VerificationRequestView] = []
        for request in requests:
            view = await self._to_view(uow, request)
            if view is not None:
                views.append(view)
        return views

    async def get_verification_request(
        self, request_id: str, *, actor: Principal
    ) -> VerificationRequestView:
        await ensure_admin(actor, operation="get_verification_request")
        uow = UnitOfWork(self.session)
        request = await uow.verification_requests.get(request_id)
        if request is None:
            raise NotFoundError(f"Verification request {request_id} not found")

        view = await self._to_view(uow, request)
        if view is None:
            raise NotFoundError(f"Verification request {request_id} has no linked credential")
        return view

    async def _close_queued_requests(
        self,
        uow: UnitOfWork,
        credential_type: CredentialType,
        credential_id: str,
        *,
        status: CredentialStatus,
        note: str | None,
        actor: Principal,
        now: datetime,
    ) -> list[str]:
        request_status = (
            VerificationRequestStatus.COMPLETED
            if status is CredentialStatus.VERIFIED
            else VerificationRequestStatus.REJECTED
        )
        queued = await uow.verification_requests.list_queued_for(
            credential_type, credential_id, for_update=True
        )
        for request in queued:
            request.status = request_status
            request.notes = note
            request.assigned_admin_id = actor.user_id
            request.updated_at = now
            await logger.ainfo(
                "verification_request_closed",
                request_id=request.id,
                status=request_status.value,
                admin_id=actor.user_id,
            )
        return [request.id for request in queued]

    async def _to_view(
        self, uow: UnitOfWork, request: VerificationRequestModel
    ) -> VerificationRequestView | None:
        linked = request.linked_credential()
        if linked is None:
            return None
        credential_type, credential_id = linked
        credential = await uow.credentials.get(credential_type, credential_id)
        if credential is None:
            return None

        return VerificationRequestView(
            request_id=request.id,
            status=request.status.value,
            credential_type=credential_type.value,
            credential_id=credential_id,
            credential_title=credential.display_title,
            credential_status=credential.status.value,
            owner_id=credential.user_id,
            assigned_admin_id=request.assigned_admin_id,
            notes=request.notes,
            created_at=_isoformat(request.created_at),
            updated_at=_isoformat(request.updated_at),
        )
