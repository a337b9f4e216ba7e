"""Tests for the credential status transition engine."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from src.domain import Principal
from src.domain.errors import (
    AuthorizationError,
    DuplicateRequestError,
    NotFoundError,
    ValidationError,
)
from src.domain.services.trust_score import TrustScoreService
from src.domain.services.verification import VerificationService
from src.infrastructure.db.models import (
    CredentialStatus,
    CredentialType,
    VerificationRequestStatus,
)

from tests.utils import (
    add_certification,
    add_education,
    add_work_experience,
    queue_request,
    reload_credential,
    reload_request,
    reload_user,
)

SessionFactory = async_sessionmaker[AsyncSession]


class TestSetCredentialStatus:
    async def test_verifying_certification_closes_request_and_raises_score(
        self,
        session: AsyncSession,
        session_factory: SessionFactory,
        admin: Principal,
        owner: Principal,
    ) -> None:
        certification = await add_certification(session_factory, owner.user_id)
        request = await queue_request(session_factory, certification)

        service = VerificationService(session)
        await service.set_credential_status(
            "certification", certification.id, "verified", actor=admin
        )

        stored = await reload_credential(
            session_factory, CredentialType.CERTIFICATION, certification.id
        )
        assert stored.status is CredentialStatus.VERIFIED
        assert stored.verified_at is not None
        assert stored.rejection_reason is None

        closed = await reload_request(session_factory, request.id)
        assert closed.status is VerificationRequestStatus.COMPLETED
        assert closed.assigned_admin_id == admin.user_id

        user = await reload_user(session_factory, owner.user_id)
        assert user.trust_score == 20 + 30

    async def test_rejecting_without_note_changes_nothing(
        self,
        session: AsyncSession,
        session_factory: SessionFactory,
        admin: Principal,
        owner: Principal,
    ) -> None:
        certification = await add_certification(session_factory, owner.user_id)
        request = await queue_request(session_factory, certification)

        service = VerificationService(session)
        with pytest.raises(ValidationError):
            await service.set_credential_status(
                "certification", certification.id, "rejected", "   ", actor=admin
            )

        stored = await reload_credential(
            session_factory, CredentialType.CERTIFICATION, certification.id
        )
        assert stored.status is CredentialStatus.PENDING
        assert (await reload_request(session_factory, request.id)).status is (
            VerificationRequestStatus.QUEUED
        )
        assert (await reload_user(session_factory, owner.user_id)).trust_score == 20

    async def test_rejecting_with_note_records_reason(
        self,
        session: AsyncSession,
        session_factory: SessionFactory,
        admin: Principal,
        owner: Principal,
    ) -> None:
        education = await add_education(session_factory, owner.user_id)
        request = await queue_request(session_factory, education)

        service = VerificationService(session)
        await service.set_credential_status(
            CredentialType.EDUCATION,
            education.id,
            CredentialStatus.REJECTED,
            "Transcript is illegible",
            actor=admin,
        )

        stored = await reload_credential(session_factory, CredentialType.EDUCATION, education.id)
        assert stored.status is CredentialStatus.REJECTED
        assert stored.rejection_reason == "Transcript is illegible"
        assert stored.verified_at is None

        closed = await reload_request(session_factory, request.id)
        assert closed.status is VerificationRequestStatus.REJECTED
        assert closed.notes == "Transcript is illegible"

    async def test_non_admin_is_rejected(
        self,
        session: AsyncSession,
        session_factory: SessionFactory,
        owner: Principal,
    ) -> None:
        certification = await add_certification(session_factory, owner.user_id)

        service = VerificationService(session)
        with pytest.raises(AuthorizationError):
            await service.set_credential_status(
                "certification", certification.id, "verified", actor=owner
            )

        stored = await reload_credential(
            session_factory, CredentialType.CERTIFICATION, certification.id
        )
        assert stored.status is CredentialStatus.PENDING
        assert (await reload_user(session_factory, owner.user_id)).trust_score == 20

    async def test_missing_credential_raises_not_found(
        self,
        session: AsyncSession,
        session_factory: SessionFactory,
        admin: Principal,
        owner: Principal,
    ) -> None:
        service = VerificationService(session)

        with pytest.raises(NotFoundError):
            await service.set_credential_status(
                "work_experience", "does-not-exist", "verified", actor=admin
            )

        assert (await reload_user(session_factory, owner.user_id)).trust_score == 20

    async def test_unknown_type_and_status_are_validation_errors(
        self, session: AsyncSession, admin: Principal
    ) -> None:
        service = VerificationService(session)

        with pytest.raises(ValidationError) as type_error:
            await service.set_credential_status("diploma", "x", "verified", actor=admin)
        assert type_error.value.field == "credential_type"

        with pytest.raises(ValidationError) as status_error:
            await service.set_credential_status("education", "x", "approved-ish", actor=admin)
        assert status_error.value.field == "status"

    async def test_reset_to_unverified_clears_timestamp_and_keeps_request_queued(
        self,
        session: AsyncSession,
        session_factory: SessionFactory,
        admin: Principal,
        owner: Principal,
    ) -> None:
        experience = await add_work_experience(
            session_factory, owner.user_id, status=CredentialStatus.VERIFIED
        )
        request = await queue_request(session_factory, experience)
        service = VerificationService(session)
        await TrustScoreService(session).update_user_trust_score(owner.user_id)

        await service.set_credential_status(
            "experience", experience.id, "unverified", actor=admin
        )

        stored = await reload_credential(
            session_factory, CredentialType.WORK_EXPERIENCE, experience.id
        )
        assert stored.status is CredentialStatus.PENDING
        assert stored.verified_at is None
        assert (await reload_request(session_factory, request.id)).status is (
            VerificationRequestStatus.QUEUED
        )
        assert (await reload_user(session_factory, owner.user_id)).trust_score == 20

    async def test_verifying_rejected_credential_clears_reason(
        self,
        session: AsyncSession,
        session_factory: SessionFactory,
        admin: Principal,
        owner: Principal,
    ) -> None:
        certification = await add_certification(
            session_factory,
            owner.user_id,
            status=CredentialStatus.REJECTED,
            rejection_reason="Expired",
        )

        service = VerificationService(session)
        await service.set_credential_status(
            "certification", certification.id, "verified", actor=admin
        )

        stored = await reload_credential(
            session_factory, CredentialType.CERTIFICATION, certification.id
        )
        assert stored.status is CredentialStatus.VERIFIED
        assert stored.rejection_reason is None
        assert stored.verified_at is not None

    async def test_failure_during_recompute_rolls_back_everything(
        self,
        session: AsyncSession,
        session_factory: SessionFactory,
        admin: Principal,
        owner: Principal,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        certification = await add_certification(session_factory, owner.user_id)
        request = await queue_request(session_factory, certification)

        async def failing_recompute(self, uow, user) -> int:
            raise RuntimeError("score store unavailable")

        monkeypatch.setattr(TrustScoreService, "recompute", failing_recompute)

        service = VerificationService(session)
        with pytest.raises(RuntimeError):
            await service.set_credential_status(
                "certification", certification.id, "verified", actor=admin
            )

        stored = await reload_credential(
            session_factory, CredentialType.CERTIFICATION, certification.id
        )
        assert stored.status is CredentialStatus.PENDING
        assert stored.verified_at is None
        assert (await reload_request(session_factory, request.id)).status is (
            VerificationRequestStatus.QUEUED
        )

    async def test_verifying_more_credentials_never_lowers_score(
        self,
        session: AsyncSession,
        session_factory: SessionFactory,
        admin: Principal,
        owner: Principal,
    ) -> None:
        experience = await add_work_experience(session_factory, owner.user_id)
        education = await add_education(session_factory, owner.user_id)
        first_cert = await add_certification(session_factory, owner.user_id, title="CKA")
        second_cert = await add_certification(session_factory, owner.user_id, title="CKAD")

        service = VerificationService(session)
        scores = [20]
        for credential in (experience, education, first_cert, second_cert):
            await service.set_credential_status(
                credential.credential_type, credential.id, "verified", actor=admin
            )
            scores.append((await reload_user(session_factory, owner.user_id)).trust_score)

        assert scores == sorted(scores)
        assert scores[-1] == 100

        await service.set_credential_status(
            "certification", second_cert.id, "rejected", "Revoked", actor=admin
        )
        assert (await reload_user(session_factory, owner.user_id)).trust_score <= scores[-1]


class TestResolveVerificationRequest:
    async def test_approval_verifies_linked_credential(
        self,
        session: AsyncSession,
        session_factory: SessionFactory,
        admin: Principal,
        owner: Principal,
    ) -> None:
        education = await add_education(session_factory, owner.user_id)
        request = await queue_request(session_factory, education)

        service = VerificationService(session)
        credential = await service.resolve_verification_request(
            request.id, "approved", actor=admin
        )

        assert credential.status is CredentialStatus.VERIFIED
        assert (await reload_request(session_factory, request.id)).status is (
            VerificationRequestStatus.COMPLETED
        )
        assert (await reload_user(session_factory, owner.user_id)).trust_score == 20 + 35 + 15

    async def test_rejection_requires_note(
        self,
        session: AsyncSession,
        session_factory: SessionFactory,
        admin: Principal,
        owner: Principal,
    ) -> None:
        education = await add_education(session_factory, owner.user_id)
        request = await queue_request(session_factory, education)

        service = VerificationService(session)
        with pytest.raises(ValidationError):
            await service.resolve_verification_request(request.id, "rejected", actor=admin)

        assert (await reload_request(session_factory, request.id)).status is (
            VerificationRequestStatus.QUEUED
        )

    async def test_closed_request_cannot_be_resolved_again(
        self,
        session: AsyncSession,
        session_factory: SessionFactory,
        admin: Principal,
        owner: Principal,
    ) -> None:
        education = await add_education(session_factory, owner.user_id)
        request = await queue_request(session_factory, education)

        service = VerificationService(session)
        await service.resolve_verification_request(request.id, "approved", actor=admin)

        with pytest.raises(ValidationError, match="already completed"):
            await service.resolve_verification_request(
                request.id, "rejected", "Changed my mind", actor=admin
            )

        stored = await reload_credential(session_factory, CredentialType.EDUCATION, education.id)
        assert stored.status is CredentialStatus.VERIFIED
        assert stored.rejection_reason is None
        assert (await reload_user(session_factory, owner.user_id)).trust_score == 20 + 35 + 15

    async def test_unknown_request_and_decision(
        self, session: AsyncSession, admin: Principal
    ) -> None:
        service = VerificationService(session)

        with pytest.raises(NotFoundError):
            await service.resolve_verification_request("missing", "approved", actor=admin)

        with pytest.raises(ValidationError):
            await service.resolve_verification_request("missing", "maybe", actor=admin)

    async def test_non_admin_cannot_resolve(
        self,
        session: AsyncSession,
        session_factory: SessionFactory,
        owner: Principal,
    ) -> None:
        education = await add_education(session_factory, owner.user_id)
        request = await queue_request(session_factory, education)

        service = VerificationService(session)
        with pytest.raises(AuthorizationError):
            await service.resolve_verification_request(request.id, "approved", actor=owner)


class TestRequestVerification:
    async def test_owner_can_queue_credential_once(
        self,
        session: AsyncSession,
        session_factory: SessionFactory,
        owner: Principal,
    ) -> None:
        certification = await add_certification(session_factory, owner.user_id)

        service = VerificationService(session)
        request = await service.request_verification(
            "certification", certification.id, actor=owner
        )

        assert request.status is VerificationRequestStatus.QUEUED
        assert request.linked_credential() == (CredentialType.CERTIFICATION, certification.id)

        with pytest.raises(DuplicateRequestError):
            await service.request_verification("certification", certification.id, actor=owner)

    async def test_other_users_cannot_queue_foreign_credentials(
        self,
        session: AsyncSession,
        session_factory: SessionFactory,
        owner: Principal,
        outsider: Principal,
    ) -> None:
        certification = await add_certification(session_factory, owner.user_id)

        service = VerificationService(session)
        with pytest.raises(AuthorizationError):
            await service.request_verification(
                "certification", certification.id, actor=outsider
            )

    async def test_verified_credentials_cannot_be_queued(
        self,
        session: AsyncSession,
        session_factory: SessionFactory,
        owner: Principal,
    ) -> None:
        experience = await add_work_experience(
            session_factory, owner.user_id, status=CredentialStatus.VERIFIED
        )

        service = VerificationService(session)
        with pytest.raises(ValidationError):
            await service.request_verification("work_experience", experience.id, actor=owner)

    async def test_rejected_credential_returns_to_pending(
        self,
        session: AsyncSession,
        session_factory: SessionFactory,
        admin: Principal,
        owner: Principal,
    ) -> None:
        certification = await add_certification(session_factory, owner.user_id)
        service = VerificationService(session)
        await service.request_verification("certification", certification.id, actor=owner)
        await service.set_credential_status(
            "certification", certification.id, "rejected", "Blurry scan", actor=admin
        )

        second = await service.request_verification(
            "certification", certification.id, actor=owner
        )

        stored = await reload_credential(
            session_factory, CredentialType.CERTIFICATION, certification.id
        )
        assert stored.status is CredentialStatus.PENDING
        assert stored.rejection_reason is None
        assert second.status is VerificationRequestStatus.QUEUED


class TestVerificationQueue:
    async def test_queue_lists_oldest_first_and_skips_closed(
        self,
        session: AsyncSession,
        session_factory: SessionFactory,
        admin: Principal,
        owner: Principal,
    ) -> None:
        now = datetime.now(UTC)
        newer = await add_certification(session_factory, owner.user_id, title="Newer")
        older = await add_education(session_factory, owner.user_id)
        closed = await add_work_experience(session_factory, owner.user_id)
        newer_request = await queue_request(session_factory, newer, created_at=now)
        older_request = await queue_request(
            session_factory, older, created_at=now - timedelta(hours=2)
        )
        await queue_request(session_factory, closed, created_at=now - timedelta(hours=5))

        service = VerificationService(session)
        await service.set_credential_status("work_experience", closed.id, "verified", actor=admin)

        views = await service.get_verification_queue(actor=admin)

        assert [view.request_id for view in views] == [older_request.id, newer_request.id]
        assert views[0].credential_type == "education"
        assert views[0].credential_title == "BSc Computer Science - State University"
        assert views[0].owner_id == owner.user_id
        assert views[1].credential_title == "Newer - Amazon"

        limited = await service.get_verification_queue(actor=admin, limit=1)
        assert [view.request_id for view in limited] == [older_request.id]

    async def test_queue_requires_admin(self, session: AsyncSession, owner: Principal) -> None:
        service = VerificationService(session)

        with pytest.raises(AuthorizationError):
            await service.get_verification_queue(actor=owner)

    async def test_get_single_request(
        self,
        session: AsyncSession,
        session_factory: SessionFactory,
        admin: Principal,
        owner: Principal,
    ) -> None:
        certification = await add_certification(session_factory, owner.user_id)
        request = await queue_request(session_factory, certification)

        service = VerificationService(session)
        view = await service.get_verification_request(request.id, actor=admin)

        assert view.request_id == request.id
        assert view.status == "queued"
        assert view.credential_status == "pending"

        with pytest.raises(NotFoundError):
            await service.get_verification_request("missing", actor=admin)
