from __future__ import annotations

from collections.abc import AsyncIterator, Callable

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession
from src.core.auth import Role, TokenError, create_access_token, decode_access_token
from src.core.logging import bind_actor
from src.domain import Principal
from src.domain.errors import AuthorizationError
from src.domain.services import AccountService, TrustScoreService, VerificationService
from src.domain.services.guards import resolve_principal
from src.infrastructure.db.session import get_session
from src.infrastructure.repositories import UserRepository

bearer_scheme = HTTPBearer(auto_error=False)


async def get_db_session() -> AsyncIterator[AsyncSession]:
    """Provide an async SQLAlchemy session for API handlers."""
    async for session in get_session():
        yield session


async def get_current_principal(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),  # noqa: B008
    session: AsyncSession = Depends(get_db_session),  # noqa: B008
) -> Principal:
    """Resolve the acting principal from a bearer token and its stored account."""
    if credentials is None:
        raise _unauthorized("Missing bearer token")

    try:
        claims = decode_access_token(credentials.credentials)
    except TokenError as exc:
        raise _unauthorized(str(exc)) from exc

    if not claims.roles:
        raise _forbidden("Token missing required roles")

    try:
        principal = await resolve_principal(
            UserRepository(session), claims.subject, email=claims.email
        )
    except AuthorizationError as exc:
        raise _forbidden(str(exc)) from exc

    bind_actor(principal.user_id, list(principal.roles))
    return principal


def require_role(role: Role) -> Callable[[Principal], Principal]:
    """Dependency factory admitting only principals that hold ``role``."""

    def dependency(
        principal: Principal = Depends(get_current_principal),  # noqa: B008
    ) -> Principal:
        if role.value not in principal.roles:
            raise _forbidden("Insufficient role privileges")
        return principal

    return dependency


require_admin = require_role(Role.ADMIN)


def get_trust_score_service(
    session: AsyncSession = Depends(get_db_session),  # noqa: B008
) -> TrustScoreService:
    return TrustScoreService(session)


def get_verification_service(
    session: AsyncSession = Depends(get_db_session),  # noqa: B008
) -> VerificationService:
    return VerificationService(session)


def get_account_service(
    session: AsyncSession = Depends(get_db_session),  # noqa: B008
) -> AccountService:
    return AccountService(session)


def issue_smoke_token(user_id: str, *, role: Role, email: str | None = None) -> str:
    """Generate a signed token for manual smoke testing."""
    return create_access_token(user_id, roles=[role], email=email)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _forbidden(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)
