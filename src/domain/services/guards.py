"""Privilege checks the core re-applies even after the API gate has run."""

from __future__ import annotations

import structlog
from src.domain.errors import AuthorizationError
from src.domain.models import Principal
from src.infrastructure.db.models import UserRole
from src.infrastructure.repositories.users import UserRepository

logger = structlog.get_logger(__name__)


async def ensure_admin(actor: Principal | None, *, operation: str) -> Principal:
    if actor is None or not actor.is_admin:
        await logger.awarning(
            "authorization_denied",
            operation=operation,
            actor_id=actor.user_id if actor else None,
        )
        raise AuthorizationError("Forbidden: admin access only")
    return actor


async def ensure_self_or_admin(
    actor: Principal | None, user_id: str, *, operation: str
) -> Principal:
    if actor is not None and (actor.user_id == user_id or actor.is_admin):
        return actor
    await logger.awarning(
        "authorization_denied",
        operation=operation,
        actor_id=actor.user_id if actor else None,
        target_user_id=user_id,
    )
    raise AuthorizationError("You may only access your own trust data")


async def resolve_principal(users: UserRepository, user_id: str, *, email: str = "") -> Principal:
    """
    Build the acting principal from the stored account behind a token.

    Roles come from the user row, so a demoted or suspended account loses its
    privileges as soon as the row changes, whatever its token still claims.
    """
    user = await users.get(user_id)
    if user is None:
        await logger.awarning("authorization_denied", operation="authenticate", actor_id=user_id)
        raise AuthorizationError("Unknown account")
    if user.is_suspended:
        await logger.awarning(
            "authorization_denied", operation="authenticate", actor_id=user_id, reason="suspended"
        )
        raise AuthorizationError("Account suspended")

    roles = ("user", "admin") if user.role is UserRole.ADMIN else ("user",)
    return Principal(user_id=user.id, email=email or user.email, roles=roles)
