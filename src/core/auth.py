from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from enum import Enum

import jwt
from src.core.config import get_settings


class TokenError(Exception):
    """Raised when a token cannot be decoded or validated."""


class Role(str, Enum):
    USER = "user"
    ADMIN = "admin"

    @classmethod
    def contains(cls, value: str) -> bool:
        return value in {role.value for role in cls}


@dataclass(slots=True, frozen=True)
class TokenClaims:
    """Validated contents of an access token."""

    subject: str
    roles: tuple[str, ...]
    email: str = ""
    expires_at: datetime | None = None


def normalize_roles(roles: Iterable[Role | str]) -> tuple[str, ...]:
    """Return role values, refusing anything outside the configured role set."""
    allowed = get_settings().allowed_roles
    values = tuple(role.value if isinstance(role, Role) else str(role) for role in roles)

    unsupported = [value for value in values if value not in allowed or not Role.contains(value)]
    if unsupported:
        raise TokenError(f"Unsupported role(s): {', '.join(unsupported)}")
    return values


def create_access_token(
    subject: str,
    *,
    roles: Iterable[Role | str],
    email: str | None = None,
    expires_delta: timedelta | None = None,
) -> str:
    """Sign a JWT naming the principal and its roles."""
    settings = get_settings()
    role_values = normalize_roles(roles)

    issued_at = datetime.now(UTC)
    expires_at = issued_at + (expires_delta or timedelta(seconds=settings.access_token_ttl_seconds))
    payload: dict[str, object] = {
        "sub": subject,
        "roles": list(role_values),
        "iat": int(issued_at.timestamp()),
        "exp": int(expires_at.timestamp()),
        "iss": settings.app_name,
    }
    if email:
        payload["email"] = email

    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> TokenClaims:
    """Verify signature, expiry and issuer, then return the token's claims."""
    settings = get_settings()

    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            issuer=settings.app_name,
            options={"require": ["sub", "roles", "exp", "iss"]},
        )
    except jwt.ExpiredSignatureError as exc:
        raise TokenError("Token expired") from exc
    except jwt.PyJWTError as exc:  # pragma: no cover - third-party raises numerous subclasses
        raise TokenError("Invalid token") from exc

    raw_roles = payload.get("roles")
    if not isinstance(raw_roles, list):
        raise TokenError("Invalid token roles")

    return TokenClaims(
        subject=str(payload["sub"]),
        roles=normalize_roles(raw_roles),
        email=payload.get("email", ""),
        expires_at=datetime.fromtimestamp(payload["exp"], UTC),
    )
