"""Bearer token authentication and role-based authorization.

Verification is stateless: the token's signature, expiry and optional
issuer/audience are checked in memory with PyJWT and nothing else is
consulted. Every failure surfaces as ``UnauthorizedError`` (401) or
``ForbiddenError`` (403) from ``hubkit.core.exceptions``.
"""

from collections.abc import Collection, Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from enum import StrEnum
from types import MappingProxyType
from typing import Any

import jwt
from pydantic import BaseModel, ConfigDict, Field

from hubkit.core.constants import BEARER_SCHEME, DEFAULT_JWT_ALGORITHM
from hubkit.core.exceptions import ForbiddenError, UnauthorizedError


class UserRole(StrEnum):
    """Roles known to hub-kit applications."""

    MEMBER = "member"
    ADMIN = "admin"


class JwtConfig(BaseModel):
    """Token verification settings supplied by the caller."""

    model_config = ConfigDict(frozen=True)

    secret: str = Field(..., repr=False, description="Signing secret or public key")
    algorithms: list[str] = Field(
        default_factory=lambda: [DEFAULT_JWT_ALGORITHM],
        description="Accepted signing algorithms",
    )
    issuer: str | None = Field(default=None, description="Expected 'iss' claim")
    audience: str | None = Field(default=None, description="Expected 'aud' claim")
    leeway: int = Field(
        default=0, ge=0, description="Grace period for expiry checks (seconds)"
    )


@dataclass(frozen=True, slots=True)
class Principal:
    """The authenticated caller for the duration of one request.

    Attributes:
        subject_id: The token's 'sub' claim.
        role: The caller's role ('role' claim, else the first 'roles' entry).
        roles: Every role the token claims, ``role`` first.
        email: The token's 'email' claim, if any.
        name: The token's 'name' claim, if any.
        raw_claims: The verified claims, read-only.
    """

    subject_id: str | None
    role: str | None = None
    roles: tuple[str, ...] = ()
    email: str | None = None
    name: str | None = None
    raw_claims: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_claims(cls, claims: Mapping[str, Any]) -> "Principal":
        """Build a principal from verified token claims."""
        roles: list[str] = []
        if isinstance(claims.get("role"), str):
            roles.append(claims["role"])
        claimed = claims.get("roles")
        if isinstance(claimed, list):
            roles.extend(r for r in claimed if isinstance(r, str) and r not in roles)

        subject = claims.get("sub")
        return cls(
            subject_id=str(subject) if subject is not None else None,
            role=roles[0] if roles else None,
            roles=tuple(roles),
            email=claims.get("email"),
            name=claims.get("name"),
            raw_claims=MappingProxyType(dict(claims)),
        )


def extract_bearer_token(authorization: str | None) -> str | None:
    """Extract the token from an ``Authorization: Bearer <token>`` header value.

    Args:
        authorization: The raw header value, if present.

    Returns:
        str | None: The token, or None when the header is absent or not a
            two-part bearer credential.
    """
    if not authorization:
        return None

    parts = authorization.split(" ")
    if len(parts) != 2 or parts[0].lower() != BEARER_SCHEME or not parts[1]:  # noqa: PLR2004
        return None
    return parts[1]


def authenticate(raw_token: str | None, config: JwtConfig) -> Principal:
    """Verify a bearer token and derive the principal.

    Args:
        raw_token: The token without the 'Bearer' prefix.
        config: Secret and verification options.

    Returns:
        Principal: The authenticated caller.

    Raises:
        UnauthorizedError: If the token is absent, malformed, signed with a
            different secret, expired, or fails issuer/audience checks.
    """
    if not raw_token:
        raise UnauthorizedError("Missing authorization header")

    try:
        claims = jwt.decode(
            raw_token,
            config.secret,
            algorithms=config.algorithms,
            issuer=config.issuer,
            audience=config.audience,
            leeway=config.leeway,
        )
    except jwt.ExpiredSignatureError as e:
        raise UnauthorizedError("Token has expired", cause=e) from e
    except jwt.InvalidTokenError as e:
        raise UnauthorizedError("Invalid token", cause=e) from e

    return Principal.from_claims(claims)


def authorize(principal: Principal, required_roles: Collection[str]) -> None:
    """Check that the principal holds one of the required roles.

    An empty ``required_roles`` admits every authenticated principal.

    Args:
        principal: The authenticated caller.
        required_roles: Roles that grant access.

    Raises:
        ForbiddenError: If no role is assigned or none of them is required.
    """
    if not required_roles:
        return

    if not principal.roles:
        raise ForbiddenError("No role assigned to user")

    if not any(role in required_roles for role in principal.roles):
        allowed = ", ".join(sorted(str(r) for r in required_roles))
        raise ForbiddenError(f"Required role not found. Required: {allowed}")


def create_token(
    claims: Mapping[str, Any],
    config: JwtConfig,
    expires_in: timedelta | None = timedelta(hours=1),
) -> str:
    """Sign a token that ``authenticate`` will accept with the same config.

    Args:
        claims: Claims to embed ('sub', 'role', 'email', ...).
        config: Secret, algorithm and issuer/audience to embed.
        expires_in: Lifetime of the token; None issues a non-expiring token.

    Returns:
        str: The encoded token.
    """
    now = datetime.now(UTC)
    payload: dict[str, Any] = {"iat": now, **claims}
    if expires_in is not None:
        payload["exp"] = now + expires_in
    if config.issuer is not None:
        payload.setdefault("iss", config.issuer)
    if config.audience is not None:
        payload.setdefault("aud", config.audience)
    return jwt.encode(payload, config.secret, algorithm=config.algorithms[0])
