"""Bearer token authentication and role-based authorization."""

from hubkit.security.auth import (
    JwtConfig,
    Principal,
    UserRole,
    authenticate,
    authorize,
    create_token,
    extract_bearer_token,
)

__all__ = [
    "JwtConfig",
    "Principal",
    "UserRole",
    "authenticate",
    "authorize",
    "create_token",
    "extract_bearer_token",
]
