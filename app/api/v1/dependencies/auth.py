"""Bearer-token identity and role gates (composition root).

The identity provider issues JWTs with ``sub`` (user id) and ``role``
(EM, USER or VENDOR); the token is trusted as given.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.domain.enums import ApprovalRole
from app.domain.exceptions import AuthenticationException, AuthorizationException
from app.infrastructure.security.jwt import verify_token

_http_bearer = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Actor:
    """Acting caller taken from the bearer token."""

    user_id: str
    role: ApprovalRole


async def get_current_actor(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_http_bearer)],
) -> Actor:
    """Return the caller from the JWT; raise AuthenticationException if missing or invalid."""
    if credentials is None:
        raise AuthenticationException("Not authenticated")
    try:
        payload = verify_token(credentials.credentials)
    except ValueError as e:
        raise AuthenticationException(str(e)) from e
    try:
        role = ApprovalRole(str(payload["role"]).upper())
    except ValueError as e:
        raise AuthenticationException(f"Unknown role claim: {payload['role']}") from e
    return Actor(user_id=str(payload["sub"]), role=role)


def require_roles(action: str, *roles: ApprovalRole):
    """Dependency factory: require a caller whose role is one of roles."""
    allowed = frozenset(roles)

    async def _require(actor: Annotated[Actor, Depends(get_current_actor)]) -> Actor:
        if actor.role not in allowed:
            raise AuthorizationException(role=actor.role.value, action=action)
        return actor

    return _require
