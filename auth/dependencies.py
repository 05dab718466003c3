"""
auth/dependencies.py -- Request gate: FastAPI Depends() helpers for protected routes.

Two checks, always in this order:
  1. authenticate(request) -- reads "Authorization: Bearer <token>", verifies
     the token and attaches the SessionClaims to request.state.claims.
  2. authorize(roles)      -- a RoleRequirement that compares the attached
     role against an allowed set. An empty set means "any authenticated user".

RoleRequirement depends on authenticate, so FastAPI always resolves the
token before the role check runs and both share the same claims.

Missing header, wrong scheme, and every token failure (InvalidSignature,
Expired, Malformed) collapse into one 401 Unauthorized. The specific reason is
logged, never returned.

Usage:
    @router.get("/me")
    def me(claims: SessionClaims = Depends(authenticate)): ...

    @router.get("/company")
    def company(claims: SessionClaims = Depends(authorize("admin"))): ...

Layer rule: may import from fastapi (Request/Depends) because this module is
part of the dependency injection system; no imports from api/.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from fastapi import Depends, Request

from auth.errors import Forbidden, TokenError, Unauthorized
from auth.models import SessionClaims

logger = logging.getLogger("onboarding.gate")

_SCHEME = "Bearer"


def bearer_token(authorization: str | None) -> str | None:
    """Return the token from an Authorization header value, or None."""
    if not authorization:
        return None
    scheme, _, token = authorization.strip().partition(" ")
    token = token.strip()
    if scheme != _SCHEME or not token or " " in token:
        return None
    return token


def authenticate(request: Request) -> SessionClaims:
    """Require a valid bearer token. Raises Unauthorized (401) otherwise."""
    token = bearer_token(request.headers.get("Authorization"))
    if token is None:
        logger.info("Rejected %s %s: no bearer token", request.method, request.url.path)
        raise Unauthorized()

    service = request.app.state.account_service
    try:
        claims = service.verify_token(token)
    except TokenError as exc:
        logger.info("Rejected %s %s: %s (%s)", request.method, request.url.path, exc.reason, exc)
        raise Unauthorized() from exc

    request.state.claims = claims
    return claims


def is_authorized(role: str, allowed_roles: Iterable[str]) -> bool:
    """Return True if `role` may pass. An empty allowed set admits every role."""
    allowed = frozenset(allowed_roles)
    return not allowed or role in allowed


class RoleRequirement:
    """Dependency that admits only claims whose role is in `allowed_roles`."""

    def __init__(self, allowed_roles: Iterable[str] = ()) -> None:
        self.allowed_roles = frozenset(allowed_roles)

    def __call__(self, claims: SessionClaims = Depends(authenticate)) -> SessionClaims:
        if not is_authorized(claims.role, self.allowed_roles):
            logger.info("Forbidden: role %r not in %s", claims.role, sorted(self.allowed_roles))
            raise Forbidden()
        return claims

    def __repr__(self) -> str:
        return f"RoleRequirement({sorted(self.allowed_roles)!r})"


def authorize(roles: str | Iterable[str] = ()) -> RoleRequirement:
    """Build a RoleRequirement. Accepts one role name or an iterable of them."""
    if isinstance(roles, str):
        roles = [roles]
    return RoleRequirement(roles)
