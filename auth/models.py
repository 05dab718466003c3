"""
auth/models.py -- Domain dataclasses for tenants, users and session claims.

Pattern: Data class (pure data container, zero logic). Stores and services do
the work; these only own the shape.

Layer rule: no imports from api/.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

ROLE_ADMIN = "admin"
ROLE_MEMBER = "member"


@dataclass
class Company:
    """A tenant. Created exactly once per registration, immutable afterwards."""

    name: str
    admin_email: str
    id: int | None = None
    created_at: str | None = None


@dataclass
class User:
    """A login identity that belongs to exactly one company.

    password_hash is always a bcrypt digest produced by auth.passwords; the
    plaintext is never stored. last_login is None until the first successful
    login and is stamped on every login after that.
    """

    company_id: int
    email: str
    password_hash: str
    role: str = ROLE_MEMBER  # "admin", "member"
    id: int | None = None
    created_at: str | None = None
    last_login: str | None = None


@dataclass
class UserSummary:
    """Non-sensitive view of a User -- safe to return to clients."""

    id: int
    email: str
    role: str
    company_id: int

    @classmethod
    def from_user(cls, user: User) -> UserSummary:
        return cls(id=user.id, email=user.email, role=user.role, company_id=user.company_id)


@dataclass
class SessionClaims:
    """Identity carried inside a session token.

    There is no server-side session store: the signed token is the only
    representation. expires_at is filled in on verification and excluded from
    equality so verify(issue(claims)) == claims holds.
    """

    user_id: int
    company_id: int
    role: str
    expires_at: datetime | None = field(default=None, compare=False)
