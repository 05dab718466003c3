"""
API request and response models for the onboarding REST endpoints.

These Pydantic v2 models define the HTTP transport contract. They are
intentionally separate from the dataclasses in auth/models.py, which own the
internal domain representation. Route handlers map between the two.

Request fields are Optional on purpose: a missing or blank field is a 400
with a specific message from AccountService, not a generic schema error.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from auth.models import Company, SessionClaims, UserSummary

# ---------------------------------------------------------------------------
# Shared / error models
# ---------------------------------------------------------------------------


class ErrorDetail(BaseModel):
    """Machine-readable error payload."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: Optional[str] = None


class ErrorResponse(BaseModel):
    """Top-level error envelope returned on 4xx/5xx responses."""

    model_config = ConfigDict(frozen=True)

    error: ErrorDetail


class HealthResponse(BaseModel):
    """Response for GET /api/health."""

    model_config = ConfigDict(frozen=True)

    status: str = "ok"
    version: str
    components: dict[str, str] = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# Auth -- requests
# ---------------------------------------------------------------------------


class RegisterRequest(BaseModel):
    """Request body for POST /api/auth/register."""

    model_config = ConfigDict(populate_by_name=True)

    company_name: Optional[str] = Field(default=None, alias="companyName", max_length=255)
    admin_email: Optional[str] = Field(default=None, alias="adminEmail", max_length=255)
    password: Optional[str] = Field(default=None, max_length=255)


class LoginRequest(BaseModel):
    """Request body for POST /api/auth/login."""

    email: Optional[str] = Field(default=None, max_length=255)
    password: Optional[str] = Field(default=None, max_length=255)


# ---------------------------------------------------------------------------
# Auth -- responses
# ---------------------------------------------------------------------------


class UserSummaryResponse(BaseModel):
    """Non-sensitive user view. The password hash is never part of any response."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: int
    email: str
    role: str
    company_id: int = Field(alias="companyId")

    @classmethod
    def from_summary(cls, summary: UserSummary) -> "UserSummaryResponse":
        return cls(id=summary.id, email=summary.email, role=summary.role, company_id=summary.company_id)


class RegisterResponse(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    message: str
    company_id: int = Field(alias="companyId")


class LoginResponse(BaseModel):
    """Response for POST /api/auth/login."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    message: str
    token: str
    token_type: str = Field(default="bearer", alias="tokenType")
    expires_in: int = Field(alias="expiresIn")
    user: UserSummaryResponse


class MeResponse(BaseModel):
    """Response for GET /api/auth/me -- the verified claims of the caller."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    user_id: int = Field(alias="userId")
    company_id: int = Field(alias="companyId")
    role: str
    expires_at: Optional[str] = Field(default=None, alias="expiresAt")

    @classmethod
    def from_claims(cls, claims: SessionClaims) -> "MeResponse":
        expires_at = claims.expires_at.isoformat() if claims.expires_at else None
        return cls(user_id=claims.user_id, company_id=claims.company_id, role=claims.role, expires_at=expires_at)


class CompanyResponse(BaseModel):
    """Response for GET /api/company -- the caller's tenant and its users."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: int
    name: str
    admin_email: str = Field(alias="adminEmail")
    created_at: str = Field(alias="createdAt")
    users: list[UserSummaryResponse]

    @classmethod
    def from_company(cls, company: Company, users: list[UserSummary]) -> "CompanyResponse":
        return cls(
            id=company.id,
            name=company.name,
            admin_email=company.admin_email,
            created_at=company.created_at or "",
            users=[UserSummaryResponse.from_summary(u) for u in users],
        )
