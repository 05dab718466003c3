"""
api/routes/auth.py -- Registration, login and identity endpoints.

Routes:
  POST /api/auth/register  -- create a company and its admin user (public)
  POST /api/auth/login     -- password login; returns a bearer token (public)
  GET  /api/auth/me        -- verified claims of the caller (requires token)

Security:
  [H2] POST /login is rate-limited per client address (LOGIN_RATE_LIMIT).
  [C1] AccountService.login() equalizes timing between unknown email and
       wrong password and returns the same InvalidCredentials for both.
  [M5] Cache-Control: no-store on login responses.

Errors are raised as auth.errors.AuthError subclasses and rendered by the
handler in api/main.py; handlers here only deal with the happy path.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from api.limiter import limiter, login_rate_limit
from api.models import LoginRequest, LoginResponse, MeResponse, RegisterRequest, RegisterResponse, UserSummaryResponse
from auth.dependencies import authenticate
from auth.models import SessionClaims
from auth.service import AccountService

# Auth policy:
# - POST /api/auth/register: public -- the caller is by definition unauthenticated
# - POST /api/auth/login:    public
# - GET  /api/auth/me:       requires a valid bearer token (authenticate)
router = APIRouter()


@router.post("/auth/register", response_model=RegisterResponse, status_code=201)
def register(request: Request, body: RegisterRequest) -> RegisterResponse:
    """Register a new company together with its first admin user.

    Both rows are created in one transaction: either both exist afterwards or
    neither does. 409 if the company name or the email is already taken.
    """
    service: AccountService = request.app.state.account_service
    company_id = service.register(body.company_name, body.admin_email, body.password)
    return RegisterResponse(message="Company and admin user registered successfully.", company_id=company_id)


@router.post("/auth/login", response_model=LoginResponse)
@limiter.limit(login_rate_limit)  # [H2] router must register the wrapped handler
def login(request: Request, body: LoginRequest) -> JSONResponse:
    """Authenticate with email and password and return a session token."""
    service: AccountService = request.app.state.account_service
    result = service.login(body.email, body.password)
    resp = JSONResponse(
        status_code=200,
        content=LoginResponse(
            message="Login successful",
            token=result.token,
            expires_in=result.expires_in,
            user=UserSummaryResponse.from_summary(result.user),
        ).model_dump(by_alias=True),
    )
    resp.headers["Cache-Control"] = "no-store"  # [M5]
    return resp


@router.get("/auth/me", response_model=MeResponse)
def me(claims: SessionClaims = Depends(authenticate)) -> MeResponse:
    """Return the identity carried by the caller's token."""
    return MeResponse.from_claims(claims)
