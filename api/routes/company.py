"""
api/routes/company.py -- Tenant endpoints for the caller's own company.

Routes:
  GET /api/company -- company details and user list (admin only)

Tenant scoping: the company id always comes from the verified token claims,
never from the URL or body, so an admin can only ever see their own tenant.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request

from api.models import CompanyResponse
from auth.dependencies import authorize
from auth.models import ROLE_ADMIN, SessionClaims, UserSummary
from auth.store import AccountStore

router = APIRouter()


@router.get("/company", response_model=CompanyResponse)
def get_company(
    request: Request,
    claims: SessionClaims = Depends(authorize(ROLE_ADMIN)),
) -> CompanyResponse:
    """Return the caller's company and a summary of each of its users."""
    store: AccountStore = request.app.state.account_store
    company = store.get_company(claims.company_id)
    if company is None:
        raise HTTPException(
            status_code=404,
            detail={"code": "not_found", "message": "Company not found."},
        )
    users = [UserSummary.from_user(u) for u in store.list_company_users(company.id)]
    return CompanyResponse.from_company(company, users)
