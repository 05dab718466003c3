"""Unit tests for auth/dependencies.py -- bearer parsing and role checks.

The HTTP behaviour of authenticate() (401 collapsing) is covered end-to-end
in test_api_routes.py; these tests pin the pure pieces.
"""

import pytest

from auth.dependencies import RoleRequirement, authorize, bearer_token, is_authorized
from auth.errors import Forbidden
from auth.models import SessionClaims


@pytest.mark.parametrize(
    "header,expected",
    [
        ("Bearer abc.def.ghi", "abc.def.ghi"),
        ("  Bearer   abc.def.ghi  ", "abc.def.ghi"),
        (None, None),
        ("", None),
        ("Bearer", None),
        ("Bearer ", None),
        ("Basic dXNlcjpwYXNz", None),
        ("bearer abc", None),
        ("Bearerabc", None),
        ("Bearer abc def", None),
    ],
)
def test_bearer_token(header, expected) -> None:
    assert bearer_token(header) == expected


def test_is_authorized() -> None:
    assert is_authorized("admin", {"admin"})
    assert not is_authorized("member", {"admin"})
    assert is_authorized("member", {"admin", "member"})


def test_empty_role_set_means_no_restriction() -> None:
    assert is_authorized("member", set())
    assert is_authorized("anything", [])


def test_authorize_admin_rejects_member() -> None:
    require_admin = authorize(["admin"])
    with pytest.raises(Forbidden) as excinfo:
        require_admin(SessionClaims(user_id=1, company_id=1, role="member"))
    assert excinfo.value.status_code == 403


def test_authorize_admin_passes_admin_through() -> None:
    claims = SessionClaims(user_id=1, company_id=1, role="admin")
    assert authorize(["admin"])(claims) is claims


def test_authorize_accepts_single_role_string() -> None:
    requirement = authorize("admin")
    assert isinstance(requirement, RoleRequirement)
    assert requirement.allowed_roles == frozenset({"admin"})


def test_authorize_without_roles_admits_everyone() -> None:
    claims = SessionClaims(user_id=1, company_id=1, role="member")
    assert authorize()(claims) is claims
