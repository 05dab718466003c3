"""Unit tests for auth/tokens.py -- JWT issue and classified verification.

Covers:
- round trip: verify(issue(claims)) == claims
- expiry exactly ttl after issuance, using an injected clock
- InvalidSignature for a different secret or a tampered payload
- Malformed for garbage, truncated tokens and missing claims
"""

from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from auth.errors import Expired, InvalidSignature, Malformed
from auth.models import SessionClaims
from auth.tokens import DEFAULT_TTL_SECONDS, issue_token, verify_token

SECRET = "unit-test-secret-0123456789abcdef-0123"
OTHER_SECRET = "another-secret-0123456789abcdef-01234"
T0 = datetime(2026, 3, 1, 9, 30, 0, tzinfo=timezone.utc)


@pytest.fixture
def claims() -> SessionClaims:
    return SessionClaims(user_id=7, company_id=3, role="admin")


def test_round_trip(claims: SessionClaims) -> None:
    token = issue_token(claims, SECRET, now=T0)
    assert verify_token(token, SECRET, now=T0) == claims


@pytest.mark.parametrize("role", ["admin", "member"])
def test_round_trip_keeps_role(role: str) -> None:
    original = SessionClaims(user_id=1, company_id=2, role=role)
    assert verify_token(issue_token(original, SECRET, now=T0), SECRET, now=T0).role == role


def test_expiry_is_exactly_ttl_after_issue(claims: SessionClaims) -> None:
    token = issue_token(claims, SECRET, ttl_seconds=DEFAULT_TTL_SECONDS, now=T0)
    verified = verify_token(token, SECRET, now=T0)
    assert verified.expires_at == T0 + timedelta(hours=1)
    assert jwt.get_unverified_claims(token)["exp"] - jwt.get_unverified_claims(token)["iat"] == 3600


def test_valid_until_ttl_then_expired(claims: SessionClaims) -> None:
    token = issue_token(claims, SECRET, ttl_seconds=3600, now=T0)
    assert verify_token(token, SECRET, now=T0 + timedelta(seconds=3599)) == claims
    with pytest.raises(Expired):
        verify_token(token, SECRET, now=T0 + timedelta(seconds=3601))


def test_wrong_secret_is_invalid_signature(claims: SessionClaims) -> None:
    token = issue_token(claims, SECRET, now=T0)
    with pytest.raises(InvalidSignature):
        verify_token(token, OTHER_SECRET, now=T0)


def test_signature_checked_before_expiry(claims: SessionClaims) -> None:
    token = issue_token(claims, SECRET, ttl_seconds=60, now=T0)
    with pytest.raises(InvalidSignature):
        verify_token(token, OTHER_SECRET, now=T0 + timedelta(days=1))


def test_tampered_payload_is_invalid_signature(claims: SessionClaims) -> None:
    token = issue_token(claims, SECRET, now=T0)
    forged = jwt.encode(
        {"userId": 7, "companyId": 3, "role": "admin", "exp": int((T0 + timedelta(days=365)).timestamp())},
        OTHER_SECRET,
        algorithm="HS256",
    )
    header, _, signature = token.split(".")
    spliced = ".".join([header, forged.split(".")[1], signature])
    with pytest.raises(InvalidSignature):
        verify_token(spliced, SECRET, now=T0)


@pytest.mark.parametrize("bad", ["", "not-a-jwt", "a.b", "a.b.c", "!!!.???.###"])
def test_garbage_is_malformed(bad: str) -> None:
    with pytest.raises(Malformed):
        verify_token(bad, SECRET, now=T0)


def test_truncated_token_is_malformed(claims: SessionClaims) -> None:
    token = issue_token(claims, SECRET, now=T0)
    header, payload, _ = token.split(".")
    with pytest.raises(Malformed):
        verify_token(f"{header}.{payload[: len(payload) // 2]}", SECRET, now=T0)


def test_missing_claim_is_malformed() -> None:
    token = jwt.encode(
        {"userId": 1, "role": "admin", "exp": int((T0 + timedelta(hours=1)).timestamp())},
        SECRET,
        algorithm="HS256",
    )
    with pytest.raises(Malformed):
        verify_token(token, SECRET, now=T0)
