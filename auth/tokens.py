"""
auth/tokens.py -- Session token issue and verification (JWT, HS256).

Security design decisions:
  JWT: python-jose with HS256. Tokens are signed with the process-wide secret
       and carry userId, companyId, role, iat and exp. Rotating the secret
       invalidates every token ever issued -- there is no revocation list.

  Verification classifies failures instead of returning None, so the request
       gate can log *why* a token was rejected:
         Malformed         -- not a decodable JWT, or required claims missing
         InvalidSignature  -- structurally fine but not signed with our secret
         Expired           -- signature fine, now >= exp
       The gate collapses all three into one 401; the class is only logged.

  Clock: both functions take an optional `now` so expiry can be tested
       without sleeping. python-jose's own exp check reads the wall clock, so
       it is switched off and the comparison is done here against `now`.

Layer rule: no imports from api/.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from auth.errors import Expired, InvalidSignature, Malformed
from auth.models import SessionClaims

_ALGORITHM = "HS256"

DEFAULT_TTL_SECONDS = 3600

_DECODE_OPTIONS = {
    "verify_exp": False,
    "verify_iat": False,
    "verify_nbf": False,
    "verify_aud": False,
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def issue_token(
    claims: SessionClaims,
    secret: str,
    ttl_seconds: int = DEFAULT_TTL_SECONDS,
    now: datetime | None = None,
) -> str:
    """Encode a signed JWT for `claims` that expires exactly `ttl_seconds` after `now`."""
    issued_at = now or _utcnow()
    expire = issued_at + timedelta(seconds=ttl_seconds)
    payload = {
        "userId": claims.user_id,
        "companyId": claims.company_id,
        "role": claims.role,
        "iat": int(issued_at.timestamp()),
        "exp": int(expire.timestamp()),
    }
    return jwt.encode(payload, secret, algorithm=_ALGORITHM)


def verify_token(token: str, secret: str, now: datetime | None = None) -> SessionClaims:
    """Decode and verify a JWT. Returns the claims or raises a TokenError subclass."""
    if not token or not isinstance(token, str):
        raise Malformed("empty token")

    # Structure first: a token that cannot be decoded at all is Malformed,
    # not a signature mismatch.
    try:
        jwt.get_unverified_claims(token)
    except JWTError as exc:
        raise Malformed(str(exc)) from exc

    try:
        payload = jwt.decode(token, secret, algorithms=[_ALGORITHM], options=_DECODE_OPTIONS)
    except JWTError as exc:
        raise InvalidSignature(str(exc)) from exc

    try:
        user_id = payload["userId"]
        company_id = payload["companyId"]
        role = payload["role"]
        exp = payload["exp"]
    except KeyError as exc:
        raise Malformed(f"missing claim {exc.args[0]!r}") from exc
    if not isinstance(exp, (int, float)) or not isinstance(role, str):
        raise Malformed("bad claim types")

    current = now or _utcnow()
    if current.timestamp() >= exp:
        raise Expired(f"token expired at {int(exp)}")

    return SessionClaims(
        user_id=user_id,
        company_id=company_id,
        role=role,
        expires_at=datetime.fromtimestamp(exp, tz=timezone.utc),
    )
