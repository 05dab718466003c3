"""
auth/service.py -- Tenant provisioning and password login.

AccountService is the only place that combines the store, the password
hasher and the token functions. It has no HTTP knowledge: it raises AuthError
subclasses and the API layer maps them to responses.

Dependencies are injected at construction (store, settings, hasher, clock) so
tests can swap in an in-memory store, a cheap bcrypt cost and a fixed clock.

Failure policy:
  - Input validation happens before any storage access.
  - Uniqueness violations are Conflict, whether caught by the pre-check or by
    the UNIQUE constraint when a concurrent registration wins the race.
  - Other storage failures are logged with detail and surfaced as
    InternalError with a generic message.
  - Unknown email and wrong password are the same InvalidCredentials, and both
    paths run one bcrypt check [C1].
  - Updating last_login is best-effort: a failure is logged and the login
    still succeeds.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from auth.errors import Conflict, InternalError, InvalidCredentials, ValidationError
from auth.models import SessionClaims, UserSummary
from auth.passwords import MAX_PASSWORD_BYTES, PasswordHasher, password_too_long
from auth.store import AccountStore
from auth.tokens import issue_token, verify_token
from core.config import Settings

logger = logging.getLogger("onboarding.auth")

REGISTER_MISSING = "Please provide company name, admin email, and password."
LOGIN_MISSING = "Please provide email and password."
COMPANY_EXISTS = "Company with this name already exists."
EMAIL_EXISTS = "User with this email already exists."
REGISTER_FAILED = "Server error during registration."
LOGIN_FAILED = "Server error during login."


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def normalize_email(email: str | None) -> str:
    """Strip and lower-case an email so uniqueness is case-insensitive."""
    return (email or "").strip().lower()


@dataclass
class LoginResult:
    token: str
    user: UserSummary
    expires_in: int


class AccountService:
    """Registers tenants and authenticates their users.

    Usage:
        service = AccountService(store, settings)
        company_id = service.register("Acme", "ops@acme.test", "s3cret")
        result = service.login("ops@acme.test", "s3cret")
        claims = service.verify_token(result.token)
    """

    def __init__(
        self,
        store: AccountStore,
        settings: Settings,
        hasher: PasswordHasher | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.store = store
        self.settings = settings
        self.hasher = hasher or PasswordHasher(rounds=settings.bcrypt_rounds)
        self.clock = clock or _utcnow

    # ------------------------------------------------------------------
    # Provisioning
    # ------------------------------------------------------------------

    def register(self, company_name: str | None, admin_email: str | None, password: str | None) -> int:
        """Create a company and its admin user together. Returns the new company id."""
        company_name = (company_name or "").strip()
        admin_email = normalize_email(admin_email)
        if not company_name or not admin_email or not password:
            raise ValidationError(REGISTER_MISSING)
        if password_too_long(password):
            raise ValidationError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes.")

        try:
            if self.store.company_name_exists(company_name):
                logger.info("Registration rejected: company name taken")
                raise Conflict(COMPANY_EXISTS)
            if self.store.email_exists(admin_email):
                logger.info("Registration rejected: email taken")
                raise Conflict(EMAIL_EXISTS)

            password_hash = self.hasher.hash(password)
            company_id, user_id = self.store.create_company_with_admin(company_name, admin_email, password_hash)
        except IntegrityError as exc:
            # Lost a race with a concurrent registration; the transaction has
            # been rolled back by the store.
            logger.info("Registration hit a uniqueness constraint: %s", exc.orig)
            raise self._conflict_for(company_name) from exc
        except SQLAlchemyError as exc:
            logger.exception("Error during registration")
            raise InternalError(REGISTER_FAILED) from exc

        logger.info("Registered company id=%s with admin user id=%s", company_id, user_id)
        return company_id

    def _conflict_for(self, company_name: str) -> Conflict:
        try:
            taken = self.store.company_name_exists(company_name)
        except SQLAlchemyError:
            logger.exception("Could not classify registration conflict")
            return Conflict()
        return Conflict(COMPANY_EXISTS if taken else EMAIL_EXISTS)

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------

    def login(self, email: str | None, password: str | None) -> LoginResult:
        """Verify credentials and issue a session token."""
        email = normalize_email(email)
        if not email or not password:
            raise ValidationError(LOGIN_MISSING)

        try:
            user = self.store.get_user_by_email(email)
        except SQLAlchemyError as exc:
            logger.exception("Error during login")
            raise InternalError(LOGIN_FAILED) from exc

        if user is None:
            # Equalize timing -- do NOT return before running bcrypt [C1]
            self.hasher.burn(password)
            raise InvalidCredentials()
        if not self.hasher.verify(password, user.password_hash):
            raise InvalidCredentials()

        now = self.clock()
        claims = SessionClaims(user_id=user.id, company_id=user.company_id, role=user.role)
        token = issue_token(claims, self.settings.secret_key, self.settings.token_expire_seconds, now=now)

        try:
            self.store.update_last_login(user.id, now)
        except SQLAlchemyError:
            logger.warning("Could not update last_login for user id=%s", user.id, exc_info=True)

        return LoginResult(
            token=token,
            user=UserSummary.from_user(user),
            expires_in=self.settings.token_expire_seconds,
        )

    def verify_token(self, token: str) -> SessionClaims:
        """Verify a session token against the configured secret and clock.

        Raises InvalidSignature, Expired or Malformed.
        """
        return verify_token(token, self.settings.secret_key, now=self.clock())
