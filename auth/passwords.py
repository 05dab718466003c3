"""
auth/passwords.py -- Credential hashing (bcrypt, direct usage).

bcrypt embeds a fresh random salt and the cost factor in every digest, so two
hashes of the same password never compare equal and verify() needs nothing
but the stored string. checkpw compares in constant time.

bcrypt only consumes the first 72 bytes of input and current releases reject
longer passwords outright. Registration refuses such passwords up front
(see MAX_PASSWORD_BYTES) rather than letting hashpw raise mid-request.

Layer rule: no imports from api/.
"""

from __future__ import annotations

import bcrypt

MAX_PASSWORD_BYTES = 72
DEFAULT_ROUNDS = 12


class PasswordHasher:
    """Salted one-way hashing with a configurable bcrypt cost factor.

    Usage:
        hasher = PasswordHasher(rounds=12)
        digest = hasher.hash("correct horse")
        hasher.verify("correct horse", digest)  # True
    """

    def __init__(self, rounds: int = DEFAULT_ROUNDS) -> None:
        self.rounds = rounds
        self._dummy_hash: str | None = None

    def hash(self, plain: str) -> str:
        """Return a bcrypt digest of `plain` with a freshly generated salt."""
        return bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt(rounds=self.rounds)).decode("utf-8")

    def verify(self, plain: str, hashed: str) -> bool:
        """Return True if `plain` matches `hashed`.

        A corrupt stored hash or an over-long candidate is a mismatch, not an
        error -- the login path must not distinguish them from a wrong password.
        """
        try:
            return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
        except ValueError:
            return False

    def burn(self, plain: str) -> None:
        """Run one verification against a throwaway hash [C1].

        Called when the login email is unknown so that path costs the same
        bcrypt work as a wrong password. The dummy hash is built lazily with
        the same cost factor as real hashes.
        """
        if self._dummy_hash is None:
            self._dummy_hash = self.hash("onboarding_timing_dummy")
        self.verify(plain, self._dummy_hash)


def password_too_long(plain: str) -> bool:
    return len(plain.encode("utf-8")) > MAX_PASSWORD_BYTES
