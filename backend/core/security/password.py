"""
Password hashing for the ``password`` field kind.
"""

import secrets

from passlib.context import CryptContext


class PasswordHasher:
    """bcrypt hashing and verification."""

    def __init__(self, rounds: int = 12):
        self._context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=rounds,
        )
        self._dummy_hash: str | None = None

    def hash(self, password: str) -> str:
        return self._context.hash(password)

    def verify(self, plain_password: str, hashed_password: str | None) -> bool:
        """
        Verify a password against a hash.

        A missing hash is still checked against a dummy value and always fails,
        so login timing does not reveal whether an identity exists.
        """
        if not hashed_password:
            if self._dummy_hash is None:
                self._dummy_hash = self._context.hash(secrets.token_urlsafe(16))
            self._context.verify(plain_password, self._dummy_hash)
            return False
        return self._context.verify(plain_password, hashed_password)

    def needs_rehash(self, hashed_password: str) -> bool:
        """Check whether a stored hash was made with outdated parameters."""
        return self._context.needs_update(hashed_password)


# Singleton instance
password_hasher = PasswordHasher()
