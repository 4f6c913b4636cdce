from __future__ import annotations

from passlib.context import CryptContext

from vendeai.application.ports.password_hasher_port import PasswordHasherPort


class PasswordHasher(PasswordHasherPort):
    def __init__(self, *, schemes: tuple[str, ...] = ("argon2", "bcrypt")):
        self._ctx = CryptContext(
            schemes=list(schemes),
            deprecated="auto",
        )

    def hash(self, plain_password: str) -> str:
        return self._ctx.hash(plain_password)

    def verify_and_update(self, plain_password: str, password_hash: str) -> tuple[bool, str | None]:
        # Unknown or malformed stored hashes count as a failed login.
        try:
            verified, replacement_hash = self._ctx.verify_and_update(plain_password, password_hash)
        except (ValueError, TypeError):
            return False, None
        return bool(verified), replacement_hash
