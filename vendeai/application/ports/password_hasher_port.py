from __future__ import annotations

from typing import Protocol


class PasswordHasherPort(Protocol):
    def hash(self, plain_password: str) -> str:
        ...

    def verify_and_update(self, plain_password: str, password_hash: str) -> tuple[bool, str | None]:
        """Return (verified, replacement_hash). A replacement is only produced
        when the stored hash uses a deprecated scheme."""
        ...
