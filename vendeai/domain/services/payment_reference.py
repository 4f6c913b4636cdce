from __future__ import annotations

from vendeai.domain.entities.payment import ExternalReference
from vendeai.domain.exceptions import InvalidReferenceError


SEPARATOR = "_"


def encode_external_reference(*, user_id: str, plan_code: str, created_at_ms: int) -> str:
    if SEPARATOR in plan_code:
        raise InvalidReferenceError("plan_code cannot contain the reference separator.")
    return f"{user_id}{SEPARATOR}{plan_code}{SEPARATOR}{int(created_at_ms)}"


def decode_external_reference(reference: str | None) -> ExternalReference:
    """Parse ``<user_id>_<plan_code>_<epoch_ms>``.

    Split from the right so that user ids containing the separator still decode.
    """
    if not reference:
        raise InvalidReferenceError("Missing external reference.")

    parts = reference.rsplit(SEPARATOR, 2)
    if len(parts) != 3:
        raise InvalidReferenceError(f"Malformed external reference '{reference}'.")

    user_id, plan_code, created_at = parts
    if not user_id or not plan_code:
        raise InvalidReferenceError(f"External reference '{reference}' is missing user or plan.")
    if not created_at.isdigit():
        raise InvalidReferenceError(f"External reference '{reference}' has an invalid timestamp.")

    return ExternalReference(user_id=user_id, plan_code=plan_code, created_at_ms=int(created_at))
