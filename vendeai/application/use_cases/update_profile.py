from __future__ import annotations

from vendeai.application.dto.auth import AuthUserOutput, UpdateProfileInput
from vendeai.application.ports.auth_port import AuthPort
from vendeai.domain.entities.user import SUPPORTED_LOCALES
from vendeai.domain.exceptions import UserNotFoundError, ValidationError

from .auth_common import build_auth_user_output, utcnow


MAX_NAME_LENGTH = 120


class UpdateProfileUseCase:
    def __init__(self, *, auth_port: AuthPort):
        self._auth_port = auth_port

    def execute(self, command: UpdateProfileInput) -> AuthUserOutput:
        user = self._auth_port.get_user_by_id(user_id=command.user_id)
        if user is None:
            raise UserNotFoundError("User not found.")

        name = user.name
        if command.name is not None:
            name = command.name.strip()
            if not name or len(name) > MAX_NAME_LENGTH:
                raise ValidationError(f"name must have between 1 and {MAX_NAME_LENGTH} characters.")

        locale = user.locale
        if command.locale is not None:
            if command.locale not in SUPPORTED_LOCALES:
                raise ValidationError(f"locale must be one of {', '.join(SUPPORTED_LOCALES)}.")
            locale = command.locale

        avatar_url = user.avatar_url if command.avatar_url is None else (command.avatar_url or None)

        updated = self._auth_port.update_user_profile(
            user_id=user.id,
            name=name,
            avatar_url=avatar_url,
            locale=locale,
            updated_at=utcnow(),
        )
        return build_auth_user_output(updated)
