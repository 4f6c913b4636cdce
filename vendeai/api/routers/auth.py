from __future__ import annotations

from fastapi import APIRouter, Depends, Header, HTTPException, Request

from vendeai.api.deps import (
    get_bearer_token,
    get_login_local_use_case,
    get_login_oauth_use_case,
    get_logout_session_use_case,
    get_register_user_use_case,
)
from vendeai.api.errors import to_http_exception
from vendeai.api.schemas.auth import (
    LoginRequest,
    LogoutResponse,
    OAuthLoginRequest,
    RegisterRequest,
    SessionResponse,
)
from vendeai.application.dto.auth import (
    LoginLocalInput,
    LoginOAuthInput,
    LogoutInput,
    RegisterUserInput,
    SessionOutput,
)
from vendeai.application.use_cases.login_local import LoginLocalUseCase
from vendeai.application.use_cases.login_oauth import LoginOAuthUseCase
from vendeai.application.use_cases.logout_session import LogoutSessionUseCase
from vendeai.application.use_cases.register_user import RegisterUserUseCase
from vendeai.domain.exceptions import DomainError


router = APIRouter()


def _client_ip(request: Request, x_forwarded_for: str | None) -> str | None:
    if x_forwarded_for:
        return x_forwarded_for.split(",")[0].strip()
    return request.client.host if request.client else None


def _session_response(output: SessionOutput) -> SessionResponse:
    return SessionResponse(
        session_token=output.session_token,
        expires_at=output.expires_at,
        created=output.created,
        user={
            "id": output.user.id,
            "name": output.user.name,
            "email": output.user.email,
            "email_verified": output.user.email_verified,
            "is_active": output.user.is_active,
            "avatar_url": output.user.avatar_url,
            "locale": output.user.locale,
        },
    )


@router.post("/v1/auth/register", response_model=SessionResponse, status_code=201)
def register_user(
    req: RegisterRequest,
    request: Request,
    user_agent: str | None = Header(default=None),
    x_forwarded_for: str | None = Header(default=None),
    use_case: RegisterUserUseCase = Depends(get_register_user_use_case),
):
    try:
        output = use_case.execute(
            RegisterUserInput(
                name=req.name,
                email=req.email,
                password=req.password,
                user_agent=user_agent,
                ip=_client_ip(request, x_forwarded_for),
            )
        )
    except DomainError as exc:
        raise to_http_exception(exc) from exc
    return _session_response(output)


@router.post("/v1/auth/login", response_model=SessionResponse)
def login_local(
    req: LoginRequest,
    request: Request,
    user_agent: str | None = Header(default=None),
    x_forwarded_for: str | None = Header(default=None),
    use_case: LoginLocalUseCase = Depends(get_login_local_use_case),
):
    try:
        output = use_case.execute(
            LoginLocalInput(
                email=req.email,
                password=req.password,
                user_agent=user_agent,
                ip=_client_ip(request, x_forwarded_for),
            )
        )
    except DomainError as exc:
        raise to_http_exception(exc) from exc
    return _session_response(output)


@router.post("/v1/auth/oauth/{provider}", response_model=SessionResponse)
def login_oauth(
    provider: str,
    req: OAuthLoginRequest,
    request: Request,
    user_agent: str | None = Header(default=None),
    x_forwarded_for: str | None = Header(default=None),
    use_case: LoginOAuthUseCase = Depends(get_login_oauth_use_case),
):
    try:
        output = use_case.execute(
            LoginOAuthInput(
                provider=provider,
                token=req.token,
                user_agent=user_agent,
                ip=_client_ip(request, x_forwarded_for),
            )
        )
    except DomainError as exc:
        raise to_http_exception(exc) from exc
    return _session_response(output)


@router.post("/v1/auth/logout", response_model=LogoutResponse)
def logout_session(
    token: str = Depends(get_bearer_token),
    use_case: LogoutSessionUseCase = Depends(get_logout_session_use_case),
):
    deleted = use_case.execute(LogoutInput(session_token=token))
    if not deleted:
        raise HTTPException(status_code=401, detail="Session not found. Log in again.")
    return LogoutResponse(ok=True)
