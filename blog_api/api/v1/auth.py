"""Register, login, refresh-token and logout endpoints."""

from typing import Annotated

from fastapi import APIRouter, Cookie, Depends, Response, status

from blog_api.api.deps import (
    AuthenticatedUser,
    authenticate,
    get_auth_service,
    get_settings,
)
from blog_api.core.config import Settings
from blog_api.schemas.auth import (
    AccessTokenResponse,
    AuthResponse,
    ErrorResponse,
    LoginRequest,
    RegisterRequest,
    UserPublic,
)
from blog_api.services.auth import AuthResult, AuthService

REFRESH_COOKIE = "refreshToken"

router = APIRouter()


def _set_refresh_cookie(response: Response, token: str, settings: Settings) -> None:
    response.set_cookie(
        REFRESH_COOKIE,
        token,
        httponly=True,
        secure=settings.is_production,
        samesite="strict",
    )


def _auth_response(result: AuthResult) -> AuthResponse:
    return AuthResponse(
        user=UserPublic.model_validate(result.user),
        access_token=result.access_token,
    )


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        403: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
def register(
    body: RegisterRequest,
    response: Response,
    service: Annotated[AuthService, Depends(get_auth_service)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> AuthResponse:
    """
    Create an account and sign in.
    Returns the access token in the body and sets the refresh token as an HTTP-only cookie.
    """
    result = service.register(body.email, body.password, body.role)
    _set_refresh_cookie(response, result.refresh_token, settings)
    return _auth_response(result)


@router.post(
    "/login",
    response_model=AuthResponse,
    responses={401: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
def login(
    body: LoginRequest,
    response: Response,
    service: Annotated[AuthService, Depends(get_auth_service)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> AuthResponse:
    """Authenticate with email and password."""
    result = service.login(body.email, body.password)
    _set_refresh_cookie(response, result.refresh_token, settings)
    return _auth_response(result)


@router.post(
    "/refresh-token",
    response_model=AccessTokenResponse,
    responses={401: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
def refresh_token(
    service: Annotated[AuthService, Depends(get_auth_service)],
    token: Annotated[str | None, Cookie(alias=REFRESH_COOKIE)] = None,
) -> AccessTokenResponse:
    """Exchange the refresh-token cookie for a new access token."""
    return AccessTokenResponse(access_token=service.refresh_access_token(token))


@router.post(
    "/logout",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={401: {"model": ErrorResponse}},
)
def logout(
    _identity: Annotated[AuthenticatedUser, Depends(authenticate)],
    service: Annotated[AuthService, Depends(get_auth_service)],
    settings: Annotated[Settings, Depends(get_settings)],
    token: Annotated[str | None, Cookie(alias=REFRESH_COOKIE)] = None,
) -> Response:
    """Revoke the refresh-token cookie and clear it."""
    service.logout(token)
    response = Response(status_code=status.HTTP_204_NO_CONTENT)
    response.delete_cookie(
        REFRESH_COOKIE,
        httponly=True,
        secure=settings.is_production,
        samesite="strict",
    )
    return response
