"""Current-user and admin user listing endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from blog_api.api.deps import authorize, get_credential_store
from blog_api.models import User, UserRole
from blog_api.schemas.auth import (
    CurrentUserResponse,
    ErrorResponse,
    UserPublic,
    UsersListResponse,
)
from blog_api.services.credential_store import CredentialStore

router = APIRouter()

_auth_errors = {401: {"model": ErrorResponse}, 403: {"model": ErrorResponse}}


@router.get("/current", response_model=CurrentUserResponse, responses=_auth_errors)
def get_current_user(
    user: Annotated[User, Depends(authorize(UserRole.ADMIN, UserRole.USER))],
) -> CurrentUserResponse:
    return CurrentUserResponse(user=UserPublic.model_validate(user))


@router.get("", response_model=UsersListResponse, responses=_auth_errors)
def list_users(
    _admin: Annotated[User, Depends(authorize(UserRole.ADMIN))],
    credentials: Annotated[CredentialStore, Depends(get_credential_store)],
    limit: Annotated[int, Query(ge=1, le=50)] = 20,
    offset: Annotated[int, Query(ge=0)] = 0,
) -> UsersListResponse:
    """List users (admin only)."""
    users = credentials.list_users(limit=limit, offset=offset)
    return UsersListResponse(
        limit=limit,
        offset=offset,
        total=credentials.count_users(),
        users=[UserPublic.model_validate(u) for u in users],
    )
