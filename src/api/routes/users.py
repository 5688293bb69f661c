"""User API routes."""

from typing import Any

from fastapi import APIRouter, Depends, Query, Request, status

from api.dependencies.services import (
    get_login_service,
    get_profile_service,
    get_registration_service,
)
from api.schemas.common import ErrorResponse
from api.schemas.user import (
    LoginRequest,
    LoginResponse,
    RegisterRequest,
    RegisterResponse,
    UserDeleteResponse,
    UserDetail,
    UserFilterItem,
    UsernameItem,
    UserSummary,
    UserUpdateRequest,
    UserUpdateResponse,
)
from domain.entities.profile import UserProfile
from domain.services.login_service import LoginService
from domain.services.profile_service import ProfileService
from domain.services.registration_service import RegistrationService

router = APIRouter(prefix="/users", tags=["users"])


def _mark_degraded(request: Request, degraded: bool) -> None:
    if degraded:
        request.state.degraded = True


def _summary(profile: UserProfile) -> UserSummary:
    return UserSummary(
        id=profile.id,
        username=profile.username or None,
        provider=profile.provider.value,
        created_at=profile.created_at,
    )


def _detail(profile: UserProfile) -> dict[str, Any]:
    return {
        "id": profile.id,
        "username": profile.username or None,
        "provider": profile.provider.value,
        "created_at": profile.created_at,
        "email": profile.email or None,
        "profile_description": profile.profile_description,
        "settings": profile.settings,
        "updated_at": profile.updated_at,
    }


@router.post(
    "",
    response_model=RegisterResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
    summary="Register a user",
    responses={
        400: {"model": ErrorResponse, "description": "Missing fields or passwords do not match"},
        500: {"model": ErrorResponse, "description": "Nothing could be persisted"},
    },
)
async def register(
    request: Request,
    body: RegisterRequest,
    service: RegistrationService = Depends(get_registration_service),
) -> RegisterResponse:
    """Create an account with the identity provider and/or a profile store."""
    result = await service.register(body.username, body.password, body.confirm_password)
    _mark_degraded(request, result.degraded)
    return RegisterResponse(
        message=result.message,
        uid=result.uid,
        username=result.username,
        server_fallback=True if result.server_fallback else None,
        firestore_error=result.store_error,
    )


@router.post(
    "/login",
    response_model=LoginResponse,
    response_model_exclude_none=True,
    summary="Log in",
    responses={
        400: {"model": ErrorResponse, "description": "Missing fields"},
        401: {"model": ErrorResponse, "description": "Invalid credentials"},
        503: {"model": ErrorResponse, "description": "No verification path is configured"},
    },
)
async def login(
    request: Request,
    body: LoginRequest,
    service: LoginService = Depends(get_login_service),
) -> LoginResponse:
    """Verify credentials and return a provider token when one is available."""
    result = await service.login(body.username, body.password)
    _mark_degraded(request, result.server_fallback)
    return LoginResponse(
        message=result.message,
        uid=result.uid,
        username=result.username,
        token=result.token,
        server_fallback=True if result.server_fallback else None,
    )


@router.get("", response_model=list[UserSummary], summary="List users")
async def list_users(
    service: ProfileService = Depends(get_profile_service),
) -> list[UserSummary]:
    """List every profile from the preferred backend."""
    return [_summary(p) for p in await service.list_profiles()]


# Static paths must be registered before /{user_id}


@router.get(
    "/filter",
    response_model=list[UserFilterItem],
    summary="Filter users by provider",
)
async def filter_users(
    provider: str | None = Query(None, description="firebase or local"),
    service: ProfileService = Depends(get_profile_service),
) -> list[UserFilterItem]:
    """List profiles created by one authority."""
    profiles = await service.filter_by_provider(provider)
    return [
        UserFilterItem(id=p.id, username=p.username or None, provider=p.provider.value)
        for p in profiles
    ]


@router.get(
    "/sort/desc",
    response_model=list[UsernameItem],
    summary="Users by username, descending",
)
async def sort_users_desc(
    service: ProfileService = Depends(get_profile_service),
) -> list[UsernameItem]:
    """List ids and usernames, Z first, ignoring case."""
    profiles = await service.sort_by_username_desc()
    return [UsernameItem(id=p.id, username=p.username or "") for p in profiles]


@router.get(
    "/{user_id}",
    response_model=UserDetail,
    summary="Get a user",
    responses={404: {"model": ErrorResponse, "description": "User not found"}},
)
async def get_user(
    user_id: str,
    service: ProfileService = Depends(get_profile_service),
) -> UserDetail:
    """Get a single profile from the preferred backend."""
    profile = await service.get(user_id)
    return UserDetail(**_detail(profile))


@router.put(
    "/{user_id}",
    response_model=UserUpdateResponse,
    summary="Update a user",
    responses={
        404: {"model": ErrorResponse, "description": "User not found"},
        503: {"model": ErrorResponse, "description": "No profile store available"},
    },
)
async def update_user(
    user_id: str,
    body: UserUpdateRequest,
    service: ProfileService = Depends(get_profile_service),
) -> UserUpdateResponse:
    """Update username, description, settings or password."""
    profile = await service.update(
        user_id,
        username=body.username,
        profile_description=body.profile_description,
        settings=body.settings,
        password=body.password,
    )
    return UserUpdateResponse(**_detail(profile))


@router.delete(
    "/{user_id}",
    response_model=UserDeleteResponse,
    response_model_exclude_none=True,
    summary="Delete a user",
    responses={
        404: {"model": ErrorResponse, "description": "User not found"},
        500: {"model": ErrorResponse, "description": "Account deleted but a profile store failed"},
        503: {"model": ErrorResponse, "description": "Identity provider not initialized"},
    },
)
async def delete_user(
    request: Request,
    user_id: str,
    service: ProfileService = Depends(get_profile_service),
) -> UserDeleteResponse:
    """Delete the account and every stored profile for it."""
    result = await service.delete(user_id)
    _mark_degraded(request, result.server_fallback)
    return UserDeleteResponse(
        id=result.user_id,
        server_fallback=True if result.server_fallback else None,
    )
