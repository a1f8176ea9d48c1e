# app/api/v1/routers/users.py
from __future__ import annotations

"""
Users & Credentials API · VidTube
=================================

Endpoints
---------
POST  /users/register           multipart sign-up (avatar required, cover optional)
POST  /users/login              email or username + password → cookies + tokens
POST  /users/logout             clear cookies, forget the live refresh token
POST  /users/refresh-token      rotate the refresh token (cookie or JSON body)
POST  /users/change-password
GET   /users/current-user
PATCH /users/update-account     fullname and/or email
PATCH /users/avatar             multipart file
PATCH /users/cover-image        multipart file
GET   /users/channel/{username} public profile (auth optional)
GET   /users/watch-history

Security
--------
- Credential endpoints are rate limited and marked **no-store**.
- Cookies are `httponly`; `secure` / `samesite` come from settings.
- Responses never include password or refresh-token fields.
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, File, Form, Request, Response, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import Settings
from app.core.dependencies import (
    get_app_settings,
    get_current_user,
    get_optional_user,
    get_token_service,
    get_uploader,
)
from app.core.exceptions import BadRequestException, NotFoundException
from app.core.jwt import ACCESS_COOKIE, REFRESH_COOKIE
from app.core.limiter import rate_limit
from app.db.models.user import User
from app.db.session import get_async_db
from app.schemas.auth import LoginOut, LoginRequest, RefreshRequest, TokensOut
from app.schemas.common import ApiResponse, ok
from app.schemas.user import (
    ChangePasswordRequest,
    ChannelProfileOut,
    UpdateAccountRequest,
    UserOut,
    WatchHistoryItem,
)
from app.security_headers import set_sensitive_cache
from app.services import user_service, views
from app.services.token_service import TokenPair, TokenService
from app.services.upload_service import Uploader

router = APIRouter(prefix="/users", tags=["Users"])


# ──────────────────────────────────────────────────────────────
# 🍪 Cookie helpers
# ──────────────────────────────────────────────────────────────
def _set_auth_cookies(response: Response, settings: Settings, pair: TokenPair) -> None:
    common: Dict[str, Any] = {
        "httponly": True,
        "secure": settings.COOKIE_SECURE,
        "samesite": settings.COOKIE_SAMESITE,
        "domain": settings.COOKIE_DOMAIN,
        "path": "/",
    }
    response.set_cookie(ACCESS_COOKIE, pair.access_token, max_age=settings.access_token_ttl_seconds, **common)
    response.set_cookie(REFRESH_COOKIE, pair.refresh_token, max_age=settings.refresh_token_ttl_seconds, **common)


def _clear_auth_cookies(response: Response, settings: Settings) -> None:
    for name in (ACCESS_COOKIE, REFRESH_COOKIE):
        response.delete_cookie(
            name,
            path="/",
            domain=settings.COOKIE_DOMAIN,
            secure=settings.COOKIE_SECURE,
            httponly=True,
            samesite=settings.COOKIE_SAMESITE,
        )


# ──────────────────────────────────────────────────────────────
# 📝 POST /users/register
# ──────────────────────────────────────────────────────────────
@router.post(
    "/register",
    response_model=ApiResponse[UserOut],
    status_code=status.HTTP_201_CREATED,
    summary="Register a new account",
)
@rate_limit("10/minute")
async def register(
    request: Request,
    username: Optional[str] = Form(None),
    email: Optional[str] = Form(None),
    fullname: Optional[str] = Form(None),
    password: Optional[str] = Form(None),
    avatar: Optional[UploadFile] = File(None),
    cover_image: Optional[UploadFile] = File(None, alias="coverImage"),
    db: AsyncSession = Depends(get_async_db),
    settings: Settings = Depends(get_app_settings),
    uploader: Uploader = Depends(get_uploader),
):
    # [Step 1] Validate + upload + insert (service owns the ordering)
    user = await user_service.register_user(
        db,
        settings,
        uploader,
        username=username,
        email=email,
        fullname=fullname,
        password=password,
        avatar=avatar,
        cover_image=cover_image,
    )
    # [Step 2] Public projection only
    return ok(UserOut.model_validate(user), "User registered successfully", status.HTTP_201_CREATED)


# ──────────────────────────────────────────────────────────────
# 🔐 POST /users/login
# ──────────────────────────────────────────────────────────────
@router.post("/login", response_model=ApiResponse[LoginOut], summary="Log in with email or username")
@rate_limit("10/minute")
async def login(
    request: Request,
    response: Response,
    payload: LoginRequest = Body(...),
    db: AsyncSession = Depends(get_async_db),
    settings: Settings = Depends(get_app_settings),
    tokens: TokenService = Depends(get_token_service),
):
    # [Step 0] Cache hardening
    set_sensitive_cache(response)

    # [Step 1] Credentials
    user = await user_service.authenticate(
        db, email=payload.email, username=payload.username, password=payload.password
    )

    # [Step 2] Issue + persist refresh digest
    pair = await tokens.issue(db, user)
    _set_auth_cookies(response, settings, pair)

    data = LoginOut(
        user=UserOut.model_validate(user),
        access_token=pair.access_token,
        refresh_token=pair.refresh_token,
    )
    return ok(data, "User logged in successfully")


# ──────────────────────────────────────────────────────────────
# 🚪 POST /users/logout
# ──────────────────────────────────────────────────────────────
@router.post("/logout", response_model=ApiResponse[Dict[str, Any]], summary="Log out")
async def logout(
    response: Response,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
    settings: Settings = Depends(get_app_settings),
    tokens: TokenService = Depends(get_token_service),
):
    set_sensitive_cache(response)
    await tokens.revoke(db, user.id)
    _clear_auth_cookies(response, settings)
    return ok({}, "User logged out")


# ──────────────────────────────────────────────────────────────
# 🔁 POST /users/refresh-token
# ──────────────────────────────────────────────────────────────
@router.post("/refresh-token", response_model=ApiResponse[TokensOut], summary="Rotate the refresh token")
@rate_limit("30/minute")
async def refresh_token(
    request: Request,
    response: Response,
    payload: Optional[RefreshRequest] = Body(None),
    db: AsyncSession = Depends(get_async_db),
    settings: Settings = Depends(get_app_settings),
    tokens: TokenService = Depends(get_token_service),
):
    set_sensitive_cache(response)

    # [Step 1] Cookie first, then JSON body
    presented = request.cookies.get(REFRESH_COOKIE) or (payload.refresh_token if payload else None)

    # [Step 2] Verify + rotate (compare-and-swap)
    _, pair = await tokens.renew(db, presented)
    _set_auth_cookies(response, settings, pair)
    return ok(
        TokensOut(access_token=pair.access_token, refresh_token=pair.refresh_token),
        "Access token refreshed",
    )


# ──────────────────────────────────────────────────────────────
# 🔑 POST /users/change-password
# ──────────────────────────────────────────────────────────────
@router.post("/change-password", response_model=ApiResponse[Dict[str, Any]], summary="Change password")
async def change_password(
    payload: ChangePasswordRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
    settings: Settings = Depends(get_app_settings),
):
    await user_service.change_password(
        db, settings, user.id, old_password=payload.old_password, new_password=payload.new_password
    )
    return ok({}, "Password changed successfully")


# ──────────────────────────────────────────────────────────────
# 👤 Account
# ──────────────────────────────────────────────────────────────
@router.get("/current-user", response_model=ApiResponse[UserOut], summary="Current user")
async def current_user(user: User = Depends(get_current_user)):
    return ok(UserOut.model_validate(user), "User fetched successfully")


@router.patch("/update-account", response_model=ApiResponse[UserOut], summary="Update fullname / email")
async def update_account(
    payload: UpdateAccountRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    updated = await user_service.update_account(
        db, user.id, fullname=payload.fullname, email=str(payload.email) if payload.email else None
    )
    return ok(UserOut.model_validate(updated), "Account details updated successfully")


@router.patch("/avatar", response_model=ApiResponse[UserOut], summary="Replace avatar")
async def update_avatar(
    avatar: Optional[UploadFile] = File(None),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
    settings: Settings = Depends(get_app_settings),
    uploader: Uploader = Depends(get_uploader),
):
    updated = await user_service.update_avatar(db, settings, uploader, user.id, avatar)
    return ok(UserOut.model_validate(updated), "Avatar image updated successfully")


@router.patch("/cover-image", response_model=ApiResponse[UserOut], summary="Replace cover image")
async def update_cover_image(
    cover_image: Optional[UploadFile] = File(None, alias="coverImage"),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
    settings: Settings = Depends(get_app_settings),
    uploader: Uploader = Depends(get_uploader),
):
    updated = await user_service.update_cover_image(db, settings, uploader, user.id, cover_image)
    return ok(UserOut.model_validate(updated), "Cover image updated successfully")


# ──────────────────────────────────────────────────────────────
# 📺 Channel + history
# ──────────────────────────────────────────────────────────────
@router.get("/channel/{username}", response_model=ApiResponse[ChannelProfileOut], summary="Channel profile")
async def channel_profile(
    username: str,
    requester: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_async_db),
):
    if not username.strip():
        raise BadRequestException("Username is missing")
    profile = await views.channel_profile(db, username, requester.id if requester else None)
    if profile is None:
        raise NotFoundException("Channel does not exist")
    return ok(profile, "User channel fetched successfully")


@router.get("/watch-history", response_model=ApiResponse[List[WatchHistoryItem]], summary="Watch history")
async def watch_history(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    items = await views.watch_history(db, user.id)
    return ok(items, "Watch history fetched successfully")


__all__ = ["router"]
