"""JSON auth endpoints (/auth/*).

Login returns ``{accessToken, user}``; the token carries the user's id and
role and is sent back as ``Authorization: Bearer <token>``.
"""

from __future__ import annotations

import logging
from typing import Literal

from fastapi import APIRouter, status
from pydantic import BaseModel, EmailStr, Field

from coursehub.api.dependencies import CurrentUser, RepoDep
from coursehub.api.schemas import UserOut, user_out
from coursehub.core.errors import Unauthorized
from coursehub.models.user import Role
from coursehub.services import auth_service, token_service, users_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


# --- Request / Response schemas -------------------------------------------


class RegisterIn(BaseModel):
    email: EmailStr
    password: str = Field(min_length=8)
    name: str = Field(min_length=1)
    username: str | None = Field(default=None, min_length=2)
    role: Literal["STUDENT", "AUTHOR"] = "STUDENT"


class LoginIn(BaseModel):
    email: str
    password: str


class ForgotPasswordIn(BaseModel):
    email: EmailStr


class ResetPasswordIn(BaseModel):
    token: str = Field(min_length=1)
    password: str = Field(min_length=8)


class RegisterOut(BaseModel):
    user: UserOut


class AuthResponse(BaseModel):
    accessToken: str
    user: UserOut


class ForgotPasswordOut(BaseModel):
    message: str
    resetLink: str | None = None


class MessageOut(BaseModel):
    message: str


# --- Routes ---------------------------------------------------------------


@router.post("/register", response_model=RegisterOut, status_code=status.HTTP_201_CREATED)
async def register(payload: RegisterIn, repos: RepoDep) -> RegisterOut:
    user = await auth_service.register_user(
        repos.users,
        email=payload.email,
        password=payload.password,
        name=payload.name.strip(),
        username=payload.username,
        role=Role(payload.role),
    )
    return RegisterOut(user=user_out(user))


@router.post("/login", response_model=AuthResponse)
async def login(payload: LoginIn, repos: RepoDep) -> AuthResponse:
    user = await auth_service.authenticate_user(
        repos.users, payload.email, payload.password
    )
    if user is None:
        logger.warning("Login failed")
        raise Unauthorized("Invalid email or password")

    logger.info("Login succeeded user_id=%s", user.id, extra={"user_id": str(user.id)})
    token = token_service.create_access_token(sub=str(user.id), role=user.role.value)
    return AuthResponse(accessToken=token, user=user_out(user))


@router.get("/me", response_model=UserOut)
async def me(principal: CurrentUser, repos: RepoDep) -> UserOut:
    return user_out(await users_service.get_profile(repos, principal))


@router.post("/forgot-password", response_model=ForgotPasswordOut, response_model_exclude_none=True)
async def forgot_password(payload: ForgotPasswordIn, repos: RepoDep) -> ForgotPasswordOut:
    result = await auth_service.request_password_reset(repos, payload.email)
    return ForgotPasswordOut(message=result.message, resetLink=result.reset_link)


@router.post("/reset-password", response_model=MessageOut)
async def reset_password(payload: ResetPasswordIn, repos: RepoDep) -> MessageOut:
    await auth_service.reset_password(repos, payload.token, payload.password)
    return MessageOut(message="Password updated. You can log in.")
