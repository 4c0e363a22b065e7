"""Account endpoints: register, login, logout, profile.

Login and register return the access token in the body and also set it as
an HttpOnly ``auth_token`` cookie, so browser clients never have to
handle it directly.
"""

from __future__ import annotations

import logging
from datetime import datetime
from uuid import UUID

import jwt
from fastapi import APIRouter, Depends, Request, Response, status
from pydantic import BaseModel

from learnhub.api.dependencies import (
    AUTH_COOKIE,
    BearerCredentials,
    CurrentUser,
    extract_token,
)
from learnhub.api.ratelimit import require_rate_limit
from learnhub.api.stores import user_repo
from learnhub.core.config import SETTINGS
from learnhub.core.errors import NotFoundError, UnauthenticatedError
from learnhub.models.user import User
from learnhub.services import auth_service, token_service
from learnhub.services.rate_limiter import RateLimitConfig
from learnhub.services.token_blacklist import token_blacklist

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

# 10 attempts burst, then one every 6 seconds per client
_LOGIN_LIMIT = RateLimitConfig(capacity=10, refill_rate=1 / 6)


class RegisterIn(BaseModel):
    name: str
    email: str
    password: str


class LoginIn(BaseModel):
    email: str
    password: str


class UserOut(BaseModel):
    id: str
    name: str
    email: str
    role: str
    created_at: datetime


class AuthOut(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserOut


def _user_out(user: User) -> UserOut:
    return UserOut(
        id=str(user.id),
        name=user.name,
        email=user.email,
        role=user.role.value,
        created_at=user.created_at,
    )


def _issue(user: User, response: Response) -> AuthOut:
    token = token_service.create_access_token(
        sub=str(user.id), name=user.name, role=user.role
    )
    response.set_cookie(
        AUTH_COOKIE,
        token,
        max_age=SETTINGS.access_token_ttl_min * 60,
        httponly=True,
        secure=SETTINGS.is_prod,
        samesite="lax",
    )
    return AuthOut(access_token=token, user=_user_out(user))


@router.post("/register", response_model=AuthOut, status_code=status.HTTP_201_CREATED)
def register(payload: RegisterIn, response: Response) -> AuthOut:
    user = auth_service.register_user(
        user_repo, name=payload.name, email=payload.email, password=payload.password
    )
    return _issue(user, response)


@router.post(
    "/login",
    response_model=AuthOut,
    dependencies=[Depends(require_rate_limit(_LOGIN_LIMIT))],
)
def login(payload: LoginIn, response: Response) -> AuthOut:
    user = auth_service.authenticate_user(user_repo, payload.email, payload.password)
    if user is None:
        logger.warning("Login failed")
        raise UnauthenticatedError("Invalid email or password")

    logger.info("Login succeeded user_id=%s", user.id)
    return _issue(user, response)


@router.delete("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(
    request: Request,
    credentials: BearerCredentials,
) -> Response:
    """Revoke the presented token and clear the cookie.  Always 204."""
    raw_token = extract_token(request, credentials)
    if raw_token is not None:
        try:
            claims = token_service.decode_access_token(raw_token)
        except jwt.InvalidTokenError:
            claims = None
        if claims is not None:
            await token_blacklist.revoke(claims["jti"], float(claims["exp"]))
            logger.info("Token revoked jti=%s", claims["jti"])

    response = Response(status_code=status.HTTP_204_NO_CONTENT)
    response.delete_cookie(AUTH_COOKIE)
    return response


@router.get("/me", response_model=UserOut)
def me(principal: CurrentUser) -> UserOut:
    user = user_repo.get_by_id(UUID(principal.user_id))
    if user is None:
        raise NotFoundError("User not found")
    return _user_out(user)
