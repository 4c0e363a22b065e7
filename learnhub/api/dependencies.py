"""Identity resolution for routes.

The access token is read from ``Authorization: Bearer`` first, then from
the ``auth_token`` cookie.  ``require_user`` rejects anything that is not
a valid, unrevoked token; ``optional_user`` never rejects and degrades
bad or missing credentials to an anonymous caller (None).
"""

from __future__ import annotations

import logging
from typing import Annotated
from uuid import UUID

import jwt
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from learnhub.models.principal import Capability, Principal, Role
from learnhub.services import token_service
from learnhub.services.token_blacklist import token_blacklist

logger = logging.getLogger(__name__)

AUTH_COOKIE = "auth_token"

bearer_scheme = HTTPBearer(auto_error=False)
BearerCredentials = Annotated[
    HTTPAuthorizationCredentials | None, Depends(bearer_scheme)
]


class TokenRevokedError(jwt.InvalidTokenError):
    """The token verified but its jti is on the blacklist."""


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def extract_token(
    request: Request, credentials: HTTPAuthorizationCredentials | None
) -> str | None:
    if credentials is not None and credentials.credentials:
        return credentials.credentials
    return request.cookies.get(AUTH_COOKIE) or None


async def _resolve(raw_token: str) -> Principal:
    """Decode, check revocation and build the Principal.

    Raises jwt.InvalidTokenError or one of its subclasses
    (ExpiredSignatureError, TokenRevokedError).
    """
    claims = token_service.decode_access_token(raw_token)
    if await token_blacklist.is_revoked(claims["jti"]):
        raise TokenRevokedError("token revoked")
    try:
        role = Role(claims["role"])
        UUID(claims["sub"])
    except ValueError:
        raise jwt.InvalidTokenError("malformed sub or role claim") from None
    return Principal(user_id=claims["sub"], name=claims.get("name", ""), role=role)


async def require_user(
    request: Request,
    credentials: BearerCredentials,
) -> Principal:
    raw_token = extract_token(request, credentials)
    if raw_token is None:
        raise _unauthorized("Authentication required")

    try:
        principal = await _resolve(raw_token)
    except jwt.ExpiredSignatureError:
        logger.warning("Expired token rejected")
        raise _unauthorized("Token expired") from None
    except TokenRevokedError:
        logger.warning("Revoked token rejected")
        raise _unauthorized("Token has been revoked") from None
    except jwt.InvalidTokenError as e:
        logger.warning("Invalid token rejected: %s", e)
        raise _unauthorized("Invalid token") from None

    logger.debug("Token validated user=%s role=%s", principal.user_id, principal.role)
    return principal


async def optional_user(
    request: Request,
    credentials: BearerCredentials,
) -> Principal | None:
    raw_token = extract_token(request, credentials)
    if raw_token is None:
        return None
    try:
        return await _resolve(raw_token)
    except jwt.InvalidTokenError as e:
        logger.debug("Optional auth ignored credential: %s", e)
        return None


def require_capability(capability: Capability):
    """Dependency factory: demand a capability of the caller's role.

    Usage: Depends(require_capability(Capability.PURCHASE))
    """

    def _guard(
        principal: Annotated[Principal, Depends(require_user)],
    ) -> Principal:
        if not principal.can(capability):
            logger.warning(
                "Access denied: user=%s role=%s missing capability=%s",
                principal.user_id,
                principal.role.value,
                capability.value,
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )
        return principal

    return _guard


CurrentUser = Annotated[Principal, Depends(require_user)]
MaybeUser = Annotated[Principal | None, Depends(optional_user)]
Student = Annotated[Principal, Depends(require_capability(Capability.PURCHASE))]
Learner = Annotated[Principal, Depends(require_capability(Capability.LEARN))]
Reviewer = Annotated[Principal, Depends(require_capability(Capability.REVIEW))]
Author = Annotated[Principal, Depends(require_capability(Capability.AUTHOR))]
CatalogAdmin = Annotated[
    Principal, Depends(require_capability(Capability.MANAGE_CATALOG))
]
