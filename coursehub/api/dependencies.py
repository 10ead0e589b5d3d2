from __future__ import annotations

import logging
from typing import Annotated

import jwt
from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer

from coursehub.core.errors import Forbidden, Unauthorized
from coursehub.models.principal import Principal
from coursehub.models.user import Role
from coursehub.repos.registry import Repos, get_repos
from coursehub.services import token_service

logger = logging.getLogger(__name__)

# auto_error=False: a missing token must surface as our own 401 body
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login", auto_error=False)

RepoDep = Annotated[Repos, Depends(get_repos)]


def _decode(raw_token: str) -> Principal:
    try:
        claims = token_service.decode_access_token(raw_token)
        return Principal(user_id=claims["sub"], role=Role(claims["role"]))
    except jwt.ExpiredSignatureError:
        logger.warning("Expired token rejected")
        raise Unauthorized("Token expired") from None
    except (jwt.InvalidTokenError, ValueError) as e:
        logger.warning("Invalid token rejected: %s", e)
        raise Unauthorized("Invalid token") from None


def require_user(
    raw_token: Annotated[str | None, Depends(oauth2_scheme)],
) -> Principal:
    """Validate the bearer token and return the caller's Principal."""
    if not raw_token:
        raise Unauthorized()
    principal = _decode(raw_token)
    logger.debug(
        "Token validated for user=%s role=%s", principal.user_id, principal.role.value
    )
    return principal


def optional_user(
    raw_token: Annotated[str | None, Depends(oauth2_scheme)],
) -> Principal | None:
    """Principal when a valid token is present, else None (anonymous)."""
    if not raw_token:
        return None
    try:
        return _decode(raw_token)
    except Unauthorized:
        return None


def require_role(*roles: Role):
    """Dependency factory: demand one of the given roles.

    Usage: Depends(require_role(Role.ADMIN))
    """
    allowed = set(roles)

    def _guard(
        principal: Annotated[Principal, Depends(require_user)],
    ) -> Principal:
        if not principal.has_any_role(allowed):
            logger.warning(
                "Access denied: user=%s role=%s required one of %s",
                principal.user_id,
                principal.role.value,
                sorted(r.value for r in allowed),
            )
            raise Forbidden()
        return principal

    return _guard


CurrentUser = Annotated[Principal, Depends(require_user)]
MaybeUser = Annotated[Principal | None, Depends(optional_user)]
AdminUser = Annotated[Principal, Depends(require_role(Role.ADMIN))]
AuthorUser = Annotated[Principal, Depends(require_role(Role.AUTHOR, Role.ADMIN))]
