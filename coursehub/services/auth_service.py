from __future__ import annotations

import hashlib
import logging
import secrets
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHash, VerificationError, VerifyMismatchError

from coursehub.core.config import SETTINGS
from coursehub.core.errors import Conflict, ValidationFailed
from coursehub.models.password_reset import PasswordResetToken
from coursehub.models.user import Role, User
from coursehub.repos.registry import Repos
from coursehub.repos.user_repo import UserRepo

logger = logging.getLogger(__name__)

_ph = PasswordHasher()

SELF_SERVICE_ROLES = frozenset({Role.STUDENT, Role.AUTHOR})
RESET_REQUESTED_MESSAGE = "If an account exists, you will receive a reset link."


def hash_password(plain_password: str) -> str:
    if not plain_password:
        raise ValueError("password must be non-empty")
    return _ph.hash(plain_password)


def verify_password(plain_password: str, password_hash: str) -> bool:
    if not plain_password or not password_hash:
        return False
    try:
        return _ph.verify(password_hash, plain_password)
    except (VerifyMismatchError, VerificationError, InvalidHash):
        return False


def hash_reset_token(token: str) -> str:
    return hashlib.sha256(token.encode()).hexdigest()


async def authenticate_user(repo: UserRepo, email: str, password: str) -> User | None:
    user = await repo.get_by_email(email)
    if user is None:
        return None
    if not verify_password(password, user.password_hash):
        return None

    try:
        if _ph.check_needs_rehash(user.password_hash):
            await repo.update_password_hash(user.id, _ph.hash(password))
            logger.info("Rehashed password for user=%s", user.id)
    except InvalidHash:
        return None

    return user


async def register_user(
    repo: UserRepo,
    *,
    email: str,
    password: str,
    name: str,
    username: str | None = None,
    role: Role = Role.STUDENT,
) -> User:
    """Create a STUDENT or AUTHOR account. Admins only come from seeding."""
    if role not in SELF_SERVICE_ROLES:
        raise ValidationFailed("Invalid role", errors={"role": ["Must be STUDENT or AUTHOR"]})

    email = email.strip().lower()
    if await repo.get_by_email(email) is not None:
        logger.warning("Registration rejected: duplicate email")
        raise Conflict("Email already in use")
    if username and await repo.get_by_username(username) is not None:
        logger.warning("Registration rejected: duplicate username=%s", username)
        raise Conflict("Username already in use")

    user = User.new(
        email=email,
        password_hash=hash_password(password),
        name=name,
        username=username or f"user_{secrets.token_hex(4)}",
        role=role,
    )
    await repo.add(user)
    logger.info("Registered user=%s role=%s", user.id, user.role.value)
    return user


@dataclass(frozen=True, slots=True)
class ResetRequest:
    message: str
    reset_link: str | None = None


async def request_password_reset(repos: Repos, email: str) -> ResetRequest:
    """Issue a one-time reset token.

    The reply is identical whether or not the account exists; the link is
    only handed back in dev, where there is no mail delivery.
    """
    user = await repos.users.get_by_email(email)
    if user is None:
        logger.info("Password reset requested for unknown email")
        return ResetRequest(message=RESET_REQUESTED_MESSAGE)

    token = secrets.token_hex(32)
    await repos.reset_tokens.add(
        PasswordResetToken.new(
            token_hash=hash_reset_token(token),
            user_id=user.id,
            expires_at=datetime.now(UTC)
            + timedelta(minutes=SETTINGS.password_reset_ttl_min),
        )
    )
    logger.info("Password reset token issued for user=%s", user.id)

    link = f"{SETTINGS.public_base_url}/reset-password?token={token}"
    return ResetRequest(
        message=RESET_REQUESTED_MESSAGE,
        reset_link=link if SETTINGS.is_dev else None,
    )


async def reset_password(repos: Repos, token: str, new_password: str) -> None:
    """Consume a reset token and set the new password.

    Both writes share the request transaction, so either both land or
    neither does.
    """
    record = await repos.reset_tokens.get_by_hash(hash_reset_token(token))
    if record is None or not record.is_usable(datetime.now(UTC)):
        raise ValidationFailed("Invalid or expired reset link")
    if not await repos.reset_tokens.consume(record.id):
        raise ValidationFailed("Invalid or expired reset link")

    await repos.users.update_password_hash(record.user_id, hash_password(new_password))
    logger.info("Password reset completed for user=%s", record.user_id)
