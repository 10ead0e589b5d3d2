from __future__ import annotations

import asyncio
from dataclasses import replace
from datetime import UTC, datetime, timedelta

import pytest
from argon2 import PasswordHasher

from coursehub.core.errors import Conflict, ValidationFailed
from coursehub.models.user import Role, User
from coursehub.repos.registry import memory_repos
from coursehub.repos.user_repo import InMemoryUserRepo
from coursehub.services import auth_service
from coursehub.services.auth_service import (
    authenticate_user,
    hash_reset_token,
    register_user,
    request_password_reset,
    reset_password,
)


def test_authenticate_user_rehashes_when_needed() -> None:
    # deliberately weak Argon2 parameters so the service wants to upgrade
    old_ph = PasswordHasher(time_cost=1, memory_cost=8 * 1024, parallelism=1)
    password = "pw123456"
    old_hash = old_ph.hash(password)
    repo = InMemoryUserRepo()

    async def scenario() -> tuple[User | None, User | None]:
        await repo.add(User.new(email="tee@example.com", password_hash=old_hash))
        authed = await authenticate_user(repo, "tee@example.com", password)
        return authed, await repo.get_by_email("tee@example.com")

    authed, stored = asyncio.run(scenario())
    assert authed is not None
    assert stored is not None
    assert stored.password_hash != old_hash


def test_authenticate_user_rejects_wrong_password_and_unknown_email() -> None:
    repo = InMemoryUserRepo()

    async def scenario() -> tuple[User | None, User | None, User | None]:
        await repo.add(
            User.new(
                email="Ada@Example.com",
                password_hash=auth_service.hash_password("correct-horse"),
            )
        )
        return (
            await authenticate_user(repo, "ada@example.com", "wrong-horse"),
            await authenticate_user(repo, "nobody@example.com", "correct-horse"),
            await authenticate_user(repo, "ADA@example.com", "correct-horse"),
        )

    wrong, unknown, ok = asyncio.run(scenario())
    assert wrong is None
    assert unknown is None
    assert ok is not None


def test_register_rejects_duplicate_email_and_username() -> None:
    repo = InMemoryUserRepo()

    async def register(email: str, username: str | None) -> User:
        return await register_user(
            repo, email=email, password="password123", name="Ada", username=username
        )

    first = asyncio.run(register("ada@example.com", "ada"))
    assert first.role == Role.STUDENT

    with pytest.raises(Conflict, match="Email already in use"):
        asyncio.run(register("ADA@example.com", "someone-else"))
    with pytest.raises(Conflict, match="Username already in use"):
        asyncio.run(register("other@example.com", "ada"))


def test_register_generates_username_when_missing() -> None:
    repo = InMemoryUserRepo()
    user = asyncio.run(
        register_user(repo, email="x@example.com", password="password123", name="X")
    )
    assert user.username and user.username.startswith("user_")


def test_register_refuses_admin_role() -> None:
    with pytest.raises(ValidationFailed):
        asyncio.run(
            register_user(
                InMemoryUserRepo(),
                email="x@example.com",
                password="password123",
                name="X",
                role=Role.ADMIN,
            )
        )


def test_password_reset_round_trip_and_single_use() -> None:
    repos = memory_repos()

    async def scenario() -> None:
        user = User.new(email="ada@example.com", password_hash=auth_service.hash_password("old-pass-1"))
        await repos.users.add(user)

        issued = await request_password_reset(repos, "ada@example.com")
        assert issued.reset_link is not None
        token = issued.reset_link.split("token=")[1]

        await reset_password(repos, token, "new-pass-2")
        assert await authenticate_user(repos.users, "ada@example.com", "new-pass-2")
        assert await authenticate_user(repos.users, "ada@example.com", "old-pass-1") is None

        with pytest.raises(ValidationFailed, match="Invalid or expired reset link"):
            await reset_password(repos, token, "third-pass-3")

    asyncio.run(scenario())


def test_reset_token_stored_hashed() -> None:
    repos = memory_repos()

    async def scenario() -> None:
        await repos.users.add(User.new(email="ada@example.com", password_hash="x"))
        issued = await request_password_reset(repos, "ada@example.com")
        token = issued.reset_link.split("token=")[1]
        assert await repos.reset_tokens.get_by_hash(token) is None
        assert await repos.reset_tokens.get_by_hash(hash_reset_token(token)) is not None

    asyncio.run(scenario())


def test_expired_reset_token_rejected() -> None:
    repos = memory_repos()

    async def scenario() -> None:
        await repos.users.add(User.new(email="ada@example.com", password_hash="x"))
        issued = await request_password_reset(repos, "ada@example.com")
        token = issued.reset_link.split("token=")[1]

        record = await repos.reset_tokens.get_by_hash(hash_reset_token(token))
        expired = replace(record, expires_at=datetime.now(UTC) - timedelta(minutes=1))
        await repos.reset_tokens.add(expired)

        with pytest.raises(ValidationFailed):
            await reset_password(repos, token, "new-pass-2")

    asyncio.run(scenario())


def test_unknown_email_gets_same_message_and_no_link() -> None:
    result = asyncio.run(request_password_reset(memory_repos(), "ghost@example.com"))
    assert result.message == auth_service.RESET_REQUESTED_MESSAGE
    assert result.reset_link is None
