from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from uuid import UUID, uuid4


class Role(str, Enum):
    STUDENT = "STUDENT"
    AUTHOR = "AUTHOR"
    ADMIN = "ADMIN"


@dataclass(frozen=True, slots=True)
class User:
    id: UUID
    email: str
    password_hash: str
    name: str = ""
    username: str | None = None
    role: Role = Role.STUDENT
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def display_name(self) -> str:
        return self.name or self.email

    @staticmethod
    def new(
        *,
        email: str,
        password_hash: str,
        name: str = "",
        username: str | None = None,
        role: Role = Role.STUDENT,
    ) -> User:
        return User(
            id=uuid4(),
            email=email.strip().lower(),
            password_hash=password_hash,
            name=name,
            username=username,
            role=role,
        )
