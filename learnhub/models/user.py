from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import UUID, uuid4

from learnhub.models.principal import Role


@dataclass(frozen=True, slots=True)
class User:
    id: UUID
    name: str
    email: str
    password_hash: str
    role: Role = Role.STUDENT
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @staticmethod
    def new(
        *, name: str, email: str, password_hash: str, role: Role = Role.STUDENT
    ) -> User:
        # Keep creation centralized so email normalization can't be skipped
        return User(
            id=uuid4(),
            name=name.strip(),
            email=email.strip().lower(),
            password_hash=password_hash,
            role=role,
        )
