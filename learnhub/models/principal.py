from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Role(str, Enum):
    STUDENT = "STUDENT"
    INSTRUCTOR = "INSTRUCTOR"
    ADMIN = "ADMIN"


class Capability(str, Enum):
    PURCHASE = "purchase"  # cart, checkout, direct enroll
    LEARN = "learn"  # progress tracking, certificates
    REVIEW = "review"
    AUTHOR = "author"  # create courses and their content
    MODERATE = "moderate"  # act on other users' courses/reviews
    MANAGE_CATALOG = "manage_catalog"  # categories


ROLE_CAPABILITIES: dict[Role, frozenset[Capability]] = {
    Role.STUDENT: frozenset(
        {Capability.PURCHASE, Capability.LEARN, Capability.REVIEW}
    ),
    Role.INSTRUCTOR: frozenset({Capability.AUTHOR}),
    Role.ADMIN: frozenset(
        {Capability.AUTHOR, Capability.MODERATE, Capability.MANAGE_CATALOG}
    ),
}


@dataclass(frozen=True, slots=True)
class Principal:
    """Authenticated identity extracted from a validated access token.

    Carried through the request via FastAPI's dependency system.  Handlers
    and services ask it for capabilities instead of comparing role strings.
    """

    user_id: str
    name: str
    role: Role

    @property
    def capabilities(self) -> frozenset[Capability]:
        return ROLE_CAPABILITIES.get(self.role, frozenset())

    def can(self, capability: Capability) -> bool:
        return capability in self.capabilities

    def is_admin(self) -> bool:
        return self.can(Capability.MODERATE)
