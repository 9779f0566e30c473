"""Acting user claims supplied by the auth provider."""

from enum import Enum

from pydantic import BaseModel


class Role(str, Enum):
    """Roles supplied by the upstream auth provider."""

    ADMIN = "admin"
    MANAGER = "manager"


class Actor(BaseModel):
    """Role and assigned branch of the user invoking an operation."""

    role: Role
    branch_id: str | None = None

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN
