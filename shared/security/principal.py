import enum
import uuid
from dataclasses import dataclass


class Role(str, enum.Enum):
    CLIENT = "CLIENT"
    ADMIN = "ADMIN"


@dataclass(frozen=True)
class CurrentUser:
    """Authenticated caller, resolved from the bearer token and passed explicitly to services."""

    id: uuid.UUID
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN
