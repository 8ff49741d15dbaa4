"""
Authenticated principal and the per-request security context
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple


class Role(str, Enum):
    ADMIN = "admin"
    USER = "user"

    @classmethod
    def parse(cls, value: Optional[str]) -> "Role":
        """Accept 'admin'/'ADMIN'; anything else is a plain user"""
        if value and value.strip().lower() == cls.ADMIN.value:
            return cls.ADMIN
        return cls.USER


@dataclass(frozen=True)
class Principal:
    """Account resolved from a validated token subject"""

    id: str
    email: str
    role: Role

    @property
    def authorities(self) -> Tuple[str, ...]:
        if self.role is Role.ADMIN:
            return ("ROLE_ADMIN", "ROLE_USER")
        return ("ROLE_USER",)

    def has_role(self, role: str) -> bool:
        """Check if principal has a specific role, e.g. 'ADMIN' or 'ROLE_ADMIN'"""
        wanted = role.upper()
        if not wanted.startswith("ROLE_"):
            wanted = f"ROLE_{wanted}"
        return wanted in self.authorities


@dataclass(frozen=True)
class SecurityContext:
    """Authentication state of a single request; never shared between requests"""

    principal: Optional[Principal] = None

    @classmethod
    def anonymous(cls) -> "SecurityContext":
        return cls()

    @property
    def is_authenticated(self) -> bool:
        return self.principal is not None

    @property
    def authorities(self) -> Tuple[str, ...]:
        return self.principal.authorities if self.principal else ()
