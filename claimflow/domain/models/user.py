"""
User domain model.
Roles and the authenticated principal threaded through request handlers.
"""

from dataclasses import dataclass
from enum import Enum


class UserRole(str, Enum):
    """Closed set of roles inside an organization."""
    ADMIN = "admin"
    MANAGER = "manager"
    BILLER = "biller"
    RCM_SPECIALIST = "rcm_specialist"
    APPEALS_SPECIALIST = "appeals_specialist"


@dataclass(frozen=True)
class AuthContext:
    """
    Identity of an authenticated caller.
    Built once per request by the authentication dependency and passed to
    handlers explicitly.
    """

    id: str
    email: str
    role: UserRole
    organization_id: str
    token: str

    def has_role(self, *roles: UserRole) -> bool:
        return self.role in roles
