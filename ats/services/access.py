"""
Role-derived record visibility.

Every store read, update and delete receives the scope computed here rather
than the raw actor ID: ``None`` means unrestricted, an integer restricts the
caller to records it created.
"""

from dataclasses import dataclass
from typing import Optional, Union

from ats.database.models.user import UserRole

Role = UserRole


@dataclass(frozen=True)
class Actor:
    """The authenticated user performing an operation."""

    id: int
    role: Role

    @property
    def scope(self) -> Optional[int]:
        return scope_for(self.role, self.id)

    @property
    def is_elevated(self) -> bool:
        return Role(self.role).is_elevated


def scope_for(role: Union[Role, str], actor_id: int) -> Optional[int]:
    """
    Resolve the visibility scope for a role.

    Args:
        role: Actor role (enum member or its string value)
        actor_id: ID of the acting user

    Returns:
        None for admin and owner, otherwise ``actor_id``

    Raises:
        ValueError: If role is not a known role
    """
    if not isinstance(role, Role):
        role = Role.from_string(role)
    return None if role.is_elevated else actor_id
