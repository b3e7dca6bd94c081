"""
User model.

Users are managed by the surrounding identity service; the records core only
needs their role (for scoping), their display name (for history and notes)
and their email address (for notifications).
"""

import enum
from datetime import datetime

from sqlalchemy import DateTime, Enum as SQLEnum, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from ats.database.base import Base, utcnow


class UserRole(str, enum.Enum):
    """User role enumeration for role-based access control."""

    CANDIDATE = "candidate"
    RECRUITER = "recruiter"
    DEVELOPER = "developer"
    ADMIN = "admin"
    OWNER = "owner"

    @classmethod
    def from_string(cls, value: str) -> "UserRole":
        """
        Convert string to UserRole enum.

        Raises:
            ValueError: If value is not a valid role
        """
        try:
            return cls(value.lower())
        except ValueError:
            raise ValueError(f"Invalid role: {value}")

    @property
    def is_elevated(self) -> bool:
        """Admins and owners see and manage every record."""
        return self in (UserRole.ADMIN, UserRole.OWNER)


class User(Base):
    """
    Application user.

    Attributes:
        id: Serial user identifier
        name: Display name shown in history and notes
        email: Address used for notifications
        role: Role used to derive record visibility
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        index=True,
    )

    role: Mapped[UserRole] = mapped_column(
        SQLEnum(
            UserRole,
            name="user_role",
            native_enum=False,
            values_callable=lambda roles: [role.value for role in roles],
        ),
        nullable=False,
        default=UserRole.RECRUITER,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )
