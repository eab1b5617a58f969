import enum
from sqlalchemy import String, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column
from typing import Optional

from app.core.db.base import BaseModel


class Role(str, enum.Enum):
    """User role enum"""

    ADMIN = "ADMIN"
    STAFF = "STAFF"
    CUSTOMER = "CUSTOMER"


class User(BaseModel):
    """
    Storefront account: shoppers (CUSTOMER) and back-office users (ADMIN/STAFF).
    Extends BaseModel which provides: id, created_at, updated_at, deleted_at
    """

    __tablename__ = "users"

    username: Mapped[str] = mapped_column(
        String(255), unique=True, nullable=False, index=True
    )

    # bcrypt hash, never returned by any response model
    password: Mapped[str] = mapped_column(String(255), nullable=False)

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    email: Mapped[Optional[str]] = mapped_column(
        String(255), nullable=True, default=None, index=True
    )

    role: Mapped[Role] = mapped_column(
        SQLEnum(
            Role,
            name="users_role_enum",
            native_enum=False,
        ),
        nullable=False,
        default=Role.CUSTOMER,
        server_default=Role.CUSTOMER.value,
    )

    def __repr__(self) -> str:
        return (
            f"<User(id={self.id}, username='{self.username}', role={self.role.value})>"
        )
