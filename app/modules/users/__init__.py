"""Users module"""

from .models import User, Role
from .service import UsersService
from .schemas import UserResponse
from .router import router

__all__ = ["User", "Role", "UsersService", "UserResponse", "router"]
