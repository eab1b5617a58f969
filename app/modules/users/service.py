"""
UsersService - registration, login and token refresh.
"""

import logging
from typing import Any, Dict, Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ConflictError, NotFoundError, UnauthorizedError
from app.modules.users.auth import AuthService
from .models import Role, User
from .schemas import (
    AuthResponse,
    LoginRequest,
    RefreshTokenRequest,
    RegisterRequest,
    TokenResponse,
    UserResponse,
)

logger = logging.getLogger(__name__)


class UsersService:
    """
    Users service. All methods are async and take the request's session.
    """

    @staticmethod
    def _issue_tokens(user: User) -> TokenResponse:
        token_data = {
            "sub": user.username,
            "user_id": user.id,
            "role": user.role.value,
        }
        return TokenResponse(
            access_token=AuthService.create_access_token(token_data),
            refresh_token=AuthService.create_refresh_token(token_data),
            token_type="bearer",
        )

    @staticmethod
    async def create(
        db: AsyncSession, create_dto: RegisterRequest, role: Role = Role.CUSTOMER
    ) -> AuthResponse:
        """
        Create a new user and sign them in.
        Public registration always yields CUSTOMER accounts; back-office
        accounts are created by passing an explicit role.

        Raises:
            ConflictError: If the username is taken
        """
        existing = await db.scalar(
            select(User).where(User.username == create_dto.username)
        )
        if existing:
            raise ConflictError("User already exists with this username")

        user = User(
            username=create_dto.username,
            password=AuthService.get_password_hash(create_dto.password),
            name=create_dto.name,
            email=create_dto.email,
            role=role,
        )
        db.add(user)
        await db.flush()
        await db.refresh(user)
        logger.info(f"Registered user {user.username} ({user.role.value})")

        return AuthResponse(
            user=UserResponse.model_validate(user),
            token=UsersService._issue_tokens(user),
        )

    @staticmethod
    async def login(db: AsyncSession, login_dto: LoginRequest) -> AuthResponse:
        """
        Raises:
            UnauthorizedError: On unknown username or wrong password
        """
        user = await db.scalar(
            select(User).where(
                User.username == login_dto.username, User.deleted_at.is_(None)
            )
        )
        if not user or not AuthService.verify_password(login_dto.password, user.password):
            raise UnauthorizedError("Invalid username or password")

        return AuthResponse(
            user=UserResponse.model_validate(user),
            token=UsersService._issue_tokens(user),
        )

    @staticmethod
    async def find_one(db: AsyncSession, user_id: int) -> User:
        """
        Raises:
            NotFoundError: If user not found or is soft-deleted
        """
        user = await db.scalar(
            select(User).where(User.id == user_id, User.deleted_at.is_(None))
        )
        if not user:
            raise NotFoundError("User", user_id)
        return user

    @staticmethod
    async def refresh_token(
        db: AsyncSession, refresh_request: RefreshTokenRequest
    ) -> TokenResponse:
        """
        Generate new tokens from a refresh token.

        Raises:
            UnauthorizedError: If refresh token is invalid or the user is gone
        """
        payload: Optional[Dict[str, Any]] = AuthService.verify_refresh_token(
            refresh_request.refresh_token
        )
        if not payload:
            raise UnauthorizedError("Invalid refresh token")

        user = await db.scalar(
            select(User).where(
                User.id == payload.get("user_id"), User.deleted_at.is_(None)
            )
        )
        if not user:
            raise UnauthorizedError("User not found")

        return UsersService._issue_tokens(user)
