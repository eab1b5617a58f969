"""
Authentication and Authorization utilities for JWT-based auth.
Provides password hashing, token generation/verification, and user dependency injection.
"""

from typing import Optional, Any, Dict, List
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import bcrypt
import jwt
from jwt.exceptions import PyJWTError, ExpiredSignatureError
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from app.core.config import config
from app.core.exceptions import ForbiddenError, UnauthorizedError


# HTTP Bearer token security scheme
security = HTTPBearer()
optional_security = HTTPBearer(auto_error=False)


@dataclass
class TokenData:
    """Token payload data structure with type safety"""
    user_id: int
    username: str
    role: str


class AuthService:
    """
    Password hashing and token management.
    """

    @staticmethod
    def verify_password(plain_password: str, hashed_password: str) -> bool:
        return bcrypt.checkpw(
            plain_password.encode("utf-8"),
            hashed_password.encode("utf-8") if isinstance(hashed_password, str) else hashed_password,
        )

    @staticmethod
    def get_password_hash(password: str) -> str:
        """Hash a password using bcrypt with an auto-generated salt."""
        hashed = bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt())
        return hashed.decode("utf-8")

    @staticmethod
    def _encode(data: Dict[str, Any], expires_delta: timedelta, token_type: str) -> str:
        now = datetime.now(timezone.utc)
        to_encode = data.copy()
        to_encode.update({
            "exp": now + expires_delta,
            "iat": now,
            "type": token_type,
        })
        return jwt.encode(to_encode, config.jwt_secret, algorithm=config.jwt_algorithm)

    @staticmethod
    def create_access_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
        """
        Create a JWT access token.

        Args:
            data: Dictionary containing user data (sub, user_id, role)
            expires_delta: Optional custom expiration time, defaults to config value

        Returns:
            Encoded JWT token as string
        """
        return AuthService._encode(
            data,
            expires_delta or timedelta(minutes=config.access_token_expire_minutes),
            "access",
        )

    @staticmethod
    def create_refresh_token(data: Dict[str, Any]) -> str:
        return AuthService._encode(
            data, timedelta(days=config.refresh_token_expire_days), "refresh"
        )

    @staticmethod
    def verify_token(token: str) -> Optional[TokenData]:
        """
        Verify and decode an access token.

        Returns:
            TokenData object if valid, None if invalid

        Raises:
            UnauthorizedError: If the token has expired
        """
        try:
            payload: Dict[str, Any] = jwt.decode(
                token, config.jwt_secret, algorithms=[config.jwt_algorithm]
            )
        except ExpiredSignatureError:
            raise UnauthorizedError("Token has expired")
        except PyJWTError:
            return None

        if payload.get("type") != "access":
            return None

        user_id: Optional[int] = payload.get("user_id")
        username: Optional[str] = payload.get("sub")
        role: Optional[str] = payload.get("role")

        if username is None or user_id is None or role is None:
            return None

        return TokenData(user_id=user_id, username=username, role=role)

    @staticmethod
    def verify_refresh_token(token: str) -> Optional[Dict[str, Any]]:
        try:
            payload: Dict[str, Any] = jwt.decode(
                token, config.jwt_secret, algorithms=[config.jwt_algorithm]
            )
        except ExpiredSignatureError:
            raise UnauthorizedError("Refresh token has expired")
        except PyJWTError:
            return None

        if payload.get("type") != "refresh":
            return None
        return payload


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security)
) -> TokenData:
    """
    Dependency to get the current authenticated user from the bearer token.

    Raises:
        UnauthorizedError: If token is invalid
    """
    token_data = AuthService.verify_token(credentials.credentials)
    if token_data is None:
        raise UnauthorizedError("Invalid authentication credentials")
    return token_data


async def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(optional_security)
) -> Optional[TokenData]:
    """Like get_current_user, but anonymous callers (guest checkout) get None."""
    if credentials is None:
        return None
    token_data = AuthService.verify_token(credentials.credentials)
    if token_data is None:
        raise UnauthorizedError("Invalid authentication credentials")
    return token_data


class RoleChecker:
    """
    Dependency class for role-based access control.
    Checks if the current user has one of the required roles.
    """

    def __init__(self, allowed_roles: List[str]) -> None:
        self.allowed_roles: List[str] = allowed_roles

    async def __call__(self, current_user: TokenData = Depends(get_current_user)) -> TokenData:
        if current_user.role not in self.allowed_roles:
            raise ForbiddenError(
                f"Operation not permitted. Required roles: {', '.join(self.allowed_roles)}"
            )
        return current_user


# Common role checkers for convenience
require_admin: RoleChecker = RoleChecker(["ADMIN"])
require_admin_or_staff: RoleChecker = RoleChecker(["ADMIN", "STAFF"])
require_any_role: RoleChecker = RoleChecker(["ADMIN", "STAFF", "CUSTOMER"])
