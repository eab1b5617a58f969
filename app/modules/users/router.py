"""
Users Router - registration, login and profile.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db.engine import get_db_util
from app.core.response_interceptor import CustomAPIRoute
from .service import UsersService
from .schemas import (
    AuthResponse,
    LoginRequest,
    RefreshTokenRequest,
    RegisterRequest,
    TokenResponse,
    UserResponse,
)
from .auth import get_current_user, TokenData

router = APIRouter(prefix="/users", tags=["users"], route_class=CustomAPIRoute)


@router.post("/register", response_model=AuthResponse)
async def register_user(
    register_dto: RegisterRequest, db: AsyncSession = Depends(get_db_util)
):
    """Register a customer account"""
    return await UsersService.create(db, register_dto)


@router.post("/login", response_model=AuthResponse)
async def login_user(login_dto: LoginRequest, db: AsyncSession = Depends(get_db_util)):
    """Login a user and receive JWT tokens"""
    return await UsersService.login(db, login_dto)


@router.post("/refresh", response_model=TokenResponse)
async def refresh_tokens(
    refresh_dto: RefreshTokenRequest, db: AsyncSession = Depends(get_db_util)
):
    return await UsersService.refresh_token(db, refresh_dto)


@router.get("/me", response_model=UserResponse)
async def get_current_user_profile(
    db: AsyncSession = Depends(get_db_util),
    current_user: TokenData = Depends(get_current_user)
):
    """Get the profile of the token's owner"""
    return await UsersService.find_one(db, current_user.user_id)
