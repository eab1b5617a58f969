from typing import List

from pydantic_settings import BaseSettings
from pydantic import Field
import os

from app.core.pagination import MAX_CURSOR_PAGE_SIZE


class Config(BaseSettings):
    # Database Configuration (any async SQLAlchemy URL)
    database_url: str = Field(
        default="sqlite+aiosqlite:///./data/storefront.db", alias="DB_URL"
    )

    # JWT Configuration
    jwt_secret: str = Field(default="change-me", alias="JWT_SECRET")
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(
        default=60, alias="ACCESS_TOKEN_EXPIRE_MINUTES"
    )
    refresh_token_expire_days: int = Field(default=7, alias="REFRESH_TOKEN_EXPIRE_DAYS")

    # CORS
    cors_origins: List[str] = Field(
        default=["http://localhost", "http://localhost:5173"],
        alias="CORS_ORIGINS",
    )

    # Admin dashboard
    dashboard_page_size: int = Field(
        default=200, ge=1, le=MAX_CURSOR_PAGE_SIZE, alias="DASHBOARD_PAGE_SIZE"
    )
    low_stock_threshold: int = Field(default=10, ge=1, alias="LOW_STOCK_THRESHOLD")
    top_products_limit: int = Field(default=10, ge=0, alias="TOP_PRODUCTS_LIMIT")
    recent_orders_limit: int = Field(default=5, ge=0, alias="RECENT_ORDERS_LIMIT")

    is_production: bool = (
        os.getenv("ENVIRONMENT", "development").lower() == "production"
    )

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"
        validate_assignment = True


# Instantiate the settings
config = Config()
