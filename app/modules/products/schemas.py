"""
Product DTOs (Data Transfer Objects)
"""

from decimal import Decimal
from typing import List, Literal, Optional
from datetime import datetime

from pydantic import BaseModel, Field

from app.core.pagination import MAX_CURSOR_PAGE_SIZE


class CreateProductDto(BaseModel):
    """DTO for creating a product"""

    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    price: Decimal = Field(..., ge=0, decimal_places=2)
    compare_at_price: Optional[Decimal] = Field(None, ge=0, decimal_places=2)
    category_id: Optional[int] = None
    stock: int = Field(0, ge=0)
    is_enabled: bool = True
    featured: bool = False


class UpdateProductDto(BaseModel):
    """DTO for updating product information"""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    price: Optional[Decimal] = Field(None, ge=0, decimal_places=2)
    compare_at_price: Optional[Decimal] = Field(None, ge=0, decimal_places=2)
    category_id: Optional[int] = None
    stock: Optional[int] = Field(None, ge=0)
    is_enabled: Optional[bool] = None
    featured: Optional[bool] = None


class StockAdjustmentDto(BaseModel):
    delta: int = Field(..., description="Positive to restock, negative to deduct")


class ProductListOptions(BaseModel):
    """
    Options for the cursor-paginated product reader.

    fetch_all includes disabled products; otherwise only rows whose
    is_enabled equals is_enabled (default True) are returned.
    """

    fetch_all: bool = False
    is_enabled: bool = True
    category_id: Optional[int] = None
    featured: Optional[bool] = None
    sort_order: Literal["asc", "desc"] = "desc"
    limit: int = Field(200, ge=1, le=MAX_CURSOR_PAGE_SIZE)
    start_after: Optional[int] = None


class ProductResponse(BaseModel):
    """Response model for Product entity"""

    id: int
    name: str
    description: Optional[str] = None
    price: Decimal
    compare_at_price: Optional[Decimal] = None
    category_id: Optional[int] = None
    stock: int
    is_enabled: bool
    featured: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ProductPageResponse(BaseModel):
    items: List[ProductResponse]
    total: int
    page: int
    page_size: int
    total_pages: int
    has_more: bool
