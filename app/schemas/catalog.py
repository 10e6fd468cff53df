"""Catalog schemas"""

from datetime import datetime
from typing import Optional, List
from uuid import UUID
from pydantic import BaseModel, Field


class CategoryCreate(BaseModel):
    slug: str = Field(min_length=1, max_length=100, pattern=r"^[a-z0-9-]+$")
    name: str
    description: Optional[str] = None
    image_url: Optional[str] = None
    sort_order: int = 0
    coming_soon: bool = False


class CategoryUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    sort_order: Optional[int] = None
    coming_soon: Optional[bool] = None


class CategoryResponse(BaseModel):
    id: UUID
    slug: str
    name: str
    description: Optional[str]
    image_url: Optional[str]
    sort_order: int
    coming_soon: bool

    class Config:
        from_attributes = True


class PackageClassCreate(BaseModel):
    """Price tier of a package"""
    name: str = Field(min_length=1, max_length=100)
    price: int = Field(ge=0)
    description: Optional[str] = None
    sort_order: int = 0


class PackageClassResponse(BaseModel):
    id: UUID
    name: str
    price: int
    description: Optional[str]
    sort_order: int

    class Config:
        from_attributes = True


class PackageCreate(BaseModel):
    category_id: UUID
    name: str
    description: Optional[str] = None
    image_url: Optional[str] = None
    class_image_url: Optional[str] = None
    base_price: Optional[int] = Field(default=None, ge=0)
    starting_price: Optional[int] = Field(default=None, ge=0)
    is_hidden: bool = False
    classes: List[PackageClassCreate] = []


class PackageUpdate(BaseModel):
    category_id: Optional[UUID] = None
    name: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    class_image_url: Optional[str] = None
    base_price: Optional[int] = Field(default=None, ge=0)
    starting_price: Optional[int] = Field(default=None, ge=0)
    is_hidden: Optional[bool] = None


class PackageResponse(BaseModel):
    id: UUID
    category_id: UUID
    name: str
    description: Optional[str]
    image_url: Optional[str]
    class_image_url: Optional[str]
    base_price: Optional[int]
    starting_price: Optional[int]
    has_classes: bool
    is_hidden: bool
    is_custom_quote: bool
    classes: List[PackageClassResponse] = []
    created_at: datetime

    class Config:
        from_attributes = True
