"""Public catalog endpoints"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.database import get_db
from app.models.catalog import Category, Package
from app.schemas.catalog import CategoryResponse, PackageResponse

router = APIRouter()


async def get_category_by_slug(slug: str, db: AsyncSession) -> Category:
    result = await db.execute(select(Category).where(Category.slug == slug))
    category = result.scalar_one_or_none()

    if not category:
        raise HTTPException(status_code=404, detail="Category not found")

    return category


@router.get("/categories", response_model=List[CategoryResponse])
async def list_categories(db: AsyncSession = Depends(get_db)):
    """List categories, coming-soon ones included so the storefront can badge them"""
    result = await db.execute(
        select(Category).order_by(Category.sort_order, Category.name)
    )
    return result.scalars().all()


@router.get("/categories/{slug}", response_model=CategoryResponse)
async def get_category(slug: str, db: AsyncSession = Depends(get_db)):
    """Get a category"""
    return await get_category_by_slug(slug, db)


@router.get("/categories/{slug}/packages", response_model=List[PackageResponse])
async def list_category_packages(slug: str, db: AsyncSession = Depends(get_db)):
    """List visible packages of a category"""
    category = await get_category_by_slug(slug, db)

    if category.coming_soon:
        return []

    result = await db.execute(
        select(Package)
        .where(Package.category_id == category.id, Package.is_hidden == False)
        .options(selectinload(Package.classes))
        .order_by(Package.created_at)
    )
    return result.scalars().all()


@router.get("/packages/{package_id}", response_model=PackageResponse)
async def get_package(package_id: UUID, db: AsyncSession = Depends(get_db)):
    """Get a visible package with its classes"""
    result = await db.execute(
        select(Package)
        .where(Package.id == package_id, Package.is_hidden == False)
        .options(selectinload(Package.classes))
    )
    package = result.scalar_one_or_none()

    if not package:
        raise HTTPException(status_code=404, detail="Package not found")

    return package
