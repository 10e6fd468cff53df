"""Back-office catalog management"""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.database import get_db
from app.models.catalog import Category, Package, PackageClass
from app.models.order import Order
from app.models.user import User, UserRole
from app.schemas.catalog import (
    CategoryCreate,
    CategoryUpdate,
    CategoryResponse,
    PackageCreate,
    PackageUpdate,
    PackageResponse,
    PackageClassCreate,
)
from app.api.auth import require_role
from app.services.audit import log_action

router = APIRouter()


async def load_package(package_id: UUID, db: AsyncSession) -> Package:
    result = await db.execute(
        select(Package)
        .where(Package.id == package_id)
        .options(selectinload(Package.classes))
        .execution_options(populate_existing=True)
    )
    package = result.scalar_one_or_none()

    if not package:
        raise HTTPException(status_code=404, detail="Package not found")

    return package


@router.get("/packages", response_model=List[PackageResponse])
async def list_all_packages(
    category_id: Optional[UUID] = None,
    current_user: User = Depends(require_role(UserRole.ADMIN)),
    db: AsyncSession = Depends(get_db),
):
    """List packages including hidden ones"""
    query = select(Package).options(selectinload(Package.classes))
    if category_id:
        query = query.where(Package.category_id == category_id)

    result = await db.execute(query.order_by(Package.created_at))
    return result.scalars().all()


@router.post("/categories", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED)
async def create_category(
    category_data: CategoryCreate,
    current_user: User = Depends(require_role(UserRole.ADMIN)),
    db: AsyncSession = Depends(get_db),
):
    """Create a category"""
    existing = await db.execute(select(Category).where(Category.slug == category_data.slug))
    if existing.scalar_one_or_none():
        raise HTTPException(status_code=400, detail="Category slug already exists")

    category = Category(**category_data.model_dump())
    db.add(category)
    await db.flush()

    await log_action(db, current_user, "create_category", "category", category.id, category.name)
    await db.commit()
    await db.refresh(category)

    return category


@router.put("/categories/{category_id}", response_model=CategoryResponse)
async def update_category(
    category_id: UUID,
    category_data: CategoryUpdate,
    current_user: User = Depends(require_role(UserRole.ADMIN)),
    db: AsyncSession = Depends(get_db),
):
    """Update a category, including its coming-soon flag"""
    result = await db.execute(select(Category).where(Category.id == category_id))
    category = result.scalar_one_or_none()

    if not category:
        raise HTTPException(status_code=404, detail="Category not found")

    changes = category_data.model_dump(exclude_unset=True)
    for field, value in changes.items():
        setattr(category, field, value)

    await log_action(
        db,
        current_user,
        "update_category",
        "category",
        category.id,
        ", ".join(f"{field}={value}" for field, value in changes.items()),
    )
    await db.commit()
    await db.refresh(category)

    return category


@router.post("/packages", response_model=PackageResponse, status_code=status.HTTP_201_CREATED)
async def create_package(
    package_data: PackageCreate,
    current_user: User = Depends(require_role(UserRole.ADMIN)),
    db: AsyncSession = Depends(get_db),
):
    """Create a package with optional classes"""
    category = await db.execute(select(Category).where(Category.id == package_data.category_id))
    if not category.scalar_one_or_none():
        raise HTTPException(status_code=404, detail="Category not found")

    package = Package(
        **package_data.model_dump(exclude={"classes"}),
        has_classes=bool(package_data.classes),
    )
    db.add(package)
    await db.flush()

    for class_data in package_data.classes:
        db.add(PackageClass(package_id=package.id, **class_data.model_dump()))

    await log_action(db, current_user, "create_package", "package", package.id, package.name)
    await db.commit()

    return await load_package(package.id, db)


@router.put("/packages/{package_id}", response_model=PackageResponse)
async def update_package(
    package_id: UUID,
    package_data: PackageUpdate,
    current_user: User = Depends(require_role(UserRole.ADMIN)),
    db: AsyncSession = Depends(get_db),
):
    """Update package fields (use the classes endpoint for tiers)"""
    package = await load_package(package_id, db)

    changes = package_data.model_dump(exclude_unset=True)
    for field, value in changes.items():
        setattr(package, field, value)

    await log_action(db, current_user, "update_package", "package", package.id, ", ".join(changes))
    await db.commit()

    return await load_package(package_id, db)


@router.put("/packages/{package_id}/classes", response_model=PackageResponse)
async def replace_package_classes(
    package_id: UUID,
    classes: List[PackageClassCreate],
    current_user: User = Depends(require_role(UserRole.ADMIN)),
    db: AsyncSession = Depends(get_db),
):
    """Replace the whole class set of a package"""
    package = await load_package(package_id, db)

    package.classes = [PackageClass(**class_data.model_dump()) for class_data in classes]
    package.has_classes = bool(classes)

    await log_action(
        db,
        current_user,
        "update_package_classes",
        "package",
        package.id,
        ", ".join(f"{c.name}={c.price}" for c in classes),
    )
    await db.commit()

    return await load_package(package_id, db)


@router.delete("/packages/{package_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_package(
    package_id: UUID,
    current_user: User = Depends(require_role(UserRole.ADMIN)),
    db: AsyncSession = Depends(get_db),
):
    """Delete a package; packages already ordered are hidden instead"""
    package = await load_package(package_id, db)
    package_name = package.name

    ordered = await db.execute(
        select(Order.id).where(Order.package_name == package_name).limit(1)
    )
    if ordered.scalar_one_or_none():
        package.is_hidden = True
        action = "hide_package"
    else:
        await db.delete(package)
        action = "delete_package"

    await log_action(db, current_user, action, "package", package_id, package_name)
    await db.commit()

