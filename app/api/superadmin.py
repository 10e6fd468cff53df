"""Super admin endpoints: staff, audit log, payment settings, analytics"""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from app.database import get_db
from app.models.audit import AuditLog
from app.models.order import Order
from app.models.settings import PaymentSettings
from app.models.user import User, UserRole
from app.schemas.admin import AuditLogListResponse, AuditLogResponse, AnalyticsResponse
from app.schemas.auth import UserCreate, UserRoleUpdate, UserSuspensionUpdate, UserResponse
from app.schemas.payment import PaymentSettingsUpdate, PaymentSettingsResponse
from app.api.admin_orders import PAID_STATUSES
from app.api.auth import require_role, get_password_hash
from app.services.audit import log_action

router = APIRouter()
logger = structlog.get_logger()


async def load_user(user_id: UUID, db: AsyncSession) -> User:
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()

    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    return user


@router.get("/users", response_model=List[UserResponse])
async def list_users(
    role: Optional[UserRole] = None,
    skip: int = 0,
    limit: int = 100,
    current_user: User = Depends(require_role(UserRole.SUPER_ADMIN)),
    db: AsyncSession = Depends(get_db),
):
    """List accounts, optionally by role"""
    query = select(User)
    if role:
        query = query.where(User.role == role)

    result = await db.execute(query.order_by(User.created_at.desc()).offset(skip).limit(limit))
    return result.scalars().all()


@router.post("/users", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    user_data: UserCreate,
    current_user: User = Depends(require_role(UserRole.SUPER_ADMIN)),
    db: AsyncSession = Depends(get_db),
):
    """Create a staff (or customer) account"""
    email = user_data.email.lower()
    result = await db.execute(select(User).where(User.email == email))
    if result.scalar_one_or_none():
        raise HTTPException(status_code=400, detail="Email already registered")

    user = User(
        email=email,
        hashed_password=get_password_hash(user_data.password),
        full_name=user_data.full_name,
        phone=user_data.phone,
        role=user_data.role,
    )
    db.add(user)
    await db.flush()

    await log_action(db, current_user, "create_user", "user", user.id, f"{email} ({user_data.role.value})")
    await db.commit()
    await db.refresh(user)

    logger.info("User created", user_id=str(user.id), role=user.role.value)
    return user


@router.put("/users/{user_id}/role", response_model=UserResponse)
async def update_user_role(
    user_id: UUID,
    role_data: UserRoleUpdate,
    current_user: User = Depends(require_role(UserRole.SUPER_ADMIN)),
    db: AsyncSession = Depends(get_db),
):
    """Grant or revoke a role"""
    if user_id == current_user.id:
        raise HTTPException(status_code=400, detail="You cannot change your own role")

    user = await load_user(user_id, db)
    previous_role = user.role
    user.role = role_data.role

    await log_action(
        db,
        current_user,
        "update_role",
        "user",
        user.id,
        f"{previous_role.value}->{role_data.role.value}",
    )
    await db.commit()
    await db.refresh(user)

    return user


@router.put("/users/{user_id}/suspension", response_model=UserResponse)
async def update_user_suspension(
    user_id: UUID,
    suspension: UserSuspensionUpdate,
    current_user: User = Depends(require_role(UserRole.SUPER_ADMIN)),
    db: AsyncSession = Depends(get_db),
):
    """Suspend or reinstate an account; suspension also ends its sessions"""
    if user_id == current_user.id:
        raise HTTPException(status_code=400, detail="You cannot suspend yourself")

    user = await load_user(user_id, db)
    user.is_suspended = suspension.is_suspended
    if suspension.is_suspended:
        user.refresh_token = None

    await log_action(
        db,
        current_user,
        "suspend_user" if suspension.is_suspended else "unsuspend_user",
        "user",
        user.id,
        user.email,
    )
    await db.commit()
    await db.refresh(user)

    return user


@router.get("/audit-log", response_model=AuditLogListResponse)
async def list_audit_log(
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=200),
    action: Optional[str] = None,
    target_type: Optional[str] = None,
    actor_id: Optional[UUID] = None,
    current_user: User = Depends(require_role(UserRole.SUPER_ADMIN)),
    db: AsyncSession = Depends(get_db),
):
    """Browse the audit trail, newest first"""
    query = select(AuditLog)
    count_query = select(func.count(AuditLog.id))

    if action:
        query = query.where(AuditLog.action == action)
        count_query = count_query.where(AuditLog.action == action)

    if target_type:
        query = query.where(AuditLog.target_type == target_type)
        count_query = count_query.where(AuditLog.target_type == target_type)

    if actor_id:
        query = query.where(AuditLog.actor_id == actor_id)
        count_query = count_query.where(AuditLog.actor_id == actor_id)

    total_result = await db.execute(count_query)
    total = total_result.scalar()

    offset = (page - 1) * page_size
    result = await db.execute(query.order_by(AuditLog.created_at.desc()).offset(offset).limit(page_size))

    return AuditLogListResponse(
        items=[AuditLogResponse.model_validate(entry) for entry in result.scalars().all()],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.put("/payment-settings", response_model=PaymentSettingsResponse)
async def update_payment_settings(
    settings_data: PaymentSettingsUpdate,
    current_user: User = Depends(require_role(UserRole.SUPER_ADMIN)),
    db: AsyncSession = Depends(get_db),
):
    """Update the bank account shown for manual transfers"""
    result = await db.execute(select(PaymentSettings).limit(1))
    payment_settings = result.scalar_one_or_none()

    if not payment_settings:
        payment_settings = PaymentSettings()
        db.add(payment_settings)

    changes = settings_data.model_dump(exclude_unset=True)
    for field, value in changes.items():
        setattr(payment_settings, field, value)

    await log_action(db, current_user, "update_payment_settings", "payment_settings", None, ", ".join(changes))
    await db.commit()
    await db.refresh(payment_settings)

    return payment_settings


@router.get("/analytics", response_model=AnalyticsResponse)
async def get_analytics(
    current_user: User = Depends(require_role(UserRole.SUPER_ADMIN)),
    db: AsyncSession = Depends(get_db),
):
    """Revenue and order volume breakdowns"""
    amount = func.coalesce(Order.admin_set_price, Order.final_price)

    status_result = await db.execute(select(Order.status, func.count(Order.id)).group_by(Order.status))
    orders_by_status = {row[0]: row[1] for row in status_result.all()}

    package_result = await db.execute(
        select(Order.package_name, func.count(Order.id)).group_by(Order.package_name)
    )
    orders_by_package = {row[0]: row[1] for row in package_result.all()}

    revenue_result = await db.execute(
        select(Order.package_name, func.sum(amount))
        .where(Order.status.in_(PAID_STATUSES))
        .group_by(Order.package_name)
    )
    revenue_by_package = {row[0]: int(row[1] or 0) for row in revenue_result.all()}

    customer_result = await db.execute(
        select(func.count(User.id)).where(User.role == UserRole.CUSTOMER)
    )

    return AnalyticsResponse(
        revenue=sum(revenue_by_package.values()),
        orders_by_status=orders_by_status,
        revenue_by_package=revenue_by_package,
        orders_by_package=orders_by_package,
        customer_count=customer_result.scalar() or 0,
    )
