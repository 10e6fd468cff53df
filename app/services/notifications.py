"""Notification fan-out"""

from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.notification import Notification
from app.models.user import User, UserRole


def notify_user(
    db: AsyncSession,
    user_id: UUID,
    title: str,
    message: str,
    order_id: Optional[UUID] = None,
) -> Notification:
    """Queue one notification on the session (caller commits)"""
    notification = Notification(
        user_id=user_id,
        order_id=order_id,
        title=title,
        message=message,
    )
    db.add(notification)
    return notification


async def admin_user_ids(db: AsyncSession) -> List[UUID]:
    result = await db.execute(
        select(User.id).where(
            User.role.in_([UserRole.ADMIN, UserRole.SUPER_ADMIN]),
            User.is_active == True,
        )
    )
    return list(result.scalars().all())


async def notify_admins(
    db: AsyncSession,
    title: str,
    message: str,
    order_id: Optional[UUID] = None,
) -> List[Notification]:
    """Queue one notification per admin account"""
    return [
        notify_user(db, admin_id, title, message, order_id=order_id)
        for admin_id in await admin_user_ids(db)
    ]
