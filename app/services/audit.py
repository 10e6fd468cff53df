"""Audit trail for back-office actions"""

from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from app.models.audit import AuditLog
from app.models.user import User

logger = structlog.get_logger()


async def log_action(
    db: AsyncSession,
    actor: Optional[User],
    action: str,
    target_type: Optional[str] = None,
    target_id: Optional[object] = None,
    details: Optional[str] = None,
) -> None:
    """Record an action in its own savepoint.

    A failed audit write is logged and dropped; it never rolls back the
    action it describes.
    """
    entry = AuditLog(
        actor_id=actor.id if actor else None,
        actor_email=actor.email if actor else None,
        actor_role=actor.role.value if actor else "system",
        action=action,
        target_type=target_type,
        target_id=str(target_id) if target_id is not None else None,
        details=details,
    )
    try:
        async with db.begin_nested():
            db.add(entry)
    except SQLAlchemyError as e:
        logger.error("Failed to write audit log", action=action, error=str(e))
