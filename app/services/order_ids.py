"""Branded, human-readable order IDs"""

import time
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from app.config import settings
from app.models.order import OrderSerial

logger = structlog.get_logger()


def format_order_id(serial: int, year: int) -> str:
    return f"{settings.order_id_prefix}-{year}-{serial:05d}"


def fallback_order_id() -> str:
    """Timestamp-based ID used when the serial cannot be allocated.

    Not guaranteed unique: two orders in the same millisecond collide.
    """
    return f"{settings.order_id_prefix}-{int(time.time() * 1000)}"


async def generate_order_id(db: AsyncSession) -> str:
    """Allocate the next branded order ID.

    The serial insert runs in a savepoint so that a failure leaves the
    surrounding checkout transaction usable.
    """
    try:
        async with db.begin_nested():
            serial = OrderSerial()
            db.add(serial)
            await db.flush()
        return format_order_id(serial.id, datetime.utcnow().year)
    except SQLAlchemyError as e:
        order_id = fallback_order_id()
        logger.warning("Order serial allocation failed", error=str(e), fallback_id=order_id)
        return order_id
