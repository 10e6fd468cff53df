"""Delivery bookkeeping"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.delivery import Delivery
from app.models.order import Order, OrderStatus

# Order statuses that put an order on the delivery board
DELIVERY_TRIGGER_STATUSES = {OrderStatus.PAID.value, OrderStatus.PROCESSING.value}


async def ensure_delivery(db: AsyncSession, order: Order) -> Delivery:
    """Create the order's delivery row unless it already has one"""
    result = await db.execute(select(Delivery).where(Delivery.order_id == order.id))
    delivery = result.scalar_one_or_none()
    if delivery is not None:
        return delivery

    delivery = Delivery(
        order_id=order.id,
        custom_order_id=order.custom_order_id,
        package_name=order.package_name,
        customer_name=order.customer_name,
        customer_whatsapp=order.customer_whatsapp,
        delivery_address=order.delivery_address,
        delivery_date=order.delivery_date,
        delivery_time=order.delivery_time,
        delivery_notes=order.delivery_notes,
    )
    db.add(delivery)
    return delivery
