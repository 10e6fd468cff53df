"""Payment confirmation shared by the webhook, verify, reconciliation and manual paths"""

import json
from datetime import datetime
from typing import Iterable, List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from app.models.order import Order, OrderStatus, PaymentStatus, PAYABLE_STATUSES
from app.models.user import User
from app.services.deliveries import ensure_delivery
from app.services.notifications import notify_user, notify_admins
from app.services.pricing import to_minor_units

logger = structlog.get_logger()


def order_ids_from_metadata(metadata) -> List[UUID]:
    """Order ids carried in gateway transaction metadata.

    Paystack echoes metadata back in the form it was sent, so it may arrive
    as a JSON string.
    """
    if not metadata:
        return []

    if isinstance(metadata, str):
        try:
            metadata = json.loads(metadata)
        except ValueError:
            logger.warning("Ignoring unparseable transaction metadata", metadata=metadata[:200])
            return []

    if not isinstance(metadata, dict):
        logger.warning("Ignoring transaction metadata that is not an object", metadata_type=type(metadata).__name__)
        return []

    raw_ids = metadata.get("order_ids") or []
    raw_ids = list(raw_ids) if isinstance(raw_ids, list) else []
    if metadata.get("order_id"):
        raw_ids.insert(0, metadata["order_id"])

    order_ids = []
    for raw in raw_ids:
        try:
            order_id = UUID(str(raw))
        except ValueError:
            logger.warning("Ignoring malformed order id in metadata", order_id=raw)
            continue
        if order_id not in order_ids:
            order_ids.append(order_id)
    return order_ids


def paid_amount_kobo(data: dict) -> int:
    """Amount a gateway transaction reports, in kobo; 0 when absent or malformed"""
    try:
        return int(data.get("amount") or 0)
    except (TypeError, ValueError):
        return 0


async def apply_payment_confirmation(
    db: AsyncSession,
    order_ids: Iterable[UUID],
    reference: Optional[str],
    verified_by: Optional[User] = None,
    amount_paid_kobo: Optional[int] = None,
) -> List[Order]:
    """Mark orders paid and notify the customer and admins.

    Orders whose payment is already recorded as paid are skipped, so a
    replayed webhook or a verify after the webhook changes nothing. An order
    that has moved past payment (e.g. delivered) keeps its status; only the
    payment fields are written. Returns the orders that were newly confirmed.
    The caller commits.

    ``amount_paid_kobo`` is the amount the gateway reports. When given, the
    unpaid orders are confirmed only if it covers their ``amount_due``;
    otherwise nothing changes. Manual verification passes ``None``.
    """
    order_ids = list(order_ids)
    if not order_ids:
        return []

    result = await db.execute(select(Order).where(Order.id.in_(order_ids)))
    orders = result.scalars().all()

    unpaid = [order for order in orders if order.payment_status != PaymentStatus.PAID.value]
    if amount_paid_kobo is not None:
        owed_kobo = to_minor_units(sum(order.amount_due for order in unpaid))
        if amount_paid_kobo < owed_kobo:
            logger.warning(
                "Payment amount below amount due",
                order_ids=[str(order.id) for order in unpaid],
                reference=reference,
                amount_paid_kobo=amount_paid_kobo,
                owed_kobo=owed_kobo,
            )
            return []

    confirmed = []
    for order in orders:
        if order.payment_status == PaymentStatus.PAID.value:
            logger.info(
                "Payment already confirmed",
                order_id=str(order.id),
                reference=reference,
            )
            continue

        if order.status == OrderStatus.CANCELLED.value:
            logger.warning(
                "Payment received for cancelled order",
                order_id=str(order.id),
                reference=reference,
            )

        order.payment_status = PaymentStatus.PAID.value
        order.payment_verified_at = datetime.utcnow()
        if reference:
            order.payment_reference = reference
        if verified_by is not None:
            order.payment_verified_by = verified_by.id

        if OrderStatus(order.status) in PAYABLE_STATUSES:
            order.status = OrderStatus.PAID.value
            await ensure_delivery(db, order)

        notify_user(
            db,
            order.user_id,
            "Payment Successful ✓",
            f"Your payment for {order.package_name} has been confirmed. "
            "Your order is now being processed.",
            order_id=order.id,
        )
        await notify_admins(
            db,
            "New Payment Received",
            f"Payment received for {order.package_name}. Order is ready for processing.",
            order_id=order.id,
        )

        logger.info(
            "Payment confirmed",
            order_id=str(order.id),
            custom_order_id=order.custom_order_id,
            reference=reference,
            status=order.status,
        )
        confirmed.append(order)

    missing = set(order_ids) - {order.id for order in orders}
    for order_id in missing:
        logger.warning("Payment confirmation for unknown order", order_id=str(order_id), reference=reference)

    return confirmed
