"""Background job tasks"""

from datetime import datetime, timedelta
from typing import List
from uuid import UUID
import asyncio
import structlog

from app.jobs.celery_app import celery_app
from app.config import settings
from app.services.paystack import PaystackRateLimitError

logger = structlog.get_logger()

RATE_LIMIT_RETRY_SECONDS = 60


def run_async(coro):
    """Helper to run async functions in sync context"""
    from app.database import engine

    async def _run():
        try:
            return await coro
        finally:
            # Pooled connections belong to this loop only
            await engine.dispose()

    return asyncio.run(_run())


async def find_stale_payments(db, cutoff: datetime) -> List[UUID]:
    """Paystack orders still awaiting payment with a reference older than cutoff"""
    from app.models.order import Order, PaymentMethod, PaymentStatus
    from sqlalchemy import select

    result = await db.execute(
        select(Order.id).where(
            Order.payment_method == PaymentMethod.PAYSTACK.value,
            Order.payment_status == PaymentStatus.PENDING_PAYMENT.value,
            Order.payment_reference.is_not(None),
            Order.updated_at < cutoff,
        )
    )
    return list(result.scalars().all())


async def reconcile_order_payment(db, paystack, order_id: UUID) -> str:
    """Pull the gateway's view of an order's transaction and apply it.

    Returns the gateway transaction status, or "skipped".
    """
    from app.models.order import Order, PaymentStatus
    from app.services.payments import apply_payment_confirmation, paid_amount_kobo
    from sqlalchemy import select

    result = await db.execute(select(Order).where(Order.id == order_id))
    order = result.scalar_one_or_none()

    if not order or not order.payment_reference or order.payment_status == PaymentStatus.PAID.value:
        return "skipped"

    data = await paystack.verify_transaction(order.payment_reference)
    transaction_status = data.get("status", "unknown")

    if transaction_status == "success":
        await apply_payment_confirmation(
            db,
            [order.id],
            order.payment_reference,
            amount_paid_kobo=paid_amount_kobo(data),
        )
    elif transaction_status == "failed":
        order.payment_status = PaymentStatus.FAILED.value

    await db.commit()
    logger.info(
        "Payment reconciled",
        order_id=str(order.id),
        reference=order.payment_reference,
        transaction_status=transaction_status,
    )
    return transaction_status


@celery_app.task(name="reconcile_pending_payments")
def reconcile_pending_payments():
    """Queue a gateway check for every stale Paystack payment"""
    logger.info("Reconciling pending payments")

    async def _find():
        from app.database import SessionLocal

        cutoff = datetime.utcnow() - timedelta(minutes=settings.payment_reconcile_after_minutes)
        async with SessionLocal() as db:
            return await find_stale_payments(db, cutoff)

    order_ids = run_async(_find())
    for order_id in order_ids:
        verify_pending_payment.delay(str(order_id))

    logger.info("Queued payment checks", count=len(order_ids))


@celery_app.task(name="verify_pending_payment", bind=True, max_retries=5)
def verify_pending_payment(self, order_id: str):
    """Verify one order's transaction with the gateway"""
    logger.info("Verifying pending payment", order_id=order_id)

    async def _verify():
        from app.database import SessionLocal
        from app.services.paystack import PaystackClient

        async with SessionLocal() as db:
            return await reconcile_order_payment(db, PaystackClient(), UUID(order_id))

    try:
        return run_async(_verify())
    except PaystackRateLimitError as e:
        logger.warning("Paystack rate limited, retrying", order_id=order_id, countdown=RATE_LIMIT_RETRY_SECONDS)
        raise self.retry(exc=e, countdown=RATE_LIMIT_RETRY_SECONDS)
