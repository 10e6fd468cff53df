"""Paystack webhook handler"""

import json

from fastapi import APIRouter, Depends, Request, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from app.config import settings
from app.database import get_db
from app.services.payments import apply_payment_confirmation, order_ids_from_metadata, paid_amount_kobo
from app.services.paystack import verify_signature

router = APIRouter()
logger = structlog.get_logger()


@router.post("/paystack")
async def handle_paystack_webhook(
    request: Request,
    db: AsyncSession = Depends(get_db),
):
    """
    Receive gateway events.
    The signature is an HMAC-SHA512 of the exact raw body, so the body is read
    before any parsing.
    """
    raw_body = await request.body()
    signature = request.headers.get("x-paystack-signature")

    if not verify_signature(settings.paystack_secret_key, raw_body, signature):
        logger.warning("Invalid Paystack signature", has_signature=bool(signature))
        raise HTTPException(status_code=401, detail="Invalid signature")

    try:
        event = json.loads(raw_body)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid payload")

    if not isinstance(event, dict):
        raise HTTPException(status_code=400, detail="Invalid payload")

    event_type = event.get("event")
    data = event.get("data") or {}
    if not isinstance(data, dict):
        raise HTTPException(status_code=400, detail="Invalid payload")

    logger.info("Paystack webhook received", paystack_event=event_type, reference=data.get("reference"))

    if event_type == "charge.success":
        order_ids = order_ids_from_metadata(data.get("metadata"))
        if not order_ids:
            logger.warning("charge.success without order metadata", reference=data.get("reference"))

        confirmed = await apply_payment_confirmation(
            db,
            order_ids,
            data.get("reference"),
            amount_paid_kobo=paid_amount_kobo(data),
        )
        await db.commit()

        logger.info(
            "Webhook payment applied",
            reference=data.get("reference"),
            confirmed=[str(order.id) for order in confirmed],
        )

    return {"status": "ok"}
