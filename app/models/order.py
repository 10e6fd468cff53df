"""Order model and its status lifecycle"""

import uuid
import enum
from datetime import datetime
from sqlalchemy import Column, String, DateTime, ForeignKey, Text, Integer
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from app.database import Base


class OrderStatus(str, enum.Enum):
    """Overall order status"""
    PENDING = "pending"
    PENDING_PAYMENT = "pending_payment"
    WAITING_FOR_PRICE = "waiting_for_price"
    PRICE_SENT = "price_sent"
    PAID = "paid"
    PROCESSING = "processing"
    READY_FOR_DELIVERY = "ready_for_delivery"
    OUT_FOR_DELIVERY = "out_for_delivery"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class PaymentStatus(str, enum.Enum):
    """Payment status tag"""
    PENDING_PAYMENT = "pending_payment"
    PROOF_UPLOADED = "proof_uploaded"
    PAID = "paid"
    FAILED = "failed"


class PaymentMethod(str, enum.Enum):
    PAYSTACK = "paystack"
    BANK_TRANSFER = "bank_transfer"


# Statuses an order may move to from each status. Re-writing the current
# status is always allowed and is not listed here.
ORDER_TRANSITIONS = {
    OrderStatus.PENDING: {
        OrderStatus.PENDING_PAYMENT,
        OrderStatus.PRICE_SENT,
        OrderStatus.PAID,
        OrderStatus.PROCESSING,
        OrderStatus.CANCELLED,
    },
    OrderStatus.PENDING_PAYMENT: {
        OrderStatus.PENDING,
        OrderStatus.PAID,
        OrderStatus.PROCESSING,
        OrderStatus.CANCELLED,
    },
    OrderStatus.WAITING_FOR_PRICE: {
        OrderStatus.PRICE_SENT,
        OrderStatus.CANCELLED,
    },
    OrderStatus.PRICE_SENT: {
        OrderStatus.PENDING_PAYMENT,
        OrderStatus.PAID,
        OrderStatus.PROCESSING,
        OrderStatus.CANCELLED,
    },
    OrderStatus.PAID: {
        OrderStatus.PROCESSING,
        OrderStatus.READY_FOR_DELIVERY,
        OrderStatus.OUT_FOR_DELIVERY,
        OrderStatus.DELIVERED,
        OrderStatus.CANCELLED,
    },
    OrderStatus.PROCESSING: {
        OrderStatus.READY_FOR_DELIVERY,
        OrderStatus.OUT_FOR_DELIVERY,
        OrderStatus.DELIVERED,
        OrderStatus.CANCELLED,
    },
    OrderStatus.READY_FOR_DELIVERY: {
        OrderStatus.OUT_FOR_DELIVERY,
        OrderStatus.DELIVERED,
        OrderStatus.CANCELLED,
    },
    OrderStatus.OUT_FOR_DELIVERY: {
        OrderStatus.DELIVERED,
    },
    OrderStatus.DELIVERED: set(),
    OrderStatus.CANCELLED: set(),
}

# Statuses from which a confirmed payment moves the order to "paid"
PAYABLE_STATUSES = {
    OrderStatus.PENDING,
    OrderStatus.PENDING_PAYMENT,
    OrderStatus.PRICE_SENT,
}


def can_transition(current: str, target: str) -> bool:
    """Check the transition table for current -> target"""
    current_status = OrderStatus(current)
    target_status = OrderStatus(target)
    if current_status == target_status:
        return True
    return target_status in ORDER_TRANSITIONS[current_status]


class Order(Base):
    """One purchase request (one cart line, one single purchase or one custom request)"""
    __tablename__ = "orders"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    custom_order_id = Column(String(50), index=True)  # Branded, human readable
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False)

    # Commercial attributes (whole naira)
    package_name = Column(String(255), nullable=False)
    package_class = Column(String(100))
    quantity = Column(Integer, nullable=False, default=1)
    notes = Column(Text)
    custom_request = Column(Text)
    total_price = Column(Integer, nullable=False, default=0)
    discount_amount = Column(Integer, default=0)
    final_price = Column(Integer, nullable=False, default=0)
    admin_set_price = Column(Integer)

    # Payment
    payment_method = Column(String(50), nullable=False, default=PaymentMethod.PAYSTACK.value)
    installment_plan = Column(String(50))
    payment_status = Column(String(50))
    payment_proof_url = Column(String(2048))
    payment_proof_type = Column(String(20))  # image, video
    payment_reference = Column(String(255), index=True)
    payment_verified_at = Column(DateTime)
    payment_verified_by = Column(UUID(as_uuid=True), ForeignKey("users.id"))

    # Fulfillment
    delivery_date = Column(String(50))
    delivery_time = Column(String(100))
    delivery_address = Column(Text)
    delivery_notes = Column(Text)
    status = Column(String(50), nullable=False, default=OrderStatus.PENDING.value)
    admin_response = Column(Text)

    # Customer snapshot at order time
    customer_name = Column(String(255), nullable=False)
    customer_email = Column(String(255), nullable=False)
    customer_whatsapp = Column(String(20), nullable=False)

    # Metadata
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    user = relationship("User", back_populates="orders", foreign_keys=[user_id])
    messages = relationship("OrderMessage", back_populates="order", order_by="OrderMessage.id")
    delivery = relationship("Delivery", back_populates="order", uselist=False)

    @property
    def amount_due(self) -> int:
        """Price shown and charged: the admin override when present"""
        if self.admin_set_price is not None:
            return self.admin_set_price
        return self.final_price


class OrderSerial(Base):
    """Sequence backing branded order IDs"""
    __tablename__ = "order_serials"

    id = Column(Integer, primary_key=True, autoincrement=True)
    created_at = Column(DateTime, default=datetime.utcnow)
