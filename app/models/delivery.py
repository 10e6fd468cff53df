"""Delivery model"""

import uuid
import enum
from datetime import datetime
from sqlalchemy import Column, String, DateTime, ForeignKey, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from app.database import Base


class DeliveryStatus(str, enum.Enum):
    SCHEDULED = "scheduled"
    IN_TRANSIT = "in_transit"
    DELIVERED = "delivered"
    FAILED = "failed"


class Delivery(Base):
    """Delivery job, created once an order is paid or processing"""
    __tablename__ = "deliveries"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    order_id = Column(UUID(as_uuid=True), ForeignKey("orders.id"), unique=True, nullable=False)
    custom_order_id = Column(String(50))

    # Snapshot of the order
    package_name = Column(String(255), nullable=False)
    customer_name = Column(String(255), nullable=False)
    customer_whatsapp = Column(String(20), nullable=False)
    delivery_address = Column(Text)
    delivery_date = Column(String(50))
    delivery_time = Column(String(100))
    delivery_notes = Column(Text)

    status = Column(String(50), default=DeliveryStatus.SCHEDULED.value)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    order = relationship("Order", back_populates="delivery")
