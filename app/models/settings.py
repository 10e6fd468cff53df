"""Store-wide settings"""

import uuid
from datetime import datetime
from sqlalchemy import Column, String, DateTime, Text
from sqlalchemy.dialects.postgresql import UUID

from app.database import Base


class PaymentSettings(Base):
    """Bank account shown to customers paying by transfer (single row)"""
    __tablename__ = "payment_settings"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    bank_name = Column(String(255), nullable=False, default="")
    account_name = Column(String(255), nullable=False, default="")
    account_number = Column(String(50), nullable=False, default="")
    additional_note = Column(Text)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
