"""Audit log model"""

import uuid
from datetime import datetime
from sqlalchemy import Column, String, DateTime, Text
from sqlalchemy.dialects.postgresql import UUID

from app.database import Base


class AuditLog(Base):
    """Audit trail for back-office actions"""
    __tablename__ = "audit_logs"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)

    # Actor information
    actor_id = Column(UUID(as_uuid=True))  # User ID or null for system
    actor_email = Column(String(255))
    actor_role = Column(String(50))  # admin, super_admin, system

    # Action details
    action = Column(String(100), nullable=False)  # update_order, create_package, etc.
    target_type = Column(String(50))  # order, package, category, user, ...
    target_id = Column(String(100))
    details = Column(Text)

    created_at = Column(DateTime, default=datetime.utcnow, index=True)
