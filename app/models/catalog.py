"""Catalog models: categories, packages and their price tiers"""

import uuid
from datetime import datetime
from sqlalchemy import Column, String, Integer, Boolean, DateTime, ForeignKey, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from app.database import Base


class Category(Base):
    """Celebration category (weddings, Eid, naming ceremonies, ...)"""
    __tablename__ = "categories"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    slug = Column(String(100), unique=True, nullable=False)
    name = Column(String(255), nullable=False)
    description = Column(Text)
    image_url = Column(String(500))
    sort_order = Column(Integer, default=0)
    coming_soon = Column(Boolean, default=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    packages = relationship("Package", back_populates="category")


class Package(Base):
    """Gift package.

    A package is priced one of three ways: a fixed ``base_price``, a set of
    ``classes`` (tiers), or neither, in which case it is quoted on request.
    """
    __tablename__ = "packages"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    category_id = Column(UUID(as_uuid=True), ForeignKey("categories.id"), nullable=False)
    name = Column(String(255), nullable=False)
    description = Column(Text)
    image_url = Column(String(500))
    class_image_url = Column(String(500))

    # Prices are whole naira
    base_price = Column(Integer)
    starting_price = Column(Integer)  # Display only ("from ₦...")
    has_classes = Column(Boolean, default=False)

    is_hidden = Column(Boolean, default=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    category = relationship("Category", back_populates="packages")
    classes = relationship(
        "PackageClass",
        back_populates="package",
        cascade="all, delete-orphan",
        order_by="PackageClass.sort_order",
    )

    @property
    def is_custom_quote(self) -> bool:
        return self.base_price is None and not self.has_classes


class PackageClass(Base):
    """Named price tier of a package (VIP, Special, Standard, ...)"""
    __tablename__ = "package_classes"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    package_id = Column(UUID(as_uuid=True), ForeignKey("packages.id"), nullable=False)
    name = Column(String(100), nullable=False)
    price = Column(Integer, nullable=False)
    description = Column(Text)
    sort_order = Column(Integer, default=0)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    package = relationship("Package", back_populates="classes")
