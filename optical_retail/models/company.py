"""
Company Model
Tenant root: every business record belongs to exactly one company
"""
from sqlalchemy import Boolean, Column, DateTime, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from optical_retail.core.database import Base, generate_id


class Company(Base):
    """Optical retail company (tenant)"""
    __tablename__ = "companies"

    id = Column(String(36), primary_key=True, default=generate_id)
    name = Column(String(200), nullable=False, doc="Trading name")
    is_active = Column(Boolean, nullable=False, default=True, doc="Inactive companies are refused access")

    created_at = Column(DateTime, server_default=func.current_timestamp(), doc="Record creation timestamp")

    categories = relationship("Category", back_populates="company", cascade="all, delete-orphan")
    inventory_items = relationship("InventoryItem", back_populates="company", cascade="all, delete-orphan")
    audits = relationship("Audit", back_populates="company", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Company(id='{self.id}', name='{self.name}')>"
