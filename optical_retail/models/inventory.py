"""
Inventory Models
Categories and stock items of an optical shop (frames, lenses, accessories)
"""
from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, Numeric, String
from sqlalchemy.orm import relationship

from optical_retail.core.database import Base, generate_id


class Category(Base):
    """Inventory category, e.g. Frames, Single Vision Lenses"""
    __tablename__ = "categories"

    id = Column(String(36), primary_key=True, default=generate_id)
    company_id = Column(String(36), ForeignKey("companies.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(100), nullable=False, doc="Category name")

    company = relationship("Company", back_populates="categories")
    items = relationship("InventoryItem", back_populates="category")

    def __repr__(self):
        return f"<Category(id='{self.id}', name='{self.name}')>"


class InventoryItem(Base):
    """
    Inventory Item

    total_stock is the live quantity, decremented by sales. Audits read it as
    the expected count but never change it. Sales refer to items by name.
    """
    __tablename__ = "inventory_items"

    id = Column(String(36), primary_key=True, default=generate_id)
    company_id = Column(String(36), ForeignKey("companies.id", ondelete="CASCADE"), nullable=False)
    category_id = Column(String(36), ForeignKey("categories.id", ondelete="RESTRICT"), nullable=False)

    name = Column(String(200), nullable=False, doc="Item name, referenced by sales")
    unit_price = Column(Numeric(15, 2), nullable=False, default=0, doc="Unit cost")
    total_stock = Column(Integer, nullable=False, default=0, doc="Live quantity on hand")

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    company = relationship("Company", back_populates="inventory_items")
    category = relationship("Category", back_populates="items")

    __table_args__ = (
        Index("idx_inventory_company_name", "company_id", "name"),
    )

    def __repr__(self):
        return f"<InventoryItem(id='{self.id}', name='{self.name}', stock={self.total_stock})>"
