"""
Audit Models
Persisted result of an inventory count plus financial reconciliation
"""
from datetime import datetime

from sqlalchemy import (
    Boolean, Column, DateTime, ForeignKey, Index, Integer, Numeric, String, Text
)
from sqlalchemy.orm import relationship

from optical_retail.core.database import Base, generate_id


class Audit(Base):
    """
    Inventory audit

    Financial columns are computed from sales, inventory and (optionally)
    expenses over [start_date, end_date]. category_breakdown holds the
    per-category profit breakdown as a JSON string.
    """
    __tablename__ = "audits"

    id = Column(String(36), primary_key=True, default=generate_id)
    company_id = Column(String(36), ForeignKey("companies.id", ondelete="CASCADE"), nullable=False)

    audit_date = Column(DateTime, nullable=False, default=datetime.utcnow)
    start_date = Column(DateTime, nullable=False)
    end_date = Column(DateTime, nullable=False)
    period = Column(String(10), nullable=True, doc="week, month or year")
    notes = Column(Text, nullable=True)
    include_expenses = Column(Boolean, nullable=False, default=False)

    # Computed values
    total_inventory_value = Column(Numeric(15, 2), nullable=False, default=0)
    total_sales_value = Column(Numeric(15, 2), nullable=False, default=0, doc="Mirror of gross_sales for older clients")
    gross_sales = Column(Numeric(15, 2), nullable=False, default=0)
    cost_of_goods_sold = Column(Numeric(15, 2), nullable=False, default=0)
    net_profit = Column(Numeric(15, 2), nullable=False, default=0)
    profit_margin = Column(Numeric(15, 4), nullable=False, default=0)
    total_expenses = Column(Numeric(15, 2), nullable=False, default=0)
    final_net_profit = Column(Numeric(15, 2), nullable=False, default=0)
    category_breakdown = Column(Text, nullable=True)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    company = relationship("Company", back_populates="audits")
    items = relationship(
        "AuditItem",
        back_populates="audit",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        Index("idx_audits_company_date", "company_id", "audit_date"),
    )

    def __repr__(self):
        return f"<Audit(id='{self.id}', audit_date={self.audit_date})>"


class AuditItem(Base):
    """
    One counted inventory item within an audit

    expected_quantity is the item's total_stock when the row was written and
    is never recomputed afterwards.
    """
    __tablename__ = "audit_items"

    id = Column(String(36), primary_key=True, default=generate_id)
    audit_id = Column(String(36), ForeignKey("audits.id", ondelete="CASCADE"), nullable=False, index=True)
    inventory_item_id = Column(String(36), ForeignKey("inventory_items.id", ondelete="CASCADE"), nullable=False)

    expected_quantity = Column(Integer, nullable=False, default=0)
    actual_quantity = Column(Integer, nullable=False, default=0)
    discrepancy = Column(Integer, nullable=False, default=0, doc="actual - expected")
    unit_price = Column(Numeric(15, 2), nullable=False, default=0)
    total_value = Column(Numeric(15, 2), nullable=False, default=0, doc="actual * unit_price")
    notes = Column(Text, nullable=True)

    audit = relationship("Audit", back_populates="items")
    inventory_item = relationship("InventoryItem")

    def __repr__(self):
        return f"<AuditItem(inventory_item_id='{self.inventory_item_id}', discrepancy={self.discrepancy})>"
