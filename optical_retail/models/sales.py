"""
Sales Model
"""
from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Index, Numeric, String

from optical_retail.core.database import Base, generate_id


class Sale(Base):
    """
    Point-of-sale record

    frame and lens hold inventory item *names*, not keys. A renamed or
    deleted item simply stops matching.
    """
    __tablename__ = "sales"

    id = Column(String(36), primary_key=True, default=generate_id)
    company_id = Column(String(36), ForeignKey("companies.id", ondelete="CASCADE"), nullable=False)

    total = Column(Numeric(15, 2), nullable=False, default=0, doc="Amount charged")
    frame = Column(String(200), nullable=True, doc="Frame item name")
    lens = Column(String(200), nullable=True, doc="Lens item name")

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    __table_args__ = (
        Index("idx_sales_company_created", "company_id", "created_at"),
    )

    def __repr__(self):
        return f"<Sale(id='{self.id}', total={self.total})>"
