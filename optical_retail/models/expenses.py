"""
Expense Models
Bills and salary payments, deducted from profit when an audit includes expenses
"""
from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, Numeric, String

from optical_retail.core.database import Base, generate_id


class Bill(Base):
    """Operating bill (rent, utilities, ...)"""
    __tablename__ = "bills"

    id = Column(String(36), primary_key=True, default=generate_id)
    company_id = Column(String(36), ForeignKey("companies.id", ondelete="CASCADE"), nullable=False)
    name = Column(String(200), nullable=False)
    amount = Column(Numeric(15, 2), nullable=False, default=0)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    __table_args__ = (
        Index("idx_bills_company_created", "company_id", "created_at"),
    )


class Salary(Base):
    """Salary paid to an employee for one month"""
    __tablename__ = "salaries"

    id = Column(String(36), primary_key=True, default=generate_id)
    company_id = Column(String(36), ForeignKey("companies.id", ondelete="CASCADE"), nullable=False)
    employee_name = Column(String(200), nullable=False)
    month = Column(Integer, nullable=False, doc="1-12")
    year = Column(Integer, nullable=False)
    amount = Column(Numeric(15, 2), nullable=False, default=0)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    __table_args__ = (
        Index("idx_salaries_company_created", "company_id", "created_at"),
    )
