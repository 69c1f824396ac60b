"""Audit Schemas"""

from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import Field, field_validator

from optical_retail.services.audit.financials import deserialize_breakdown
from .common import CamelModel
from .inventory import InventoryItemRead


# Enums
class AuditPeriod(str, Enum):
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


class AuditListPeriod(str, Enum):
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"
    ALL = "all"


# Request Schemas
class AuditItemInput(CamelModel):
    inventory_item_id: str = Field(..., min_length=1)
    # Accepted for older clients, never used: expected counts come from live stock
    expected_quantity: Optional[int] = Field(None, ge=0)
    actual_quantity: int = Field(..., ge=0)
    notes: Optional[str] = None


class AuditCreate(CamelModel):
    audit_date: Optional[datetime] = None
    start_date: datetime
    end_date: datetime
    period: Optional[AuditPeriod] = None
    notes: Optional[str] = None
    include_expenses: bool = False
    items: List[AuditItemInput] = Field(..., min_length=1)


class AuditUpdate(CamelModel):
    audit_date: Optional[datetime] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    period: Optional[AuditPeriod] = None
    notes: Optional[str] = None
    include_expenses: Optional[bool] = None
    items: Optional[List[AuditItemInput]] = None


# Response Schemas
class CategoryItemRead(CamelModel):
    item_name: str
    quantity: int
    unit_price: float
    total_cost: float
    total_revenue: float
    profit: float


class CategoryBreakdownRead(CamelModel):
    category_name: str
    items_sold: int
    total_cost: float
    total_revenue: float
    total_profit: float
    items: List[CategoryItemRead] = []


class AuditItemRead(CamelModel):
    id: str
    audit_id: str
    inventory_item_id: str
    expected_quantity: int
    actual_quantity: int
    discrepancy: int
    unit_price: float
    total_value: float
    notes: Optional[str] = None
    inventory_item: Optional[InventoryItemRead] = None


class AuditRead(CamelModel):
    id: str
    company_id: str
    audit_date: datetime
    start_date: datetime
    end_date: datetime
    period: Optional[str] = None
    notes: Optional[str] = None
    include_expenses: bool
    total_inventory_value: float
    total_sales_value: float
    gross_sales: float
    cost_of_goods_sold: float
    net_profit: float
    profit_margin: float
    total_expenses: float
    final_net_profit: float
    category_breakdown: Dict[str, CategoryBreakdownRead] = {}
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    items: List[AuditItemRead] = []

    @field_validator("category_breakdown", mode="before")
    @classmethod
    def parse_breakdown(cls, v):
        """Stored as JSON text, returned as an object"""
        if v is None or isinstance(v, str):
            return deserialize_breakdown(v)
        return v


class AuditSummary(CamelModel):
    total_audits: int
    total_inventory_value: float
    total_sales_value: float
    total_gross_sales: float
    total_cogs: float = Field(..., alias="totalCOGS")
    total_net_profit: float
    total_expenses: float
    total_final_net_profit: float
    avg_profit_margin: float
    total_discrepancies: float


class AuditListResponse(CamelModel):
    audits: List[AuditRead]
    summary: AuditSummary
