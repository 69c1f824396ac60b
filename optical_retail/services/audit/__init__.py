"""
Audit Services
Inventory counts reconciled against sales, cost and expenses
"""

from .audit_service import AuditService, period_start
from .financials import (
    AuditFinancials,
    CategoryBreakdown,
    CategoryItemLine,
    build_sales_summary,
    compute_financials,
    deserialize_breakdown,
    end_of_day,
    serialize_breakdown,
    split_sale_revenue,
    start_of_day,
)

__all__ = [
    'AuditService',
    'period_start',
    'AuditFinancials',
    'CategoryBreakdown',
    'CategoryItemLine',
    'build_sales_summary',
    'compute_financials',
    'deserialize_breakdown',
    'end_of_day',
    'serialize_breakdown',
    'split_sale_revenue',
    'start_of_day',
]
