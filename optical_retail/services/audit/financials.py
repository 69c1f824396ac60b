"""
Audit Financial Reconciliation
Gross sales, cost of goods sold and per-category profit for an audit window

Sales carry the *names* of the frame and lens they sold. Each name is looked
up in the company's current inventory; a leg whose name matches nothing adds
no cost and no category revenue, although the sale total still counts towards
gross sales. When both legs match, the sale total is split between them in
proportion to their unit cost.
"""
import json
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from sqlalchemy import and_, func
from sqlalchemy.orm import Session, joinedload

from optical_retail.models import Bill, InventoryItem, Salary, Sale

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
HUNDRED = Decimal("100")
UNCATEGORIZED = "Uncategorized"

END_OF_DAY = time(23, 59, 59, 999000)


def start_of_day(value: date) -> datetime:
    """00:00:00.000 on the day of value"""
    day = value.date() if isinstance(value, datetime) else value
    return datetime.combine(day, time.min)


def end_of_day(value: date) -> datetime:
    """23:59:59.999 on the day of value"""
    day = value.date() if isinstance(value, datetime) else value
    return datetime.combine(day, END_OF_DAY)


def to_decimal(value: Any) -> Decimal:
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


@dataclass
class CategoryItemLine:
    """Sales of one item name within a category"""
    item_name: str
    quantity: int
    unit_price: Decimal
    total_cost: Decimal
    total_revenue: Decimal
    profit: Decimal

    def to_dict(self) -> Dict[str, Any]:
        return {
            "itemName": self.item_name,
            "quantity": self.quantity,
            "unitPrice": float(self.unit_price),
            "totalCost": float(self.total_cost),
            "totalRevenue": float(self.total_revenue),
            "profit": float(self.profit),
        }


@dataclass
class CategoryBreakdown:
    """Accumulated sales figures for one category"""
    category_name: str
    items_sold: int = 0
    total_cost: Decimal = ZERO
    total_revenue: Decimal = ZERO
    total_profit: Decimal = ZERO
    items: List[CategoryItemLine] = field(default_factory=list)

    def record(self, item_name: str, cost: Decimal, revenue: Decimal) -> None:
        """Add one sold unit of item_name, merging into an existing item line"""
        profit = revenue - cost

        self.items_sold += 1
        self.total_cost += cost
        self.total_revenue += revenue
        self.total_profit += profit

        line = next((row for row in self.items if row.item_name == item_name), None)
        if line is None:
            self.items.append(CategoryItemLine(
                item_name=item_name,
                quantity=1,
                unit_price=cost,
                total_cost=cost,
                total_revenue=revenue,
                profit=profit,
            ))
        else:
            line.quantity += 1
            line.total_cost += cost
            line.total_revenue += revenue
            line.profit += profit

    def to_dict(self) -> Dict[str, Any]:
        return {
            "categoryName": self.category_name,
            "itemsSold": self.items_sold,
            "totalCost": float(self.total_cost),
            "totalRevenue": float(self.total_revenue),
            "totalProfit": float(self.total_profit),
            "items": [line.to_dict() for line in self.items],
        }


@dataclass
class SalesSummary:
    gross_sales: Decimal = ZERO
    cost_of_goods_sold: Decimal = ZERO
    category_breakdown: Dict[str, CategoryBreakdown] = field(default_factory=dict)

    def record_leg(self, item: Any, cost: Decimal, revenue: Decimal) -> None:
        category_id = str(item.category_id)
        entry = self.category_breakdown.get(category_id)
        if entry is None:
            category = getattr(item, "category", None)
            entry = CategoryBreakdown(
                category_name=category.name if category is not None and category.name else UNCATEGORIZED
            )
            self.category_breakdown[category_id] = entry
        entry.record(item.name, cost, revenue)


@dataclass
class AuditFinancials:
    """Result of one reconciliation run"""
    gross_sales: Decimal
    cost_of_goods_sold: Decimal
    net_profit: Decimal
    profit_margin: Decimal
    total_expenses: Decimal
    final_net_profit: Decimal
    category_breakdown: Dict[str, CategoryBreakdown]


def split_sale_revenue(
    total: Decimal,
    frame_cost: Optional[Decimal],
    lens_cost: Optional[Decimal],
) -> Tuple[Decimal, Decimal]:
    """
    Split a sale total between its frame and lens legs.

    A cost of None marks an unresolved leg. Both resolved: proportional to
    cost, lens takes the remainder, an even split when both cost nothing.
    One resolved: it takes the whole total. Neither: nothing is allocated.
    """
    if frame_cost is not None and lens_cost is not None:
        cost_total = frame_cost + lens_cost
        if cost_total > 0:
            frame_revenue = total * frame_cost / cost_total
        else:
            frame_revenue = total / 2
        return frame_revenue, total - frame_revenue
    if frame_cost is not None:
        return total, ZERO
    if lens_cost is not None:
        return ZERO, total
    return ZERO, ZERO


def index_items_by_name(items: Iterable[Any]) -> Dict[str, Any]:
    """Exact, case-sensitive name lookup. A later item wins on duplicate names."""
    return {item.name: item for item in items}


def build_sales_summary(sales: Iterable[Any], items_by_name: Mapping[str, Any]) -> SalesSummary:
    """Fold sales into gross sales, cost of goods sold and the category breakdown"""
    summary = SalesSummary()

    for sale in sales:
        total = to_decimal(sale.total)
        summary.gross_sales += total

        frame = items_by_name.get(sale.frame) if sale.frame else None
        lens = items_by_name.get(sale.lens) if sale.lens else None

        frame_cost = to_decimal(frame.unit_price) if frame is not None else None
        lens_cost = to_decimal(lens.unit_price) if lens is not None else None
        summary.cost_of_goods_sold += (frame_cost or ZERO) + (lens_cost or ZERO)

        frame_revenue, lens_revenue = split_sale_revenue(total, frame_cost, lens_cost)

        if frame is not None:
            summary.record_leg(frame, frame_cost, frame_revenue)
        if lens is not None:
            summary.record_leg(lens, lens_cost, lens_revenue)

    return summary


def profit_margin(net_profit: Decimal, gross_sales: Decimal) -> Decimal:
    if gross_sales > 0:
        return net_profit / gross_sales * HUNDRED
    return ZERO


def breakdown_to_dict(breakdown: Mapping[str, CategoryBreakdown]) -> Dict[str, Dict[str, Any]]:
    return {category_id: entry.to_dict() for category_id, entry in breakdown.items()}


def serialize_breakdown(breakdown: Mapping[str, CategoryBreakdown]) -> str:
    """JSON text stored in Audit.category_breakdown"""
    return json.dumps(breakdown_to_dict(breakdown))


def deserialize_breakdown(raw: Optional[str]) -> Dict[str, Dict[str, Any]]:
    if not raw:
        return {}
    return json.loads(raw)


def _sum_in_window(db: Session, column, company_column, created_column,
                   company_id: str, start_date: datetime, end_date: datetime) -> Decimal:
    total = db.query(func.coalesce(func.sum(column), 0)).filter(
        and_(
            company_column == company_id,
            created_column >= start_date,
            created_column <= end_date,
        )
    ).scalar()
    return to_decimal(total)


def total_expenses(db: Session, company_id: str, start_date: datetime, end_date: datetime) -> Decimal:
    """Bills plus salaries created inside the window"""
    bills = _sum_in_window(db, Bill.amount, Bill.company_id, Bill.created_at,
                           company_id, start_date, end_date)
    salaries = _sum_in_window(db, Salary.amount, Salary.company_id, Salary.created_at,
                              company_id, start_date, end_date)
    return bills + salaries


def compute_financials(
    db: Session,
    company_id: str,
    start_date: datetime,
    end_date: datetime,
    include_expenses: bool,
) -> AuditFinancials:
    """
    Reconcile sales against inventory cost for one company and window.

    start_date and end_date are inclusive and are expected to be normalized
    with start_of_day / end_of_day already. Read-only.
    """
    sales = db.query(Sale).filter(
        and_(
            Sale.company_id == company_id,
            Sale.created_at >= start_date,
            Sale.created_at <= end_date,
        )
    ).order_by(Sale.created_at, Sale.id).all()

    inventory = db.query(InventoryItem).options(
        joinedload(InventoryItem.category)
    ).filter(
        InventoryItem.company_id == company_id
    ).order_by(InventoryItem.created_at, InventoryItem.id).all()

    summary = build_sales_summary(sales, index_items_by_name(inventory))

    net_profit = summary.gross_sales - summary.cost_of_goods_sold
    margin = profit_margin(net_profit, summary.gross_sales)

    expenses = ZERO
    if include_expenses:
        expenses = total_expenses(db, company_id, start_date, end_date)

    logger.debug(
        f"Financials for company {company_id} {start_date:%Y-%m-%d}..{end_date:%Y-%m-%d}: "
        f"{len(sales)} sales, gross {summary.gross_sales}, cogs {summary.cost_of_goods_sold}, "
        f"expenses {expenses}"
    )

    return AuditFinancials(
        gross_sales=summary.gross_sales,
        cost_of_goods_sold=summary.cost_of_goods_sold,
        net_profit=net_profit,
        profit_margin=margin,
        total_expenses=expenses,
        final_net_profit=net_profit - expenses,
        category_breakdown=summary.category_breakdown,
    )
