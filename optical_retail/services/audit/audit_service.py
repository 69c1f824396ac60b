"""
Audit Service
Inventory audit lifecycle: list, read, create, update, delete

Every query is scoped to the company the service was built for. Mutating
operations run in a single transaction and roll back on any failure, so an
audit either exists with consistent items and financials or not at all.
"""
import logging
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import and_, func
from sqlalchemy.orm import Session, joinedload, selectinload

from optical_retail.core.exceptions import NotFoundError, ValidationError
from optical_retail.models import Audit, AuditItem, Category, InventoryItem, Sale
from optical_retail.services.audit.financials import (
    ZERO,
    AuditFinancials,
    compute_financials,
    end_of_day,
    serialize_breakdown,
    start_of_day,
    to_decimal,
)

logger = logging.getLogger(__name__)

EPOCH = datetime(1970, 1, 1)

SCALAR_FIELDS = ("audit_date", "notes", "period", "include_expenses")


def period_start(period: str, now: Optional[datetime] = None) -> datetime:
    """
    Start of a canned listing window ending now.

    week: the last 7 days, month: since the 1st of this month,
    year: since January 1st. Anything else means no lower bound.
    """
    now = now or datetime.utcnow()
    if period == "week":
        return now - timedelta(days=7)
    if period == "month":
        return datetime(now.year, now.month, 1)
    if period == "year":
        return datetime(now.year, 1, 1)
    return EPOCH


def coerce_datetime(value: Any) -> Optional[datetime]:
    """Accept datetime, date or ISO-8601 text"""
    if value is None or isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, datetime.min.time())
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return datetime.fromisoformat(text)
        except ValueError:
            raise ValidationError(f"Invalid date: {value}")
    raise ValidationError(f"Invalid date: {value!r}")


def naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Stored timestamps are naive UTC"""
    if value is not None and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def _field(data: Any, name: str, default: Any = None) -> Any:
    if isinstance(data, dict):
        return data.get(name, default)
    return getattr(data, name, default)


class AuditService:
    """
    Audit lifecycle for one company
    """

    def __init__(self, db: Session, company_id: str):
        self.db = db
        self.company_id = company_id

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_audits(
        self,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        period: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Audits newest first plus a summary across them.

        A canned period takes precedence over explicit dates. The summary's
        totalSalesValue covers sales inside the same window.
        """
        lower, upper = None, None
        if period:
            lower = period_start(period)
        else:
            lower = naive_utc(coerce_datetime(start_date))
            upper = naive_utc(coerce_datetime(end_date))

        query = self.db.query(Audit).options(
            selectinload(Audit.items).joinedload(AuditItem.inventory_item)
        ).filter(Audit.company_id == self.company_id)
        if lower is not None:
            query = query.filter(Audit.audit_date >= lower)
        if upper is not None:
            query = query.filter(Audit.audit_date <= upper)
        audits = query.order_by(Audit.audit_date.desc()).all()

        sales_query = self.db.query(func.coalesce(func.sum(Sale.total), 0)).filter(
            Sale.company_id == self.company_id
        )
        if lower is not None:
            sales_query = sales_query.filter(Sale.created_at >= lower)
        if upper is not None:
            sales_query = sales_query.filter(Sale.created_at <= upper)
        total_sales_value = to_decimal(sales_query.scalar())

        return {
            "audits": audits,
            "summary": self._summarize(audits, total_sales_value),
        }

    def _summarize(self, audits: List[Audit], total_sales_value: Decimal) -> Dict[str, Any]:
        def total(attribute: str) -> Decimal:
            return sum((to_decimal(getattr(audit, attribute)) for audit in audits), ZERO)

        margins = total("profit_margin")
        discrepancies = sum(
            (abs(item.discrepancy) * to_decimal(item.unit_price)
             for audit in audits for item in audit.items),
            ZERO,
        )

        return {
            "total_audits": len(audits),
            "total_inventory_value": total("total_inventory_value"),
            "total_sales_value": total_sales_value,
            "total_gross_sales": total("gross_sales"),
            "total_cogs": total("cost_of_goods_sold"),
            "total_net_profit": total("net_profit"),
            "total_expenses": total("total_expenses"),
            "total_final_net_profit": total("final_net_profit"),
            "avg_profit_margin": margins / len(audits) if audits else ZERO,
            "total_discrepancies": discrepancies,
        }

    def get_audit(self, audit_id: str) -> Audit:
        audit = self.db.query(Audit).options(
            selectinload(Audit.items).joinedload(AuditItem.inventory_item)
        ).filter(
            and_(Audit.id == audit_id, Audit.company_id == self.company_id)
        ).first()

        if not audit:
            raise NotFoundError("Audit not found")
        return audit

    def list_inventory_items_for_audit(self) -> List[InventoryItem]:
        """Inventory the user can pick from, grouped by category name"""
        return self.db.query(InventoryItem).join(
            Category, InventoryItem.category_id == Category.id
        ).options(
            joinedload(InventoryItem.category)
        ).filter(
            InventoryItem.company_id == self.company_id
        ).order_by(Category.name.asc(), InventoryItem.name.asc()).all()

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def create_audit(self, audit_data: Dict[str, Any]) -> Audit:
        """
        Count inventory and reconcile the period's financials.

        Expected quantities always come from the live stock level; any
        expected quantity sent by the client is ignored.
        """
        items = audit_data.get("items") or []
        if not items:
            raise ValidationError("At least one item is required")
        if audit_data.get("start_date") is None:
            raise ValidationError("Start date is required")
        if audit_data.get("end_date") is None:
            raise ValidationError("End date is required")

        start_date = start_of_day(coerce_datetime(audit_data["start_date"]))
        end_date = end_of_day(coerce_datetime(audit_data["end_date"]))
        audit_date = naive_utc(coerce_datetime(audit_data.get("audit_date"))) or datetime.utcnow()
        include_expenses = bool(audit_data.get("include_expenses") or False)

        try:
            audit_items, total_inventory_value = self._build_audit_items(items)
            financials = compute_financials(
                self.db, self.company_id, start_date, end_date, include_expenses
            )

            audit = Audit(
                company_id=self.company_id,
                audit_date=audit_date,
                start_date=start_date,
                end_date=end_date,
                period=audit_data.get("period"),
                notes=audit_data.get("notes"),
                include_expenses=include_expenses,
                total_inventory_value=total_inventory_value,
                items=audit_items,
            )
            self._apply_financials(audit, financials)

            self.db.add(audit)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info(
            f"Audit {audit.id} created for company {self.company_id}: "
            f"{len(audit_items)} items, gross sales {financials.gross_sales}"
        )
        return self.get_audit(audit.id)

    def update_audit(self, audit_id: str, update_data: Dict[str, Any]) -> Audit:
        """
        Patch an audit.

        Supplying items replaces all existing audit items, re-snapshotting
        expected quantities against today's stock. Supplying start_date,
        end_date or include_expenses recomputes the financials; otherwise the
        stored figures stay as they are.
        """
        audit = self.db.query(Audit).filter(
            and_(Audit.id == audit_id, Audit.company_id == self.company_id)
        ).first()
        if not audit:
            raise NotFoundError("Audit not found")

        try:
            for name in SCALAR_FIELDS:
                if name in update_data:
                    value = update_data[name]
                    if name == "audit_date":
                        value = naive_utc(coerce_datetime(value))
                    if value is None and name in ("audit_date", "include_expenses"):
                        continue
                    setattr(audit, name, value)

            if update_data.get("start_date") is not None:
                audit.start_date = start_of_day(coerce_datetime(update_data["start_date"]))
            if update_data.get("end_date") is not None:
                audit.end_date = end_of_day(coerce_datetime(update_data["end_date"]))

            if update_data.get("items") is not None:
                audit_items, total_inventory_value = self._build_audit_items(update_data["items"])
                # delete-orphan cascade removes the previous rows on flush
                audit.items = audit_items
                audit.total_inventory_value = total_inventory_value

            recalculate = any(
                name in update_data for name in ("start_date", "end_date", "include_expenses")
            )
            if recalculate and audit.start_date and audit.end_date:
                financials = compute_financials(
                    self.db,
                    self.company_id,
                    start_of_day(audit.start_date),
                    end_of_day(audit.end_date),
                    bool(audit.include_expenses),
                )
                self._apply_financials(audit, financials)

            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info(f"Audit {audit_id} updated for company {self.company_id}")
        return self.get_audit(audit_id)

    def delete_audit(self, audit_id: str) -> None:
        audit = self.db.query(Audit).filter(
            and_(Audit.id == audit_id, Audit.company_id == self.company_id)
        ).first()
        if not audit:
            raise NotFoundError("Audit not found")

        try:
            self.db.delete(audit)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info(f"Audit {audit_id} deleted for company {self.company_id}")

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _build_audit_items(self, items: List[Any]) -> Tuple[List[AuditItem], Decimal]:
        """Resolve every counted item before anything is written"""
        audit_items = []
        total_inventory_value = ZERO

        for item in items:
            inventory_item_id = _field(item, "inventory_item_id")
            inventory_item = self.db.query(InventoryItem).filter(
                and_(
                    InventoryItem.id == inventory_item_id,
                    InventoryItem.company_id == self.company_id,
                )
            ).first()

            if not inventory_item:
                raise NotFoundError(f"Inventory item with ID {inventory_item_id} not found")

            expected_quantity = inventory_item.total_stock
            actual_quantity = int(_field(item, "actual_quantity", 0))
            unit_price = to_decimal(inventory_item.unit_price)
            total_value = actual_quantity * unit_price
            total_inventory_value += total_value

            audit_items.append(AuditItem(
                inventory_item_id=inventory_item.id,
                expected_quantity=expected_quantity,
                actual_quantity=actual_quantity,
                discrepancy=actual_quantity - expected_quantity,
                unit_price=unit_price,
                total_value=total_value,
                notes=_field(item, "notes") or None,
            ))

        return audit_items, total_inventory_value

    @staticmethod
    def _apply_financials(audit: Audit, financials: AuditFinancials) -> None:
        audit.total_sales_value = financials.gross_sales
        audit.gross_sales = financials.gross_sales
        audit.cost_of_goods_sold = financials.cost_of_goods_sold
        audit.net_profit = financials.net_profit
        audit.profit_margin = financials.profit_margin
        audit.total_expenses = financials.total_expenses
        audit.final_net_profit = financials.final_net_profit
        audit.category_breakdown = serialize_breakdown(financials.category_breakdown)
