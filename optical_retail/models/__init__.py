"""
Optical Retail SQLAlchemy Models
"""

# Import all models to ensure they are registered with SQLAlchemy
from .company import Company
from .inventory import Category, InventoryItem
from .sales import Sale
from .expenses import Bill, Salary
from .audit import Audit, AuditItem

__all__ = [
    "Company",
    "Category",
    "InventoryItem",
    "Sale",
    "Bill",
    "Salary",
    "Audit",
    "AuditItem",
]
