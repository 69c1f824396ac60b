"""Inventory Schemas"""

from typing import Optional

from .common import CamelModel


class CategoryRead(CamelModel):
    id: str
    name: str


class InventoryItemRead(CamelModel):
    id: str
    name: str
    category_id: str
    unit_price: float
    total_stock: int
    category: Optional[CategoryRead] = None
