"""
Optical Retail Pydantic Schemas
Request/response models for the REST API
"""

from .common import CamelModel, ErrorResponse, SuccessResponse
from .inventory import CategoryRead, InventoryItemRead
from .audit import (
    AuditPeriod, AuditListPeriod,
    AuditItemInput, AuditCreate, AuditUpdate,
    CategoryItemRead, CategoryBreakdownRead,
    AuditItemRead, AuditRead, AuditSummary, AuditListResponse,
)

__all__ = [
    "CamelModel",
    "ErrorResponse",
    "SuccessResponse",
    "CategoryRead",
    "InventoryItemRead",
    "AuditPeriod",
    "AuditListPeriod",
    "AuditItemInput",
    "AuditCreate",
    "AuditUpdate",
    "CategoryItemRead",
    "CategoryBreakdownRead",
    "AuditItemRead",
    "AuditRead",
    "AuditSummary",
    "AuditListResponse",
]
