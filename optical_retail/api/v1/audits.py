"""
Audits API endpoints
"""

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from optical_retail.api import deps
from optical_retail.core.exceptions import NotFoundError, ValidationError
from optical_retail.schemas.audit import (
    AuditCreate, AuditListPeriod, AuditListResponse, AuditRead, AuditUpdate
)
from optical_retail.schemas.common import ErrorResponse, SuccessResponse
from optical_retail.schemas.inventory import InventoryItemRead
from optical_retail.services.audit import AuditService

router = APIRouter()


@router.get("/inventory-items", response_model=List[InventoryItemRead])
def list_inventory_items_for_audit(
    service: AuditService = Depends(deps.get_audit_service)
):
    """
    Inventory items available for counting, ordered by category.
    """
    return service.list_inventory_items_for_audit()


@router.get("/", response_model=AuditListResponse)
def list_audits(
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate"),
    period: Optional[AuditListPeriod] = None,
    service: AuditService = Depends(deps.get_audit_service)
):
    """
    Retrieve audits, newest first, with a summary across them.
    """
    return service.list_audits(
        start_date=start_date,
        end_date=end_date,
        period=period.value if period else None
    )


@router.get("/{audit_id}", response_model=AuditRead, responses={404: {"model": ErrorResponse}})
def get_audit(
    audit_id: str,
    service: AuditService = Depends(deps.get_audit_service)
):
    """
    Get a specific audit with its items.
    """
    try:
        return service.get_audit(audit_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)


@router.post("/", response_model=AuditRead, status_code=status.HTTP_201_CREATED)
def create_audit(
    audit_in: AuditCreate,
    service: AuditService = Depends(deps.get_audit_service)
):
    """
    Record an inventory count and reconcile the period's financials.
    """
    try:
        return service.create_audit(audit_in.model_dump())
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=e.message)


@router.patch("/{audit_id}", response_model=AuditRead, responses={404: {"model": ErrorResponse}})
def update_audit(
    audit_id: str,
    audit_in: AuditUpdate,
    service: AuditService = Depends(deps.get_audit_service)
):
    """
    Update an audit; date or expense changes recompute its financials.
    """
    try:
        return service.update_audit(audit_id, audit_in.model_dump(exclude_unset=True))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=e.message)


@router.delete("/{audit_id}", response_model=SuccessResponse, responses={404: {"model": ErrorResponse}})
def delete_audit(
    audit_id: str,
    service: AuditService = Depends(deps.get_audit_service)
):
    """
    Delete an audit and its items.
    """
    try:
        service.delete_audit(audit_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)

    return {"success": True}
