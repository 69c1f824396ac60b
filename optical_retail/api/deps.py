"""
API Dependencies
Common dependencies for API endpoints
"""

from typing import Generator

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from optical_retail.core.database import get_db as _get_db
from optical_retail.core.exceptions import TenantAccessError
from optical_retail.core.security import company_id_from_token
from optical_retail.models import Company
from optical_retail.services.audit import AuditService

# Security scheme
security = HTTPBearer()


def get_db() -> Generator:
    """
    Database dependency - creates a new database session for each request.
    """
    yield from _get_db()


def get_current_company(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db)
) -> Company:
    """
    Resolve the tenant from the bearer token.

    The company id is never taken from the request body or query.
    """
    company_id = company_id_from_token(credentials.credentials)
    if not company_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    company = db.query(Company).filter(Company.id == company_id).first()
    if not company or not company.is_active:
        raise TenantAccessError("Company access denied")

    return company


def get_audit_service(
    db: Session = Depends(get_db),
    company: Company = Depends(get_current_company)
) -> AuditService:
    return AuditService(db, company.id)
