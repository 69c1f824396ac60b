"""
Security utilities
Tenant tokens: the company a request acts for travels as a signed JWT claim
"""
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

from jose import JWTError, jwt

from optical_retail.core.config import settings

COMPANY_CLAIM = "company_id"


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create JWT access token"""
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.utcnow() + expires_delta
    else:
        expire = datetime.utcnow() + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def create_company_token(company_id: str, subject: Optional[str] = None,
                         expires_delta: Optional[timedelta] = None) -> str:
    """Token scoped to one company"""
    data = {COMPANY_CLAIM: company_id}
    if subject:
        data["sub"] = subject
    return create_access_token(data, expires_delta)


def verify_token(token: str) -> Optional[Dict[str, Any]]:
    """Verify JWT token and return payload, or None when invalid or expired"""
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None


def company_id_from_token(token: str) -> Optional[str]:
    payload = verify_token(token)
    if not payload:
        return None
    return payload.get(COMPANY_CLAIM)
