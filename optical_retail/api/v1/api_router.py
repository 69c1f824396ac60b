"""
Main API Router - Consolidates all module routes
"""

from fastapi import APIRouter

from optical_retail.api.v1 import audits

api_router = APIRouter()

# Audit routes
api_router.include_router(audits.router, prefix="/audits", tags=["audits"])
