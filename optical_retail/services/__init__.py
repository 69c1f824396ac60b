"""
Optical Retail Business Services
"""

from .audit import AuditService

__all__ = [
    "AuditService",
]
