"""
Custom Application Exceptions
"""


class OpticalRetailException(Exception):
    """Base exception for the optical retail application"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(OpticalRetailException):
    """Raised when a record is absent or belongs to another company"""
    pass


class ValidationError(OpticalRetailException):
    """Raised when data validation fails before any computation"""
    pass


class TenantAccessError(OpticalRetailException):
    """Raised when the requesting company is unknown or inactive"""
    pass
