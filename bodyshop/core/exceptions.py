"""
Custom Application Exceptions
"""
from decimal import Decimal


class BodyshopException(Exception):
    """Base exception for the workshop application"""
    pass


class InsufficientPermissionsError(BodyshopException):
    """Raised when user lacks required permissions"""
    pass


class ValidationError(BodyshopException):
    """Raised when data validation fails"""
    pass


class NotFoundError(BodyshopException):
    """Raised when a job, item, part line or usage entry does not exist"""
    pass


class BusinessLogicError(BodyshopException):
    """Raised when business rules are violated"""
    pass


class InsufficientStockError(BusinessLogicError):
    """Raised at commit time when on-hand stock cannot cover an issuance"""

    def __init__(self, item_id: str, available: Decimal, required: Decimal):
        self.item_id = item_id
        self.available = available
        self.required = required
        super().__init__(
            f"Insufficient stock for {item_id}: available {available}, required {required}"
        )


class AlreadyIssuedError(BusinessLogicError):
    """Raised when a part line has already been issued"""
    pass


class UnlinkedPartError(BusinessLogicError):
    """Raised when a part line is not linked to master stock"""
    pass
