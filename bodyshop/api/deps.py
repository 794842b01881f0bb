"""
API Dependencies
Common dependencies for API endpoints
"""

from fastapi import HTTPException, status

from bodyshop.core.database import get_db  # noqa: F401
from bodyshop.core.exceptions import (
    AlreadyIssuedError, BodyshopException, InsufficientPermissionsError,
    InsufficientStockError, NotFoundError
)


def http_error(exc: BodyshopException) -> HTTPException:
    """Translate a domain exception into the matching HTTP error"""
    if isinstance(exc, NotFoundError):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, (InsufficientStockError, AlreadyIssuedError)):
        code = status.HTTP_409_CONFLICT
    elif isinstance(exc, InsufficientPermissionsError):
        code = status.HTTP_403_FORBIDDEN
    else:
        code = status.HTTP_400_BAD_REQUEST
    return HTTPException(status_code=code, detail=str(exc))
