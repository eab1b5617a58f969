"""
Simple exception classes for the application.
"""

from fastapi import HTTPException, status


class ValidationError(HTTPException):
    """Raised when input validation fails."""

    def __init__(self, message: str):
        super().__init__(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=message
        )


class InvalidArgumentError(HTTPException):
    """Raised when a caller supplies an unusable combination of arguments."""

    def __init__(self, message: str):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=message)


class NotFoundError(HTTPException):
    """Raised when a requested resource is not found."""

    def __init__(self, resource_type: str, resource_id):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND, detail=f"{resource_type} not found"
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


class ConflictError(HTTPException):
    """Raised when there's a conflict with existing data."""

    def __init__(self, message: str):
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=message)


class DatabaseError(HTTPException):
    """Raised when database operations fail."""

    def __init__(self, message: str = "Database operation failed"):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=message
        )


class UnauthorizedError(HTTPException):
    """Raised when a user is not authorized to access a resource."""

    def __init__(self, message: str):
        super().__init__(status_code=status.HTTP_401_UNAUTHORIZED, detail=message)


class ForbiddenError(HTTPException):
    """Raised when an authenticated user lacks the required role."""

    def __init__(self, message: str):
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=message)
