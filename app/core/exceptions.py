from typing import Optional, Any

class DashboardError(Exception):
    """
    Base exception for the dashboard application.
    """
    def __init__(self, message: str, code: str = "INTERNAL_ERROR", status_code: int = 500, details: Optional[Any] = None):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details
        super().__init__(self.message)

class RecordNotFoundError(DashboardError):
    """
    Raised when a collection or a record id does not exist.
    """
    def __init__(self, message: str = "Record not found", details: Optional[Any] = None):
        super().__init__(message, code="NOT_FOUND", status_code=404, details=details)

class UnknownCollectionError(DashboardError):
    """
    Raised when a collection name has no registered schema.
    """
    def __init__(self, collection: str):
        super().__init__(
            f"Unknown collection: {collection}",
            code="UNKNOWN_COLLECTION",
            status_code=404,
            details={"collection": collection},
        )

class DuplicateIdentityError(DashboardError):
    """
    Raised when an identity with the same email already exists.
    """
    def __init__(self, message: str = "User with this email already exists.", details: Optional[Any] = None):
        super().__init__(message, code="DUPLICATE_IDENTITY", status_code=409, details=details)

class DuplicateRecordError(DashboardError):
    """
    Raised when a record is created with an id already present in its collection.
    """
    def __init__(self, message: str = "Record already exists", details: Optional[Any] = None):
        super().__init__(message, code="DUPLICATE_RECORD", status_code=409, details=details)

class AuthenticationError(DashboardError):
    """
    Raised when authentication fails.
    """
    def __init__(self, message: str = "Authentication failed", details: Optional[Any] = None):
        super().__init__(message, code="AUTHENTICATION_FAILED", status_code=401, details=details)

class AuthorizationError(DashboardError):
    """
    Raised when an authenticated identity lacks the role for a route.
    """
    def __init__(self, message: str = "You do not have access to this page", details: Optional[Any] = None):
        super().__init__(message, code="FORBIDDEN", status_code=403, details=details)

class ValidationError(DashboardError):
    """
    Raised when input validation fails.
    """
    def __init__(self, message: str = "Validation error", details: Optional[Any] = None):
        super().__init__(message, code="VALIDATION_ERROR", status_code=422, details=details)
