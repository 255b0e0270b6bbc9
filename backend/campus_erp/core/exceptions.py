class AppError(Exception):
    """Base class for all application exceptions."""
    def __init__(self, message: str, status_code: int = 500, details: dict = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

class ValidationFailed(AppError):
    """Raised for missing or malformed input, including bad identifiers."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=400, details=details)

class Unauthenticated(AppError):
    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message, status_code=401)

class Forbidden(AppError):
    """Raised on role mismatch or when a faculty member is not assigned to a section."""
    def __init__(self, message: str = "Forbidden: Insufficient permissions"):
        super().__init__(message, status_code=403)

class ResourceNotFoundError(AppError):
    """Raised when a requested resource is not found."""
    def __init__(self, message: str):
        super().__init__(message, status_code=404)

class SlotConflictError(AppError):
    """Raised when a section already has a class in the requested day and period."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=400, details=details)

class IdentityProviderError(AppError):
    """Raised when a login identity cannot be created or removed."""
    def __init__(self, message: str):
        super().__init__(message, status_code=500)
