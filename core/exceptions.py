"""
Application exceptions.

Every subclass of ``AppException`` carries the HTTP status it maps to, so the
web layer can turn it into a ``{"success": false, "error": ...}`` payload in
one place.
"""


class AppException(Exception):
    """Base application exception."""
    def __init__(self, message: str = "An error occurred", status_code: int = 500):
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class NotFoundException(AppException):
    """Resource not found."""
    def __init__(self, message: str = "Resource not found"):
        super().__init__(message, status_code=404)


class ValidationException(AppException):
    """Invalid or missing input."""
    def __init__(self, message: str = "Validation error"):
        super().__init__(message, status_code=400)


class ConflictException(ValidationException):
    """Duplicate unique value (e.g. an email that is already registered)."""
    def __init__(self, message: str = "Conflict with existing data"):
        super().__init__(message)


class AuthenticationException(AppException):
    def __init__(self, message: str = "Authentication failed"):
        super().__init__(message, status_code=401)


class AuthorizationException(AppException):
    def __init__(self, message: str = "Access denied"):
        super().__init__(message, status_code=403)


class ConfigurationException(AppException):
    """Raised at startup when required settings are missing."""
    def __init__(self, message: str = "Invalid configuration"):
        super().__init__(message, status_code=500)


class AuditLogImmutableError(AppException):
    """Audit entries are append-only."""
    def __init__(self, message: str = "Audit log entries cannot be modified or deleted"):
        super().__init__(message, status_code=500)
