# --- Service layer exception classes ---

class ServiceError(Exception):
    """General exception class for the service layer."""
    pass

class NotFoundError(ServiceError):
    """The requested record does not exist (or is not visible to the caller)."""
    pass

class AuthorizationError(ServiceError):
    """Exception class for authorization-related errors."""
    pass
