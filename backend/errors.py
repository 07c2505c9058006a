class AppError(Exception):
    """Base class for errors that map to an HTTP response."""

    status_code = 500
    code = "ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(AppError):
    """Malformed or missing input."""

    status_code = 400
    code = "VALIDATION_ERROR"


class NoActiveSessionError(AppError):
    """A scan arrived while no session accepts attendance for its scope."""

    status_code = 400
    code = "NO_ACTIVE_SESSION"

    def __init__(self, message: str = "No active session"):
        super().__init__(message)


class AuthError(AppError):
    """Missing or invalid credential."""

    status_code = 401
    code = "UNAUTHORIZED"


class PermissionDeniedError(AuthError):
    """Valid credential, but the role does not allow the action."""

    status_code = 403
    code = "FORBIDDEN"


class NotFoundError(AppError):
    status_code = 404
    code = "NOT_FOUND"


class ConflictError(AppError):
    status_code = 409
    code = "CONFLICT"


class StorageError(AppError):
    """The document store could not be read or written."""

    status_code = 500
    code = "STORAGE_ERROR"
