"""
Application error types.
Each error carries the code and HTTP status the error middleware renders.
"""


class AppError(Exception):
    """Base class for errors the API turns into JSON responses"""

    code = "INTERNAL_ERROR"
    status = 500

    def __init__(self, message: str = None):
        super().__init__(message or self.__class__.__name__)
        self.message = message or self.__class__.__name__


class ValidationError(AppError):
    code = "VALIDATION_ERROR"
    status = 400


class AuthenticationError(AppError):
    code = "AUTHENTICATION_ERROR"
    status = 401


class NotFoundError(AppError):
    code = "NOT_FOUND"
    status = 404

    def __init__(self, resource: str = "Resource"):
        super().__init__(f"{resource} not found")
        self.resource = resource


class DocumentExistsError(AppError):
    """A create-if-absent write hit an existing document"""

    code = "CONFLICT"
    status = 409


class StoreUnavailable(AppError):
    """The document store could not be reached or rejected the operation"""

    code = "DATABASE_ERROR"
    status = 503
