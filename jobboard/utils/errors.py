"""
Operational errors raised by the API.

Every subclass carries an HTTP status code and a message that is safe to
show to the client verbatim. Anything that is not an ``ApiError`` is treated
as a programming fault by the exception handlers in ``jobboard.main``.
"""


class ApiError(Exception):
    status_code = 500

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    @property
    def status(self) -> str:
        return "fail" if 400 <= self.status_code < 500 else "error"


class ValidationError(ApiError):
    status_code = 400


class UnauthorizedError(ApiError):
    status_code = 401


class ForbiddenError(ApiError):
    status_code = 403


class NotFoundError(ApiError):
    status_code = 404


class ConflictError(ApiError):
    status_code = 409
