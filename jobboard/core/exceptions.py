"""
Service-layer errors.

Services raise these; the FastAPI app turns them into JSON responses
shaped like HTTPException ({"detail": ...}).
"""


class AppError(Exception):
    status_code = 400

    def __init__(self, detail: str, status_code: int = None):
        super().__init__(detail)
        self.detail = detail
        if status_code is not None:
            self.status_code = status_code


class InvalidRequestError(AppError):
    status_code = 400


class AuthenticationError(AppError):
    status_code = 401


class PermissionDeniedError(AppError):
    status_code = 403


class NotFoundError(AppError):
    status_code = 404


class ConflictError(AppError):
    status_code = 409
