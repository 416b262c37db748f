"""
Application Error Taxonomy

Every service fails fast with the most specific error kind. The HTTP layer
converts any AppError into ``{"error": message}`` with the matching status
code (see bistro.main).

    ValidationError      400  malformed or missing input
    AuthenticationError  401  missing/invalid credentials or session
    NotFoundError        404  referenced entity absent
    ConflictError        409  duplicate unique key
    InternalError        500  unexpected or database failure
"""


class AppError(Exception):
    """Base class for errors that map onto an HTTP response."""

    status_code: int = 500
    default_message: str = "Internal Server Error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        """Convert to the JSON error body."""
        return {"error": self.message}


class ValidationError(AppError):
    status_code = 400
    default_message = "Invalid request"


class AuthenticationError(AppError):
    status_code = 401
    default_message = "Not authenticated"


class NotFoundError(AppError):
    status_code = 404
    default_message = "Not found"


class ConflictError(AppError):
    status_code = 409
    default_message = "Already exists"


class InternalError(AppError):
    status_code = 500
    default_message = "Internal Server Error"
