"""Domain errors raised by the stores and the auth layer.

Handlers in :mod:`taskboard.api.errors` turn :class:`AppError` subclasses into
``{"success": false, "message": ...}`` JSON responses with ``status_code``.
"""


class AppError(Exception):
    status_code = 500
    message = "Internal server error"
    headers: dict[str, str] | None = None

    def __init__(self, message: str | None = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class InvalidInput(AppError):
    status_code = 400
    message = "Invalid input"


class DuplicateEmail(AppError):
    status_code = 400
    message = "User already exists with this email"


class InvalidCredentials(AppError):
    # deliberately says nothing about which factor was wrong
    status_code = 401
    message = "Invalid credentials"


class Unauthorized(AppError):
    status_code = 401
    message = "Not authorized to access this route"
    headers = {"WWW-Authenticate": "Bearer"}


class NotFound(AppError):
    status_code = 404
    message = "Not found"


# --- Token errors (diagnostic only; all become Unauthorized at the edge) ---


class TokenError(Exception):
    pass


class TokenMalformed(TokenError):
    pass


class TokenInvalid(TokenError):
    pass


class TokenExpired(TokenError):
    pass
