"""
Application errors.

Сервисы выбрасывают эти исключения, обработчики в api/errors.py
превращают их в единый формат ответа:

    {"error": {"code": "NOT_FOUND", "message": "...", "details": null}}
"""

from fastapi import status


class AppError(Exception):
    """
    Base class for all errors that map to an HTTP response.

    Использование:
        raise AppError(code="CONFLICT", message="...", status_code=409)
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = status.HTTP_400_BAD_REQUEST,
        details: list[dict] | None = None,
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details
        super().__init__(message)


class NotFoundError(AppError):
    """
    Row does not exist or is not owned by the caller (404).

    Оба случая намеренно неразличимы: клиент не должен узнать,
    что чужая запись с таким id существует.

        raise NotFoundError("Task", 123)
        # "Task with id=123 not found"
    """

    def __init__(self, resource: str, resource_id: int | str):
        super().__init__(
            code="NOT_FOUND",
            message=f"{resource} with id={resource_id} not found",
            status_code=status.HTTP_404_NOT_FOUND,
        )


class AlreadyExistsError(AppError):
    """Unique value already taken (400)."""

    def __init__(self, resource: str, field: str, value: str):
        super().__init__(
            code="ALREADY_EXISTS",
            message=f"{resource} with {field}='{value}' already exists",
            status_code=status.HTTP_400_BAD_REQUEST,
            details=[{"field": field, "message": f"Value '{value}' is already in use"}],
        )


class ValidationError_(AppError):
    """
    Business-rule validation failure (400).

    Underscore suffix keeps it apart from pydantic.ValidationError.
    """

    def __init__(self, message: str, details: list[dict] | None = None):
        super().__init__(
            code="VALIDATION_ERROR",
            message=message,
            status_code=status.HTTP_400_BAD_REQUEST,
            details=details,
        )


class UnauthorizedError(AppError):
    """Missing, invalid or expired session (401)."""

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(
            code="UNAUTHORIZED",
            message=message,
            status_code=status.HTTP_401_UNAUTHORIZED,
        )


class InternalError(AppError):
    """Store or unexpected failure (500). Never carries internal detail."""

    def __init__(self, message: str = "Internal server error"):
        super().__init__(
            code="INTERNAL_ERROR",
            message=message,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
