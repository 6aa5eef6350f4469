"""
Обработчики ошибок (Exception Handlers) для API.

Все ошибки отдаются в одном формате ErrorResponse:
    {"error": {"code": "...", "message": "...", "details": [...] | null}}

- AppError (наши исключения из core.exceptions) -> свой status_code
- RequestValidationError (Pydantic) -> 400 VALIDATION_ERROR
- SQLAlchemyError и всё остальное -> 500 INTERNAL_ERROR без деталей
"""

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from ..core.exceptions import AppError, InternalError
from ..core.logging import get_logger
from .schemas import ErrorBody, ErrorDetail, ErrorResponse

logger = get_logger(__name__)


def error_response(
    status_code: int, code: str, message: str, details: list[dict] | None = None
) -> JSONResponse:
    body = ErrorResponse(
        error=ErrorBody(
            code=code,
            message=message,
            details=[ErrorDetail(**d) for d in details] if details else None,
        )
    )
    return JSONResponse(status_code=status_code, content=body.model_dump())


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """AppError -> его status_code и код."""
    if exc.status_code >= 500:
        logger.error(f"API Error: {exc.code} - {exc.message}", exc_info=exc)
    else:
        logger.warning(f"API Error: {exc.code} - {exc.message}")

    return error_response(exc.status_code, exc.code, exc.message, exc.details)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Ошибки валидации Pydantic -> 400.

    Pydantic:
        {"detail": [{"type": "string_too_short", "loc": ["body", "title"], "msg": "..."}]}

    Наш формат:
        {"error": {"code": "VALIDATION_ERROR", "details": [{"field": "title", "message": "..."}]}}
    """
    logger.warning(f"Validation Error: {exc.errors()}")

    details = []
    for error in exc.errors():
        # loc: ["body", "categoryIds", 0] / ["path", "todo_id"] / ["body"]
        loc = [str(part) for part in error.get("loc", [])]
        if len(loc) > 1 and loc[0] in ("body", "path", "query"):
            field = ".".join(loc[1:])
        else:
            field = loc[-1] if loc else "unknown"
        details.append({"field": field, "message": error.get("msg", "Invalid value")})

    return error_response(
        status.HTTP_400_BAD_REQUEST,
        "VALIDATION_ERROR",
        "Request validation failed",
        details,
    )


async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """
    Ошибка хранилища -> 500.

    Клиент не видит ни текста SQL, ни stack trace: только в логах.
    """
    logger.error(f"Database Error: {type(exc).__name__}: {exc}", exc_info=exc)
    internal = InternalError()
    return error_response(internal.status_code, internal.code, internal.message)


async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Всё, что не поймали выше -> 500 без деталей."""
    logger.error(f"Internal Error: {type(exc).__name__}: {exc}", exc_info=exc)
    internal = InternalError()
    return error_response(internal.status_code, internal.code, internal.message)


def register_error_handlers(app: FastAPI) -> None:
    """
    Регистрирует все error handlers в приложении.

    Вызывается из main.py:
        register_error_handlers(app)
    """
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(SQLAlchemyError, database_error_handler)
    app.add_exception_handler(Exception, generic_error_handler)

    logger.info("Error handlers registered")
